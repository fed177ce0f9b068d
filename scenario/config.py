"""
Scenario configuration

Module-level defaults reproduce the reference two-vehicle run: vehicles
50 m apart closing at 20 m/s each, 500 byte BSMs at 10 Hz from 1 s to 10 s,
23 dBm at 5.9 GHz with 1.5 m antennas.
"""

import json
import math
from dataclasses import dataclass, fields, replace
from typing import Self

from phy import PhyConfig, DEFAULT_RX_SENSITIVITY_DBM

# ---- parameters ----
DISTANCE = 50.0        # initial separation (m)
SPEED = 20.0           # per vehicle (m/s), 72 km/h
NODE_Z = 1.5           # node z coordinate (m)
TX_POWER_DBM = 23.0
FREQUENCY_HZ = 5.9e9
ANTENNA_HEIGHT_M = 1.5  # above node z
RX_GAIN_DB = 10.0
NOISE_FIGURE_DB = 2.0
PACKET_SIZE = 500      # BSM size (bytes)
INTERVAL = 0.1         # 10 Hz BSM rate
PORT = 5000
APP_START = 1.0
APP_STOP = 10.0
SIM_STOP = 10.0
MAX_PACKETS = 90       # 10 Hz * 9 s

Vector = tuple[float, float, float]


def _vector(value) -> Vector:
    vec = tuple(float(v) for v in value)
    if len(vec) != 3:
        raise ValueError(f"expected 3 components, got {value!r}")
    return vec


@dataclass(frozen=True)
class ScenarioConfig:
    positions: tuple[Vector, Vector] = ((0.0, 0.0, NODE_Z), (DISTANCE, 0.0, NODE_Z))
    velocities: tuple[Vector, Vector] = ((SPEED, 0.0, 0.0), (-SPEED, 0.0, 0.0))
    tx_power_dbm: float = TX_POWER_DBM
    frequency_hz: float = FREQUENCY_HZ
    antenna_height_m: float = ANTENNA_HEIGHT_M
    rx_gain_db: float = RX_GAIN_DB
    noise_figure_db: float = NOISE_FIGURE_DB
    rx_sensitivity_dbm: float = DEFAULT_RX_SENSITIVITY_DBM
    packet_size: int = PACKET_SIZE
    interval: float = INTERVAL
    port: int = PORT
    app_start: float = APP_START
    app_stop: float = APP_STOP
    sim_stop: float = SIM_STOP
    max_packets: int | None = MAX_PACKETS

    def __post_init__(self):
        if len(self.positions) != 2 or len(self.velocities) != 2:
            raise ValueError("the scenario has exactly two nodes")
        object.__setattr__(self, "positions", tuple(_vector(p) for p in self.positions))
        object.__setattr__(self, "velocities", tuple(_vector(v) for v in self.velocities))
        if not (math.isfinite(self.interval) and self.interval > 0):
            raise ValueError(f"interval must be positive, got {self.interval}")
        if self.packet_size <= 0:
            raise ValueError(f"packet_size must be positive, got {self.packet_size}")
        if not 0 <= self.port <= 65535:
            raise ValueError(f"invalid port {self.port}")
        if self.app_start < 0 or self.app_stop < self.app_start:
            raise ValueError(f"invalid application window {self.app_start}..{self.app_stop}")
        if self.sim_stop < self.app_start:
            raise ValueError(f"sim_stop {self.sim_stop} is before app_start {self.app_start}")
        if self.max_packets is not None and self.max_packets < 0:
            raise ValueError(f"invalid max_packets {self.max_packets}")

    @property
    def observation_window(self) -> float:
        """throughput window, app_stop - app_start"""
        return self.app_stop - self.app_start

    @property
    def initial_distance(self) -> float:
        return math.dist(self.positions[0], self.positions[1])

    def phy(self) -> PhyConfig:
        return PhyConfig(
            tx_power_dbm=self.tx_power_dbm,
            frequency_hz=self.frequency_hz,
            antenna_height_m=self.antenna_height_m,
            rx_gain_db=self.rx_gain_db,
            noise_figure_db=self.noise_figure_db,
            rx_sensitivity_dbm=self.rx_sensitivity_dbm,
        )

    def with_distance(self, distance: float) -> Self:
        """same scenario with node 1 placed distance meters along x from node 0"""
        x0, y0, z0 = self.positions[0]
        return replace(self, positions=(self.positions[0], (x0 + distance, y0, z0)))

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown configuration keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> Self:
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
