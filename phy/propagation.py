"""
Propagation model for the 802.11p channel

Constant speed propagation delay plus two-ray ground reflection loss with a
Friis free-space fallback below the crossover distance. The model is purely
combinational: no state, identical outputs for identical inputs.

    lambda   = c / f
    d_c      = 4 * pi * h_tx * h_rx / lambda
    d <= d_c : loss = -10 log10(lambda^2 / (16 pi^2 d^2 L))
    d >  d_c : loss = -10 log10(h_tx^2 h_rx^2 / (d^4 L))

Antenna heights are the node's z coordinate plus the configured height
above z. Inside min_distance_m the loss is 0 dB. Every finite input gives
a result; only NaN or inf raises ValueError.
"""

import math
from dataclasses import dataclass

import numpy as np

SPEED_OF_LIGHT = 299792458.0  # m/s

# IEEE 802.11 OFDM minimum input sensitivity, 10 MHz channel:
# 3 Mb/s -85 dBm, 4.5 Mb/s -84 dBm, 6 Mb/s -82 dBm
DEFAULT_RX_SENSITIVITY_DBM = -82.0


@dataclass(frozen=True)
class PhyConfig:
    """transmit/receive configuration of a 802.11p radio"""

    tx_power_dbm: float = 23.0
    frequency_hz: float = 5.9e9
    antenna_height_m: float = 1.5
    rx_gain_db: float = 10.0
    noise_figure_db: float = 2.0
    rx_sensitivity_dbm: float = DEFAULT_RX_SENSITIVITY_DBM
    system_loss: float = 1.0
    min_distance_m: float = 0.5
    speed_of_light: float = SPEED_OF_LIGHT

    def __post_init__(self):
        for name in ("tx_power_dbm", "frequency_hz", "antenna_height_m", "rx_gain_db",
                     "noise_figure_db", "rx_sensitivity_dbm", "system_loss",
                     "min_distance_m", "speed_of_light"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        if self.frequency_hz <= 0:
            raise ValueError("frequency_hz must be positive")
        if self.system_loss < 1.0:
            raise ValueError("system_loss must be >= 1")
        if self.min_distance_m < 0:
            raise ValueError("min_distance_m must be >= 0")
        if self.speed_of_light <= 0:
            raise ValueError("speed_of_light must be positive")

    @property
    def wavelength_m(self) -> float:
        return self.speed_of_light / self.frequency_hz


@dataclass(frozen=True)
class PropagationResult:
    delay: float
    receivable: bool
    rx_power_dbm: float
    path_loss_db: float
    distance: float


class TwoRayGroundPropagation:
    """two-ray ground loss model with constant speed delay"""

    def __init__(self, config: PhyConfig = PhyConfig()):
        self.config = config

    def __str__(self):
        return (f"TwoRayGroundPropagation(gain={self.config.rx_gain_db}dB, "
                f"nf={self.config.noise_figure_db}dB, "
                f"sensitivity={self.config.rx_sensitivity_dbm}dBm)")

    def crossover_distance(self, h_tx: float, h_rx: float, frequency_hz: float) -> float:
        """
        distance where the ground reflection regime starts

        Returns inf when an antenna is at or below ground or the frequency is
        not positive, so free space applies at every range.
        """
        if h_tx <= 0 or h_rx <= 0 or frequency_hz <= 0:
            return math.inf
        wavelength = self.config.speed_of_light / frequency_hz
        return 4.0 * math.pi * h_tx * h_rx / wavelength

    def path_loss_db(self, distance: float, h_tx: float, h_rx: float, frequency_hz: float) -> float:
        if distance <= self.config.min_distance_m:
            return 0.0
        if frequency_hz <= 0:
            return math.inf
        system_loss_db = 10.0 * math.log10(self.config.system_loss)
        # sums of logs: h_tx * h_rx or d / lambda may underflow to 0
        if distance <= self.crossover_distance(h_tx, h_rx, frequency_hz):
            # Friis, 20 log10(4 pi d f / c)
            return 20.0 * (math.log10(4.0 * math.pi) + math.log10(distance)
                           + math.log10(frequency_hz) - math.log10(self.config.speed_of_light)) + system_loss_db
        return 40.0 * math.log10(distance) - 20.0 * (math.log10(h_tx) + math.log10(h_rx)) + system_loss_db

    def evaluate(self, tx_pos, rx_pos, tx_power_dbm: float, frequency_hz: float,
                 height_m: float) -> PropagationResult:
        """
        evaluate a single transmission

        Args:
            tx_pos: transmitter position (x, y, z) in meters
            rx_pos: receiver position (x, y, z) in meters
            tx_power_dbm: transmit power
            frequency_hz: carrier frequency; beyond min_distance_m a
                non-positive value means infinite loss
            height_m: antenna height above each node's z coordinate

        Returns:
            PropagationResult with the delay in seconds, the receive power and
            whether the frame clears the receiver sensitivity
        """
        tx = np.asarray(tx_pos, dtype=float)
        rx = np.asarray(rx_pos, dtype=float)
        if not (np.all(np.isfinite(tx)) and np.all(np.isfinite(rx))
                and math.isfinite(tx_power_dbm) and math.isfinite(height_m)
                and math.isfinite(frequency_hz)):
            raise ValueError("propagation inputs must be finite")

        cfg = self.config
        distance = float(np.linalg.norm(rx - tx))
        delay = distance / cfg.speed_of_light

        if distance == 0.0:
            return PropagationResult(
                delay=0.0,
                receivable=True,
                rx_power_dbm=tx_power_dbm + cfg.rx_gain_db,
                path_loss_db=0.0,
                distance=0.0,
            )

        h_tx = float(tx[2]) + height_m
        h_rx = float(rx[2]) + height_m
        loss = self.path_loss_db(distance, h_tx, h_rx, frequency_hz)
        rx_power = tx_power_dbm + cfg.rx_gain_db - loss
        receivable = rx_power - cfg.noise_figure_db >= cfg.rx_sensitivity_dbm
        return PropagationResult(
            delay=delay,
            receivable=bool(receivable),
            rx_power_dbm=rx_power,
            path_loss_db=loss,
            distance=distance,
        )

    def max_range(self, tx_power_dbm: float, frequency_hz: float, h_tx: float, h_rx: float) -> float:
        """
        largest distance that is still receivable for the given heights

        Returns 0.0 when even an unattenuated frame misses the sensitivity.
        """
        cfg = self.config
        budget = tx_power_dbm + cfg.rx_gain_db - cfg.noise_figure_db - cfg.rx_sensitivity_dbm
        if budget < 0 or frequency_hz <= 0:
            return 0.0
        budget -= 10.0 * math.log10(cfg.system_loss)
        wavelength = cfg.speed_of_light / frequency_hz
        crossover = self.crossover_distance(h_tx, h_rx, frequency_hz)
        d_free = wavelength / (4.0 * math.pi) * 10.0 ** (budget / 20.0)
        if d_free <= crossover:
            return max(d_free, cfg.min_distance_m)
        d_two_ray = math.sqrt(h_tx * h_rx) * 10.0 ** (budget / 40.0)
        return max(d_two_ray, cfg.min_distance_m)
