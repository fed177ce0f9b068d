"""
Wireless channel entity

Connects transmitters to receivers through the propagation model. Node
positions are read from the mobility model at the transmit time, never
cached. A receivable frame becomes a Deliver event at tx_time + delay, an
unreceivable one is dropped on the spot.
"""

import math

from core import (
    SimulationEngine, SimulationEntity, Packet, Deliver, TraceSource,
    InvalidScheduleError, seconds_to_ticks,
)
from mobility import ConstantVelocityMobilityModel
from phy.propagation import PhyConfig, TwoRayGroundPropagation

DROP_BELOW_SENSITIVITY = "below-sensitivity"


class WirelessChannel(SimulationEntity):
    """Transmission media shared by the attached nodes"""

    def __init__(
        self,
        simulator: SimulationEngine,
        mobility: ConstantVelocityMobilityModel,
        propagation: TwoRayGroundPropagation,
        name: str = "channel",
    ):
        super().__init__(name)
        self.mobility = mobility
        self.propagation = propagation
        self.nodes: set[int] = set()

        # fired with (packet, src, dst, port)
        self.tx_trace = TraceSource("tx")
        # fired with (packet, src, dst, port, delay)
        self.rx_trace = TraceSource("rx")
        # fired with (packet, src, dst, port, reason)
        self.drop_trace = TraceSource("drop")

        self.stats = {"transmitted": 0, "delivered": 0, "dropped": 0, "in_transit": 0}

        simulator.register_entity(self)
        simulator.register_handler(Deliver, self._on_deliver)

    @property
    def config(self) -> PhyConfig:
        return self.propagation.config

    def attach(self, node_id: int):
        """attach a node; it must already be known to the mobility model"""
        if node_id not in self.mobility.nodes:
            raise KeyError(f"node {node_id} has no mobility state")
        self.nodes.add(node_id)

    def transmit(
        self,
        flow_id: int,
        from_node: int,
        to_node: int,
        size_bytes: int,
        tx_time: float,
        port: int = 0,
        seq: int = 0,
    ) -> Packet:
        """
        send one frame from from_node to to_node

        The tx trace fires before the frame is evaluated, so every call counts
        as a transmission whatever its fate. A tx_time before the current
        time is rejected before anything is counted.

        Returns:
            the transmitted packet
        """
        if from_node not in self.nodes or to_node not in self.nodes:
            raise ValueError(f"nodes {from_node}->{to_node} are not both attached to {self.name}")
        if from_node == to_node:
            raise ValueError(f"node {from_node} cannot transmit to itself")
        if size_bytes <= 0:
            raise ValueError(f"invalid packet size {size_bytes}")
        if not math.isfinite(tx_time):
            raise ValueError(f"invalid tx time {tx_time}")
        if seconds_to_ticks(tx_time) < self.simulator.current_tick:
            raise InvalidScheduleError(f"tx time {tx_time}s is before now ({self.simulator.now}s)")

        packet = Packet(flow_id=flow_id, size_bytes=size_bytes, tx_time=tx_time, seq=seq)
        self.stats["transmitted"] += 1
        self.tx_trace.notify(packet, from_node, to_node, port)

        cfg = self.config
        result = self.propagation.evaluate(
            tx_pos=self.mobility.position_at(from_node, tx_time),
            rx_pos=self.mobility.position_at(to_node, tx_time),
            tx_power_dbm=cfg.tx_power_dbm,
            frequency_hz=cfg.frequency_hz,
            height_m=cfg.antenna_height_m,
        )

        if not result.receivable:
            self.stats["dropped"] += 1
            self.debug_log(
                f"drop flow {flow_id} seq {seq}: {result.rx_power_dbm:.2f} dBm at {result.distance:.2f} m"
            )
            self.drop_trace.notify(packet, from_node, to_node, port, DROP_BELOW_SENSITIVITY)
            return packet

        self.simulator.schedule(
            tx_time + result.delay,
            Deliver(packet=packet, src=from_node, dst=to_node, port=port),
        )
        self.stats["in_transit"] += 1
        self.debug_log(
            f"tx flow {flow_id} seq {seq}: {result.rx_power_dbm:.2f} dBm at {result.distance:.2f} m, "
            f"delay {result.delay * 1e9:.1f} ns"
        )
        return packet

    def _on_deliver(self, action: Deliver):
        delay = self.simulator.now - action.packet.tx_time
        self.stats["in_transit"] -= 1
        self.stats["delivered"] += 1
        self.rx_trace.notify(action.packet, action.src, action.dst, action.port, delay)

    def reset(self):
        self.stats = {"transmitted": 0, "delivered": 0, "dropped": 0, "in_transit": 0}

    def get_stats(self):
        return self.stats
