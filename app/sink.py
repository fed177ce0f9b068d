from core import SimulationEngine, SimulationEntity, Packet
from phy import WirelessChannel


class PacketSink(SimulationEntity):
    """
    passive receiver endpoint - counts what the channel delivers to
    (node_id, port), sends nothing back
    """

    def __init__(self, simulator: SimulationEngine, channel: WirelessChannel,
                 node_id: int, port: int, name: str = "sink"):
        super().__init__(name=name)
        self.node_id = node_id
        self.port = port
        self.received = 0
        self.bytes_received = 0
        self.last_seq = None
        channel.rx_trace.connect(self._on_rx)
        simulator.register_entity(self)

    def _on_rx(self, packet: Packet, src: int, dst: int, port: int, delay: float):
        if dst != self.node_id or port != self.port:
            return
        self.received += 1
        self.bytes_received += packet.size_bytes
        self.last_seq = packet.seq
        self.debug_log(f"Received {packet.size_bytes} bytes from node {src} (seq {packet.seq}, delay {delay * 1e9:.1f} ns)")

    def reset(self):
        self.received = 0
        self.bytes_received = 0
        self.last_seq = None
