"""
Packet and event action variants

Actions are plain tagged records; the engine dispatches on their type to
the handler the owning component registered.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Packet:
    """an application packet, immutable once created"""

    flow_id: int
    size_bytes: int
    tx_time: float
    seq: int = 0


@dataclass(frozen=True)
class Send:
    """periodic fire of the application named target; index is the fire count"""

    target: str
    index: int


@dataclass(frozen=True)
class Deliver:
    """arrival of packet at node dst"""

    packet: Packet
    src: int
    dst: int
    port: int
