"""
Application Module
"""

from app.beacon import BeaconApplication
from app.sink import PacketSink

__all__ = [
    "BeaconApplication",
    "PacketSink",
]
