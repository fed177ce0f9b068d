"""
Physical Layer Module
"""

from phy.propagation import (
    PhyConfig,
    PropagationResult,
    TwoRayGroundPropagation,
    SPEED_OF_LIGHT,
    DEFAULT_RX_SENSITIVITY_DBM,
)
from phy.channel import WirelessChannel, DROP_BELOW_SENSITIVITY


__all__ = [
    "PhyConfig",
    "PropagationResult",
    "TwoRayGroundPropagation",
    "SPEED_OF_LIGHT",
    "DEFAULT_RX_SENSITIVITY_DBM",
    "WirelessChannel",
    "DROP_BELOW_SENSITIVITY",
]
