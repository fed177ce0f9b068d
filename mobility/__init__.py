"""
Mobility Module
"""

from mobility.model import ConstantVelocityMobilityModel, Node, as_vector

__all__ = [
    "ConstantVelocityMobilityModel",
    "Node",
    "as_vector",
]
