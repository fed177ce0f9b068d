"""
Core module for the DSRC link simulator.

Includes the discrete event engine, event actions, trace sources and errors.
"""

from core.simulator import (
    SimulationEngine,
    SimulationEntity,
    Event,
    EventHandle,
    TICKS_PER_SECOND,
    seconds_to_ticks,
    ticks_to_seconds,
)
from core.packet import Packet, Send, Deliver
from core.trace import TraceSource
from core.errors import (
    SimulationError,
    InvalidScheduleError,
    UnknownHandleError,
    UnhandledActionError,
    MutationAfterStartError,
    CollectorBusyError,
)

__all__ = [
    "SimulationEngine",
    "SimulationEntity",
    "Event",
    "EventHandle",
    "TICKS_PER_SECOND",
    "seconds_to_ticks",
    "ticks_to_seconds",
    "Packet",
    "Send",
    "Deliver",
    "TraceSource",
    "SimulationError",
    "InvalidScheduleError",
    "UnknownHandleError",
    "UnhandledActionError",
    "MutationAfterStartError",
    "CollectorBusyError",
]
