"""
Error taxonomy for the simulation core

Scheduler errors are fatal to a run: they abort run_until and propagate.
Undefined statistics (zero packets) are reported as NaN, never raised.
"""


class SimulationError(Exception):
    """base class of all simulator errors"""


class InvalidScheduleError(SimulationError):
    """an event was scheduled before the current simulation time"""


class UnknownHandleError(SimulationError):
    """cancel() got a handle this engine never issued"""


class UnhandledActionError(SimulationError):
    """an event fired whose action type has no registered handler"""


class MutationAfterStartError(SimulationError):
    """setup-only parameters were changed after the run started"""


class CollectorBusyError(SimulationError):
    """statistics were requested while the engine is still running"""
