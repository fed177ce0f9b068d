"""
Discrete Event Simulation Engine

Owns virtual time and the pending event queue. Events are popped in
(tick, sequence) order, so equal-time events fire in insertion order and
every run of the same setup replays identically.

The engine doubles as the simulation context: it is handed to every
component at construction and owns the clock, the logger and the entity
registry. There is no module-level simulation state.
"""

import abc
import heapq
import itertools
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from core.errors import InvalidScheduleError, UnhandledActionError, UnknownHandleError

# 1 tick == 1 ns
TICKS_PER_SECOND = 1_000_000_000

_engine_ids = itertools.count(1)


def seconds_to_ticks(seconds: float) -> int:
    """convert seconds to the nearest integer tick"""
    return int(round(seconds * TICKS_PER_SECOND))


def ticks_to_seconds(ticks: int) -> float:
    return ticks / TICKS_PER_SECOND


class SimulationEntity(abc.ABC):
    """simulation entity"""

    def __init__(self, name: str):
        self.name = name
        self.simulator: Optional["SimulationEngine"] = None

    def initialize(self):
        """called once, when the first run_until starts"""

    def teardown(self):
        """called every time run_until returns"""

    def reset(self):
        """reset entity state"""

    def set_name(self, name: str):
        self.name = name

    def debug_log(self, msg: str):
        if self.simulator is None:
            return
        logger = self.simulator.logger
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"[t={self.simulator.now:.9f}s][{self.name}] {msg}")

    def __str__(self):
        return f"SimulationEntity({self.name})"


@dataclass(order=True)
class Event:
    """a pending action; ordering key is (tick, sequence)"""

    tick: int
    sequence: int
    action: Any = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    @property
    def time(self) -> float:
        return ticks_to_seconds(self.tick)


@dataclass(frozen=True)
class EventHandle:
    engine_id: int
    sequence: int
    tick: int

    @property
    def time(self) -> float:
        return ticks_to_seconds(self.tick)


class SimulationEngine:
    """single-threaded discrete event engine"""

    def __init__(self, name: str = "engine", debug: bool = False):
        """
        Args:
            name: engine name, also used for the logger name (dsrc.<name>.<id>)
            debug: log every entity debug message
        """
        self.name = name
        self._engine_id = next(_engine_ids)
        # unique per engine instance
        self.logger = logging.getLogger(f"dsrc.{name}.{self._engine_id}")

        self.current_tick = 0
        self.entities: list[SimulationEntity] = []
        self.running = False
        self.started = False
        self._stop_requested = False

        self._queue: list[Event] = []
        self._live: dict[int, Event] = {}
        self._next_sequence = 0
        # (action type, target) -> handler
        self._handlers: dict[tuple[type, Any], Callable[[Any], None]] = {}

        self.stats = {
            "events_processed": 0,
            "events_cancelled": 0,
            "total_time_s": 0.0,
            "wallclock_time_s": 0.0,
            "simulation_speed": 0.0,  # simulated seconds per wall-clock second
        }

        self.set_debug(debug)

    def set_debug(self, debug: bool):
        self.debug = debug
        self.logger.setLevel(logging.DEBUG if debug else logging.INFO)

    @property
    def now(self) -> float:
        """current simulation time in seconds"""
        return ticks_to_seconds(self.current_tick)

    @property
    def pending(self) -> int:
        """number of events that are scheduled and not cancelled"""
        return len(self._live)

    def register_entity(self, entity: SimulationEntity):
        """register an entity so it gets initialize/teardown calls"""
        entity.simulator = self
        self.entities.append(entity)

    def register_handler(self, action_type: type, handler: Callable[[Any], None], target: Any = None):
        """
        route events whose action is of action_type to handler

        Actions that carry a `target` attribute are routed to the handler
        registered for that target; all others use target None.
        """
        key = (action_type, target)
        if key in self._handlers:
            raise ValueError(f"handler for {action_type.__name__} (target={target!r}) already registered")
        self._handlers[key] = handler

    # ------------------------------------------------------------------
    # scheduling

    def schedule(self, time_s: float, action: Any) -> EventHandle:
        """schedule action at absolute time time_s (seconds)"""
        if not math.isfinite(time_s):
            raise InvalidScheduleError(f"cannot schedule {type(action).__name__} at {time_s}s")
        tick = seconds_to_ticks(time_s)
        if tick < self.current_tick:
            raise InvalidScheduleError(
                f"cannot schedule {type(action).__name__} at {time_s}s, now is {self.now}s"
            )
        event = Event(tick=tick, sequence=self._next_sequence, action=action)
        self._next_sequence += 1
        heapq.heappush(self._queue, event)
        self._live[event.sequence] = event
        return EventHandle(engine_id=self._engine_id, sequence=event.sequence, tick=tick)

    def schedule_in(self, delay_s: float, action: Any) -> EventHandle:
        """schedule action delay_s seconds from now"""
        if delay_s < 0:
            raise InvalidScheduleError(f"negative delay {delay_s}s")
        return self.schedule(self.now + delay_s, action)

    def cancel(self, handle: EventHandle) -> bool:
        """
        cancel a pending event

        Returns:
            True if the event was pending, False if it already fired or was
            already cancelled
        """
        if handle.engine_id != self._engine_id or handle.sequence >= self._next_sequence:
            raise UnknownHandleError(f"handle {handle} was not issued by engine {self.name}")
        event = self._live.pop(handle.sequence, None)
        if event is None:
            return False
        # lazy removal: the heap entry is skipped when popped
        event.cancelled = True
        self.stats["events_cancelled"] += 1
        return True

    def next_event_time(self) -> Optional[float]:
        self._discard_cancelled()
        if self._queue:
            return self._queue[0].time
        return None

    def _discard_cancelled(self):
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)

    # ------------------------------------------------------------------
    # running

    def run_until(self, stop_time: float) -> int:
        """
        run the simulation

        Fires events in (time, sequence) order until the queue is empty or the
        next event lies after stop_time, then advances the clock to stop_time.
        Events at exactly stop_time fire.

        Args:
            stop_time: absolute stop time in seconds

        Returns:
            number of events processed during this call
        """
        if not math.isfinite(stop_time):
            raise InvalidScheduleError(f"invalid stop time {stop_time}s")
        stop_tick = seconds_to_ticks(stop_time)
        if stop_tick < self.current_tick:
            raise InvalidScheduleError(f"stop time {stop_time}s is before now ({self.now}s)")

        if not self.started:
            self.started = True
            for entity in self.entities:
                entity.initialize()

        self.running = True
        self._stop_requested = False
        processed = 0
        start_tick = self.current_tick
        start_wallclock = time.time()
        self.logger.debug(f"run_until {stop_time}s, {self.pending} events pending")

        try:
            while not self._stop_requested:
                self._discard_cancelled()
                if not self._queue or self._queue[0].tick > stop_tick:
                    self.current_tick = stop_tick
                    break
                event = heapq.heappop(self._queue)
                del self._live[event.sequence]
                self.current_tick = event.tick
                self._dispatch(event.action)
                processed += 1
        finally:
            self.running = False
            wallclock_time = time.time() - start_wallclock
            self.stats["events_processed"] += processed
            self.stats["total_time_s"] = self.now
            self.stats["wallclock_time_s"] += wallclock_time
            simulated = ticks_to_seconds(self.current_tick - start_tick)
            self.stats["simulation_speed"] = simulated / wallclock_time if wallclock_time > 0 else 0.0
            for entity in self.entities:
                entity.teardown()

        self.logger.debug(
            f"run_until done at {self.now}s: {processed} events in {wallclock_time:.6f}s wallclock"
        )
        return processed

    def stop(self):
        """ask the running loop to return after the current event"""
        self._stop_requested = True

    def _dispatch(self, action: Any):
        target = getattr(action, "target", None)
        handler = self._handlers.get((type(action), target))
        if handler is None:
            raise UnhandledActionError(
                f"no handler registered for {type(action).__name__} (target={target!r})"
            )
        handler(action)

    def reset(self):
        """drop every pending event and rewind the clock to zero"""
        if self.running:
            raise RuntimeError("cannot reset a running engine")
        self._queue.clear()
        self._live.clear()
        self.current_tick = 0
        self.started = False
        for entity in self.entities:
            entity.reset()
        self.logger.debug("simulation reset")
