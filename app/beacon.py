"""
Periodic beacon (BSM) source

Sends one fixed-size packet every interval from start_time while the send
time stays strictly before stop_time. Send times are computed from the fire
index, start_time + k * interval, so they never drift.
"""

import math
from typing import Optional

from core import SimulationEngine, SimulationEntity, EventHandle, Send, seconds_to_ticks
from phy import WirelessChannel
from stats import FlowClassifier


class BeaconApplication(SimulationEntity):
    """periodic sender bound to one (src, dst, port) flow"""

    def __init__(
        self,
        simulator: SimulationEngine,
        channel: WirelessChannel,
        classifier: FlowClassifier,
        src: int,
        dst: int,
        port: int,
        name: str = "beacon",
    ):
        super().__init__(name=name)
        self.channel = channel
        self.classifier = classifier
        self.src = src
        self.dst = dst
        self.port = port

        self.start_time: Optional[float] = None
        self.stop_time: Optional[float] = None
        self.interval: Optional[float] = None
        self.size_bytes: Optional[int] = None
        self.max_packets: Optional[int] = None

        self.sent = 0
        self._pending: Optional[EventHandle] = None

        simulator.register_entity(self)
        simulator.register_handler(Send, self._on_send, target=name)

    @property
    def active(self) -> bool:
        return self._pending is not None

    def start(
        self,
        start_time: float,
        stop_time: float,
        interval: float,
        size_bytes: int,
        max_packets: Optional[int] = None,
    ):
        """
        arm the first send at start_time

        Args:
            start_time: time of the first send (fires)
            stop_time: nothing fires at or after this time
            interval: seconds between sends
            size_bytes: payload size of every packet
            max_packets: optional cap on the number of sends
        """
        if not (math.isfinite(interval) and interval > 0):
            raise ValueError(f"invalid interval {interval}")
        if size_bytes <= 0:
            raise ValueError(f"invalid packet size {size_bytes}")
        if stop_time < start_time:
            raise ValueError(f"stop time {stop_time} is before start time {start_time}")
        if max_packets is not None and max_packets < 0:
            raise ValueError(f"invalid max_packets {max_packets}")
        if self._pending is not None:
            raise RuntimeError(f"{self.name} is already started")

        self.start_time = start_time
        self.stop_time = stop_time
        self.interval = interval
        self.size_bytes = size_bytes
        self.max_packets = max_packets

        if self._may_fire(0):
            self._pending = self.simulator.schedule(start_time, Send(target=self.name, index=0))
            self.debug_log(f"armed: {start_time}s..{stop_time}s every {interval}s, {size_bytes}B")

    def stop(self) -> bool:
        """cancel the pending send; True if one was pending"""
        if self._pending is None:
            return False
        cancelled = self.simulator.cancel(self._pending)
        self._pending = None
        return cancelled

    def send_time(self, index: int) -> float:
        return self.start_time + index * self.interval

    def _may_fire(self, index: int) -> bool:
        if self.max_packets is not None and index >= self.max_packets:
            return False
        return seconds_to_ticks(self.send_time(index)) < seconds_to_ticks(self.stop_time)

    def _on_send(self, action: Send):
        self._pending = None
        flow_id = self.classifier.classify(self.src, self.dst, self.port)
        self.channel.transmit(
            flow_id=flow_id,
            from_node=self.src,
            to_node=self.dst,
            size_bytes=self.size_bytes,
            tx_time=self.simulator.now,
            port=self.port,
            seq=action.index,
        )
        self.sent += 1

        next_index = action.index + 1
        if self._may_fire(next_index):
            self._pending = self.simulator.schedule(
                self.send_time(next_index), Send(target=self.name, index=next_index)
            )

    def reset(self):
        self.sent = 0
        self._pending = None
