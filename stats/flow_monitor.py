"""
Per-flow statistics

Flows are classified by their (source node, destination node, port) tuple.
Counters only ever grow; ratios, mean delay and throughput are derived at
report time and come back as NaN when their denominator is zero.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from core import SimulationEngine, SimulationEntity, CollectorBusyError


class FlowClassifier:
    """maps (src, dst, port) tuples to flow ids, 1, 2, ... in first-seen order"""

    def __init__(self):
        self._flows: dict[tuple[int, int, int], int] = {}
        self._tuples: dict[int, tuple[int, int, int]] = {}

    def classify(self, src: int, dst: int, port: int) -> int:
        key = (src, dst, port)
        flow_id = self._flows.get(key)
        if flow_id is None:
            flow_id = len(self._flows) + 1
            self._flows[key] = flow_id
            self._tuples[flow_id] = key
        return flow_id

    def lookup(self, flow_id: int) -> Optional[tuple[int, int, int]]:
        return self._tuples.get(flow_id)

    def __len__(self):
        return len(self._flows)


@dataclass
class FlowRecord:
    flow_id: int
    src: Optional[int] = None
    dst: Optional[int] = None
    port: Optional[int] = None
    tx_packets: int = 0
    rx_packets: int = 0
    dropped_packets: int = 0
    tx_bytes: int = 0
    rx_bytes: int = 0
    delay_sum: float = 0.0
    jitter_sum: float = 0.0
    last_delay: Optional[float] = None
    first_tx_time: Optional[float] = None
    last_rx_time: Optional[float] = None

    @property
    def in_flight(self) -> int:
        return self.tx_packets - self.rx_packets - self.dropped_packets

    @property
    def delivery_ratio_pct(self) -> float:
        if self.tx_packets == 0:
            return math.nan
        return self.rx_packets * 100.0 / self.tx_packets

    @property
    def avg_delay(self) -> float:
        if self.rx_packets == 0:
            return math.nan
        return self.delay_sum / self.rx_packets

    @property
    def avg_jitter(self) -> float:
        if self.rx_packets < 2:
            return math.nan
        return self.jitter_sum / (self.rx_packets - 1)

    def throughput_kbps(self, duration_s: float) -> float:
        """received kbit/s over a fixed observation window"""
        if duration_s <= 0:
            return math.nan
        return self.rx_bytes * 8.0 / duration_s / 1000.0


@dataclass(frozen=True)
class FlowSummary:
    flow_id: int
    src: Optional[int]
    dst: Optional[int]
    port: Optional[int]
    tx_packets: int
    rx_packets: int
    dropped_packets: int
    delivery_ratio_pct: float
    avg_delay: float
    avg_jitter: float
    throughput_kbps: float


class FlowStatsCollector(SimulationEntity):
    """accumulates send/deliver/drop notifications per flow"""

    def __init__(
        self,
        simulator: SimulationEngine,
        classifier: FlowClassifier,
        duration_s: float = 9.0,
        name: str = "flowmon",
    ):
        """
        Args:
            classifier: flow id source, used to label records with their tuple
            duration_s: observation window for throughput, e.g. stop - start
        """
        super().__init__(name=name)
        self.classifier = classifier
        self.duration_s = duration_s
        self.records: dict[int, FlowRecord] = {}
        simulator.register_entity(self)

    def install(self, channel):
        """subscribe to a channel's tx/rx/drop trace sources"""
        channel.tx_trace.connect(self._trace_tx)
        channel.rx_trace.connect(self._trace_rx)
        channel.drop_trace.connect(self._trace_drop)

    def _trace_tx(self, packet, src, dst, port):
        self.on_sent(packet.flow_id, packet.size_bytes, packet.tx_time)

    def _trace_rx(self, packet, src, dst, port, delay):
        self.on_delivered(packet.flow_id, delay, packet.size_bytes)

    def _trace_drop(self, packet, src, dst, port, reason):
        self.on_dropped(packet.flow_id)

    def _record(self, flow_id: int) -> FlowRecord:
        record = self.records.get(flow_id)
        if record is None:
            key = self.classifier.lookup(flow_id)
            src, dst, port = key if key is not None else (None, None, None)
            record = FlowRecord(flow_id=flow_id, src=src, dst=dst, port=port)
            self.records[flow_id] = record
            self.debug_log(f"new flow {flow_id}: {src} -> {dst}:{port}")
        return record

    def on_sent(self, flow_id: int, size_bytes: int = 0, time: Optional[float] = None):
        record = self._record(flow_id)
        record.tx_packets += 1
        record.tx_bytes += size_bytes
        if record.first_tx_time is None:
            record.first_tx_time = time

    def on_delivered(self, flow_id: int, delay: float, size_bytes: int):
        record = self._record(flow_id)
        record.rx_packets += 1
        record.rx_bytes += size_bytes
        record.delay_sum += delay
        if record.last_delay is not None:
            record.jitter_sum += abs(delay - record.last_delay)
        record.last_delay = delay
        if self.simulator is not None:
            record.last_rx_time = self.simulator.now

    def on_dropped(self, flow_id: int):
        self._record(flow_id).dropped_packets += 1

    def check_for_lost_packets(self) -> int:
        """
        count packets still in flight as dropped

        Returns:
            number of packets reclassified
        """
        lost = 0
        for record in self.records.values():
            if record.in_flight > 0:
                self.debug_log(f"flow {record.flow_id}: {record.in_flight} packets still in flight, counted lost")
                lost += record.in_flight
                record.dropped_packets += record.in_flight
        return lost

    def _check_idle(self):
        if self.simulator is not None and self.simulator.running:
            raise CollectorBusyError("flow statistics are only available once run_until has returned")

    def report(self) -> list[FlowRecord]:
        """snapshot of every flow record, in creation order"""
        self._check_idle()
        return [replace(record) for record in self.records.values()]

    def summarize(self, duration_s: Optional[float] = None) -> list[FlowSummary]:
        window = self.duration_s if duration_s is None else duration_s
        return [
            FlowSummary(
                flow_id=r.flow_id,
                src=r.src,
                dst=r.dst,
                port=r.port,
                tx_packets=r.tx_packets,
                rx_packets=r.rx_packets,
                dropped_packets=r.dropped_packets,
                delivery_ratio_pct=r.delivery_ratio_pct,
                avg_delay=r.avg_delay,
                avg_jitter=r.avg_jitter,
                throughput_kbps=r.throughput_kbps(window),
            )
            for r in self.report()
        ]

    def reset(self):
        self.records.clear()
