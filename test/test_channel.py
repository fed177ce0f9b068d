import sys
sys.path.append("..")
import math

import pytest

from core import SimulationEngine, InvalidScheduleError
from mobility import ConstantVelocityMobilityModel
from phy import PhyConfig, TwoRayGroundPropagation, WirelessChannel, SPEED_OF_LIGHT, DROP_BELOW_SENSITIVITY
from stats import FlowClassifier, FlowStatsCollector


class ChannelBench:
    """two nodes on the x axis, node 1 optionally receding from node 0"""

    def __init__(self, distance=100.0, speed=0.0, tx_power=23.0):
        self.simulator = SimulationEngine(name="channel-test")
        self.mobility = ConstantVelocityMobilityModel(self.simulator)
        self.mobility.add_node(0, position=(0.0, 0.0, 0.0))
        self.mobility.add_node(1, position=(distance, 0.0, 0.0), velocity=(speed, 0.0, 0.0))
        self.propagation = TwoRayGroundPropagation(PhyConfig(tx_power_dbm=tx_power))
        self.channel = WirelessChannel(self.simulator, self.mobility, self.propagation)
        self.channel.attach(0)
        self.channel.attach(1)

        self.log = []
        self.channel.tx_trace.connect(lambda p, s, d, port: self.log.append(("tx", p.seq, self.simulator.now)))
        self.channel.rx_trace.connect(
            lambda p, s, d, port, delay: self.log.append(("rx", p.seq, self.simulator.now, delay))
        )
        self.channel.drop_trace.connect(
            lambda p, s, d, port, reason: self.log.append(("drop", p.seq, self.simulator.now, reason))
        )


def test_receivable_frame_is_delivered_after_propagation_delay():
    bench = ChannelBench(distance=100.0)
    packet = bench.channel.transmit(flow_id=1, from_node=0, to_node=1, size_bytes=500, tx_time=0.0, port=5000)

    assert packet.flow_id == 1 and packet.size_bytes == 500 and packet.tx_time == 0.0
    assert bench.log == [("tx", 0, 0.0)]
    assert bench.simulator.pending == 1
    assert bench.channel.stats["in_transit"] == 1

    bench.simulator.run_until(1.0)

    kind, seq, arrival, delay = bench.log[1]
    assert kind == "rx"
    assert abs(delay - 100.0 / SPEED_OF_LIGHT) < 1e-9
    assert arrival == pytest.approx(100.0 / SPEED_OF_LIGHT, abs=1e-9)
    assert bench.channel.stats == {"transmitted": 1, "delivered": 1, "dropped": 0, "in_transit": 0}


def test_unreceivable_frame_is_counted_then_dropped_immediately():
    bench = ChannelBench(distance=100.0, tx_power=-100.0)
    bench.channel.transmit(flow_id=1, from_node=0, to_node=1, size_bytes=500, tx_time=0.0)

    assert [entry[0] for entry in bench.log] == ["tx", "drop"]
    assert bench.log[1][3] == DROP_BELOW_SENSITIVITY
    assert bench.simulator.pending == 0
    assert bench.channel.stats["dropped"] == 1


def test_positions_are_read_at_tx_time():
    # node 1 leaves 100 m at 1000 m/s, out of range (~1 km) after one second
    bench = ChannelBench(distance=100.0, speed=1000.0)
    bench.channel.transmit(flow_id=1, from_node=0, to_node=1, size_bytes=100, tx_time=0.0, seq=0)
    bench.channel.transmit(flow_id=1, from_node=0, to_node=1, size_bytes=100, tx_time=1.0, seq=1)
    bench.simulator.run_until(2.0)

    kinds = {(entry[0], entry[1]) for entry in bench.log}
    assert ("rx", 0) in kinds
    assert ("drop", 1) in kinds
    assert ("rx", 1) not in kinds


def test_every_listener_sees_every_notification():
    bench = ChannelBench()
    extra = []
    bench.channel.rx_trace.connect(lambda *args: extra.append(args))
    assert len(bench.channel.rx_trace) == 2

    for i in range(3):
        bench.channel.transmit(flow_id=1, from_node=0, to_node=1, size_bytes=10, tx_time=0.0, seq=i)
    bench.simulator.run_until(1.0)

    assert len(extra) == 3
    assert [entry[1] for entry in bench.log if entry[0] == "rx"] == [0, 1, 2]


def test_disconnect_listener():
    bench = ChannelBench()
    seen = []

    def listener(*args):
        seen.append(args)

    bench.channel.tx_trace.connect(listener)
    bench.channel.tx_trace.disconnect(listener)
    bench.channel.transmit(flow_id=1, from_node=0, to_node=1, size_bytes=10, tx_time=0.0)
    assert seen == []
    with pytest.raises(ValueError):
        bench.channel.tx_trace.disconnect(listener)


def test_invalid_transmissions():
    bench = ChannelBench()
    with pytest.raises(ValueError):
        bench.channel.transmit(flow_id=1, from_node=0, to_node=0, size_bytes=10, tx_time=0.0)
    with pytest.raises(ValueError):
        bench.channel.transmit(flow_id=1, from_node=0, to_node=5, size_bytes=10, tx_time=0.0)
    with pytest.raises(ValueError):
        bench.channel.transmit(flow_id=1, from_node=0, to_node=1, size_bytes=0, tx_time=0.0)
    with pytest.raises(KeyError):
        bench.channel.attach(9)
    assert bench.log == []


def test_transmit_in_the_past_is_rejected_before_counting():
    for tx_power in (23.0, -100.0):
        bench = ChannelBench(tx_power=tx_power)
        classifier = FlowClassifier()
        flowmon = FlowStatsCollector(bench.simulator, classifier)
        flowmon.install(bench.channel)
        bench.simulator.run_until(5.0)

        flow = classifier.classify(0, 1, 5000)
        with pytest.raises(InvalidScheduleError):
            bench.channel.transmit(flow_id=flow, from_node=0, to_node=1, size_bytes=10, tx_time=1.0, port=5000)
        with pytest.raises(ValueError):
            bench.channel.transmit(flow_id=flow, from_node=0, to_node=1, size_bytes=10, tx_time=math.nan)

        assert bench.log == []
        assert bench.channel.stats["transmitted"] == 0
        assert flowmon.report() == []

        # current time is fine
        bench.channel.transmit(flow_id=flow, from_node=0, to_node=1, size_bytes=10, tx_time=5.0, port=5000)
        assert flowmon.report()[0].tx_packets == 1
