import sys
sys.path.append("..")

import numpy as np
import pytest

from core import SimulationEngine, MutationAfterStartError
from mobility import ConstantVelocityMobilityModel


def make_model():
    simulator = SimulationEngine(name="mobility-test")
    model = ConstantVelocityMobilityModel(simulator)
    model.add_node(0, position=(0.0, 0.0, 1.5), velocity=(20.0, 0.0, 0.0))
    model.add_node(1, position=(50.0, 0.0, 1.5), velocity=(-20.0, 0.0, 0.0))
    return simulator, model


def test_position_is_linear_in_time():
    _, model = make_model()
    assert np.array_equal(model.position_at(0, 0.0), [0.0, 0.0, 1.5])
    assert np.allclose(model.position_at(0, 2.5), [50.0, 0.0, 1.5])
    assert np.allclose(model.position_at(1, 2.5), [0.0, 0.0, 1.5])


def test_queries_do_not_depend_on_call_order():
    _, model = make_model()
    late = model.position_at(0, 9.0)
    early = model.position_at(0, 1.0)
    assert np.array_equal(model.position_at(0, 1.0), early)
    assert np.array_equal(model.position_at(0, 9.0), late)


def test_returned_positions_are_copies():
    _, model = make_model()
    p = model.position_at(0, 0.0)
    p[0] = 1000.0
    assert model.position_at(0, 0.0)[0] == 0.0


def test_distance_between_vehicles_closing_then_opening():
    _, model = make_model()
    assert model.distance_between(0, 1, 0.0) == pytest.approx(50.0)
    assert model.distance_between(0, 1, 1.25) == pytest.approx(0.0)
    assert model.distance_between(0, 1, 10.0) == pytest.approx(350.0)


def test_setup_mutators():
    _, model = make_model()
    model.set_initial_position(1, (100.0, 0.0, 1.5))
    model.set_velocity(1, (0.0, 0.0, 0.0))
    assert np.allclose(model.position_at(1, 5.0), [100.0, 0.0, 1.5])
    assert np.array_equal(model.velocity_of(1), [0.0, 0.0, 0.0])
    assert model.node_ids() == [0, 1]


def test_mutation_after_start_fails():
    simulator, model = make_model()
    simulator.run_until(1.0)
    with pytest.raises(MutationAfterStartError):
        model.set_velocity(0, (0.0, 0.0, 0.0))
    with pytest.raises(MutationAfterStartError):
        model.set_initial_position(0, (1.0, 0.0, 0.0))
    with pytest.raises(MutationAfterStartError):
        model.add_node(2)
    # queries are still fine
    assert np.allclose(model.position_at(0, 0.5), [10.0, 0.0, 1.5])


def test_invalid_input():
    _, model = make_model()
    with pytest.raises(KeyError):
        model.position_at(7, 1.0)
    with pytest.raises(ValueError):
        model.position_at(0, -1.0)
    with pytest.raises(ValueError):
        model.add_node(0)
    with pytest.raises(ValueError):
        model.set_velocity(0, (1.0, 2.0))
    with pytest.raises(ValueError):
        model.set_velocity(0, (float("nan"), 0.0, 0.0))
