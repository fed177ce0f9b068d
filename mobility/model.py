"""
Constant velocity mobility

Node kinematics are a pure function of time: position(t) = p0 + v * t.
Positions are never advanced or cached, so any time, past or future,
can be queried in any order.
"""

import math
from dataclasses import dataclass

import numpy as np

from core import SimulationEngine, SimulationEntity, MutationAfterStartError


def as_vector(value) -> np.ndarray:
    """convert a 3-sequence to a float Vector3"""
    vec = np.asarray(value, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    if not np.all(np.isfinite(vec)):
        raise ValueError(f"vector has non-finite components: {value}")
    return vec


@dataclass
class Node:
    id: int
    position: np.ndarray
    velocity: np.ndarray

    def __str__(self):
        return f"Node({self.id}, p0={self.position.tolist()}, v={self.velocity.tolist()})"


class ConstantVelocityMobilityModel(SimulationEntity):
    """owns every node's kinematic state"""

    def __init__(self, simulator: SimulationEngine, name: str = "mobility"):
        super().__init__(name=name)
        self.nodes: dict[int, Node] = {}
        simulator.register_entity(self)

    def add_node(self, node_id: int, position=(0.0, 0.0, 0.0), velocity=(0.0, 0.0, 0.0)) -> Node:
        self._check_setup("add_node")
        if node_id in self.nodes:
            raise ValueError(f"node {node_id} already exists")
        node = Node(id=node_id, position=as_vector(position), velocity=as_vector(velocity))
        self.nodes[node_id] = node
        self.debug_log(f"added {node}")
        return node

    def set_initial_position(self, node_id: int, position):
        self._check_setup("set_initial_position")
        self._node(node_id).position = as_vector(position)

    def set_velocity(self, node_id: int, velocity):
        self._check_setup("set_velocity")
        self._node(node_id).velocity = as_vector(velocity)

    def _check_setup(self, what: str):
        if self.simulator is not None and self.simulator.started:
            raise MutationAfterStartError(f"{what} called after the simulation started")

    def _node(self, node_id: int) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise KeyError(f"unknown node {node_id}") from None

    def position_at(self, node_id: int, time_s: float) -> np.ndarray:
        """position of node_id at time_s seconds"""
        if not math.isfinite(time_s) or time_s < 0:
            raise ValueError(f"invalid time {time_s}")
        node = self._node(node_id)
        return node.position + node.velocity * time_s

    def velocity_of(self, node_id: int) -> np.ndarray:
        return self._node(node_id).velocity.copy()

    def distance_between(self, a: int, b: int, time_s: float) -> float:
        return float(np.linalg.norm(self.position_at(a, time_s) - self.position_at(b, time_s)))

    def node_ids(self) -> list[int]:
        return list(self.nodes)
