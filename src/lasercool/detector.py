"""
Atom detectors.

A detector entity carries a ``Position`` and a ``Detector``: a disk of given
radius and thickness whose axis points along ``direction``. Every atom found
inside the disk is marked ``ToBeDestroyed`` and recorded in the
``DetectingInfo`` resource. Writing the records to disk is left to the
caller.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .atom import Atom, InitialVelocity, Position, Velocity
from .destructor import ToBeDestroyed
from .ecs import Component, Resource, System
from .integrator import Step, Timestep
from .shapes import Cylinder


@dataclass
class Detector(Component):
    radius: float
    thickness: float
    direction: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))

    def __post_init__(self):
        self._shape = Cylinder(self.radius, self.thickness, self.direction)
        self.direction = self._shape.direction

    def detects(self, centre, positions) -> np.ndarray:
        return self._shape.contains(centre, positions)


@dataclass
class DetectionRecord:
    time: float
    position: np.ndarray
    velocity: np.ndarray
    initial_velocity: np.ndarray


@dataclass
class DetectingInfo(Resource):
    """Running tally of detected atoms."""

    atom_detected: int = 0
    total_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    records: List[DetectionRecord] = field(default_factory=list)

    @property
    def mean_velocity(self) -> np.ndarray:
        if self.atom_detected == 0:
            return np.full(3, np.nan)
        return self.total_velocity / self.atom_detected


class DetectingAtomSystem(System):
    reads = (Position, Velocity, InitialVelocity, Detector, Atom, Step, Timestep)
    writes = (DetectingInfo, ToBeDestroyed)
    optional = (DetectingInfo,)

    def setup(self, world):
        if world.try_resource(DetectingInfo) is None:
            world.insert_resource(DetectingInfo())

    def run(self, world):
        detectors = list(world.query(Position, Detector))
        if not detectors:
            return
        rows = world.join(Atom, Position, Velocity, without=(ToBeDestroyed,))
        if len(rows) == 0:
            return

        info = world.resource(DetectingInfo)
        time = world.resource(Step).n * world.resource(Timestep).delta
        positions = world.storage(Position)["vec"]
        velocities = world.storage(Velocity)["vec"]
        initial = world.storage(InitialVelocity)

        detected = np.zeros(len(rows), dtype=bool)
        for _, centre, detector in detectors:
            detected |= detector.detects(centre.vec, positions[rows])

        for index in rows[detected]:
            world.commands.insert(world.entity(index), ToBeDestroyed())
            info.atom_detected += 1
            info.total_velocity += velocities[index]
            info.records.append(
                DetectionRecord(
                    time=time,
                    position=positions[index].copy(),
                    velocity=velocities[index].copy(),
                    initial_velocity=(
                        initial["vec"][index].copy() if initial.mask[index] else np.full(3, np.nan)
                    ),
                )
            )
