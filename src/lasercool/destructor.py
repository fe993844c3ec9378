"""
Two-phase destruction.

Any system may mark an entity with ``ToBeDestroyed`` through the command
buffer. In the following step ``DeleteToBeDestroyedEntitiesSystem`` queues
its deletion, so the entity is gone after that step's flush and no system
ever observes a partially deleted entity.
"""

from dataclasses import dataclass

import numpy as np

from .atom import Atom, Position
from .ecs import Component, Resource, StorageKind, System


class ToBeDestroyed(Component):
    storage = StorageKind.MARKER


class DeleteToBeDestroyedEntitiesSystem(System):
    writes = (ToBeDestroyed,)

    def run(self, world):
        for index in world.join(ToBeDestroyed):
            world.commands.delete(world.entity(index))


@dataclass
class SimulationBounds(Resource):
    """Atoms with ``|x_i| > half_width_i`` on any axis are destroyed."""

    half_width: np.ndarray

    def __post_init__(self):
        self.half_width = np.asarray(self.half_width, dtype=float)


class DestroyOutOfBoundAtomsSystem(System):
    reads = (Position, Atom, SimulationBounds)
    writes = (ToBeDestroyed,)
    optional = (SimulationBounds,)

    def run(self, world):
        bounds = world.try_resource(SimulationBounds)
        if bounds is None:
            return
        rows = world.join(Atom, Position, without=(ToBeDestroyed,))
        positions = world.storage(Position)["vec"][rows]
        outside = np.any(np.abs(positions) > bounds.half_width, axis=1)
        for index in rows[outside]:
            world.commands.insert(world.entity(index), ToBeDestroyed())
