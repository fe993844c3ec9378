from dataclasses import dataclass, field

import numpy as np

from ..atom import Atom
from ..ecs import Component, StorageKind, System, dense_field
from ..initiate import NewlyCreated


@dataclass
class MagneticFieldSampler(Component):
    """Magnetic field at an atom's position [T] and its magnitude."""

    storage = StorageKind.DENSE
    layout = {"field": dense_field((3,)), "magnitude": dense_field()}

    field: np.ndarray = field(default_factory=lambda: np.zeros(3))
    magnitude: float = 0.0

    def __post_init__(self):
        self.field = np.asarray(self.field, dtype=float)


class ClearMagneticFieldSamplerSystem(System):
    writes = (MagneticFieldSampler,)

    def run(self, world):
        store = world.storage(MagneticFieldSampler)
        store["field"][store.mask] = 0.0
        store["magnitude"][store.mask] = 0.0


class CalculateMagneticFieldMagnitudeSystem(System):
    writes = (MagneticFieldSampler,)

    def run(self, world):
        store = world.storage(MagneticFieldSampler)
        store["magnitude"][store.mask] = np.linalg.norm(store["field"][store.mask], axis=1)


class AttachFieldSamplersToNewlyCreatedAtomsSystem(System):
    reads = (Atom, NewlyCreated)
    writes = (MagneticFieldSampler,)

    def run(self, world):
        for index in world.join(Atom, NewlyCreated, without=(MagneticFieldSampler,)):
            world.commands.insert(world.entity(index), MagneticFieldSampler())
