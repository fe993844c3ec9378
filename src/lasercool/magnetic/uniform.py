from dataclasses import dataclass

import numpy as np

from ..ecs import Component, System
from .sampler import MagneticFieldSampler


@dataclass
class UniformMagneticField(Component):
    """Homogeneous bias field [T], e.g. from a pair of Helmholtz coils."""

    field: np.ndarray

    def __post_init__(self):
        self.field = np.asarray(self.field, dtype=float)

    @classmethod
    def gauss(cls, field) -> "UniformMagneticField":
        return cls(np.asarray(field, dtype=float) * 1e-4)


class UniformMagneticFieldSystem(System):
    reads = (UniformMagneticField,)
    writes = (MagneticFieldSampler,)

    def run(self, world):
        store = world.storage(MagneticFieldSampler)
        for _, uniform in world.query(UniformMagneticField):
            store["field"][store.mask] += uniform.field
