from dataclasses import dataclass
from typing import List

import numpy as np

from ..constants import AMU
from ..ecs import Component


@dataclass
class MassRatio:
    """An isotope of mass ``mass`` [amu] with relative abundance ``ratio``."""

    mass: float
    ratio: float


@dataclass
class MassDistribution(Component):
    """
    Isotope distribution of an emitter.

    Ratios are normalised on construction; ``draw_random_mass`` returns
    masses in kilograms.
    """

    distribution: List[MassRatio]

    def __post_init__(self):
        if not self.distribution:
            raise ValueError("MassDistribution needs at least one isotope")
        total = sum(item.ratio for item in self.distribution)
        if total <= 0:
            raise ValueError(f"Isotope ratios must sum to a positive number, got {total}")
        self.distribution = [MassRatio(item.mass, item.ratio / total) for item in self.distribution]

    @classmethod
    def single(cls, mass: float) -> "MassDistribution":
        return cls([MassRatio(mass, 1.0)])

    def draw_random_mass(self, rng: np.random.Generator, n: int = 1) -> np.ndarray:
        masses = np.array([item.mass for item in self.distribution])
        ratios = np.array([item.ratio for item in self.distribution])
        return rng.choice(masses, size=n, p=ratios) * AMU
