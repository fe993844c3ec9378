"""
Steady-state excited population.

With total scattering rate ``R = Σ_beams R_i`` the rate equations of a
two-level atom give

    ρ_ee = R / (Γ + 2R)

which tends to 1/2 at high saturation.
"""

from dataclasses import dataclass

import numpy as np

from ..atom import Atom, AtomicTransition
from ..ecs import Component, StorageKind, System, dense_field
from .rate import RateCoefficients


@dataclass
class TwoLevelPopulation(Component):
    storage = StorageKind.DENSE
    layout = {"ground": dense_field(fill=1.0), "excited": dense_field()}

    ground: float = 1.0
    excited: float = 0.0


class CalculateTwoLevelPopulationSystem(System):
    reads = (Atom, AtomicTransition, RateCoefficients)
    writes = (TwoLevelPopulation,)

    def run(self, world):
        rows = world.join(Atom, AtomicTransition, RateCoefficients, TwoLevelPopulation)
        if len(rows) == 0:
            return
        gamma = 2.0 * np.pi * world.storage(AtomicTransition)["linewidth"][rows]
        total_rate = np.nansum(world.storage(RateCoefficients)["contents"][rows], axis=1)
        excited = total_rate / (gamma + 2.0 * total_rate)

        population = world.storage(TwoLevelPopulation)
        population["excited"][rows] = excited
        population["ground"][rows] = 1.0 - excited
