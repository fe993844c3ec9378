"""
Loss to dark states.

Each scattering event has a small chance ``depump_chance`` of leaving the
atom in a state the cooling light no longer addresses. After ``N`` events
in a step the atom has gone dark with probability ``1 - (1 - p)^N``; dark
atoms are marked ``Dark`` and excluded from scattering.
"""

from dataclasses import dataclass

import numpy as np

from ..atom import Dark
from ..ecs import Resource, System
from ..ecs.parallel import system_rng
from .photons_scattered import ActualPhotonsScatteredVector


@dataclass
class RepumpLoss(Resource):
    depump_chance: float

    def __post_init__(self):
        if not 0.0 <= self.depump_chance <= 1.0:
            raise ValueError(f"depump_chance must be a probability, got {self.depump_chance}")

    def loss_probability(self, number_scattering_events):
        return 1.0 - (1.0 - self.depump_chance) ** np.asarray(number_scattering_events)


class RepumpSystem(System):
    reads = (ActualPhotonsScatteredVector, RepumpLoss)
    writes = (Dark,)
    optional = (RepumpLoss,)

    def setup(self, world):
        self.rng = system_rng(world)

    def run(self, world):
        repump = world.try_resource(RepumpLoss)
        if repump is None:
            return
        rows = world.join(ActualPhotonsScatteredVector, without=(Dark,))
        if len(rows) == 0:
            return
        photons = world.storage(ActualPhotonsScatteredVector)["contents"][rows].sum(axis=1)
        lost = self.rng.random(len(rows)) < repump.loss_probability(photons)
        for row in rows[lost]:
            world.commands.insert(world.entity(row), Dark())
