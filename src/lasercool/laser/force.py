"""
Radiation pressure.

Absorption: every photon absorbed from a beam transfers ``ħk`` along the
beam direction, so a beam contributing ``N`` photons in one step exerts a
mean force ``ħk·d̂·N/Δt``.

Emission: spontaneously emitted photons leave in random directions. When
``EmissionForceOption`` is enabled each atom receives a random-walk kick of
``ħk`` per emitted photon. Up to ``explicit_threshold`` photons the kick is
an explicit sum of random unit vectors; above it the sum is approximated by
a random direction scaled by ``√N``.
"""

from dataclasses import dataclass

import numpy as np

from ..atom import Atom, AtomicTransition, Force
from ..constants import C, HBAR
from ..ecs import Resource, System
from ..ecs.parallel import system_rng
from ..integrator import Timestep
from ..utils.math_utils import random_unit_vectors
from .cooling import CoolingLight, CoolingLightIndex
from .gaussian import GaussianBeam
from .intensity import cooling_beams
from .photons_scattered import ActualPhotonsScatteredVector


@dataclass
class EmissionForceOption(Resource):
    enabled: bool = True
    explicit_threshold: int = 5


class CalculateCoolingForcesSystem(System):
    reads = (ActualPhotonsScatteredVector, CoolingLight, CoolingLightIndex, GaussianBeam, Timestep)
    writes = (Force,)

    def run(self, world):
        rows = world.join(Force, ActualPhotonsScatteredVector)
        beams = list(cooling_beams(world))
        if len(rows) == 0 or not beams:
            return
        dt = world.resource(Timestep).delta
        photons = world.storage(ActualPhotonsScatteredVector)["contents"]
        force = world.storage(Force)["vec"]
        for slot, light, beam, _ in beams:
            momentum = HBAR * light.wavenumber * beam.direction
            force[rows] += np.outer(photons[rows, slot], momentum) / dt


class ApplyEmissionForceSystem(System):
    reads = (Atom, AtomicTransition, ActualPhotonsScatteredVector, Timestep, EmissionForceOption)
    writes = (Force,)
    optional = (EmissionForceOption,)

    def setup(self, world):
        self.rng = system_rng(world)

    def run(self, world):
        option = world.try_resource(EmissionForceOption)
        if option is None or not option.enabled:
            return
        rows = world.join(Atom, AtomicTransition, Force, ActualPhotonsScatteredVector)
        if len(rows) == 0:
            return

        dt = world.resource(Timestep).delta
        photons = world.storage(ActualPhotonsScatteredVector)["contents"][rows].sum(axis=1)
        wavenumber = 2.0 * np.pi * world.storage(AtomicTransition)["frequency"][rows] / C
        kicks = np.zeros((len(rows), 3))

        explicit = photons <= option.explicit_threshold
        counts = np.rint(photons[explicit]).astype(int)
        if counts.sum() > 0:
            owner = np.repeat(np.flatnonzero(explicit), counts)
            np.add.at(kicks, owner, random_unit_vectors(self.rng, counts.sum()))

        bulk = np.flatnonzero(~explicit)
        if len(bulk):
            kicks[bulk] = np.sqrt(photons[bulk])[:, None] * random_unit_vectors(self.rng, len(bulk))

        world.storage(Force)["vec"][rows] += kicks * (HBAR * wavenumber / dt)[:, None]
