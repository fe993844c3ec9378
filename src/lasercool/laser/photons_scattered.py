"""
Photons scattered per step.

The mean number of photons an atom scatters in one step is ``Γ·ρ_ee·Δt``.
It is shared between the beams in proportion to their rate coefficients,
giving the expected count per beam. The actual count per beam is either the
expected value, or a Poisson draw around it when
``ScatteringFluctuationsOption`` is enabled.
"""

from dataclasses import dataclass, field

import numpy as np

from ..atom import Atom, AtomicTransition
from ..ecs import Component, Resource, StorageKind, System, dense_field
from ..ecs.parallel import system_rng
from ..integrator import Timestep
from .index import COOLING_BEAM_LIMIT
from .rate import RateCoefficients
from .twolevel import TwoLevelPopulation


@dataclass
class ScatteringFluctuationsOption(Resource):
    """Draw photon numbers from a Poisson distribution instead of using the mean."""

    enabled: bool = True


@dataclass
class TotalPhotonsScattered(Component):
    """Mean number of photons scattered by an atom this step, over all beams."""

    storage = StorageKind.DENSE
    layout = {"total": dense_field()}

    total: float = 0.0


@dataclass
class ExpectedPhotonsScatteredVector(Component):
    storage = StorageKind.DENSE
    layout = {"contents": dense_field((COOLING_BEAM_LIMIT,))}

    contents: np.ndarray = field(default_factory=lambda: np.zeros(COOLING_BEAM_LIMIT))


@dataclass
class ActualPhotonsScatteredVector(Component):
    storage = StorageKind.DENSE
    layout = {"contents": dense_field((COOLING_BEAM_LIMIT,))}

    contents: np.ndarray = field(default_factory=lambda: np.zeros(COOLING_BEAM_LIMIT))


class CalculateMeanTotalPhotonsScatteredSystem(System):
    reads = (Atom, AtomicTransition, TwoLevelPopulation, Timestep)
    writes = (TotalPhotonsScattered,)

    def run(self, world):
        rows = world.join(Atom, AtomicTransition, TwoLevelPopulation, TotalPhotonsScattered)
        if len(rows) == 0:
            return
        dt = world.resource(Timestep).delta
        gamma = 2.0 * np.pi * world.storage(AtomicTransition)["linewidth"][rows]
        excited = world.storage(TwoLevelPopulation)["excited"][rows]
        world.storage(TotalPhotonsScattered)["total"][rows] = gamma * excited * dt


class CalculateExpectedPhotonsScatteredSystem(System):
    reads = (RateCoefficients, TotalPhotonsScattered)
    writes = (ExpectedPhotonsScatteredVector,)

    def run(self, world):
        rows = world.join(RateCoefficients, TotalPhotonsScattered, ExpectedPhotonsScatteredVector)
        if len(rows) == 0:
            return
        rates = np.nan_to_num(world.storage(RateCoefficients)["contents"][rows], nan=0.0)
        total_rate = rates.sum(axis=1)
        total = world.storage(TotalPhotonsScattered)["total"][rows]
        share = np.divide(rates, total_rate[:, None], out=np.zeros_like(rates), where=total_rate[:, None] > 0)
        world.storage(ExpectedPhotonsScatteredVector)["contents"][rows] = share * total[:, None]


class CalculateActualPhotonsScatteredSystem(System):
    reads = (ExpectedPhotonsScatteredVector, ScatteringFluctuationsOption)
    writes = (ActualPhotonsScatteredVector,)
    optional = (ScatteringFluctuationsOption,)

    def setup(self, world):
        self.rng = system_rng(world)

    def run(self, world):
        rows = world.join(ExpectedPhotonsScatteredVector, ActualPhotonsScatteredVector)
        if len(rows) == 0:
            return
        expected = world.storage(ExpectedPhotonsScatteredVector)["contents"][rows]
        option = world.try_resource(ScatteringFluctuationsOption)
        if option is not None and option.enabled:
            actual = self.rng.poisson(expected).astype(float)
        else:
            actual = expected
        world.storage(ActualPhotonsScatteredVector)["contents"][rows] = actual
