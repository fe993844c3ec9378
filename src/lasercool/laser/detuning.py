"""
Laser detuning seen by each atom.

For every cooling beam and every atom the angular detuning of each
transition component q ∈ {σ+, σ-, π} is

    δ_q = 2π(f_laser - f_atom) - k·v - μ_q·|B|/ħ

combining the bare laser detuning, the Doppler shift of the moving atom and
the Zeeman shift of the component's magnetic sublevel.
"""

from dataclasses import dataclass, field

import numpy as np

from ..atom import Atom, AtomicTransition, Velocity
from ..constants import HBAR
from ..ecs import Component, StorageKind, System, dense_field
from ..magnetic import MagneticFieldSampler
from .cooling import CoolingLight, CoolingLightIndex
from .gaussian import GaussianBeam
from .index import COOLING_BEAM_LIMIT
from .intensity import cooling_beams

SIGMA_PLUS, SIGMA_MINUS, PI_COMPONENT = 0, 1, 2


@dataclass
class LaserDetuningSamplers(Component):
    """Angular detunings [rad/s] by beam slot, columns (σ+, σ-, π)."""

    storage = StorageKind.DENSE
    layout = {"contents": dense_field((COOLING_BEAM_LIMIT, 3), fill=np.nan)}

    contents: np.ndarray = field(default_factory=lambda: np.full((COOLING_BEAM_LIMIT, 3), np.nan))


class InitialiseLaserDetuningSamplersSystem(System):
    writes = (LaserDetuningSamplers,)

    def run(self, world):
        store = world.storage(LaserDetuningSamplers)
        store["contents"][store.mask] = np.nan


class CalculateLaserDetuningSystem(System):
    reads = (
        Atom, Velocity, AtomicTransition, MagneticFieldSampler,
        CoolingLight, CoolingLightIndex, GaussianBeam,
    )
    writes = (LaserDetuningSamplers,)

    def run(self, world):
        rows = world.join(Atom, Velocity, AtomicTransition, MagneticFieldSampler, LaserDetuningSamplers)
        beams = list(cooling_beams(world))
        if len(rows) == 0 or not beams:
            return

        transition = world.storage(AtomicTransition)
        velocity = world.storage(Velocity)["vec"][rows]
        b_magnitude = world.storage(MagneticFieldSampler)["magnitude"][rows]
        atom_omega = 2.0 * np.pi * transition["frequency"][rows]
        zeeman = np.column_stack((
            transition["mup"][rows], transition["mum"][rows], transition["muz"][rows],
        )) * (b_magnitude / HBAR)[:, None]

        detunings = world.storage(LaserDetuningSamplers)["contents"]
        for slot, light, beam, _ in beams:
            wavevector = light.wavenumber * beam.direction
            base = 2.0 * np.pi * light.frequency - atom_omega - velocity @ wavevector
            detunings[rows, slot, :] = base[:, None] - zeeman
