"""
Rate Coefficients
=================

Scattering rate of each atom from each cooling beam in the two-level
rate-equation picture.

The beam's polarization ε is projected onto the σ+, σ- and π components
defined relative to the local quantization axis: the magnetic field
direction, or the beam direction where the field is numerically zero
(``|B|² < 10·machine epsilon``). Each component scatters with a Lorentzian
in its own detuning δ_q:

    R = Σ_q |⟨σ_q|ε⟩|² · Γ³/(8·I_sat) · I / (δ_q² + (Γ/2)²)

which is the low-saturation limit of ``(Γ/2)·s/(1 + s + 4δ²/Γ²)`` with
``s = I/I_sat``. Atoms marked ``Dark`` do not scatter.
"""

from dataclasses import dataclass, field

import numpy as np

from ..atom import Atom, AtomicTransition, Dark
from ..constants import MACHINE_EPSILON
from ..ecs import Component, StorageKind, System, dense_field, par_for_each
from ..magnetic import MagneticFieldSampler
from .cooling import CoolingLight, CoolingLightIndex
from .detuning import LaserDetuningSamplers
from .gaussian import GaussianBeam
from .index import COOLING_BEAM_LIMIT
from .intensity import LaserIntensitySamplers, cooling_beams
from .polarization import Polarization, cdot, linear, sigma_minus, sigma_plus


@dataclass
class RateCoefficients(Component):
    """Scattering rate from each beam [Hz], by beam slot."""

    storage = StorageKind.DENSE
    layout = {"contents": dense_field((COOLING_BEAM_LIMIT,), fill=np.nan)}

    contents: np.ndarray = field(default_factory=lambda: np.full(COOLING_BEAM_LIMIT, np.nan))


class InitialiseRateCoefficientsSystem(System):
    writes = (RateCoefficients,)

    def run(self, world):
        store = world.storage(RateCoefficients)
        store["contents"][store.mask] = np.nan


def rate_prefactor(linewidth, saturation_intensity):
    """``Γ³/(8·I_sat)`` for a linewidth given in Hz."""
    gamma = 2.0 * np.pi * np.asarray(linewidth)
    return gamma**3 / (8.0 * np.asarray(saturation_intensity))


def quantization_axes(fields: np.ndarray, fallback: np.ndarray) -> np.ndarray:
    """Unit field directions, or ``fallback`` where the field is negligible."""
    fields = np.atleast_2d(fields)
    norm2 = np.einsum("ij,ij->i", fields, fields)
    negligible = norm2 < 10.0 * MACHINE_EPSILON
    safe_norm = np.sqrt(np.where(negligible, 1.0, norm2))
    return np.where(negligible[:, None], fallback, fields / safe_norm[:, None])


def polarization_weights(axes: np.ndarray, polarization: np.ndarray) -> np.ndarray:
    """Fraction of the light in the (σ+, σ-, π) components about each axis, shape (n, 3)."""
    return np.column_stack([
        np.abs(cdot(sigma_plus(axes), polarization)) ** 2,
        np.abs(cdot(sigma_minus(axes), polarization)) ** 2,
        np.abs(cdot(linear(axes), polarization)) ** 2,
    ])


def beam_polarization(world, entity, light: CoolingLight, beam: GaussianBeam) -> np.ndarray:
    explicit = world.get(entity, Polarization)
    if explicit is not None:
        return explicit.vector
    return light.polarization_vector(beam.direction)


class CalculateRateCoefficientsSystem(System):
    reads = (
        Atom, AtomicTransition, MagneticFieldSampler, LaserIntensitySamplers,
        LaserDetuningSamplers, CoolingLight, CoolingLightIndex, GaussianBeam,
        Polarization, Dark,
    )
    writes = (RateCoefficients,)

    def run(self, world):
        rows = world.join(
            Atom, AtomicTransition, MagneticFieldSampler,
            LaserIntensitySamplers, LaserDetuningSamplers, RateCoefficients,
        )
        beams = [
            (slot, beam.direction, beam_polarization(world, entity, light, beam))
            for slot, light, beam, entity in cooling_beams(world)
        ]
        if len(rows) == 0 or not beams:
            return

        transition = world.storage(AtomicTransition)
        fields = world.storage(MagneticFieldSampler)["field"]
        intensities = world.storage(LaserIntensitySamplers)["contents"]
        detunings = world.storage(LaserDetuningSamplers)["contents"]
        rates = world.storage(RateCoefficients)["contents"]
        dark = world.storage(Dark).mask

        def kernel(chunk):
            gamma = 2.0 * np.pi * transition["linewidth"][chunk]
            prefactor = rate_prefactor(transition["linewidth"][chunk], transition["saturation_intensity"][chunk])
            half_width2 = (gamma / 2.0) ** 2
            for slot, direction, polarization in beams:
                axes = quantization_axes(fields[chunk], direction)
                weights = polarization_weights(axes, polarization)
                lorentzians = 1.0 / (detunings[chunk, slot, :] ** 2 + half_width2[:, None])
                rates[chunk, slot] = prefactor * intensities[chunk, slot] * np.sum(weights * lorentzians, axis=1)
            dark_rows = chunk[dark[chunk]]
            for slot, _, _ in beams:
                rates[dark_rows, slot] = 0.0

        par_for_each(world, rows, kernel)
