"""
Test Suite: Polarization, Detuning and Scattering Rates
=======================================================

Projection of beam polarization onto the local quantization axis, the
laser/Doppler/Zeeman detuning of each transition component, and the
resulting per-beam scattering rates.
"""

import warnings

import numpy as np
import pytest

from lasercool.atom import AtomicTransition, Dark
from lasercool.constants import HBAR
from lasercool.laser import (
    CalculateLaserDetuningSystem,
    CalculateRateCoefficientsSystem,
    CoolingLight,
    CoolingLightIndex,
    GaussianBeam,
    LaserDetuningSamplers,
    LaserIntensitySamplers,
    Polarization,
    RateCoefficients,
)
from lasercool.laser.polarization import cdot, sigma_minus, sigma_plus
from lasercool.laser.rate import polarization_weights, quantization_axes, rate_prefactor
from lasercool.magnetic import MagneticFieldSampler

Z = np.array([0.0, 0.0, 1.0])


def add_beam(world, light, direction=Z, slot=0, extra=()):
    beam = GaussianBeam(np.zeros(3), np.asarray(direction, dtype=float), 1e-2, 1e-3)
    return world.create_entity(light, beam, CoolingLightIndex(slot, True), *extra)


class TestPolarization:

    def test_circular_basis_is_orthonormal(self):
        axis = np.array([0.3, -0.4, 0.5])
        plus, minus = sigma_plus(axis), sigma_minus(axis)
        assert np.real(cdot(plus, plus)) == pytest.approx(1.0)
        assert abs(cdot(plus, minus)) == pytest.approx(0.0, abs=1e-15)

    def test_weights_along_own_axis(self):
        weights = polarization_weights(Z[None, :], sigma_plus(Z))
        np.testing.assert_allclose(weights, [[1.0, 0.0, 0.0]], atol=1e-15)

    def test_weights_against_axis_swap_handedness(self):
        weights = polarization_weights(-Z[None, :], sigma_plus(Z))
        np.testing.assert_allclose(weights, [[0.0, 1.0, 0.0]], atol=1e-15)

    def test_weights_perpendicular_axis(self):
        weights = polarization_weights(np.array([[1.0, 0.0, 0.0]]), sigma_plus(Z))
        np.testing.assert_allclose(weights, [[0.25, 0.25, 0.5]], atol=1e-12)

    def test_weights_sum_to_one(self):
        rng = np.random.default_rng(3)
        axes = rng.normal(size=(20, 3))
        axes /= np.linalg.norm(axes, axis=1, keepdims=True)
        weights = polarization_weights(axes, Polarization.linear([1.0, 1.0, 0.0]).vector)
        np.testing.assert_allclose(weights.sum(axis=1), 1.0)

    def test_quantization_axis_falls_back_to_beam(self):
        fields = np.array([[0.0, 0.0, 0.0], [0.0, 2e-3, 0.0]])
        axes = quantization_axes(fields, np.array([1.0, 0.0, 0.0]))
        np.testing.assert_allclose(axes, [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])


class TestCoolingLight:

    def test_detuning_sets_frequency(self):
        transition = AtomicTransition.rubidium()
        light = CoolingLight.for_species(transition, -6.0)
        assert light.frequency - transition.frequency == pytest.approx(-6.0e6, rel=1e-6)

    def test_blue_detuning_warns(self):
        with pytest.warns(UserWarning):
            CoolingLight.for_species("Rubidium", 1.0)

    def test_red_detuning_does_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            CoolingLight.for_species("StrontiumRed", -0.12, polarization=-1)

    def test_polarization_must_be_circular(self):
        with pytest.raises(ValueError):
            CoolingLight(780e-9, polarization=0)


class TestDetuning:

    def test_bare_doppler_and_zeeman_terms(self, world, make_atom):
        transition = AtomicTransition.rubidium()
        light = CoolingLight.for_species(transition, -10.0)
        add_beam(world, light)
        b = 1e-4
        atom = make_atom(
            velocity=(0.0, 0.0, 2.0),
            transition=transition,
            extra=(MagneticFieldSampler([0.0, 0.0, b], b), LaserDetuningSamplers()),
        )

        CalculateLaserDetuningSystem().run_now(world)

        detuning = world.get(atom, LaserDetuningSamplers).contents[0]
        bare = 2 * np.pi * (light.frequency - transition.frequency)
        doppler = light.wavenumber * 2.0
        expected = bare - doppler - np.array([transition.mup, transition.mum, transition.muz]) * b / HBAR
        np.testing.assert_allclose(detuning, expected, rtol=1e-6)
        assert np.all(np.isnan(world.get(atom, LaserDetuningSamplers).contents[1:])), "Unused slots must stay NaN"


class TestRateCoefficients:

    def _atom(self, make_atom, intensity, detuning, field=(0.0, 0.0, 1e-3), extra=()):
        intensities = np.full(16, np.nan)
        intensities[0] = intensity
        detunings = np.full((16, 3), np.nan)
        detunings[0] = detuning
        return make_atom(
            extra=(
                MagneticFieldSampler(np.asarray(field), float(np.linalg.norm(field))),
                LaserIntensitySamplers(intensities),
                LaserDetuningSamplers(detunings),
                RateCoefficients(),
            ) + tuple(extra)
        )

    def test_resonant_aligned_rate(self, world, make_atom):
        transition = AtomicTransition.rubidium()
        add_beam(world, CoolingLight(transition.wavelength, 1))
        intensity = 2.0
        atom = self._atom(make_atom, intensity, [0.0, 1e15, 1e15])

        CalculateRateCoefficientsSystem().run_now(world)

        rate = world.get(atom, RateCoefficients).contents[0]
        gamma = transition.gamma
        assert rate == pytest.approx(gamma * intensity / (2 * transition.saturation_intensity), rel=1e-6)

    def test_lorentzian_halves_at_half_width(self, world, make_atom):
        transition = AtomicTransition.rubidium()
        add_beam(world, CoolingLight(transition.wavelength, 1))
        resonant = self._atom(make_atom, 1.0, [0.0, 1e15, 1e15])
        detuned = self._atom(make_atom, 1.0, [transition.gamma / 2, 1e15, 1e15])

        CalculateRateCoefficientsSystem().run_now(world)

        ratio = world.get(detuned, RateCoefficients).contents[0] / world.get(resonant, RateCoefficients).contents[0]
        assert ratio == pytest.approx(0.5, rel=1e-6)

    def test_polarization_component_overrides_light(self, world, make_atom):
        transition = AtomicTransition.rubidium()
        add_beam(world, CoolingLight(transition.wavelength, 1), extra=(Polarization.sigma_minus(Z),))
        atom = self._atom(make_atom, 1.0, [0.0, 1e15, 1e15])

        CalculateRateCoefficientsSystem().run_now(world)

        assert world.get(atom, RateCoefficients).contents[0] < 1e-6, "σ- light must not drive the σ+ line"

    def test_dark_atoms_do_not_scatter(self, world, make_atom):
        transition = AtomicTransition.rubidium()
        add_beam(world, CoolingLight(transition.wavelength, 1))
        atom = self._atom(make_atom, 1.0, [0.0, 0.0, 0.0], extra=(Dark(),))

        CalculateRateCoefficientsSystem().run_now(world)

        assert world.get(atom, RateCoefficients).contents[0] == 0.0

    def test_prefactor(self):
        linewidth, saturation = 6.065e6, 16.69
        gamma = 2 * np.pi * linewidth
        assert rate_prefactor(linewidth, saturation) == pytest.approx(gamma**3 / (8 * saturation))
