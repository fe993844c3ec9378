"""
Test Suite: Atom Sources
========================

Mass distributions, emission policies, the velocity cap, the effusive oven
sampling laws and the central creator.
"""

import numpy as np
import pytest
from scipy import special

from lasercool.atom import Atom, AtomicTransition, InitialVelocity, Position, Velocity
from lasercool.atom_sources import (
    AtomNumberToEmit,
    CentralCreator,
    CentralCreatorCreateAtomsSystem,
    CircularAperture,
    CubicAperture,
    DestroyEmitOnceSourcesSystem,
    EmitFixedRate,
    EmitFixedRateSystem,
    EmitNumberPerFrame,
    EmitNumberPerFrameSystem,
    EmitOnce,
    MassDistribution,
    MassRatio,
    Oven,
    OvenCreateAtomsSystem,
    PositionDensityDistribution,
    SpatialSpeedDistribution,
    SpatialVectorDistribution,
    SpeedDensityDistribution,
    VectorDensityDistribution,
    VelocityCap,
    spawn_atoms,
)
from lasercool.constants import AMU, BOLTZCONST
from lasercool.destructor import ToBeDestroyed
from lasercool.errors import UnimplementedDistributionError
from lasercool.initiate import NewlyCreated
from lasercool.integrator import Timestep


class TestMassDistribution:

    def test_ratios_are_normalised(self):
        distribution = MassDistribution([MassRatio(85.0, 3.0), MassRatio(87.0, 1.0)])
        assert [item.ratio for item in distribution.distribution] == pytest.approx([0.75, 0.25])

    def test_draws_are_isotope_masses_in_kg(self):
        distribution = MassDistribution([MassRatio(85.0, 0.7), MassRatio(87.0, 0.3)])
        masses = distribution.draw_random_mass(np.random.default_rng(0), 5000) / AMU
        assert set(np.round(masses, 6)) == {85.0, 87.0}
        assert np.mean(np.isclose(masses, 85.0)) == pytest.approx(0.7, abs=0.03)

    def test_empty_distribution_raises(self):
        with pytest.raises(ValueError):
            MassDistribution([])


class TestEmissionPolicies:

    def test_fixed_number_per_frame(self, world):
        emitter = world.create_entity(EmitNumberPerFrame(4), AtomNumberToEmit())
        EmitNumberPerFrameSystem().run_now(world)
        assert world.get(emitter, AtomNumberToEmit).number == 4

    def test_fixed_rate_random_rounding(self, world):
        world.insert_resource(Timestep(1e-3))
        emitter = world.create_entity(EmitFixedRate(2500.0), AtomNumberToEmit())
        system = EmitFixedRateSystem()

        counts = []
        for _ in range(2000):
            system.run_now(world)
            counts.append(world.get(emitter, AtomNumberToEmit).number)

        assert set(counts) <= {2, 3}
        assert np.mean(counts) == pytest.approx(2.5, abs=0.05)

    def test_emit_once_sources_are_marked(self, world):
        emitter = world.create_entity(EmitOnce(), AtomNumberToEmit(1))
        DestroyEmitOnceSourcesSystem().run_now(world)
        world.maintain()
        assert world.has(emitter, ToBeDestroyed)


class TestSpawning:

    def test_spawned_atoms_carry_particle_components(self, world):
        transition = AtomicTransition.rubidium()
        count = spawn_atoms(
            world, transition, np.zeros((2, 3)), np.array([[1.0, 0.0, 0.0], [0.0, 2.0, 0.0]]), np.full(2, 1e-25)
        )
        world.maintain()

        assert count == 2
        assert world.count(Atom, Position, Velocity, InitialVelocity, AtomicTransition, NewlyCreated) == 2

    def test_velocity_cap_discards_fast_samples(self, world):
        velocities = np.array([[1.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
        count = spawn_atoms(
            world, AtomicTransition.rubidium(), np.zeros((2, 3)), velocities, np.full(2, 1e-25), VelocityCap(5.0)
        )
        world.maintain()

        assert count == 1
        snapshot = world.snapshot(Atom, Velocity)
        np.testing.assert_array_equal(snapshot["Velocity"]["vec"], [[1.0, 0.0, 0.0]])


class TestOven:

    @pytest.fixture
    def rng(self):
        return np.random.default_rng(42)

    def test_speed_distribution_mean(self, rng):
        oven = Oven(800.0, CircularAperture(1e-3))
        mass = 87.0 * AMU
        speeds = oven.sample_speeds(rng, np.full(100_000, mass))
        # flux-weighted Maxwell-Boltzmann: <v> = sqrt(2kT/m)·Γ(5/2)/Γ(2)
        expected = np.sqrt(2 * BOLTZCONST * 800.0 / mass) * special.gamma(2.5) / special.gamma(2.0)
        assert np.mean(speeds) == pytest.approx(expected, rel=0.02)

    def test_directions_within_cone(self, rng):
        oven = Oven(500.0, CircularAperture(1e-3), direction=np.array([0.0, 1.0, 0.0]), theta_max=0.1)
        directions = oven.sample_directions(rng, 5000)
        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0)
        assert np.all(directions[:, 1] >= np.cos(0.1) - 1e-12)

    def test_circular_aperture_positions(self, rng):
        oven = Oven(500.0, CircularAperture(1e-3, thickness=2e-4), direction=np.array([1.0, 0.0, 0.0]))
        positions = oven.sample_positions(rng, 5000)
        assert np.all(np.hypot(positions[:, 1], positions[:, 2]) <= 1e-3 + 1e-15)
        assert np.all(np.abs(positions[:, 0]) <= 1e-4 + 1e-15)

    def test_cubic_aperture_positions(self, rng):
        oven = Oven(500.0, CubicAperture([1e-3, 2e-3, 3e-3]))
        positions = oven.sample_positions(rng, 5000)
        assert np.all(np.abs(positions) <= np.array([0.5e-3, 1e-3, 1.5e-3]))

    def test_invalid_cone(self):
        with pytest.raises(ValueError):
            Oven(500.0, CircularAperture(1e-3), theta_max=2.0)

    def test_oven_system_creates_atoms(self, world):
        world.create_entity(
            Position(np.array([0.0, 0.0, -0.1])),
            Oven(700.0, CircularAperture(1e-3), direction=np.array([0.0, 0.0, 1.0]), theta_max=0.05),
            AtomicTransition.strontium(),
            MassDistribution.single(88.0),
            AtomNumberToEmit(20),
        )
        OvenCreateAtomsSystem().run_now(world)
        world.maintain()

        snapshot = world.snapshot(Atom, Velocity)
        assert len(snapshot["entities"]) == 20
        assert np.all(snapshot["Velocity"]["vec"][:, 2] > 0), "Atoms leave along the oven axis"


class TestCentralCreator:

    @pytest.fixture
    def rng(self):
        return np.random.default_rng(7)

    def test_uniform_cubic_spawn_conditions(self, rng):
        creator = CentralCreator.new_uniform_cubic(1e-3, 0.2)
        positions, velocities = creator.get_random_spawn_condition(rng, 2000)

        assert np.all(np.abs(positions) <= 0.5e-3)
        speeds = np.linalg.norm(velocities, axis=1)
        assert np.all((speeds >= 0.1 - 1e-12) & (speeds <= 0.3 + 1e-12))
        assert np.linalg.norm(np.mean(velocities / speeds[:, None], axis=0)) < 0.1, "Directions are isotropic"

    def test_spheric_position_is_unimplemented(self, rng):
        creator = CentralCreator(
            PositionDensityDistribution.UniformSpheric(1e-3),
            SpatialSpeedDistribution.Uniform(0.1),
            SpeedDensityDistribution.UniformCentral(0.05),
            SpatialVectorDistribution.Uniform(),
            VectorDensityDistribution.Uniform(),
        )
        with pytest.raises(UnimplementedDistributionError):
            creator.validate()
        with pytest.raises(NotImplementedError):
            creator.sample_positions(rng, 1)

    def test_spatial_speed_variants_are_unimplemented(self):
        creator = CentralCreator(
            PositionDensityDistribution.UniformCuboidic((1e-3, 1e-3, 1e-3)),
            SpatialSpeedDistribution.UniformSpheric(0.1, 1e-3),
            SpeedDensityDistribution.UniformCentral(0.05),
            SpatialVectorDistribution.Uniform(),
            VectorDensityDistribution.Uniform(),
        )
        with pytest.raises(UnimplementedDistributionError):
            creator.characteristic_speed()

    def test_system_setup_rejects_unimplemented(self, world):
        world.create_entity(
            Position(),
            CentralCreator(
                PositionDensityDistribution.UniformSpheric(1e-3),
                SpatialSpeedDistribution.Uniform(0.1),
                SpeedDensityDistribution.UniformCentral(0.05),
                SpatialVectorDistribution.Uniform(),
                VectorDensityDistribution.Uniform(),
            ),
        )
        with pytest.raises(UnimplementedDistributionError):
            CentralCreatorCreateAtomsSystem().run_now(world)

    def test_system_applies_creator_offset(self, world):
        centre = np.array([1.0, 0.0, 0.0])
        world.create_entity(
            Position(centre),
            CentralCreator.new_uniform_cubic(1e-4, 0.1),
            AtomicTransition.strontium_red(),
            MassDistribution.single(88.0),
            AtomNumberToEmit(10),
            EmitOnce(),
        )
        CentralCreatorCreateAtomsSystem().run_now(world)
        world.maintain()

        snapshot = world.snapshot(Atom, Position)
        assert len(snapshot["entities"]) == 10
        assert np.all(np.abs(snapshot["Position"]["vec"] - centre) <= 0.5e-4)
