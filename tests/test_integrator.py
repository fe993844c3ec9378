"""
Test Suite: Integration and Global Forces
=========================================

Explicit Euler updates, the frame counter, gravity and the early-timestep
switch.
"""

import numpy as np
import pytest

from lasercool.atom import ClearForceSystem, Force, Mass, Position, Velocity
from lasercool.constants import EXP_G
from lasercool.gravity import ApplyGravitationalForceSystem, ApplyGravityOption
from lasercool.integrator import EulerIntegrationSystem, Step, Timestep
from lasercool.optimization import EarlyTimestepOptimization, TimestepOptimizationSystem


def add_particle(world, force=(0.0, 0.0, 0.0), mass=2.0):
    return world.create_entity(
        Position(np.zeros(3)),
        Velocity(np.zeros(3)),
        Force(np.asarray(force, dtype=float)),
        Mass(mass),
    )


class TestEuler:

    def test_single_step(self, world):
        world.insert_resource(Timestep(0.1))
        particle = add_particle(world, force=(2.0, 0.0, 0.0))

        EulerIntegrationSystem().run_now(world)

        np.testing.assert_allclose(world.get(particle, Velocity).vec, [0.1, 0.0, 0.0])
        np.testing.assert_allclose(world.get(particle, Position).vec, [0.01, 0.0, 0.0])

    def test_step_counter_increments_without_atoms(self, world):
        system = EulerIntegrationSystem()
        for _ in range(3):
            system.run_now(world)
        assert world.resource(Step).n == 3

    def test_force_cleared(self, world):
        particle = add_particle(world, force=(1.0, 2.0, 3.0))
        ClearForceSystem().run_now(world)
        np.testing.assert_array_equal(world.get(particle, Force).vec, 0.0)


class TestGravity:

    def test_gravity_pulls_down(self, world):
        particle = add_particle(world, mass=3.0)
        ApplyGravitationalForceSystem().run_now(world)
        np.testing.assert_allclose(world.get(particle, Force).vec, [0.0, 0.0, -3.0 * EXP_G])

    def test_gravity_disabled(self, world):
        world.insert_resource(ApplyGravityOption(False))
        particle = add_particle(world)
        ApplyGravitationalForceSystem().run_now(world)
        np.testing.assert_array_equal(world.get(particle, Force).vec, 0.0)

    def test_free_fall_distance(self, world):
        world.insert_resource(Timestep(1e-4))
        particle = add_particle(world, mass=1.0)
        clear, gravity, euler = ClearForceSystem(), ApplyGravitationalForceSystem(), EulerIntegrationSystem()
        for _ in range(1000):
            clear.run_now(world)
            gravity.run_now(world)
            euler.run_now(world)
        # semi-implicit position update overshoots 0.5·g·t² by 0.5·g·t·dt
        assert world.get(particle, Position).vec[2] == pytest.approx(-0.5 * EXP_G * 0.1**2, rel=2e-3)


class TestEarlyTimestep:

    def test_switches_back_to_nominal(self, world):
        world.insert_resource(Timestep(1e-6))
        world.insert_resource(EarlyTimestepOptimization(1e-8, 2))
        system = TimestepOptimizationSystem()

        system.run_now(world)
        assert world.resource(Timestep).delta == 1e-8

        world.resource(Step).n = 2
        system.run_now(world)
        assert world.resource(Timestep).delta == 1e-6

    def test_absent_resource_leaves_timestep(self, world):
        world.remove_resource(EarlyTimestepOptimization)
        TimestepOptimizationSystem().run_now(world)
        assert world.resource(Timestep).delta == 1e-6

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            EarlyTimestepOptimization(0.0, 3)
        with pytest.raises(ValueError):
            EarlyTimestepOptimization(1e-8, -1)
