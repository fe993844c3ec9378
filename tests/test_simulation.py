"""
Test Suite: Simulation Driver
=============================

Observer cadence, console progress logging, seeded reproducibility,
threaded dispatch, setup-time validation, keyframe ramps and the
run-wide configuration.
"""

import logging

import numpy as np
import pytest

from lasercool import Simulation, SimulationConfig, create_simulation_dispatcher_builder
from lasercool.atom import Atom, AtomicTransition, Position, Velocity
from lasercool.atom_sources import (
    AtomNumberToEmit,
    CentralCreator,
    EmitOnce,
    MassDistribution,
    PositionDensityDistribution,
    SpatialSpeedDistribution,
    SpatialVectorDistribution,
    SpeedDensityDistribution,
    VectorDensityDistribution,
)
from lasercool.ecs import WorkerPool
from lasercool.errors import UnimplementedDistributionError
from lasercool.integrator import Step, Timestep
from lasercool.interpolate import Ramp, RampSystem, lerp
from lasercool.laser import GaussianBeam
from lasercool.templates import add_central_source, add_quadrupole, add_six_beam_mot


def rubidium_mot(sim, n_atoms=20):
    transition = AtomicTransition.rubidium()
    add_quadrupole(sim.world, 15.0)
    add_six_beam_mot(sim.world, transition, detuning=-12.0, total_power=0.06, e_radius=5e-3, gradient=15.0)
    add_central_source(sim.world, transition, n_atoms=n_atoms, size=1e-4, speed=0.5)


class TestObservers:

    def test_interval_and_snapshot(self):
        seen = []
        with Simulation.from_config(SimulationConfig(seed=3)) as sim:
            add_central_source(sim.world, AtomicTransition.rubidium(), n_atoms=4, size=1e-4, speed=0.1)
            sim.add_observer(lambda step, snapshot: seen.append((step, snapshot)), [Atom, Position], interval=2)
            sim.run(6)

        assert [step for step, _ in seen] == [2, 4, 6]
        snapshot = seen[-1][1]
        assert len(snapshot["entities"]) == 4
        assert snapshot["Position"]["vec"].shape == (4, 3)

    def test_snapshots_are_copies(self):
        seen = []
        with Simulation.from_config(SimulationConfig(seed=3)) as sim:
            add_central_source(sim.world, AtomicTransition.rubidium(), n_atoms=2, size=1e-4, speed=0.1)
            sim.add_observer(lambda step, snapshot: seen.append(snapshot), [Atom, Position])
            sim.run(3)

        first, last = seen[1]["Position"]["vec"], seen[2]["Position"]["vec"]
        assert not np.allclose(first, last), "Atoms move between steps"

    def test_invalid_interval(self):
        with Simulation.from_config() as sim:
            with pytest.raises(ValueError):
                sim.add_observer(lambda *_: None, [Atom], interval=0)


class TestConsoleOutput:

    def test_progress_logged_at_interval(self, caplog):
        with Simulation.from_config(SimulationConfig(seed=1, console_interval=2)) as sim:
            with caplog.at_level(logging.INFO, logger="lasercool"):
                sim.run(4)

        progress = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Step ")]
        assert len(progress) == 2
        assert progress[0].startswith("Step 2:")


class TestReproducibility:

    def _final_positions(self, seed, workers=1):
        config = SimulationConfig(timestep=1e-5, seed=seed, workers=workers)
        with Simulation.from_config(config) as sim:
            rubidium_mot(sim)
            sim.run(20)
            return sim.world.snapshot(Atom, Position)["Position"]["vec"]

    def test_same_seed_same_trajectory(self):
        np.testing.assert_array_equal(self._final_positions(5), self._final_positions(5))

    def test_different_seed_differs(self):
        assert not np.allclose(self._final_positions(5), self._final_positions(6))

    def test_threaded_dispatch_runs(self):
        positions = self._final_positions(5, workers=4)
        assert positions.shape == (20, 3)
        assert np.all(np.isfinite(positions))

    def test_kernel_pool_is_shut_down(self):
        sim = Simulation.from_config(SimulationConfig(seed=2, kernel_workers=2))
        pool = sim.world.resource(WorkerPool)
        rubidium_mot(sim, n_atoms=5)
        sim.run(3)
        sim.close()
        with pytest.raises(RuntimeError):
            pool.executor.submit(int)


class TestSetupValidation:

    def test_unimplemented_distribution_fails_first_step(self, caplog):
        sim = Simulation.from_config(SimulationConfig(seed=1))
        sim.world.create_entity(
            Position(),
            CentralCreator(
                PositionDensityDistribution.UniformSpheric(1e-3),
                SpatialSpeedDistribution.Uniform(0.1),
                SpeedDensityDistribution.UniformCentral(0.05),
                SpatialVectorDistribution.Uniform(),
                VectorDensityDistribution.Uniform(),
            ),
            AtomicTransition.rubidium(),
            MassDistribution.single(87.0),
            AtomNumberToEmit(3),
            EmitOnce(),
        )
        with caplog.at_level(logging.ERROR, logger="lasercool"):
            with pytest.raises(UnimplementedDistributionError):
                sim.step()
        sim.close()

        assert any("central_creator" in r.getMessage() for r in caplog.records)
        assert sim.world.count(Atom) == 0


class TestRamps:

    def _beam(self, power):
        return GaussianBeam(np.zeros(3), np.array([1.0, 0.0, 0.0]), 1e-3, power)

    def test_lerp_interpolates_floats(self):
        beam = lerp(self._beam(1.0), self._beam(3.0), 0.25)
        assert beam.power == pytest.approx(1.5)
        assert beam.e_radius == pytest.approx(1e-3)

    def test_ramp_system_updates_component(self, world):
        entity = world.create_entity(
            self._beam(1.0), Ramp(GaussianBeam, [0.0, 1e-5], [self._beam(1.0), self._beam(3.0)])
        )
        world.resource(Step).n = 5
        RampSystem(GaussianBeam).run_now(world)
        assert world.get(entity, GaussianBeam).power == pytest.approx(2.0)

        world.resource(Step).n = 50
        RampSystem(GaussianBeam).run_now(world)
        assert world.get(entity, GaussianBeam).power == pytest.approx(3.0)

    def test_ramp_in_custom_schedule(self):
        builder = create_simulation_dispatcher_builder()
        builder.add(RampSystem(GaussianBeam), "ramp_beam")
        builder.add_barrier()
        with Simulation.from_config(SimulationConfig(timestep=1e-6), builder=builder) as sim:
            entity = sim.world.create_entity(
                self._beam(0.0), Ramp(GaussianBeam, [0.0, 1e-5], [self._beam(0.0), self._beam(1.0)])
            )
            sim.run(4)
            assert sim.world.get(entity, GaussianBeam).power == pytest.approx(0.4)

    def test_keyframes_must_increase(self):
        with pytest.raises(ValueError):
            Ramp(GaussianBeam, [1.0, 0.0], [self._beam(1.0), self._beam(2.0)])


class TestConfig:

    def test_resources_follow_config(self):
        with Simulation.from_config(SimulationConfig(timestep=2e-6, seed=1)) as sim:
            assert sim.world.resource(Timestep).delta == 2e-6
            assert sim.world.resource(Step).n == 0
            assert not sim.world.has_resource(WorkerPool)

    @pytest.mark.parametrize("kwargs", [{"timestep": 0.0}, {"workers": 0}, {"kernel_workers": 0}])
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)

    def test_spawn_speeds_within_range(self):
        with Simulation.from_config(SimulationConfig(seed=4, gravity=False)) as sim:
            add_central_source(sim.world, AtomicTransition.rubidium(), n_atoms=3, size=1e-4, speed=0.2)
            sim.run(2)
            speeds = np.linalg.norm(sim.world.snapshot(Atom, Velocity)["Velocity"]["vec"], axis=1)
        assert np.all((speeds >= 0.1) & (speeds <= 0.3))
