"""
Simulation Assembly
===================

Registers every component type, inserts the standard resources, builds the
staged system graph and drives the step loop.

THE STEP
--------

    stage 0  timestep optimisation, clear forces, deflag new atoms,
             beam indexing, attach per-atom samplers to new atoms
    ------ barrier
    stage 1  magnetic: clear → quadrupole / wire / uniform → magnitude
    ------ barrier
    stage 2  laser: intensity, detuning, gradient → rate coefficients →
             two-level population → photons scattered → cooling,
             emission and dipole forces, repump loss
    ------ barrier
    stage 3  atom sources: emission numbers → oven / central creator →
             retire emit-once sources
    ------ barrier
    stage 4  gravity → Euler integration → volume, bounds and detector
             tests, deletion of marked entities, console output
    ------ barrier
    flush    deferred commands are applied

Usage:

    sim = Simulation.from_config(SimulationConfig(timestep=1e-6, seed=1))
    templates.add_six_beam_mot(sim.world, ...)
    sim.add_observer(record, [Position, Velocity], interval=100)
    sim.run(10_000)
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .atom import (
    Atom,
    AtomicDipoleTransition,
    AtomicTransition,
    ClearForceSystem,
    Dark,
    Force,
    InitialVelocity,
    Mass,
    Position,
    Velocity,
)
from .atom_sources import (
    AtomNumberToEmit,
    CentralCreator,
    CentralCreatorCreateAtomsSystem,
    DestroyEmitOnceSourcesSystem,
    EmitFixedRate,
    EmitFixedRateSystem,
    EmitNumberPerFrame,
    EmitNumberPerFrameSystem,
    EmitOnce,
    MassDistribution,
    Oven,
    OvenCreateAtomsSystem,
    VelocityCap,
)
from .destructor import DeleteToBeDestroyedEntitiesSystem, DestroyOutOfBoundAtomsSystem, ToBeDestroyed
from .detector import Detector, DetectingAtomSystem
from .dipole import (
    AttachAtomicDipoleTransitionToAtomsSystem,
    AttachDipoleComponentsToNewlyCreatedAtomsSystem,
    AttachIndexToDipoleLightSystem,
    ApplyDipoleForceSystem,
    DipoleLight,
    DipoleLightIndex,
    IndexDipoleLightsSystem,
    InitialiseLaserIntensityGradientSamplersSystem,
    LaserIntensityGradientSamplers,
    SampleLaserIntensityGradientSystem,
)
from .ecs import DispatcherBuilder, RandomSource, World, WorkerPool
from .gravity import ApplyGravitationalForceSystem, ApplyGravityOption
from .initiate import DeflagNewAtomsSystem, NewlyCreated
from .integrator import EulerIntegrationSystem, Step, Timestep
from .interpolate import Ramp
from .laser import (
    ActualPhotonsScatteredVector,
    ApplyEmissionForceSystem,
    AttachIndexToCoolingLightSystem,
    AttachLaserComponentsToNewlyCreatedAtomsSystem,
    CalculateActualPhotonsScatteredSystem,
    CalculateCoolingForcesSystem,
    CalculateExpectedPhotonsScatteredSystem,
    CalculateLaserDetuningSystem,
    CalculateMeanTotalPhotonsScatteredSystem,
    CalculateRateCoefficientsSystem,
    CalculateTwoLevelPopulationSystem,
    CircularMask,
    CoolingLight,
    CoolingLightIndex,
    EmissionForceOption,
    ExpectedPhotonsScatteredVector,
    GaussianBeam,
    GaussianRayleighRange,
    GaussianReferenceFrame,
    IndexCoolingLightsSystem,
    InitialiseLaserDetuningSamplersSystem,
    InitialiseLaserIntensitySamplersSystem,
    InitialiseRateCoefficientsSystem,
    LaserDetuningSamplers,
    LaserIntensitySamplers,
    Polarization,
    RateCoefficients,
    RepumpSystem,
    SampleLaserIntensitySystem,
    ScatteringFluctuationsOption,
    TotalPhotonsScattered,
    TwoLevelPopulation,
)
from .magnetic import (
    AttachFieldSamplersToNewlyCreatedAtomsSystem,
    CalculateMagneticFieldMagnitudeSystem,
    ClearMagneticFieldSamplerSystem,
    MagneticFieldSampler,
    MagneticWireField,
    QuadrupoleField3D,
    Sample3DQuadrupoleFieldSystem,
    SampleMagneticWireFieldSystem,
    UniformMagneticField,
    UniformMagneticFieldSystem,
)
from .optimization import EarlyTimestepOptimization, TimestepOptimizationSystem
from .output import ConsoleOutputSystem, Observer
from .sim_region import RegionTestSystem, SimulationVolume

logger = logging.getLogger(__name__)

ALL_COMPONENTS = (
    # particles
    Position, Velocity, InitialVelocity, Force, Mass, Atom, AtomicTransition,
    AtomicDipoleTransition, NewlyCreated, ToBeDestroyed, Dark,
    # per-step samples
    MagneticFieldSampler, LaserIntensitySamplers, LaserDetuningSamplers,
    LaserIntensityGradientSamplers, RateCoefficients, TwoLevelPopulation,
    TotalPhotonsScattered, ExpectedPhotonsScatteredVector, ActualPhotonsScatteredVector,
    # field and beam sources
    QuadrupoleField3D, MagneticWireField, UniformMagneticField, GaussianBeam,
    GaussianRayleighRange, GaussianReferenceFrame, CircularMask, Polarization,
    CoolingLight, CoolingLightIndex, DipoleLight, DipoleLightIndex,
    # emitters, volumes, detectors, ramps
    Oven, CentralCreator, MassDistribution, AtomNumberToEmit, EmitNumberPerFrame,
    EmitFixedRate, EmitOnce, SimulationVolume, Detector, Ramp,
)


@dataclass
class SimulationConfig:
    """
    Run-wide settings.

    Parameters
    ----------
    timestep : float
        Integration timestep [s].
    workers : int
        Threads used to run independent systems of one stage.
    kernel_workers : int
        Threads used inside per-atom kernels. ``1`` disables the pool.
    seed : int, optional
        Seed of the ``RandomSource``. ``None`` draws fresh entropy.
    emission_force : bool
        Apply random recoil kicks from spontaneous emission.
    emission_threshold : int
        Up to this many photons per step, recoil directions are summed explicitly.
    scattering_fluctuations : bool
        Draw photon numbers from a Poisson distribution.
    gravity : bool
    velocity_cap : float, optional
        Discard spawned atoms faster than this [m/s].
    console_interval : int
        Log progress every this many steps; ``0`` disables.
    early_timestep : float, optional
        Timestep used for the first ``early_steps`` steps [s].
    early_steps : int
    capacity : int
        Initial entity capacity of the world.
    """

    timestep: float = 1e-6
    workers: int = 1
    kernel_workers: int = 1
    seed: Optional[int] = None
    emission_force: bool = True
    emission_threshold: int = 5
    scattering_fluctuations: bool = True
    gravity: bool = True
    velocity_cap: Optional[float] = None
    console_interval: int = 0
    early_timestep: Optional[float] = None
    early_steps: int = 0
    capacity: int = 1024

    def __post_init__(self):
        if self.timestep <= 0:
            raise ValueError(f"timestep must be positive, got {self.timestep}")
        if self.workers < 1 or self.kernel_workers < 1:
            raise ValueError("workers and kernel_workers must be >= 1")


def register_components(world: World):
    world.register(*ALL_COMPONENTS)


def register_resources(world: World, config: SimulationConfig):
    world.insert_resource(Step())
    world.insert_resource(Timestep(config.timestep))
    world.insert_resource(RandomSource(config.seed))
    world.insert_resource(EmissionForceOption(config.emission_force, config.emission_threshold))
    world.insert_resource(ScatteringFluctuationsOption(config.scattering_fluctuations))
    world.insert_resource(ApplyGravityOption(config.gravity))
    if config.velocity_cap is not None:
        world.insert_resource(VelocityCap(config.velocity_cap))
    if config.early_timestep is not None:
        world.insert_resource(EarlyTimestepOptimization(config.early_timestep, config.early_steps))
    if config.kernel_workers > 1:
        world.insert_resource(WorkerPool(config.kernel_workers))


def create_simulation_dispatcher_builder(console_interval: int = 0) -> DispatcherBuilder:
    """The standard step graph, see the module docstring."""
    builder = DispatcherBuilder()

    builder.add(TimestepOptimizationSystem(), "timestep_optimization")
    builder.add(ClearForceSystem(), "clear_force")
    builder.add(DeflagNewAtomsSystem(), "deflag")
    builder.add(AttachIndexToCoolingLightSystem(), "attach_cooling_index")
    builder.add(IndexCoolingLightsSystem(), "index_cooling_lights", deps=["attach_cooling_index"])
    builder.add(AttachIndexToDipoleLightSystem(), "attach_dipole_index")
    builder.add(IndexDipoleLightsSystem(), "index_dipole_lights", deps=["attach_dipole_index"])
    builder.add(AttachFieldSamplersToNewlyCreatedAtomsSystem(), "attach_field_samplers")
    builder.add(AttachLaserComponentsToNewlyCreatedAtomsSystem(), "attach_laser_components")
    builder.add(AttachDipoleComponentsToNewlyCreatedAtomsSystem(), "attach_dipole_components")
    builder.add(AttachAtomicDipoleTransitionToAtomsSystem(), "attach_dipole_transition")
    builder.add_barrier()

    builder.add(ClearMagneticFieldSamplerSystem(), "magnetic_clear")
    builder.add(Sample3DQuadrupoleFieldSystem(), "magnetic_quadrupole", deps=["magnetic_clear"])
    builder.add(SampleMagneticWireFieldSystem(), "magnetic_wire", deps=["magnetic_clear"])
    builder.add(UniformMagneticFieldSystem(), "magnetic_uniform", deps=["magnetic_clear"])
    builder.add(
        CalculateMagneticFieldMagnitudeSystem(),
        "magnetic_magnitude",
        deps=["magnetic_quadrupole", "magnetic_wire", "magnetic_uniform"],
    )
    builder.add_barrier()

    builder.add(InitialiseLaserIntensitySamplersSystem(), "initialise_intensity")
    builder.add(InitialiseLaserDetuningSamplersSystem(), "initialise_detuning")
    builder.add(InitialiseRateCoefficientsSystem(), "initialise_rates")
    builder.add(InitialiseLaserIntensityGradientSamplersSystem(), "initialise_gradient")
    builder.add(SampleLaserIntensitySystem(), "sample_intensity", deps=["initialise_intensity"])
    builder.add(CalculateLaserDetuningSystem(), "calculate_detuning", deps=["initialise_detuning"])
    builder.add(SampleLaserIntensityGradientSystem(), "sample_gradient", deps=["initialise_gradient"])
    builder.add(
        CalculateRateCoefficientsSystem(),
        "calculate_rates",
        deps=["sample_intensity", "calculate_detuning", "initialise_rates"],
    )
    builder.add(CalculateTwoLevelPopulationSystem(), "two_level_population", deps=["calculate_rates"])
    builder.add(
        CalculateMeanTotalPhotonsScatteredSystem(), "mean_photons", deps=["two_level_population"]
    )
    builder.add(CalculateExpectedPhotonsScatteredSystem(), "expected_photons", deps=["mean_photons"])
    builder.add(CalculateActualPhotonsScatteredSystem(), "actual_photons", deps=["expected_photons"])
    builder.add(CalculateCoolingForcesSystem(), "cooling_force", deps=["actual_photons"])
    builder.add(ApplyEmissionForceSystem(), "emission_force", deps=["actual_photons"])
    builder.add(ApplyDipoleForceSystem(), "dipole_force", deps=["sample_gradient"])
    builder.add(RepumpSystem(), "repump", deps=["actual_photons"])
    builder.add_barrier()

    builder.add(EmitNumberPerFrameSystem(), "emit_number_per_frame")
    builder.add(EmitFixedRateSystem(), "emit_fixed_rate")
    builder.add(OvenCreateAtomsSystem(), "oven", deps=["emit_number_per_frame", "emit_fixed_rate"])
    builder.add(
        CentralCreatorCreateAtomsSystem(),
        "central_creator",
        deps=["emit_number_per_frame", "emit_fixed_rate"],
    )
    builder.add(DestroyEmitOnceSourcesSystem(), "destroy_emit_once", deps=["oven", "central_creator"])
    builder.add_barrier()

    builder.add(ApplyGravitationalForceSystem(), "gravity")
    builder.add(EulerIntegrationSystem(), "euler_integrator", deps=["gravity"])
    builder.add(RegionTestSystem(), "region_test", deps=["euler_integrator"])
    builder.add(DestroyOutOfBoundAtomsSystem(), "destroy_out_of_bounds", deps=["euler_integrator"])
    builder.add(DetectingAtomSystem(), "detector", deps=["euler_integrator"])
    builder.add(DeleteToBeDestroyedEntitiesSystem(), "delete_to_be_destroyed")
    if console_interval > 0:
        builder.add(ConsoleOutputSystem(console_interval), "console_output", deps=["euler_integrator"])
    builder.add_barrier()
    return builder


class Simulation:
    """
    Drives the step loop of one world.

    Systems are set up lazily on the first step, so every source entity the
    driver creates beforehand is validated (e.g. central creators with
    unimplemented distributions) before anything runs.
    """

    def __init__(self, world: World, dispatcher):
        self.world = world
        self.dispatcher = dispatcher
        self.observers: List[Observer] = []
        self._is_setup = False

    @classmethod
    def from_config(cls, config: Optional[SimulationConfig] = None, builder: Optional[DispatcherBuilder] = None):
        config = config or SimulationConfig()
        world = World(config.capacity)
        register_components(world)
        register_resources(world, config)
        builder = builder or create_simulation_dispatcher_builder(config.console_interval)
        return cls(world, builder.build(config.workers))

    def add_observer(
        self,
        callback: Callable,
        components: Sequence[type],
        interval: int = 1,
        without: Sequence[type] = (),
    ) -> Observer:
        observer = Observer(callback, tuple(components), interval, tuple(without))
        self.observers.append(observer)
        return observer

    def setup(self):
        if not self._is_setup:
            self.dispatcher.setup(self.world)
            self._is_setup = True

    def step(self):
        self.setup()
        self.dispatcher.dispatch(self.world)
        self.world.maintain()
        for observer in self.observers:
            observer.notify(self.world)

    def run(self, n_steps: int):
        self.setup()
        logger.info(f"Running {n_steps} steps")
        for _ in range(n_steps):
            self.step()

    def close(self):
        self.dispatcher.close()
        pool = self.world.try_resource(WorkerPool)
        if pool is not None:
            pool.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
