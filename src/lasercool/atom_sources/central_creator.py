"""
Central Creator
===============

A volumetric source that spawns atoms around the emitter position with a
configurable spread of positions, speeds and directions. Each aspect is a
closed set of distribution variants:

| Distribution                 | Variants                                 |
|------------------------------|------------------------------------------|
| PositionDensityDistribution  | UniformCuboidic(size), UniformSpheric    |
| SpatialSpeedDistribution     | Uniform(speed), UniformCuboidic,         |
|                              | UniformSpheric                           |
| SpeedDensityDistribution     | UniformCentral(width)                    |
| SpatialVectorDistribution    | Uniform                                  |
| VectorDensityDistribution    | Uniform                                  |

``SpatialSpeedDistribution`` gives the characteristic speed (possibly
position dependent), ``SpeedDensityDistribution`` the spread of speeds
around it, and ``VectorDensityDistribution`` the direction of motion.

The spherical position law and the position-dependent speed laws have no
defined sampling law. They can be constructed, but a creator using them
fails with ``UnimplementedDistributionError`` when its system is set up.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..atom import AtomicTransition, Position
from ..destructor import ToBeDestroyed
from ..ecs import Component, System
from ..ecs.parallel import system_rng
from ..errors import UnimplementedDistributionError
from ..utils.math_utils import random_unit_vectors
from .emit import AtomNumberToEmit, VelocityCap, spawn_atoms
from .mass import MassDistribution


class PositionDensityDistribution:
    @dataclass(frozen=True)
    class UniformCuboidic:
        size: Tuple[float, float, float]

    @dataclass(frozen=True)
    class UniformSpheric:
        radius: float


class SpatialSpeedDistribution:
    @dataclass(frozen=True)
    class Uniform:
        speed: float

    @dataclass(frozen=True)
    class UniformCuboidic:
        speed: float
        size: Tuple[float, float, float]

    @dataclass(frozen=True)
    class UniformSpheric:
        speed: float
        radius: float


class SpeedDensityDistribution:
    @dataclass(frozen=True)
    class UniformCentral:
        width: float


class SpatialVectorDistribution:
    @dataclass(frozen=True)
    class Uniform:
        pass


class VectorDensityDistribution:
    @dataclass(frozen=True)
    class Uniform:
        pass


def _unimplemented(distribution):
    return UnimplementedDistributionError(
        f"Sampling from {type(distribution).__qualname__} is not implemented"
    )


@dataclass
class CentralCreator(Component):
    position_density_distribution: object
    spatial_speed_distribution: object
    speed_density_distribution: object
    spatial_vector_distribution: object
    vector_density_distribution: object

    @classmethod
    def new_uniform_cubic(cls, size_of_cube: float, speed: float) -> "CentralCreator":
        """Atoms uniformly in a cube, speeds uniform in [0.5, 1.5]·speed, isotropic directions."""
        return cls(
            PositionDensityDistribution.UniformCuboidic((size_of_cube,) * 3),
            SpatialSpeedDistribution.Uniform(speed),
            SpeedDensityDistribution.UniformCentral(0.5 * speed),
            SpatialVectorDistribution.Uniform(),
            VectorDensityDistribution.Uniform(),
        )

    def validate(self):
        """Raise if any configured distribution has no sampling law."""
        if isinstance(self.position_density_distribution, PositionDensityDistribution.UniformSpheric):
            raise _unimplemented(self.position_density_distribution)
        if isinstance(
            self.spatial_speed_distribution,
            (SpatialSpeedDistribution.UniformCuboidic, SpatialSpeedDistribution.UniformSpheric),
        ):
            raise _unimplemented(self.spatial_speed_distribution)

    def sample_positions(self, rng, n) -> np.ndarray:
        distribution = self.position_density_distribution
        if isinstance(distribution, PositionDensityDistribution.UniformCuboidic):
            return rng.uniform(-0.5, 0.5, (n, 3)) * np.asarray(distribution.size)
        if isinstance(distribution, PositionDensityDistribution.UniformSpheric):
            raise _unimplemented(distribution)
        raise TypeError(f"Unknown position distribution: {distribution!r}")

    def characteristic_speed(self) -> float:
        distribution = self.spatial_speed_distribution
        if isinstance(distribution, SpatialSpeedDistribution.Uniform):
            return distribution.speed
        if isinstance(
            distribution, (SpatialSpeedDistribution.UniformCuboidic, SpatialSpeedDistribution.UniformSpheric)
        ):
            raise _unimplemented(distribution)
        raise TypeError(f"Unknown spatial speed distribution: {distribution!r}")

    def sample_speeds(self, rng, n) -> np.ndarray:
        speed = self.characteristic_speed()
        distribution = self.speed_density_distribution
        if isinstance(distribution, SpeedDensityDistribution.UniformCentral):
            low = max(0.0, speed - distribution.width)
            return rng.uniform(low, speed + distribution.width, n)
        raise TypeError(f"Unknown speed density distribution: {distribution!r}")

    def sample_directions(self, rng, n) -> np.ndarray:
        if not isinstance(self.spatial_vector_distribution, SpatialVectorDistribution.Uniform):
            raise TypeError(f"Unknown spatial vector distribution: {self.spatial_vector_distribution!r}")
        distribution = self.vector_density_distribution
        if isinstance(distribution, VectorDensityDistribution.Uniform):
            return random_unit_vectors(rng, n)
        raise TypeError(f"Unknown vector density distribution: {distribution!r}")

    def get_random_spawn_condition(self, rng, n: int = 1):
        """
        Draw ``n`` spawn conditions relative to the creator position.

        Returns
        -------
        (np.ndarray, np.ndarray)
            Positions [m] and velocities [m/s], each of shape (n, 3).
        """
        positions = self.sample_positions(rng, n)
        velocities = self.sample_directions(rng, n) * self.sample_speeds(rng, n)[:, None]
        return positions, velocities


class CentralCreatorCreateAtomsSystem(System):
    reads = (
        CentralCreator, AtomicTransition, AtomNumberToEmit, Position, MassDistribution,
        VelocityCap, ToBeDestroyed,
    )
    optional = (VelocityCap,)

    def setup(self, world):
        self.rng = system_rng(world)
        for _, creator in world.query(CentralCreator):
            creator.validate()

    def run(self, world):
        cap = world.try_resource(VelocityCap)
        for entity, creator, transition, to_emit, centre, masses in world.query(
            CentralCreator, AtomicTransition, AtomNumberToEmit, Position, MassDistribution, without=(ToBeDestroyed,)
        ):
            n = to_emit.number
            if n <= 0:
                continue
            mass = masses.draw_random_mass(self.rng, n)
            offsets, velocities = creator.get_random_spawn_condition(self.rng, n)
            spawn_atoms(world, transition, centre.vec + offsets, velocities, mass, cap)
