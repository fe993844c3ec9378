"""
Effusive Oven
=============

Atoms leave a thermal oven at temperature T through an aperture.

**Speed.** The flux through an aperture weights the Maxwell–Boltzmann speed
distribution by v, giving ``p(v) ∝ v³·exp(-m·v²/2kT)``. In terms of the
kinetic energy ``E = m·v²/2`` this is a Gamma(2) distribution with scale
kT, so speeds are drawn as

    v = √(2kT/m · X),    X ~ Gamma(2, 1)

**Direction.** Effusion is Lambertian (flux ∝ cos θ) about the oven axis.
Restricting to a cone of half-angle θmax, the polar angle is drawn from

    sin θ = √U · sin θmax,    U ~ Uniform(0, 1)

**Position.** Uniform over the aperture: a disk (with thickness along the
axis) or an axis-aligned box, centred on the oven position.
"""

from dataclasses import dataclass, field
from typing import Union

import numpy as np

from ..atom import AtomicTransition, Position
from ..destructor import ToBeDestroyed
from ..constants import BOLTZCONST
from ..ecs import Component, System
from ..ecs.parallel import system_rng
from ..utils.math_utils import normalize, orthonormal_basis
from .emit import AtomNumberToEmit, VelocityCap, spawn_atoms
from .mass import MassDistribution


@dataclass
class CircularAperture:
    radius: float
    thickness: float = 0.0


@dataclass
class CubicAperture:
    size: np.ndarray

    def __post_init__(self):
        self.size = np.asarray(self.size, dtype=float)


@dataclass
class Oven(Component):
    """
    Parameters
    ----------
    temperature : float
        Oven temperature [K].
    aperture : CircularAperture or CubicAperture
    direction : np.ndarray
        Axis of the emitted beam.
    theta_max : float
        Half-angle of the emission cone [rad].
    """

    temperature: float
    aperture: Union[CircularAperture, CubicAperture]
    direction: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0]))
    theta_max: float = np.pi / 2

    def __post_init__(self):
        self.direction = normalize(self.direction)
        if self.temperature <= 0:
            raise ValueError(f"Oven temperature must be positive, got {self.temperature}")
        if not 0.0 < self.theta_max <= np.pi / 2:
            raise ValueError(f"theta_max must be in (0, π/2], got {self.theta_max}")

    def sample_positions(self, rng: np.random.Generator, n: int) -> np.ndarray:
        if isinstance(self.aperture, CircularAperture):
            e1, e2 = orthonormal_basis(self.direction)
            r = self.aperture.radius * np.sqrt(rng.random(n))
            phi = rng.uniform(0.0, 2.0 * np.pi, n)
            axial = rng.uniform(-0.5, 0.5, n) * self.aperture.thickness
            return (
                np.outer(r * np.cos(phi), e1)
                + np.outer(r * np.sin(phi), e2)
                + np.outer(axial, self.direction)
            )
        if isinstance(self.aperture, CubicAperture):
            return rng.uniform(-0.5, 0.5, (n, 3)) * self.aperture.size
        raise TypeError(f"Unknown aperture: {self.aperture!r}")

    def sample_directions(self, rng: np.random.Generator, n: int) -> np.ndarray:
        sin_theta = np.sqrt(rng.random(n)) * np.sin(self.theta_max)
        cos_theta = np.sqrt(1.0 - sin_theta**2)
        phi = rng.uniform(0.0, 2.0 * np.pi, n)
        e1, e2 = orthonormal_basis(self.direction)
        return (
            np.outer(sin_theta * np.cos(phi), e1)
            + np.outer(sin_theta * np.sin(phi), e2)
            + np.outer(cos_theta, self.direction)
        )

    def sample_speeds(self, rng: np.random.Generator, masses: np.ndarray) -> np.ndarray:
        return np.sqrt(2.0 * BOLTZCONST * self.temperature / masses * rng.gamma(2.0, 1.0, len(masses)))


class OvenCreateAtomsSystem(System):
    reads = (
        Oven, AtomicTransition, AtomNumberToEmit, Position, MassDistribution, VelocityCap, ToBeDestroyed,
    )
    optional = (VelocityCap,)

    def setup(self, world):
        self.rng = system_rng(world)

    def run(self, world):
        cap = world.try_resource(VelocityCap)
        for entity, oven, transition, to_emit, centre, masses in world.query(
            Oven, AtomicTransition, AtomNumberToEmit, Position, MassDistribution, without=(ToBeDestroyed,)
        ):
            n = to_emit.number
            if n <= 0:
                continue
            mass = masses.draw_random_mass(self.rng, n)
            positions = centre.vec + oven.sample_positions(self.rng, n)
            velocities = oven.sample_directions(self.rng, n) * oven.sample_speeds(self.rng, mass)[:, None]
            spawn_atoms(world, transition, positions, velocities, mass, cap)
