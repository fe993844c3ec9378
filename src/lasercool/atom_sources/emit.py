"""
Emission control and atom spawning.

Each emitter holds an ``AtomNumberToEmit`` that its source system reads
every step. The number is either constant (set directly), refreshed from
``EmitNumberPerFrame``, or drawn from ``EmitFixedRate``: a rate ``r`` in
atoms per second gives ``r·Δt`` atoms per step, with the fractional part
realised by random rounding so the long-run average is exact.

Emitters marked ``EmitOnce`` are destroyed after their first step. Source
systems skip emitters already marked ``ToBeDestroyed``, so an ``EmitOnce``
emitter produces exactly one batch.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..atom import Atom, AtomicTransition, Force, InitialVelocity, Mass, Position, Velocity
from ..destructor import ToBeDestroyed
from ..ecs import Component, Resource, StorageKind, System
from ..ecs.parallel import system_rng
from ..initiate import NewlyCreated
from ..integrator import Timestep

logger = logging.getLogger(__name__)


@dataclass
class VelocityCap(Resource):
    """Spawned atoms faster than ``value`` [m/s] are discarded."""

    value: float


@dataclass
class AtomNumberToEmit(Component):
    number: int = 0


@dataclass
class EmitNumberPerFrame(Component):
    number: int


@dataclass
class EmitFixedRate(Component):
    """Emission rate [atoms/s]."""

    rate: float


class EmitOnce(Component):
    storage = StorageKind.MARKER


class EmitNumberPerFrameSystem(System):
    reads = (EmitNumberPerFrame,)
    writes = (AtomNumberToEmit,)

    def run(self, world):
        for _, per_frame, to_emit in world.query(EmitNumberPerFrame, AtomNumberToEmit):
            to_emit.number = per_frame.number


class EmitFixedRateSystem(System):
    reads = (EmitFixedRate, Timestep)
    writes = (AtomNumberToEmit,)

    def setup(self, world):
        self.rng = system_rng(world)

    def run(self, world):
        dt = world.resource(Timestep).delta
        for _, fixed_rate, to_emit in world.query(EmitFixedRate, AtomNumberToEmit):
            expected = fixed_rate.rate * dt
            whole = int(np.floor(expected))
            to_emit.number = whole + int(self.rng.random() < expected - whole)


class DestroyEmitOnceSourcesSystem(System):
    reads = (EmitOnce,)
    writes = (ToBeDestroyed,)

    def run(self, world):
        for row in world.join(EmitOnce, without=(ToBeDestroyed,)):
            world.commands.insert(world.entity(row), ToBeDestroyed())


def spawn_atoms(
    world,
    transition: AtomicTransition,
    positions: np.ndarray,
    velocities: np.ndarray,
    masses: np.ndarray,
    velocity_cap: Optional[VelocityCap] = None,
) -> int:
    """
    Queue creation of one atom per row of ``positions``.

    Samples faster than the velocity cap are dropped without creating an
    entity.

    Returns
    -------
    int
        Number of atoms queued.
    """
    if velocity_cap is not None:
        keep = np.linalg.norm(velocities, axis=1) <= velocity_cap.value
        if not keep.all():
            logger.debug(f"Velocity cap discarded {int((~keep).sum())} of {len(keep)} samples")
        positions, velocities, masses = positions[keep], velocities[keep], masses[keep]

    for position, velocity, mass in zip(positions, velocities, masses):
        world.commands.create_entity(
            Position(position),
            Velocity(velocity),
            Force(),
            Mass(float(mass)),
            transition,
            Atom(),
            InitialVelocity(velocity.copy()),
            NewlyCreated(),
        )
    logger.debug(f"Queued creation of {len(positions)} atoms")
    return len(positions)
