"""
Shared fixtures.

``world`` is a fully registered world with the standard resources inserted
and a fixed seed, ready for systems to be run one at a time with
``run_now``.
"""

import numpy as np
import pytest

from lasercool.atom import Atom, AtomicTransition, Force, InitialVelocity, Mass, Position, Velocity
from lasercool.constants import AMU
from lasercool.ecs import World
from lasercool.simulation import SimulationConfig, register_components, register_resources


@pytest.fixture
def world():
    w = World(capacity=8)
    register_components(w)
    register_resources(w, SimulationConfig(timestep=1e-6, seed=1234))
    return w


@pytest.fixture
def make_atom(world):
    """Create an atom immediately, with optional extra components."""

    def _make(position=(0.0, 0.0, 0.0), velocity=(0.0, 0.0, 0.0), transition=None, extra=()):
        transition = transition or AtomicTransition.rubidium()
        return world.create_entity(
            Position(np.asarray(position, dtype=float)),
            Velocity(np.asarray(velocity, dtype=float)),
            InitialVelocity(np.asarray(velocity, dtype=float)),
            Force(),
            Mass(87.0 * AMU),
            transition,
            Atom(),
            *extra,
        )

    return _make
