"""
Explicit Euler integration.

Each step every atom is advanced with

    v ← v + (F/m)·Δt
    x ← x + v·Δt

using the force accumulated by all force systems of the step, after which
the frame counter is incremented.
"""

from dataclasses import dataclass

from .atom import Force, Mass, Position, Velocity
from .ecs import Resource, System


@dataclass
class Timestep(Resource):
    """Duration of one integration step [s]."""

    delta: float = 1e-6


@dataclass
class Step(Resource):
    """Number of steps completed so far."""

    n: int = 0


class EulerIntegrationSystem(System):
    reads = (Force, Mass, Timestep)
    writes = (Position, Velocity, Step)

    def run(self, world):
        dt = world.resource(Timestep).delta
        rows = world.join(Position, Velocity, Force, Mass)
        if len(rows):
            position = world.storage(Position)["vec"]
            velocity = world.storage(Velocity)["vec"]
            force = world.storage(Force)["vec"][rows]
            mass = world.storage(Mass)["value"][rows]

            velocity[rows] += force / mass[:, None] * dt
            position[rows] += velocity[rows] * dt
        world.resource(Step).n += 1
