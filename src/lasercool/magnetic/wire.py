"""
Field of a finite straight wire.

Biot–Savart for a segment of length L carrying current I, evaluated at a
point with axial offset ``a`` and radial distance ``ρ`` from the wire centre:

    |B| = (μ0 I / 4πρ)·[(a - L/2)/√(ρ² + (a - L/2)²) - (a + L/2)/√(ρ² + (a + L/2)²)]

directed along ``ρ̂ × d̂``. The unit vector is formed with ``ρ + 1e-6`` in
the denominator so points on the wire axis give zero instead of NaN.
"""

from dataclasses import dataclass

import numpy as np

from ..atom import Position
from ..ecs import Component, System
from ..utils.math_utils import normalize
from .sampler import MagneticFieldSampler

MU0_OVER_4PI = 1e-7  # [T·m/A]
RADIAL_EPSILON = 1e-6  # [m]


@dataclass
class MagneticWireField(Component):
    """
    Parameters
    ----------
    length : float
        Wire length [m].
    current : float
        Current [A].
    direction : np.ndarray
        Direction of current flow.
    """

    length: float
    current: float
    direction: np.ndarray

    def __post_init__(self):
        self.direction = normalize(self.direction)


def calculate_wire_field(positions, wire_centre, length, current, direction) -> np.ndarray:
    delta = np.atleast_2d(positions) - wire_centre
    axial = delta @ direction
    perp = delta - np.outer(axial, direction)
    radial = np.linalg.norm(perp, axis=1)

    upper = axial - 0.5 * length
    lower = axial + 0.5 * length
    with np.errstate(divide="ignore", invalid="ignore"):
        magnitude = MU0_OVER_4PI * current / radial * (
            upper / np.sqrt(radial**2 + upper**2) - lower / np.sqrt(radial**2 + lower**2)
        )
    magnitude = np.where(radial > 0.0, magnitude, 0.0)
    return magnitude[:, None] * np.cross(perp, direction) / (radial + RADIAL_EPSILON)[:, None]


class SampleMagneticWireFieldSystem(System):
    reads = (Position, MagneticWireField)
    writes = (MagneticFieldSampler,)

    def run(self, world):
        rows = world.join(Position, MagneticFieldSampler)
        if len(rows) == 0:
            return
        positions = world.storage(Position)["vec"][rows]
        fields = world.storage(MagneticFieldSampler)["field"]
        for _, centre, wire in world.query(Position, MagneticWireField):
            fields[rows] += calculate_wire_field(
                positions, centre.vec, wire.length, wire.current, wire.direction
            )
