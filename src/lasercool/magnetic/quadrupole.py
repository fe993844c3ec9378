"""
Quadrupole field of an anti-Helmholtz coil pair.

Near the centre of a coil pair with symmetry axis d̂ the field is linear in
the displacement ``r`` from the centre:

    B = g·(r - 3(r·d̂)d̂)

which for d̂ = ẑ is the familiar ``(g·x, g·y, -2g·z)``. Here ``g`` is the
radial gradient; the axial gradient is ``-2g``.
"""

from dataclasses import dataclass, field

import numpy as np

from ..atom import Position
from ..constants import GAUSS_PER_CM
from ..ecs import Component, System
from ..utils.math_utils import normalize
from .sampler import MagneticFieldSampler


@dataclass
class QuadrupoleField3D(Component):
    """
    Parameters
    ----------
    gradient : float
        Radial field gradient [T/m].
    direction : np.ndarray
        Symmetry axis of the coil pair.
    """

    gradient: float
    direction: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))

    def __post_init__(self):
        self.direction = normalize(self.direction)

    @classmethod
    def gauss_per_cm(cls, gradient: float, direction=(0.0, 0.0, 1.0)) -> "QuadrupoleField3D":
        """Create a quadrupole with the gradient given in G/cm."""
        return cls(gradient * GAUSS_PER_CM, np.asarray(direction, dtype=float))


def calculate_quadrupole_field(positions, centre, gradient, direction=(0.0, 0.0, 1.0)) -> np.ndarray:
    """
    Quadrupole field at each position.

    Parameters
    ----------
    positions : np.ndarray
        Sample points, shape (n, 3).
    centre : np.ndarray
        Field zero.
    gradient : float
        Radial gradient [T/m].
    direction : array_like
        Unit symmetry axis.

    Returns
    -------
    np.ndarray
        Field [T], shape (n, 3).
    """
    rel = np.atleast_2d(positions) - centre
    direction = np.asarray(direction, dtype=float)
    return gradient * (rel - 3.0 * np.outer(rel @ direction, direction))


class Sample3DQuadrupoleFieldSystem(System):
    reads = (Position, QuadrupoleField3D)
    writes = (MagneticFieldSampler,)

    def run(self, world):
        rows = world.join(Position, MagneticFieldSampler)
        if len(rows) == 0:
            return
        positions = world.storage(Position)["vec"][rows]
        fields = world.storage(MagneticFieldSampler)["field"]
        for _, centre, quadrupole in world.query(Position, QuadrupoleField3D):
            fields[rows] += calculate_quadrupole_field(
                positions, centre.vec, quadrupole.gradient, quadrupole.direction
            )
