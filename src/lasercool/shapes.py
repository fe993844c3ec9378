"""
Geometric shapes used by simulation volumes and detectors.

Each shape answers ``contains(centre, positions)`` for a whole array of
positions at once.
"""

from dataclasses import dataclass, field

import numpy as np

from .utils.math_utils import axial_offset, distance_to_line, normalize


@dataclass
class Cuboid:
    """Axis-aligned box given by its half widths [m]."""

    half_width: np.ndarray

    def __post_init__(self):
        self.half_width = np.asarray(self.half_width, dtype=float)

    def contains(self, centre, positions) -> np.ndarray:
        delta = np.abs(np.asarray(positions) - centre)
        return np.all(delta < self.half_width, axis=-1)


@dataclass
class Sphere:
    radius: float

    def contains(self, centre, positions) -> np.ndarray:
        delta = np.asarray(positions) - centre
        return np.einsum("ij,ij->i", delta, delta) < self.radius**2


@dataclass
class Cylinder:
    """Finite cylinder of given radius and length, centred on its axis midpoint."""

    radius: float
    length: float
    direction: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))

    def __post_init__(self):
        self.direction = normalize(self.direction)

    def contains(self, centre, positions) -> np.ndarray:
        axial = axial_offset(positions, centre, self.direction)
        radial = distance_to_line(positions, centre, self.direction)
        return (np.abs(axial) < 0.5 * self.length) & (radial < self.radius)
