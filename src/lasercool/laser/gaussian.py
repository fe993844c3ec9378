"""
Gaussian Beams
==============

Intensity profile of a Gaussian beam with 1/e intensity radius ``e`` at the
waist (``w0 = √2·e`` in the usual 1/e² convention), carrying power ``P``:

    I(ρ, z) = P/(π·w²)·exp(-ρ²/w²),    w² = e²·(1 + z²/zR²)

where ``ρ`` is the distance from the beam axis and ``z`` the axial distance
from the waist (``intersection``). Writing ``b = 1/(1 + (z/zR)²)`` this is

    I = P/(π·e²) · b · exp(-ρ²·b/e²)

so on axis at ``z = zR`` the intensity is halved. Without a
``GaussianRayleighRange`` the beam is treated as collimated (``b = 1``).

Optional modifiers on a beam entity:

- ``CircularMask``: intensity is zero within ``radius`` of the axis (e.g. the
  hole in a mirror used to pass an atomic beam).
- ``GaussianReferenceFrame``: transverse axes (``x_vector``, ``y_vector``)
  and an ellipticity ε. The beam is elliptical with ``w_y = w·√(1 - ε²)``.

INTENSITY GRADIENT
------------------

For dipole trapping the gradient is needed. With transverse coordinates
``x`` and ``y' = y/√(1-ε²)``:

    ∇I = I·[ -2/w²·(x·x̂ + y'/√(1-ε²)·ŷ) + d̂·2z/(z² + zR²)·(ρ²/w² - 1) ]

The axial term vanishes for collimated beams.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ecs import Component
from ..utils.math_utils import normalize, orthonormal_basis


@dataclass
class GaussianBeam(Component):
    """
    Parameters
    ----------
    intersection : np.ndarray
        A point on the beam axis; the waist position [m].
    direction : np.ndarray
        Propagation direction.
    e_radius : float
        Radius at which intensity falls to 1/e of its peak [m].
    power : float
        Total beam power [W].
    """

    intersection: np.ndarray
    direction: np.ndarray
    e_radius: float
    power: float

    def __post_init__(self):
        self.intersection = np.asarray(self.intersection, dtype=float)
        self.direction = normalize(self.direction)
        if self.e_radius <= 0:
            raise ValueError(f"e_radius must be positive, got {self.e_radius}")

    @property
    def peak_intensity(self) -> float:
        return self.power / (np.pi * self.e_radius**2)


@dataclass
class GaussianRayleighRange(Component):
    rayleigh_range: float


def make_gaussian_rayleigh_range(wavelength: float, beam: GaussianBeam) -> GaussianRayleighRange:
    """Rayleigh range ``π·w0²/λ = 2π·e²/λ`` of a beam at the given wavelength."""
    return GaussianRayleighRange(2.0 * np.pi * beam.e_radius**2 / wavelength)


@dataclass
class CircularMask(Component):
    radius: float


@dataclass
class GaussianReferenceFrame(Component):
    """
    Transverse axes of an elliptical beam.

    ``x_vector`` and ``y_vector`` must be orthonormal and perpendicular to
    the beam direction.
    """

    x_vector: np.ndarray
    y_vector: np.ndarray
    ellipticity: float = 0.0

    def __post_init__(self):
        self.x_vector = normalize(self.x_vector)
        self.y_vector = normalize(self.y_vector)
        if not 0.0 <= self.ellipticity < 1.0:
            raise ValueError(f"Ellipticity must be in [0, 1), got {self.ellipticity}")

    @classmethod
    def for_beam(cls, beam: GaussianBeam, ellipticity: float = 0.0) -> "GaussianReferenceFrame":
        x_vector, y_vector = orthonormal_basis(beam.direction)
        return cls(x_vector, y_vector, ellipticity)


def _beam_coordinates(beam, positions, frame):
    """Transverse vector (in the scaled frame), squared scaled radius, and axial offset."""
    rel = np.atleast_2d(positions) - beam.intersection
    z = rel @ beam.direction
    if frame is None:
        transverse = rel - np.outer(z, beam.direction)
        return transverse, np.einsum("ij,ij->i", transverse, transverse), z

    stretch = 1.0 / np.sqrt(1.0 - frame.ellipticity**2)
    x = rel @ frame.x_vector
    y = rel @ frame.y_vector * stretch
    transverse = np.outer(x, frame.x_vector) + np.outer(y * stretch, frame.y_vector)
    return transverse, x**2 + y**2, z


def get_gaussian_beam_intensity(
    beam: GaussianBeam,
    positions: np.ndarray,
    mask: Optional[CircularMask] = None,
    rayleigh_range: Optional[GaussianRayleighRange] = None,
    frame: Optional[GaussianReferenceFrame] = None,
) -> np.ndarray:
    """
    Intensity of a beam at each position.

    Parameters
    ----------
    beam : GaussianBeam
    positions : np.ndarray
        Points, shape (n, 3) [m].
    mask : CircularMask, optional
    rayleigh_range : GaussianRayleighRange, optional
    frame : GaussianReferenceFrame, optional

    Returns
    -------
    np.ndarray
        Intensity [W/m²], shape (n,).
    """
    _, rho2, z = _beam_coordinates(beam, positions, frame)
    if rayleigh_range is None:
        broadening = np.ones_like(z)
    else:
        broadening = 1.0 / (1.0 + (z / rayleigh_range.rayleigh_range) ** 2)

    intensity = beam.peak_intensity * broadening * np.exp(-rho2 * broadening / beam.e_radius**2)
    if mask is not None:
        radial, _, _ = _beam_coordinates(beam, positions, None)
        distance = np.linalg.norm(radial, axis=1)
        intensity = np.where(distance < mask.radius, 0.0, intensity)
    return intensity


def get_gaussian_beam_intensity_gradient(
    beam: GaussianBeam,
    positions: np.ndarray,
    rayleigh_range: Optional[GaussianRayleighRange] = None,
    frame: Optional[GaussianReferenceFrame] = None,
) -> np.ndarray:
    """
    Gradient of a beam's intensity at each position [W/m³], shape (n, 3).
    """
    transverse, rho2, z = _beam_coordinates(beam, positions, frame)
    intensity = get_gaussian_beam_intensity(beam, positions, rayleigh_range=rayleigh_range, frame=frame)

    if rayleigh_range is None:
        w2 = np.full_like(z, beam.e_radius**2)
        axial = np.zeros_like(z)
    else:
        zr2 = rayleigh_range.rayleigh_range**2
        w2 = beam.e_radius**2 * (1.0 + z**2 / zr2)
        axial = 2.0 * z / (z**2 + zr2) * (rho2 / w2 - 1.0)

    gradient = -2.0 / w2[:, None] * transverse + np.outer(axial, beam.direction)
    return intensity[:, None] * gradient
