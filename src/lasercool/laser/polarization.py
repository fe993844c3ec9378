"""
Polarization vectors.

Light polarization is a complex 3-vector ε. Relative to a quantization axis
â with transverse basis (ê1, ê2) = orthonormal_basis(â):

    σ+(â) = (ê1 - i·ê2)/√2
    σ-(â) = (ê1 + i·ê2)/√2
    π(â)  = â

The fraction of a beam's intensity driving each component is
``|⟨σ_q(â)|ε⟩|²`` with ``⟨u|v⟩ = Σ conj(u_i)·v_i``.
"""

from dataclasses import dataclass

import numpy as np

from ..ecs import Component
from ..utils.math_utils import normalize, orthonormal_basis

SQRT2 = np.sqrt(2.0)


def sigma_plus(axis) -> np.ndarray:
    e1, e2 = orthonormal_basis(axis)
    return (e1 - 1j * e2) / SQRT2


def sigma_minus(axis) -> np.ndarray:
    e1, e2 = orthonormal_basis(axis)
    return (e1 + 1j * e2) / SQRT2


def linear(axis) -> np.ndarray:
    return normalize(axis).astype(complex)


def cdot(v1, v2) -> np.ndarray:
    """Hermitian inner product along the last axis."""
    return np.sum(np.conj(v1) * v2, axis=-1)


@dataclass
class Polarization(Component):
    """Explicit polarization vector of a beam, overriding ``CoolingLight.polarization``."""

    vector: np.ndarray

    def __post_init__(self):
        vector = np.asarray(self.vector, dtype=complex)
        self.vector = vector / np.sqrt(np.real(cdot(vector, vector)))

    @classmethod
    def sigma_plus(cls, direction):
        return cls(sigma_plus(direction))

    @classmethod
    def sigma_minus(cls, direction):
        return cls(sigma_minus(direction))

    @classmethod
    def linear(cls, direction):
        return cls(linear(direction))
