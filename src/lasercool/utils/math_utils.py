"""
Vector geometry helpers.

All functions operate on arrays of 3-vectors with shape ``(n, 3)`` (a single
``(3,)`` vector broadcasts) so samplers can evaluate a whole atom population
against one source in a single call.
"""

import numpy as np


def normalize(v: np.ndarray) -> np.ndarray:
    """Return ``v`` scaled to unit length along the last axis."""
    v = np.asarray(v, dtype=float)
    return v / np.linalg.norm(v, axis=-1, keepdims=True)


def axial_offset(positions: np.ndarray, origin: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """
    Signed distance of each position along a line, measured from ``origin``.

    ``direction`` must be a unit vector.
    """
    return (np.asarray(positions) - origin) @ direction


def radial_vector(positions: np.ndarray, origin: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """
    Component of ``positions - origin`` perpendicular to the line.

    Parameters
    ----------
    positions : np.ndarray
        Points, shape (n, 3).
    origin : np.ndarray
        A point on the line, shape (3,).
    direction : np.ndarray
        Unit vector along the line, shape (3,).

    Returns
    -------
    np.ndarray
        Perpendicular displacement from the line to each point, shape (n, 3).
    """
    rel = np.asarray(positions) - origin
    return rel - np.outer(rel @ direction, direction)


def distance_to_line(positions: np.ndarray, origin: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """Minimum distance between each point and the line through ``origin``."""
    return np.linalg.norm(radial_vector(positions, origin, direction), axis=-1)


def random_unit_vectors(rng: np.random.Generator, n: int) -> np.ndarray:
    """Draw ``n`` directions uniformly distributed on the unit sphere."""
    cos_theta = rng.uniform(-1.0, 1.0, n)
    phi = rng.uniform(0.0, 2.0 * np.pi, n)
    sin_theta = np.sqrt(1.0 - cos_theta**2)
    return np.column_stack((sin_theta * np.cos(phi), sin_theta * np.sin(phi), cos_theta))


def orthonormal_basis(direction: np.ndarray, reference=(0.23, 1.2, 0.4563)):
    """
    Two unit vectors spanning the plane perpendicular to ``direction``.

    The reference vector must not be parallel to ``direction``. Works
    row-wise for an array of directions.

    Returns
    -------
    (np.ndarray, np.ndarray)
        ``(e1, e2)`` with ``e1 x e2 = direction``.
    """
    direction = normalize(direction)
    e1 = normalize(np.cross(direction, np.asarray(reference, dtype=float)))
    e2 = np.cross(direction, e1)
    return e1, e2
