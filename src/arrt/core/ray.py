"""Ray data structure and vector utilities.

This module provides the fundamental Ray and Range types plus the vector
helpers used throughout the tracer. Vectors are plain float64 NumPy arrays
of length 3; none of the helpers mutate their arguments.

Example:
    >>> from arrt.core.ray import Ray, vec3
    >>> ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> ray.point_at(5.0)  # Point 5 units along the ray
    array([ 0.,  0., -5.])
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

Vec3 = npt.NDArray[np.float64]

# Largest finite float; used as an open upper bound for ray ranges.
FLOAT_MAX = sys.float_info.max

# Tolerance used by the near-zero checks.
EPSILON = sys.float_info.epsilon


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Vec3:
    """Create a 3D vector.

    Args:
        x: X component.
        y: Y component.
        z: Z component.

    Returns:
        A float64 array of shape (3,).
    """
    return np.array((x, y, z), dtype=np.float64)


def as_vec3(value) -> Vec3:
    """Convert any 3-sequence into a float64 vector (copying)."""
    arr = np.array(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 components, got shape {arr.shape}")
    return arr


@dataclass
class Ray:
    """A ray with an origin point, direction and recursion depth.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Expected to be unit
            length, but this is not enforced.
        depth: Number of reflection/refraction bounces that produced
            this ray. Camera rays start at 0.
    """

    origin: Vec3
    direction: Vec3
    depth: int = 0

    def point_at(self, t: float) -> Vec3:
        """Compute the point along the ray at parameter t.

        Args:
            t: The parameter value. Positive values are in front of the origin.

        Returns:
            The point origin + t * direction.
        """
        return self.origin + t * self.direction


@dataclass
class Range:
    """Open interval (min, max) of the ray parameter t.

    Tracing narrows ``max`` as nearer hits are found.
    """

    min: float = 1e-6
    max: float = FLOAT_MAX

    def copy(self) -> Range:
        return Range(self.min, self.max)


def in_range(r: Range, t: float) -> bool:
    """Return True when t lies strictly inside the open interval r."""
    return r.min < t < r.max


def nearly_zero(x: float) -> bool:
    """Return True if x is within two machine epsilons of zero."""
    return abs(x) <= 2.0 * EPSILON


# =============================================================================
# Vector Utility Functions
# =============================================================================


def dot(a: Vec3, b: Vec3) -> float:
    """Compute the dot product of two vectors."""
    return float(a[0] * b[0] + a[1] * b[1] + a[2] * b[2])


def cross(a: Vec3, b: Vec3) -> Vec3:
    """Compute the cross product of two vectors."""
    return vec3(
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length(v: Vec3) -> float:
    """Compute the Euclidean length of a vector."""
    return math.sqrt(dot(v, v))


def normalize(v: Vec3) -> Vec3:
    """Normalize a vector to unit length.

    A zero-length input yields NaN components; callers are responsible for
    passing non-degenerate vectors.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return v / length(v)


def reflect(v: Vec3, n: Vec3) -> Vec3:
    """Reflect a vector about a normal.

    Args:
        v: Direction pointing away from the surface (e.g. towards the viewer).
        n: The unit surface normal.

    Returns:
        The normalized mirror direction, also pointing away from the surface.
    """
    return normalize(2.0 * dot(n, v) * n - v)


def refract(v: Vec3, n: Vec3, cos_theta_i: float, eta: float) -> Vec3 | None:
    """Refract a vector through a surface using Snell's law.

    Args:
        v: Direction pointing away from the surface on the incident side.
        n: Unit normal on the incident side.
        cos_theta_i: Cosine of the incident angle, ``dot(n, v)``.
        eta: Ratio of refractive indices (transmitted / incident).

    Returns:
        The normalized transmitted direction, or None on total internal
        reflection.
    """
    f = 1.0 - (1.0 - cos_theta_i * cos_theta_i) / (eta * eta)
    if f < 0.0:
        return None
    return normalize(-v / eta - (math.sqrt(f) - cos_theta_i / eta) * n)
