"""3x3/4x4 matrix helpers and angle types.

Matrices are float64 NumPy arrays in row-major order, multiplied with
column vectors (``m @ v``). Every affine builder has an exact analytic
inverse so instance transforms never go through a numerical inversion.

Example:
    >>> from arrt.core.matrix import Degree, rotate_y, transform_point
    >>> from arrt.core.ray import vec3
    >>> m = rotate_y(Degree(90.0).to_radians())
    >>> transform_point(m, vec3(1.0, 0.0, 0.0)).round(6)
    array([ 0.,  0., -1.])
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from arrt.core.ray import Vec3

Mat3 = npt.NDArray[np.float64]
Mat4 = npt.NDArray[np.float64]


# =============================================================================
# Angles
# =============================================================================


@dataclass(frozen=True)
class Radian:
    """An angle in radians."""

    value: float

    def to_degrees(self) -> Degree:
        return Degree(math.degrees(self.value))


@dataclass(frozen=True)
class Degree:
    """An angle in degrees."""

    value: float

    def to_radians(self) -> Radian:
        return Radian(math.radians(self.value))


# =============================================================================
# Mat3
# =============================================================================


def mat3(rows) -> Mat3:
    """Build a 3x3 matrix from three rows."""
    return np.array(rows, dtype=np.float64).reshape(3, 3)


def determinant(m: Mat3) -> float:
    """Determinant of a 3x3 matrix by cofactor expansion along the first row.

    Expanded by hand rather than through ``numpy.linalg.det`` so that the
    triangle solver gets the exact same rounding for every call.
    """
    return float(
        m[0, 0] * (m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1])
        - m[0, 1] * (m[1, 0] * m[2, 2] - m[1, 2] * m[2, 0])
        + m[0, 2] * (m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0])
    )


# =============================================================================
# Mat4 builders
# =============================================================================


def identity() -> Mat4:
    return np.eye(4, dtype=np.float64)


def translate(t: Vec3) -> Mat4:
    m = identity()
    m[0:3, 3] = t
    return m


def itranslate(t: Vec3) -> Mat4:
    """Inverse of :func:`translate`."""
    return translate(-np.asarray(t, dtype=np.float64))


def scale(s: Vec3) -> Mat4:
    m = identity()
    m[0, 0], m[1, 1], m[2, 2] = s[0], s[1], s[2]
    return m


def iscale(s: Vec3) -> Mat4:
    """Inverse of :func:`scale`. Zero scale factors produce inf entries."""
    with np.errstate(divide="ignore"):
        return scale(1.0 / np.asarray(s, dtype=np.float64))


def rotate_x(angle: Radian) -> Mat4:
    c, s = math.cos(angle.value), math.sin(angle.value)
    m = identity()
    m[1, 1], m[1, 2] = c, -s
    m[2, 1], m[2, 2] = s, c
    return m


def rotate_y(angle: Radian) -> Mat4:
    c, s = math.cos(angle.value), math.sin(angle.value)
    m = identity()
    m[0, 0], m[0, 2] = c, s
    m[2, 0], m[2, 2] = -s, c
    return m


def rotate_z(angle: Radian) -> Mat4:
    c, s = math.cos(angle.value), math.sin(angle.value)
    m = identity()
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


# A rotation's inverse is its transpose.


def irotate_x(angle: Radian) -> Mat4:
    return rotate_x(angle).T.copy()


def irotate_y(angle: Radian) -> Mat4:
    return rotate_y(angle).T.copy()


def irotate_z(angle: Radian) -> Mat4:
    return rotate_z(angle).T.copy()


def transpose(m: Mat4) -> Mat4:
    return m.T.copy()


# =============================================================================
# Applying matrices
# =============================================================================


def transform_point(m: Mat4, p: Vec3) -> Vec3:
    """Apply an affine matrix to a point (homogeneous w = 1)."""
    return m[0:3, 0:3] @ p + m[0:3, 3]


def transform_vector(m: Mat4, v: Vec3) -> Vec3:
    """Apply an affine matrix to a direction (homogeneous w = 0)."""
    return m[0:3, 0:3] @ v


def transform_points(m: Mat4, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Apply an affine matrix to an (N, 3) array of points."""
    return points @ m[0:3, 0:3].T + m[0:3, 3]
