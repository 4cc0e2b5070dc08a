"""Superquadric (superellipsoid) tessellation.

A superquadric with radii ``a`` and shape exponents ``e1`` (north/south)
and ``e2`` (east/west) is sampled on a latitude/longitude grid and turned
into an indexed triangle Mesh with analytic vertex normals:

    x = a.x * cos(theta)^e1 * cos(phi)^e2
    y = a.y * sin(theta)^e1
    z = a.z * cos(theta)^e1 * sin(phi)^e2

where ``f^e`` means ``sign(f) * |f|^e``. Normals use the same formula with
exponents ``2 - e1``/``2 - e2`` and inverse radii.
"""

from __future__ import annotations

import logging
import math

import numpy as np
import numpy.typing as npt

from arrt.core.ray import Vec3
from arrt.geometry.mesh import Mesh

logger = logging.getLogger(__name__)

THETA_START = -math.pi / 2.0
THETA_RANGE = math.pi
PHI_START = -math.pi
PHI_RANGE = 2.0 * math.pi


def signed_pow(f: npt.NDArray[np.float64], e: float) -> npt.NDArray[np.float64]:
    """``sign(f) * |f| ** e``, defined for negative bases."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.sign(f) * np.abs(f) ** e


def _surface(theta, phi, e1: float, e2: float, a: Vec3) -> npt.NDArray[np.float64]:
    cos_theta = signed_pow(np.cos(theta), e1)
    sin_theta = signed_pow(np.sin(theta), e1)
    cos_phi = signed_pow(np.cos(phi), e2)
    sin_phi = signed_pow(np.sin(phi), e2)
    with np.errstate(invalid="ignore"):
        return np.stack(
            [
                a[0] * cos_theta * cos_phi,
                a[1] * sin_theta,
                a[2] * cos_theta * sin_phi,
            ],
            axis=-1,
        )


def tessellate_superquadric(
    a: Vec3,
    e1: float,
    e2: float,
    vslices: int,
    hslices: int,
    name: str = "superquadric",
) -> Mesh:
    """Tessellate a superquadric into a Mesh.

    Args:
        a: Radii along x, y and z.
        e1: North/south shape exponent.
        e2: East/west shape exponent.
        vslices: Number of latitude bands (rows of quads).
        hslices: Number of longitude segments; the grid wraps around.
        name: Mesh name used in log messages.

    Returns:
        A Mesh with ``(vslices + 1) * hslices`` vertices and
        ``2 * vslices * hslices`` triangles.

    Raises:
        ValueError: If the slice counts or radii are invalid.
    """
    if vslices < 1 or hslices < 3:
        raise ValueError(
            f"Superquadric needs vslices >= 1 and hslices >= 3, got {vslices}/{hslices}"
        )
    a = np.asarray(a, dtype=np.float64)
    if np.any(a == 0.0):
        raise ValueError(f"Superquadric radii must be non-zero, got {a}")

    theta = THETA_START + np.arange(vslices + 1) * (THETA_RANGE / vslices)
    phi = PHI_START + np.arange(hslices) * (PHI_RANGE / hslices)
    theta_grid, phi_grid = np.meshgrid(theta, phi, indexing="ij")

    vertices = _surface(theta_grid, phi_grid, e1, e2, a).reshape(-1, 3)
    normals = _surface(theta_grid, phi_grid, 2.0 - e1, 2.0 - e2, 1.0 / a).reshape(-1, 3)

    # Poles and exponents above 2 can produce 0 * inf; point those normals
    # straight along the y axis.
    bad = ~np.all(np.isfinite(normals), axis=1)
    normals[bad] = 0.0
    normals[bad, 1] = np.where(vertices[bad, 1] < 0.0, -1.0, 1.0)
    lengths = np.linalg.norm(normals, axis=1)
    zero = lengths == 0.0
    normals[zero, 1] = np.where(vertices[zero, 1] < 0.0, -1.0, 1.0)
    lengths[zero] = 1.0
    normals /= lengths[:, None]

    triangles = []
    for v in range(vslices):
        for h in range(hslices):
            h_next = (h + 1) % hslices
            bottom_left = v * hslices + h
            bottom_right = v * hslices + h_next
            top_left = (v + 1) * hslices + h
            top_right = (v + 1) * hslices + h_next
            triangles.append((bottom_left, bottom_right, top_left))
            triangles.append((top_right, top_left, bottom_right))

    mesh = Mesh(
        vertices=vertices,
        triangles=np.array(triangles, dtype=np.int64),
        normals=normals,
        name=name,
    )
    box = mesh.bbox()
    logger.debug("Tessellated %s: %d triangles, bbox %s..%s", name, mesh.triangle_count, box.min, box.max)
    return mesh
