"""Bicubic Bezier patch files and their tessellation.

Patch files start with the number of patches. Each patch is a ``3 3``
degree line followed by 16 control points, one ``x y z`` per line, in
row-major order.
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt

from arrt.geometry.mesh import Mesh, compute_normals

logger = logging.getLogger(__name__)

Patch = npt.NDArray[np.float64]  # (4, 4, 3) control points


def parse_bpt(lines, name: str = "<bpt>") -> list[Patch]:
    """Parse the lines of a patch file into (4, 4, 3) control point arrays.

    Raises:
        ValueError: If the file is truncated or malformed.
    """
    rows = [line.strip() for line in lines if line.strip()]
    if not rows:
        raise ValueError(f"{name}: empty patch file")
    try:
        count = int(rows[0])
    except ValueError as e:
        raise ValueError(f"{name}: expected patch count, got {rows[0]!r}") from e

    patches: list[Patch] = []
    pos = 1
    for index in range(count):
        if pos + 17 > len(rows):
            raise ValueError(f"{name}: patch {index} is truncated")
        if rows[pos].split() != ["3", "3"]:
            raise ValueError(f"{name}: patch {index} is not bicubic: {rows[pos]!r}")
        points = []
        for row in rows[pos + 1 : pos + 17]:
            parts = row.split()
            if len(parts) != 3:
                raise ValueError(f"{name}: bad control point {row!r}")
            points.append([float(p) for p in parts])
        patches.append(np.array(points, dtype=np.float64).reshape(4, 4, 3))
        pos += 17
    return patches


def read_bpt(path: str | os.PathLike) -> list[Patch]:
    path = os.fspath(path)
    logger.info("Loading patches from %s", path)
    with open(path, encoding="utf-8") as f:
        return parse_bpt(f, name=os.path.basename(path))


def bernstein(u: float) -> npt.NDArray[np.float64]:
    """Cubic Bernstein basis weights at ``u``."""
    v = 1.0 - u
    return np.array([v**3, 3.0 * u * v**2, 3.0 * u**2 * v, u**3])


def evaluate_patch(patch: Patch, u: float, v: float) -> npt.NDArray[np.float64]:
    """Point on a patch: each control row is blended along u, then the four
    resulting curve points are blended along v."""
    curve = np.einsum("j,ijk->ik", bernstein(u), patch)
    return bernstein(v) @ curve


def tessellate_bpatch(
    patches: list[Patch],
    slices: int,
    flip_normals: bool = False,
    name: str = "bpatch",
) -> Mesh:
    """Tessellate patches into one Mesh.

    Each patch is sampled on a ``(slices + 1) x (slices + 1)`` grid and
    every grid cell becomes two triangles. Vertex normals are averaged from
    the faces.

    Raises:
        ValueError: If ``slices`` is less than 1.
    """
    if slices < 1:
        raise ValueError(f"Patch tessellation needs slices >= 1, got {slices}")

    vertices = []
    triangles = []
    s = slices + 1
    for patch in patches:
        offset = len(vertices)
        for i in range(s):
            u = i / slices
            for j in range(s):
                vertices.append(evaluate_patch(patch, u, j / slices))
        for i in range(slices):
            for j in range(slices):
                i0 = offset + i * s + j
                i1 = offset + i * s + j + 1
                i2 = offset + (i + 1) * s + j + 1
                i3 = offset + (i + 1) * s + j
                triangles.append((i0, i1, i2))
                triangles.append((i2, i3, i0))

    vertex_array = np.array(vertices, dtype=np.float64).reshape(-1, 3)
    triangle_array = np.array(triangles, dtype=np.int64).reshape(-1, 3)
    mesh = Mesh(
        vertices=vertex_array,
        triangles=triangle_array,
        normals=compute_normals(vertex_array, triangle_array, flip=flip_normals),
        name=name,
    )
    logger.debug("Tessellated %s: %d patches, %d triangles", name, len(patches), mesh.triangle_count)
    return mesh
