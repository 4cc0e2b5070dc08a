"""Indexed triangle meshes, the mesh file loader and the mesh library.

A Mesh owns flat vertex/normal buffers and an (M, 3) array of vertex
indices. Ray/mesh intersection is a brute-force scan over every triangle;
acceleration happens between top-level objects in the BVH, not within a
single mesh. The scan is evaluated over all triangles at once with NumPy,
which gives the same answer as visiting triangles in order and narrowing
``t_range.max`` after each hit: the first triangle with the smallest ``t``
wins.

Mesh files use a small line-oriented text format::

    # comment
    v x y z        vertex position
    f i j k        triangle, 1-based vertex indices
    n a b c        vertex normal (optional, one per vertex)

Example:
    >>> from arrt.geometry.mesh import MeshLibrary
    >>> library = MeshLibrary()
    >>> handle = library.load("models/bunny.smf")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from arrt.core.ray import Range, Ray, normalize
from arrt.geometry.aabb import AABB
from arrt.geometry.primitive import Surfel

logger = logging.getLogger(__name__)

# Barycentric coordinates below this are rejected so that rays grazing a
# shared edge do not register on both neighbouring triangles.
BARYCENTRIC_EPSILON = 1e-6


# =============================================================================
# Mesh
# =============================================================================


def compute_normals(
    vertices: npt.NDArray[np.float64],
    triangles: npt.NDArray[np.int64],
    flip: bool = False,
) -> npt.NDArray[np.float64]:
    """Per-vertex normals as the normalized mean of adjacent face normals.

    Zero-area faces contribute nothing. Vertices not referenced by any
    usable face get a zero normal.

    Args:
        vertices: (N, 3) vertex positions.
        triangles: (M, 3) vertex indices.
        flip: Negate every normal (for inside-out tessellations).

    Returns:
        (N, 3) array of unit normals.
    """
    normals = np.zeros_like(vertices, dtype=np.float64)
    if len(triangles) == 0:
        return normals

    v0 = vertices[triangles[:, 0]]
    v1 = vertices[triangles[:, 1]]
    v2 = vertices[triangles[:, 2]]
    face = np.cross(v1 - v0, v2 - v0)
    lengths = np.linalg.norm(face, axis=1)
    usable = lengths > 0.0
    face[usable] /= lengths[usable, None]
    face[~usable] = 0.0

    for corner in range(3):
        np.add.at(normals, triangles[:, corner], face)

    lengths = np.linalg.norm(normals, axis=1)
    nonzero = lengths > 0.0
    normals[nonzero] /= lengths[nonzero, None]
    if flip:
        normals = -normals
    return normals


@dataclass
class Mesh:
    """Indexed triangle mesh with per-vertex normals.

    Attributes:
        vertices: (N, 3) float64 vertex positions.
        triangles: (M, 3) int64 vertex indices (0-based).
        normals: (N, 3) float64 unit vertex normals. Computed from the faces
            when not given.
        name: Source identifier, used in log messages.
    """

    vertices: npt.NDArray[np.float64]
    triangles: npt.NDArray[np.int64]
    normals: npt.NDArray[np.float64] | None = None
    name: str = "<mesh>"
    _edge1: npt.NDArray[np.float64] = field(init=False, repr=False)
    _edge2: npt.NDArray[np.float64] = field(init=False, repr=False)
    _v0: npt.NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.triangles = np.asarray(self.triangles, dtype=np.int64).reshape(-1, 3)
        if len(self.triangles) and (
            self.triangles.min() < 0 or self.triangles.max() >= len(self.vertices)
        ):
            raise ValueError(
                f"Mesh {self.name} references vertex indices outside "
                f"0..{len(self.vertices) - 1}"
            )
        if self.normals is None or len(self.normals) != len(self.vertices):
            self.normals = compute_normals(self.vertices, self.triangles)
        else:
            self.normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)

        # Columns of the Cramer system, shared by every ray.
        self._v0 = self.vertices[self.triangles[:, 0]]
        self._edge1 = self._v0 - self.vertices[self.triangles[:, 1]]
        self._edge2 = self._v0 - self.vertices[self.triangles[:, 2]]

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    def bbox(self) -> AABB:
        return AABB.from_points(self.vertices)

    def intersect(self, ray: Ray, t_range: Range, material_id: int = 0) -> Surfel | None:
        """Nearest triangle hit strictly inside ``t_range``.

        Evaluates Cramer's rule for all triangles at once. The determinants
        are written as scalar triple products of the system's columns.
        """
        if len(self.triangles) == 0:
            return None

        d = ray.direction
        s = self._v0 - ray.origin
        e1, e2 = self._edge1, self._edge2

        e2_x_d = np.cross(e2, d)
        with np.errstate(divide="ignore", invalid="ignore"):
            det_a = np.einsum("ij,ij->i", e1, e2_x_d)
            beta = np.einsum("ij,ij->i", s, e2_x_d) / det_a
            gamma = np.einsum("ij,ij->i", e1, np.cross(s, d)) / det_a
            t = np.einsum("ij,ij->i", e1, np.cross(e2, s)) / det_a

            valid = (
                (det_a != 0.0)
                & (beta >= BARYCENTRIC_EPSILON)
                & (gamma >= BARYCENTRIC_EPSILON)
                & (beta + gamma <= 1.0)
                & np.isfinite(t)
                & (t > t_range.min)
                & (t < t_range.max)
            )
        if not valid.any():
            return None

        candidates = np.flatnonzero(valid)
        best = candidates[np.argmin(t[candidates])]
        t_hit = float(t[best])
        b, g = float(beta[best]), float(gamma[best])
        alpha = max(0.0, 1.0 - b - g)
        i, j, k = self.triangles[best]
        normal = normalize(
            alpha * self.normals[i] + b * self.normals[j] + g * self.normals[k]
        )
        return Surfel(
            t=t_hit,
            point=ray.point_at(t_hit),
            normal=normal,
            material_id=material_id,
        )


# =============================================================================
# Loading
# =============================================================================


def parse_mesh(lines, name: str = "<mesh>") -> Mesh:
    """Build a Mesh from the lines of a mesh file.

    Raises:
        ValueError: If a ``v``, ``f`` or ``n`` record cannot be parsed.
    """
    vertices: list[tuple[float, float, float]] = []
    triangles: list[tuple[int, int, int]] = []
    normals: list[tuple[float, float, float]] = []

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) < 4:
            continue
        tag = parts[0]
        try:
            if tag == "v":
                vertices.append((float(parts[1]), float(parts[2]), float(parts[3])))
            elif tag == "f":
                triangles.append(
                    (int(parts[1]) - 1, int(parts[2]) - 1, int(parts[3]) - 1)
                )
            elif tag == "n":
                normals.append((float(parts[1]), float(parts[2]), float(parts[3])))
        except ValueError as e:
            raise ValueError(f"{name}:{lineno}: malformed '{tag}' record: {line!r}") from e

    return Mesh(
        vertices=np.array(vertices, dtype=np.float64).reshape(-1, 3),
        triangles=np.array(triangles, dtype=np.int64).reshape(-1, 3),
        normals=np.array(normals, dtype=np.float64).reshape(-1, 3) if normals else None,
        name=name,
    )


def load_mesh(path: str | os.PathLike) -> Mesh:
    """Load a mesh file from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is malformed.
    """
    path = os.fspath(path)
    logger.info("Loading mesh from %s", path)
    with open(path, encoding="utf-8") as f:
        mesh = parse_mesh(f, name=os.path.basename(path))
    logger.info(
        "Loaded mesh %s: %d vertices, %d triangles",
        mesh.name,
        len(mesh.vertices),
        mesh.triangle_count,
    )
    return mesh


class MeshLibrary:
    """Arena owning every mesh in a scene, addressed by integer handle.

    Instances hold a handle instead of a reference to shared mesh data.
    Files are loaded once; asking for the same path again returns the
    existing handle.
    """

    def __init__(self) -> None:
        self._meshes: list[Mesh] = []
        self._by_key: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._meshes)

    def add(self, mesh: Mesh, key: str | None = None) -> int:
        """Store a mesh and return its handle.

        Args:
            mesh: The mesh to store.
            key: Optional cache key; adding a second mesh under an existing
                key returns the existing handle.
        """
        if key is not None and key in self._by_key:
            return self._by_key[key]
        handle = len(self._meshes)
        self._meshes.append(mesh)
        if key is not None:
            self._by_key[key] = handle
        return handle

    def load(self, path: str | os.PathLike) -> int:
        key = os.path.abspath(os.fspath(path))
        if key in self._by_key:
            return self._by_key[key]
        return self.add(load_mesh(path), key=key)

    def get(self, handle: int) -> Mesh:
        return self._meshes[handle]
