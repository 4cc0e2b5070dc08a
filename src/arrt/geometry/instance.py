"""Transformed mesh instances.

An Instance pairs a handle into a MeshLibrary with a Transform. Rays are
mapped into object space with the inverse matrix, intersected against the
shared mesh, and the hit is mapped back: the point through the forward
matrix and the normal through the inverse-transpose, which keeps normals
perpendicular under non-uniform scale.

The object-space direction is deliberately left unnormalized. An affine map
sends ``o + t*d`` to ``o' + t*d'`` with the same ``t``, so the world-space
``t_range`` can be passed straight through.
"""

from __future__ import annotations

import logging

import numpy as np

from arrt.core.matrix import transform_point, transform_vector, transpose
from arrt.core.ray import Range, Ray, Vec3, in_range, normalize
from arrt.core.transform import Transform
from arrt.geometry.aabb import AABB
from arrt.geometry.mesh import MeshLibrary
from arrt.geometry.primitive import Surfel

logger = logging.getLogger(__name__)


def recompute_t(ray: Ray, point: Vec3) -> float:
    """Ray parameter of a world-space point known to lie on ``ray``.

    Divides the displacement along the axis where the direction is
    largest in magnitude; a tiny component would only divide rounding
    noise.
    """
    axis = int(np.argmax(np.abs(ray.direction)))
    return float((point[axis] - ray.origin[axis]) / ray.direction[axis])


class Instance:
    """A mesh from a MeshLibrary placed in the world by a Transform."""

    def __init__(
        self,
        library: MeshLibrary,
        handle: int,
        material_id: int,
        transform: Transform | None = None,
    ) -> None:
        self._library = library
        self._handle = handle
        self._material_id = material_id
        transform = transform or Transform()
        self._forward = transform.mat4()
        self._inverse = transform.inverse()
        self._normal_matrix = transpose(self._inverse)
        self._bbox = library.get(handle).bbox().transform(self._forward)
        logger.debug("Instance of mesh %d bbox %s..%s", handle, self._bbox.min, self._bbox.max)

    def bbox(self) -> AABB:
        return self._bbox

    def centroid(self) -> Vec3:
        return self._bbox.center()

    def intersect(self, ray: Ray, t_range: Range) -> Surfel | None:
        local = Ray(
            origin=transform_point(self._inverse, ray.origin),
            direction=transform_vector(self._inverse, ray.direction),
            depth=ray.depth,
        )
        hit = self._library.get(self._handle).intersect(local, t_range, self._material_id)
        if hit is None:
            return None

        point = transform_point(self._forward, hit.point)
        normal = normalize(transform_vector(self._normal_matrix, hit.normal))
        t = recompute_t(ray, point)
        if not np.isfinite(t) or not in_range(t_range, t):
            return None
        return Surfel(t=t, point=point, normal=normal, material_id=self._material_id)
