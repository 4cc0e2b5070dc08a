"""Infinite plane primitive.

Planes are unbounded: they report no bounding box and are kept out of the
BVH, tested directly alongside it.
"""

from __future__ import annotations

from dataclasses import dataclass

from arrt.core.ray import Range, Ray, Vec3, dot, in_range, normalize
from arrt.geometry.primitive import Surfel


@dataclass
class Plane:
    """An infinite plane through ``point`` with unit ``normal``."""

    point: Vec3
    normal: Vec3
    material_id: int = 0

    def __post_init__(self) -> None:
        self.normal = normalize(self.normal)

    def bbox(self) -> None:
        return None

    def centroid(self) -> Vec3:
        return self.point

    def intersect(self, ray: Ray, t_range: Range) -> Surfel | None:
        """Intersect the plane, flipping the normal to face the ray origin."""
        n_dot_d = dot(self.normal, ray.direction)
        if n_dot_d == 0.0:
            return None

        t = -(dot(self.normal, ray.origin) - dot(self.normal, self.point)) / n_dot_d
        if not in_range(t_range, t):
            return None

        normal = -self.normal if n_dot_d > 0.0 else self.normal
        return Surfel(
            t=t,
            point=ray.point_at(t),
            normal=normal,
            material_id=self.material_id,
        )
