"""Sphere primitive with analytic ray-sphere intersection.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic ``a*t^2 + b*t + c = 0`` with:
    a = dot(direction, direction)
    b = 2 * dot(direction, origin - center)
    c = dot(origin - center, origin - center) - radius^2

Example:
    >>> from arrt.core.ray import Range, Ray, vec3
    >>> from arrt.geometry.sphere import Sphere
    >>> sphere = Sphere(center=vec3(0, 0, 0), radius=1.0, material_id=0)
    >>> hit = sphere.intersect(Ray(vec3(0, 0, 5), vec3(0, 0, -1)), Range())
    >>> hit.t
    4.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from arrt.core.ray import Range, Ray, Vec3, dot, in_range, normalize
from arrt.geometry.aabb import AABB
from arrt.geometry.primitive import Surfel


@dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        material_id: Material identifier reported by hits.
    """

    center: Vec3
    radius: float
    material_id: int = 0

    def bbox(self) -> AABB:
        return AABB(self.center - self.radius, self.center + self.radius)

    def centroid(self) -> Vec3:
        return self.center

    def intersect(self, ray: Ray, t_range: Range) -> Surfel | None:
        """Test for ray-sphere intersection.

        The nearer root is preferred; if it lies behind the origin the far
        root is used instead (origin inside the sphere). The chosen root
        must lie strictly inside ``t_range``.

        Args:
            ray: The ray to test.
            t_range: Open interval of acceptable ``t`` values.

        Returns:
            A Surfel with an outward normal, or None on a miss.
        """
        v = ray.origin - self.center
        a = dot(ray.direction, ray.direction)
        b = 2.0 * dot(ray.direction, v)
        c = dot(v, v) - self.radius * self.radius

        disc = b * b - 4.0 * a * c
        if disc < 0.0 or a == 0.0:
            return None

        sqrt_d = math.sqrt(disc)
        t = (-b - sqrt_d) / (2.0 * a)
        if t < 0.0:
            t = (-b + sqrt_d) / (2.0 * a)
            if t < 0.0:
                return None

        if not in_range(t_range, t):
            return None

        point = ray.point_at(t)
        return Surfel(
            t=t,
            point=point,
            normal=normalize(point - self.center),
            material_id=self.material_id,
        )
