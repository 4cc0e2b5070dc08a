"""Axis-aligned bounding boxes.

Boxes support merging, slab-method ray intersection and re-bounding under
an affine transform. The empty box (``AABB.empty()``) has ``min = +MAX`` and
``max = -MAX`` so that merging it with any real box yields that box.

Example:
    >>> from arrt.core.ray import Range, Ray, vec3
    >>> from arrt.geometry.aabb import AABB
    >>> box = AABB(vec3(-1, -1, -1), vec3(1, 1, 1))
    >>> box.intersect(Ray(vec3(0, 0, 5), vec3(0, 0, -1)), Range())
    4.0
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product

import numpy as np

from arrt.core.matrix import Mat4, transform_points
from arrt.core.ray import FLOAT_MAX, Range, Ray, Vec3, nearly_zero, vec3


@dataclass
class AABB:
    """Axis-aligned box given by its minimum and maximum corners."""

    min: Vec3
    max: Vec3

    @classmethod
    def empty(cls) -> AABB:
        """The additive identity for :func:`merge`."""
        return cls(
            vec3(FLOAT_MAX, FLOAT_MAX, FLOAT_MAX),
            vec3(-FLOAT_MAX, -FLOAT_MAX, -FLOAT_MAX),
        )

    @classmethod
    def from_points(cls, points) -> AABB:
        """Tightest box around an (N, 3) array of points."""
        pts = np.asarray(points, dtype=np.float64)
        if len(pts) == 0:
            return cls.empty()
        return cls(pts.min(axis=0), pts.max(axis=0))

    def is_empty(self) -> bool:
        return bool(np.any(self.min > self.max))

    def center(self) -> Vec3:
        return (self.min + self.max) / 2.0

    def corners(self) -> list[Vec3]:
        """All eight corner points."""
        lo, hi = self.min, self.max
        return [
            vec3(x, y, z)
            for x, y, z in product((lo[0], hi[0]), (lo[1], hi[1]), (lo[2], hi[2]))
        ]

    def transform(self, m: Mat4) -> AABB:
        """Axis-aligned box enclosing this box after transformation by ``m``.

        An oriented transform of a box is not axis-aligned, so all eight
        corners are projected and the componentwise extrema taken.
        """
        if self.is_empty():
            return AABB.empty()
        return AABB.from_points(transform_points(m, np.array(self.corners())))

    def intersect(self, ray: Ray, t_range: Range) -> float | None:
        """Slab-method ray/box test.

        Args:
            ray: The ray to test.
            t_range: Interval the entry/exit parameters are clipped to.

        Returns:
            The entry ``t`` (or the exit ``t`` when the origin is inside the
            box), or None if the ray misses.
        """
        if self.is_empty():
            return None

        t_near = t_range.min
        t_far = t_range.max

        for axis in (0, 1, 2):
            d = ray.direction[axis]
            o = ray.origin[axis]
            lo = self.min[axis]
            hi = self.max[axis]

            if nearly_zero(d):
                # Parallel to this slab: either always inside it or never.
                if o < lo or o > hi:
                    return None
                continue

            t1 = (lo - o) / d
            t2 = (hi - o) / d
            if t1 > t2:
                t1, t2 = t2, t1
            if t1 > t_near:
                t_near = t1
            if t2 < t_far:
                t_far = t2
            if t_near > t_far or t_far < 0.0:
                return None

        if t_near > t_far:
            return None
        return float(t_far if t_near < 0.0 else t_near)


def merge(a: AABB, b: AABB) -> AABB:
    """Tightest box containing both ``a`` and ``b``."""
    return AABB(np.minimum(a.min, b.min), np.maximum(a.max, b.max))


def merge_all(boxes) -> AABB:
    result = AABB.empty()
    for box in boxes:
        result = merge(result, box)
    return result
