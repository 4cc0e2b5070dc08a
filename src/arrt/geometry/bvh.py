"""Bounding volume hierarchy over bounded objects.

The tree is built once by sorting objects on one centroid axis, splitting
at the median and recursing on each half with the next axis. A Bvh node is
itself a Primitive, so a whole hierarchy can sit in the scene's object list
next to unbounded objects such as planes.

Example:
    >>> from arrt.core.ray import Range, Ray, vec3
    >>> from arrt.geometry.bvh import Bvh
    >>> from arrt.geometry.sphere import Sphere
    >>> spheres = [Sphere(vec3(x, 0, 0), 0.5) for x in range(8)]
    >>> bvh = Bvh(spheres)
    >>> bvh.intersect(Ray(vec3(3, 0, 5), vec3(0, 0, -1)), Range()).t
    4.5
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from arrt.core.ray import Range, Ray, Vec3
from arrt.geometry.aabb import AABB, merge, merge_all
from arrt.geometry.primitive import Primitive, Surfel

logger = logging.getLogger(__name__)


class Bvh:
    """A BVH node: either a leaf with at most one object or two children.

    Attributes:
        left: Left subtree (internal nodes only).
        right: Right subtree (internal nodes only).
        objects: Objects stored in a leaf (empty for internal nodes).
    """

    def __init__(self, objects: Sequence[Primitive], axis: int = 0) -> None:
        """Build a BVH.

        Args:
            objects: Bounded objects to partition. Every object must return
                a box from ``bbox()``.
            axis: Centroid axis used for the first split.

        Raises:
            ValueError: If an object is unbounded.
        """
        ordered = sorted(objects, key=lambda obj: obj.centroid()[axis])

        self.left: Bvh | None = None
        self.right: Bvh | None = None
        self.objects: list[Primitive] = []

        if len(ordered) <= 1:
            self.objects = ordered
            boxes = []
            for obj in ordered:
                box = obj.bbox()
                if box is None:
                    raise ValueError(f"Cannot place unbounded object {obj!r} in a BVH")
                boxes.append(box)
            self._bbox = merge_all(boxes)
            logger.debug("BVH leaf with %d objects, bbox %s..%s", len(ordered), self._bbox.min, self._bbox.max)
        else:
            next_axis = (axis + 1) % 3
            mid = len(ordered) // 2
            self.left = Bvh(ordered[:mid], next_axis)
            self.right = Bvh(ordered[mid:], next_axis)
            self._bbox = merge(self.left.bbox(), self.right.bbox())

    @property
    def is_leaf(self) -> bool:
        return self.left is None

    def depth(self) -> int:
        """Height of the tree; a single leaf has depth 1."""
        if self.is_leaf:
            return 1
        return 1 + max(self.left.depth(), self.right.depth())

    def bbox(self) -> AABB:
        return self._bbox

    def centroid(self) -> Vec3:
        return self._bbox.center()

    def intersect(self, ray: Ray, t_range: Range) -> Surfel | None:
        """Nearest hit among the objects in this subtree.

        Both children are searched with the incoming range; the node's own
        box test only prunes and never narrows it. Ties between children
        go to the left child.
        """
        if self._bbox.intersect(ray, t_range) is None:
            return None

        if self.is_leaf:
            current = t_range.copy()
            result = None
            for obj in self.objects:
                hit = obj.intersect(ray, current)
                if hit is not None:
                    current.max = hit.t
                    result = hit
            return result

        left = self.left.intersect(ray, t_range)
        right = self.right.intersect(ray, t_range)
        if left is None:
            return right
        if right is None:
            return left
        return left if left.t <= right.t else right
