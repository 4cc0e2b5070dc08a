"""Hit record and the common contract shared by every traceable object.

Every object the tracer can intersect (sphere, plane, mesh instance, BVH
node) exposes the same three operations: ``bbox()``, ``centroid()`` and
``intersect(ray, range)``. The set of implementers is closed and small, so
the contract is expressed as a ``typing.Protocol`` rather than an abstract
base class that would invite open-ended subclassing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from arrt.core.ray import Range, Ray, Vec3

if TYPE_CHECKING:
    from arrt.geometry.aabb import AABB

# Distance secondary rays are pushed off a surface along its normal.
DEFAULT_N_OFFSET = 1e-4


@dataclass
class Surfel:
    """Record of a ray-surface intersection.

    Attributes:
        t: Ray parameter of the hit.
        point: World-space hit point.
        normal: World-space unit normal.
        material_id: Identifier of the surface material in the MaterialMap.
        n_offset: Small positive distance used to bias secondary-ray
            origins off the surface.
    """

    t: float
    point: Vec3
    normal: Vec3
    material_id: int
    n_offset: float = DEFAULT_N_OFFSET


class Primitive(Protocol):
    """Intersection contract shared by spheres, planes, instances and BVHs."""

    def bbox(self) -> AABB | None:
        """World-space bounding box, or None for unbounded objects."""
        ...

    def centroid(self) -> Vec3:
        """Representative point used to order objects during BVH builds."""
        ...

    def intersect(self, ray: Ray, t_range: Range) -> Surfel | None:
        """Nearest hit strictly inside ``t_range``, or None."""
        ...
