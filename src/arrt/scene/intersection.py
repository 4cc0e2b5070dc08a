"""Scene-level ray intersection.

The scene's object list is short (the unbounded planes plus one BVH), so
the closest hit is found by testing every object in order and narrowing
the range after each hit.
"""

from __future__ import annotations

from collections.abc import Sequence

from arrt.core.ray import FLOAT_MAX, Range, Ray
from arrt.geometry.primitive import Primitive, Surfel

# Smallest t accepted for primary and secondary rays.
T_MIN = 1e-6


def default_range() -> Range:
    return Range(T_MIN, FLOAT_MAX)


def intersect_scene(
    objects: Sequence[Primitive],
    ray: Ray,
    t_range: Range | None = None,
) -> Surfel | None:
    """Closest hit over a list of objects.

    Args:
        objects: Objects to test, in order.
        ray: The ray to trace.
        t_range: Interval of acceptable ``t``; defaults to ``(1e-6, MAX)``.

    Returns:
        The nearest Surfel, or None if nothing is hit. When two objects
        report the same ``t`` the earlier one wins.
    """
    current = default_range() if t_range is None else t_range.copy()
    result = None
    for obj in objects:
        hit = obj.intersect(ray, current)
        if hit is not None:
            current.max = hit.t
            result = hit
    return result
