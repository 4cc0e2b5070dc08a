"""Ray tracer front end: camera rays, trace contexts and statistics.

A RayTracer is built once per render from a Scene. It owns the camera, the
object list and the integrator, all read-only while rendering. Each worker
creates its own TraceContext, which samples rays and keeps private
statistics; the statistics of all contexts are merged afterwards with
:meth:`TraceStats.combine`.

Example:
    >>> from arrt.core.tracer import RayTracer
    >>> from arrt.scene.cornell_box import create_cornell_box_scene
    >>> tracer = RayTracer(create_cornell_box_scene())
    >>> context = tracer.context()
    >>> color = context.sample_point(16, 16)
    >>> context.stats.ray_count
    1
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from arrt.core.integrator import MAX_DEPTH, Integrator
from arrt.core.ray import Ray, Vec3

logger = logging.getLogger(__name__)


@dataclass
class TraceStats:
    """Per-context counters for primary rays.

    Attributes:
        ray_count: Primary rays traced.
        hit_count: Primary rays that hit a surface.
        trace_sum: Total wall time spent tracing, in seconds.
        trace_max: Longest single trace, in seconds.
    """

    ray_count: int = 0
    hit_count: int = 0
    trace_sum: float = 0.0
    trace_max: float = 0.0

    def combine(self, other: TraceStats) -> TraceStats:
        """Merge two sets of counters (associative and commutative)."""
        return TraceStats(
            ray_count=self.ray_count + other.ray_count,
            hit_count=self.hit_count + other.hit_count,
            trace_sum=self.trace_sum + other.trace_sum,
            trace_max=max(self.trace_max, other.trace_max),
        )

    @property
    def hit_percent(self) -> float:
        if self.ray_count == 0:
            return 0.0
        return 100.0 * self.hit_count / self.ray_count

    @property
    def trace_avg(self) -> float:
        if self.ray_count == 0:
            return 0.0
        return self.trace_sum / self.ray_count

    def log_stats(self, label: str = "trace") -> None:
        logger.info(
            "%s: ray count: %d, hit count: %d, hit %%: %.2f, sum: %.3fs, avg: %.1fus, max: %.1fus",
            label,
            self.ray_count,
            self.hit_count,
            self.hit_percent,
            self.trace_sum,
            self.trace_avg * 1e6,
            self.trace_max * 1e6,
        )


class RayTracer:
    """Camera, objects and integrator for one scene."""

    def __init__(self, scene, max_depth: int = MAX_DEPTH) -> None:
        """Build the camera and objects.

        Args:
            scene: The Scene to render.
            max_depth: Recursion limit for reflection and refraction.

        Raises:
            FileNotFoundError: If a mesh or patch file is missing.
        """
        self.scene = scene
        self.camera = scene.make_camera()
        self.objects = scene.make_objects()
        self.integrator = Integrator(scene, self.objects, max_depth=max_depth)

    def context(self) -> TraceContext:
        return TraceContext(self)


class TraceContext:
    """Per-worker sampling handle with private statistics."""

    def __init__(self, tracer: RayTracer) -> None:
        self.tracer = tracer
        self.stats = TraceStats()

    def sample_point(self, x: int, y: int) -> Vec3:
        """Color through integer pixel coordinates."""
        return self.trace_ray(self.tracer.camera.ray_at(float(x), float(y)))

    def sample_coord(self, x: float, y: float) -> Vec3:
        """Color through continuous pixel coordinates."""
        return self.trace_ray(self.tracer.camera.ray_at(x, y))

    def trace_ray(self, ray: Ray) -> Vec3:
        start = time.perf_counter()
        color, hit = self.tracer.integrator.trace(ray)
        elapsed = time.perf_counter() - start

        self.stats.ray_count += 1
        self.stats.trace_sum += elapsed
        if elapsed > self.stats.trace_max:
            self.stats.trace_max = elapsed
        if hit:
            self.stats.hit_count += 1
        return color
