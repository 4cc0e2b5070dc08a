"""Two-pass threaded renderer.

This module turns a Scene into a Framebuffer:

    1. Primary pass: one ray per pixel. Image rows are split into disjoint
       chunks that a thread pool renders in parallel; each chunk has its
       own TraceContext and writes only its own rows.
    2. Antialiasing pass: starts after every primary chunk has finished.
       Each pixel is adaptively supersampled from the primary image (read
       only) into a second framebuffer.

Per-chunk statistics are merged with ``TraceStats.combine`` once a pass
completes. Every pixel depends only on the scene and the primary image, so
the output does not depend on the number of workers.

Example:
    >>> from arrt.core.renderer import Renderer, RenderSettings
    >>> from arrt.scene.cornell_box import create_cornell_box_scene
    >>> renderer = Renderer(create_cornell_box_scene(width=64, height=64))
    >>> framebuffer = renderer.render()
    >>> framebuffer.pixels.shape
    (64, 64, 3)
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from arrt.core.framebuffer import Framebuffer
from arrt.core.integrator import MAX_DEPTH
from arrt.core.supersample import AdaptivePixel, min_quad_size
from arrt.core.tracer import RayTracer, TraceStats

logger = logging.getLogger(__name__)

# Callback receives (pass name, rows finished, total rows)
ProgressCallback = Callable[[str, int, int], None]

# Chunks per worker; more chunks than workers evens out uneven rows.
CHUNKS_PER_WORKER = 4


def _default_workers() -> int:
    return os.cpu_count() or 1


@dataclass
class RenderSettings:
    """Renderer options.

    Attributes:
        sampling_depth: Antialiasing level, 0 (finest) to 2 (no subdivision).
        workers: Number of worker threads.
        max_depth: Reflection/refraction recursion limit.
    """

    sampling_depth: int = 0
    workers: int = field(default_factory=_default_workers)
    max_depth: int = MAX_DEPTH

    def __post_init__(self) -> None:
        min_quad_size(self.sampling_depth)
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")


def row_chunks(height: int, count: int) -> list[range]:
    """Split ``range(height)`` into at most ``count`` contiguous, disjoint ranges."""
    count = max(1, min(count, height))
    base, extra = divmod(height, count)
    chunks = []
    start = 0
    for i in range(count):
        size = base + (1 if i < extra else 0)
        chunks.append(range(start, start + size))
        start += size
    return chunks


class Renderer:
    """Renders one scene with the two-pass scheme.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        stats: Statistics merged across workers, per pass.
    """

    def __init__(self, scene, settings: RenderSettings | None = None) -> None:
        """Prepare the tracer (camera, objects, BVH).

        Args:
            scene: The Scene to render.
            settings: Render options; defaults to RenderSettings().

        Raises:
            FileNotFoundError: If a mesh or patch file is missing.
        """
        self.settings = settings or RenderSettings()
        setup_start = time.perf_counter()
        self.tracer = RayTracer(scene, max_depth=self.settings.max_depth)
        logger.info("Setup time: %.3fs", time.perf_counter() - setup_start)
        self._width = scene.width
        self._height = scene.height
        self.stats: dict[str, TraceStats] = {}

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def render(self, callback: ProgressCallback | None = None) -> Framebuffer:
        """Run both passes and return the antialiased image.

        Args:
            callback: Optional progress callback, called from the calling
                thread after each chunk completes.

        Returns:
            The final framebuffer.
        """
        begin = time.perf_counter()
        primary = Framebuffer(self.width, self.height)
        self.stats["primary"] = self._run_pass(
            "primary", lambda rows, ctx: self._primary_rows(rows, ctx, primary), callback
        )
        logger.info("Total tracing time: %.3fs", time.perf_counter() - begin)

        final = primary.copy()
        self.stats["antialias"] = self._run_pass(
            "antialias",
            lambda rows, ctx: self._antialias_rows(rows, ctx, primary, final),
            callback,
        )

        for name, stats in self.stats.items():
            stats.log_stats(name)
        logger.info("Total render time: %.3fs", time.perf_counter() - begin)
        return final

    def total_stats(self) -> TraceStats:
        total = TraceStats()
        for stats in self.stats.values():
            total = total.combine(stats)
        return total

    # =========================================================================
    # Passes
    # =========================================================================

    def _run_pass(self, name: str, work, callback: ProgressCallback | None) -> TraceStats:
        """Run ``work(rows, context)`` over all row chunks and merge statistics.

        Returns only after every chunk has finished.
        """
        chunks = row_chunks(self.height, self.settings.workers * CHUNKS_PER_WORKER)
        total = TraceStats()
        done_rows = 0

        def run(rows: range) -> tuple[range, TraceStats]:
            context = self.tracer.context()
            work(rows, context)
            return rows, context.stats

        with ThreadPoolExecutor(max_workers=self.settings.workers) as pool:
            futures = [pool.submit(run, rows) for rows in chunks]
            for future in as_completed(futures):
                rows, stats = future.result()
                total = total.combine(stats)
                done_rows += len(rows)
                if callback is not None:
                    callback(name, done_rows, self.height)
        return total

    def _primary_rows(self, rows: range, context, framebuffer: Framebuffer) -> None:
        for y in rows:
            for x in range(self.width):
                framebuffer.set_color(x, y, context.sample_point(x, y))

    def _antialias_rows(
        self,
        rows: range,
        context,
        primary: Framebuffer,
        final: Framebuffer,
    ) -> None:
        """Supersample the pixels in ``rows``.

        The top row and right column have no quad above/right of them and
        keep their primary color.
        """
        depth = self.settings.sampling_depth
        for y in rows:
            if y == 0:
                continue
            for x in range(self.width - 1):
                pixel = AdaptivePixel(x, y)
                final.set_color(x, y, pixel.sample(context, primary, depth))


def render_scene(
    scene,
    sampling_depth: int = 0,
    workers: int | None = None,
    max_depth: int = MAX_DEPTH,
) -> Framebuffer:
    """Render a scene with default settings.

    Args:
        scene: The Scene to render.
        sampling_depth: Antialiasing level, 0 (finest) to 2.
        workers: Worker threads; defaults to the CPU count.
        max_depth: Reflection/refraction recursion limit.

    Returns:
        The final framebuffer.
    """
    settings = RenderSettings(
        sampling_depth=sampling_depth,
        workers=workers if workers is not None else _default_workers(),
        max_depth=max_depth,
    )
    return Renderer(scene, settings).render()
