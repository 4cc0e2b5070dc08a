"""Adaptive supersampling of one pixel.

The pixel at ``(x, y)`` is the quad spanned by the pass-one samples at
``(x, y)``, ``(x + 1, y)``, ``(x + 1, y - 1)`` and ``(x, y - 1)``. If the
four corner colors agree within :data:`TOLERANCE` the pixel is their
average; otherwise the quad is split into four quadrants and each quadrant
is treated the same way, down to a minimum quad size chosen by the sampling
depth setting.

Samples live in a 5x5 stash covering the quad at quarter-pixel spacing, so
corners shared by neighbouring quadrants are traced only once. Stash row 0
is the top edge (``y - 1``) and row 4 the bottom edge (``y``); column 0 is
the left edge (``x``) and column 4 the right edge (``x + 1``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from arrt.core.ray import Vec3

if TYPE_CHECKING:
    from arrt.core.framebuffer import Framebuffer
    from arrt.core.tracer import TraceContext

# Largest per-channel difference between corners that still counts as equal.
TOLERANCE = 0.05

STASH_SIZE = 5
FULL = STASH_SIZE - 1  # quad size in stash cells

# sampling depth -> smallest quad size (in quarter pixels)
MIN_QUAD_SIZE = {0: 1, 1: 2, 2: 4}


def min_quad_size(sampling_depth: int) -> int:
    """Smallest quad size for a sampling depth: 0 -> 1/4 pixel, 2 -> whole pixel.

    Raises:
        ValueError: If ``sampling_depth`` is not 0, 1 or 2.
    """
    try:
        return MIN_QUAD_SIZE[sampling_depth]
    except KeyError as e:
        raise ValueError(f"sampling_depth must be 0, 1 or 2, got {sampling_depth}") from e


def colors_differ(a: Vec3, b: Vec3) -> bool:
    return bool(np.any(np.abs(a - b) > TOLERANCE))


def samples_differ(samples: list[Vec3]) -> bool:
    """Compare the corners of a quad (a, b, e, d) along its four edges."""
    a, b, e, d = samples
    return (
        colors_differ(a, b)
        or colors_differ(a, d)
        or colors_differ(e, d)
        or colors_differ(e, b)
    )


def average_color(samples: list[Vec3]) -> Vec3:
    return (samples[0] + samples[1] + samples[2] + samples[3]) / 4.0


class AdaptivePixel:
    """Sample cache and recursive subdivision for one pixel."""

    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y
        self.stash: list[list[Vec3 | None]] = [[None] * STASH_SIZE for _ in range(STASH_SIZE)]
        self.traced = 0

    def sample(
        self,
        context: TraceContext,
        framebuffer: Framebuffer,
        sampling_depth: int,
    ) -> Vec3:
        """Antialiased color of the pixel.

        Args:
            context: Trace context used for any extra samples.
            framebuffer: Pass-one image; only read.
            sampling_depth: 0 (finest) to 2 (no subdivision).

        Returns:
            The averaged RGB color.
        """
        min_size = min_quad_size(sampling_depth)
        x, y = self.x, self.y
        self.stash[FULL][0] = framebuffer.get_color(x, y)
        self.stash[FULL][FULL] = framebuffer.get_color(x + 1, y)
        self.stash[0][FULL] = framebuffer.get_color(x + 1, y - 1)
        self.stash[0][0] = framebuffer.get_color(x, y - 1)
        return self._subdivide(context, float(x), float(y), FULL, 0, FULL, min_size)

    def _lookup(self, context: TraceContext, row: int, col: int, x: float, y: float) -> Vec3:
        cached = self.stash[row][col]
        if cached is None:
            cached = context.sample_coord(x, y)
            self.stash[row][col] = cached
            self.traced += 1
        return cached

    def _subdivide(
        self,
        context: TraceContext,
        x: float,
        y: float,
        row: int,
        col: int,
        size: int,
        min_size: int,
    ) -> Vec3:
        """Color of the quad whose bottom-left corner is ``(x, y)``.

        Args:
            context: Trace context for new samples.
            x: Bottom-left pixel x coordinate.
            y: Bottom-left pixel y coordinate.
            row: Stash row of the bottom-left corner.
            col: Stash column of the bottom-left corner.
            size: Quad side length in stash cells (4, 2 or 1).
            min_size: Stop subdividing at this size.
        """
        step = size / FULL
        samples = [
            self._lookup(context, row, col, x, y),
            self._lookup(context, row, col + size, x + step, y),
            self._lookup(context, row - size, col + size, x + step, y - step),
            self._lookup(context, row - size, col, x, y - step),
        ]

        if size <= min_size or not samples_differ(samples):
            return average_color(samples)

        half = size // 2
        half_step = half / FULL
        quadrants = [
            self._subdivide(context, x, y, row, col, half, min_size),
            self._subdivide(context, x + half_step, y, row, col + half, half, min_size),
            self._subdivide(
                context, x + half_step, y - half_step, row - half, col + half, half, min_size
            ),
            self._subdivide(context, x, y - half_step, row - half, col, half, min_size),
        ]
        return average_color(quadrants)
