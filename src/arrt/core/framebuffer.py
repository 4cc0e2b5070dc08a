"""Row-major RGB float framebuffer."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from arrt.core.ray import Vec3


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image in [0, 1] to uint8.

    Values are clamped and mapped with ``round(255 * c)``; halves round up,
    not to even.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    clipped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    return np.floor(clipped * 255.0 + 0.5).astype(np.uint8)


class Framebuffer:
    """Width x height image of linear RGB floats.

    Pixel ``(x, y)`` is stored at ``pixels[y, x]``; row 0 is the top of the
    image.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Framebuffer size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels: npt.NDArray[np.float64] = np.zeros((height, width, 3), dtype=np.float64)

    def get_color(self, x: int, y: int) -> Vec3:
        return self.pixels[y, x].copy()

    def set_color(self, x: int, y: int, color: Vec3) -> None:
        self.pixels[y, x] = color

    def copy(self) -> Framebuffer:
        result = Framebuffer(self.width, self.height)
        result.pixels[...] = self.pixels
        return result

    def to_uint8(self) -> npt.NDArray[np.uint8]:
        return image_to_uint8(self.pixels)
