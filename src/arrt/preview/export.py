"""Image export utilities for rendered framebuffers.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from arrt.preview.export import save_png
    >>> from arrt.core.renderer import render_scene
    >>> from arrt.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> framebuffer = render_scene(create_cornell_box_scene(64, 64))
    >>> save_png(framebuffer, "output.png")
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from arrt.core.framebuffer import Framebuffer, image_to_uint8

logger = logging.getLogger(__name__)


def save_png_from_array(image: npt.NDArray[np.floating], filepath: str | os.PathLike) -> None:
    """Save a float image array of shape (H, W, 3) as an 8-bit PNG."""
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath, format="PNG")
    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], os.fspath(filepath))


def save_png(framebuffer: Framebuffer, filepath: str | os.PathLike) -> None:
    """Save a framebuffer as an 8-bit PNG.

    Args:
        framebuffer: The rendered framebuffer.
        filepath: Output file path.
    """
    save_png_from_array(framebuffer.pixels, filepath)


def load_png(filepath: str | os.PathLike) -> npt.NDArray[np.float64]:
    """Load a PNG as a float image in [0, 1] of shape (H, W, 3)."""
    with PILImage.open(filepath) as pil_image:
        data = np.asarray(pil_image.convert("RGB"), dtype=np.float64)
    return data / 255.0


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
