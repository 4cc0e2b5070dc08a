"""Output utilities for rendered images."""

from .export import compute_rmse, image_to_uint8, load_png, save_png, save_png_from_array

__all__ = ["compute_rmse", "image_to_uint8", "load_png", "save_png", "save_png_from_array"]
