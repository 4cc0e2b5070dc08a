"""Camera models with ray generation."""

from .pinhole import Camera, CameraConfig

__all__ = ["Camera", "CameraConfig"]
