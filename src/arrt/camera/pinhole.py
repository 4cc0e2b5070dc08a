"""Pinhole camera model for perspective projection ray generation.

The camera builds an orthonormal basis from the view parameters:
- forward: points from eye toward look_at
- left: ``normalize(cross(up, forward))``, pointing towards the image's left edge
- up: ``normalize(cross(forward, left))``

The image plane sits ``dist`` units in front of the eye and is ``2 * dist *
tan(fov / 2)`` units wide. Pixel ``(0, 0)`` is the top-left corner; x grows
to the right and y grows downwards. Pixel coordinates are continuous, so
the supersampler can ask for rays between pixel centers.

Example:
    >>> from arrt.camera.pinhole import Camera, CameraConfig
    >>> from arrt.core.ray import vec3
    >>> config = CameraConfig(
    ...     eye=vec3(0.0, 0.0, 5.0),
    ...     look_at=vec3(0.0, 0.0, 0.0),
    ...     up=vec3(0.0, 1.0, 0.0),
    ...     dist=1.0,
    ...     fov=60.0,
    ... )
    >>> camera = Camera(config, 64, 48)
    >>> ray = camera.ray_at(31.5, 23.5)  # Ray through image center
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from arrt.core.ray import Ray, Vec3, as_vec3, cross, normalize

logger = logging.getLogger(__name__)


# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class CameraConfig:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        eye: Camera position in world space.
        look_at: Point the camera is looking at.
        up: Approximate up direction for camera orientation.
        dist: Distance from the eye to the image plane.
        fov: Horizontal field of view in degrees.
    """

    eye: Vec3
    look_at: Vec3
    up: Vec3
    dist: float = 1.0
    fov: float = 60.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "eye": [float(v) for v in self.eye],
            "look_at": [float(v) for v in self.look_at],
            "up": [float(v) for v in self.up],
            "dist": self.dist,
            "fov": self.fov,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CameraConfig:
        """Create a CameraConfig from a mapping.

        Raises:
            ValueError: If a required key is missing or malformed.
        """
        missing = [k for k in ("eye", "look_at", "up") if k not in data]
        if missing:
            raise ValueError(f"Camera is missing required keys: {missing}")
        return cls(
            eye=as_vec3(data["eye"]),
            look_at=as_vec3(data["look_at"]),
            up=as_vec3(data["up"]),
            dist=float(data.get("dist", 1.0)),
            fov=float(data.get("fov", 60.0)),
        )


# =============================================================================
# Camera
# =============================================================================


class Camera:
    """Immutable pinhole camera that maps pixel coordinates to rays."""

    def __init__(self, config: CameraConfig, hres: int, vres: int) -> None:
        """Derive the view basis and image plane.

        Args:
            config: View parameters.
            hres: Image width in pixels.
            vres: Image height in pixels.

        Raises:
            ValueError: If the resolution is smaller than 2x2 or the view
                direction is parallel to ``up``.
        """
        if hres < 2 or vres < 2:
            raise ValueError(f"Camera resolution must be at least 2x2, got {hres}x{vres}")

        forward = normalize(config.look_at - config.eye)
        left = normalize(cross(normalize(config.up), forward))
        up = normalize(cross(forward, left))
        if not all(map(math.isfinite, (*forward, *left, *up))):
            raise ValueError("Camera eye, look_at and up do not define a view basis")

        half_width = config.dist * math.tan(math.radians(config.fov / 2.0))
        self.eye = config.eye
        self.forward = forward
        self.left = left
        self.up = up
        self.hres = hres
        self.vres = vres
        self.sj = 2.0 * half_width
        self.sk = self.sj * (vres / hres)
        self.top_left = (
            config.eye
            + config.dist * forward
            + (self.sj / 2.0) * left
            + (self.sk / 2.0) * up
        )
        logger.debug(
            "Camera eye=%s forward=%s left=%s up=%s plane=%.4fx%.4f",
            self.eye,
            forward,
            left,
            up,
            self.sj,
            self.sk,
        )

    def ray_at(self, x: float, y: float) -> Ray:
        """Primary ray through continuous pixel coordinates ``(x, y)``.

        Args:
            x: Horizontal pixel coordinate, 0 at the left edge.
            y: Vertical pixel coordinate, 0 at the top edge.

        Returns:
            A unit-direction ray from the eye with depth 0.
        """
        target = (
            self.top_left
            - self.sj * (x / (self.hres - 1)) * self.left
            - self.sk * (y / (self.vres - 1)) * self.up
        )
        return Ray(origin=self.eye, direction=normalize(target - self.eye), depth=0)
