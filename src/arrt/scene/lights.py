"""Point and spot lights.

Both light types expose the same small interface used by the shader:
``direction_from(point)`` (unnormalized vector from a surface point to the
light), ``intensity_at(l)`` for a unit direction ``l`` from the surface to
the light, and ``diffuse``/``specular`` colors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from arrt.core.ray import Vec3, dot, normalize


class Light(Protocol):
    position: Vec3

    def direction_from(self, point: Vec3) -> Vec3: ...

    def intensity_at(self, l: Vec3) -> float: ...

    @property
    def diffuse_color(self) -> Vec3: ...

    @property
    def specular_color(self) -> Vec3: ...


@dataclass
class PointLight:
    """Omnidirectional light with separate ambient/diffuse/specular colors.

    The ambient color is kept for scene files that set it; the shader uses
    the scene-wide ambient term instead.
    """

    position: Vec3
    ambient: Vec3
    diffuse: Vec3
    specular: Vec3

    def direction_from(self, point: Vec3) -> Vec3:
        return self.position - point

    def intensity_at(self, l: Vec3) -> float:
        return 1.0

    @property
    def diffuse_color(self) -> Vec3:
        return self.diffuse

    @property
    def specular_color(self) -> Vec3:
        return self.specular


@dataclass
class SpotLight:
    """Cone-shaped light with a smooth falloff towards the cutoff angle.

    Attributes:
        position: Light position.
        direction: Axis of the cone, pointing away from the light.
        angle: Cutoff half-angle in degrees.
        sharpness: Falloff exponent; larger values concentrate the beam.
        color: Used for both diffuse and specular contributions.
    """

    position: Vec3
    direction: Vec3
    angle: float
    sharpness: float
    color: Vec3

    def __post_init__(self) -> None:
        self.direction = normalize(np.asarray(self.direction, dtype=np.float64))

    def direction_from(self, point: Vec3) -> Vec3:
        return self.position - point

    def intensity_at(self, l: Vec3) -> float:
        """``cos(pi/2 * phi/cutoff) ** sharpness`` inside the cone, else 0.

        Args:
            l: Unit vector from the surface point towards the light.
        """
        cutoff = math.radians(self.angle)
        cos_phi = max(-1.0, min(1.0, dot(-l, self.direction)))
        phi = math.acos(cos_phi)
        if phi > cutoff or cutoff <= 0.0:
            return 0.0
        return math.cos((math.pi / 2.0) * (phi / cutoff)) ** self.sharpness

    @property
    def diffuse_color(self) -> Vec3:
        return self.color

    @property
    def specular_color(self) -> Vec3:
        return self.color
