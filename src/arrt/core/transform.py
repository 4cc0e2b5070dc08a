"""Affine transform built from translation, XYZ rotation and scale."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from arrt.core.matrix import (
    Degree,
    Mat4,
    irotate_x,
    irotate_y,
    irotate_z,
    iscale,
    itranslate,
    rotate_x,
    rotate_y,
    rotate_z,
    scale,
    translate,
)
from arrt.core.ray import Vec3, as_vec3, vec3


@dataclass
class Transform:
    """Translate/rotate/scale transform applied as ``T * Rx * Ry * Rz * S``.

    Attributes:
        translate: Translation in world units.
        rotate: Rotation about X, Y and Z in degrees.
        scale: Per-axis scale factors.
    """

    translate: Vec3 = field(default_factory=lambda: vec3(0.0, 0.0, 0.0))
    rotate: Vec3 = field(default_factory=lambda: vec3(0.0, 0.0, 0.0))
    scale: Vec3 = field(default_factory=lambda: vec3(1.0, 1.0, 1.0))

    def mat4(self) -> Mat4:
        """Forward (object to world) matrix."""
        rx, ry, rz = (Degree(float(a)).to_radians() for a in self.rotate)
        rotation = rotate_x(rx) @ rotate_y(ry) @ rotate_z(rz)
        return translate(self.translate) @ rotation @ scale(self.scale)

    def inverse(self) -> Mat4:
        """Exact inverse (world to object) matrix."""
        rx, ry, rz = (Degree(float(a)).to_radians() for a in self.rotate)
        rotation = irotate_z(rz) @ irotate_y(ry) @ irotate_x(rx)
        return iscale(self.scale) @ rotation @ itranslate(self.translate)

    def is_identity(self) -> bool:
        return (
            not np.any(self.translate)
            and not np.any(self.rotate)
            and bool(np.all(self.scale == 1.0))
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "translate": [float(v) for v in self.translate],
            "rotate": [float(v) for v in self.rotate],
            "scale": [float(v) for v in self.scale],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Transform:
        """Create a Transform from a mapping; missing keys keep their defaults."""
        data = data or {}
        result = cls()
        if "translate" in data:
            result.translate = as_vec3(data["translate"])
        if "rotate" in data:
            result.rotate = as_vec3(data["rotate"])
        if "scale" in data:
            result.scale = as_vec3(data["scale"])
        return result
