"""Scene configuration parsed from YAML.

A scene file is a mapping with the image size, background and ambient
colors, a camera block, and lists of objects and lights. Objects and lights
are single-key mappings whose key names the variant::

    width: 320
    height: 240
    bgcolor: [0.1, 0.1, 0.1]
    camera: {eye: [0, 1, 6], look_at: [0, 1, 0], up: [0, 1, 0], dist: 1, fov: 60}
    objects:
      - sphere: {center: [0, 1, 0], radius: 1, material: mirror}
      - plane: {point: [0, 0, 0], normal: [0, 1, 0], material: floor}
      - model: {mesh: bunny.smf, material: clay, transform: {scale: [2, 2, 2]}}
    lights:
      - point: {position: [5, 5, 5], ambient: [0, 0, 0], diffuse: [1, 1, 1], specular: [1, 1, 1]}

Materials come from an inline ``materials`` list or, when absent, from a
``materials.yaml`` file next to the scene file.

Example:
    >>> from arrt.scene.config import load_scene_config
    >>> config = load_scene_config("scenes/spheres.yaml")  # doctest: +SKIP
    >>> config.width, config.height  # doctest: +SKIP
    (320, 240)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Union

import numpy as np
import yaml

from arrt.camera.pinhole import CameraConfig
from arrt.core.ray import Vec3, as_vec3
from arrt.core.transform import Transform
from arrt.materials.material import parse_color
from arrt.scene.lights import PointLight, SpotLight

logger = logging.getLogger(__name__)

MATERIALS_FILE = "materials.yaml"


class SceneError(ValueError):
    """Raised when a scene description is invalid."""


# =============================================================================
# Object configurations
# =============================================================================


@dataclass
class SphereConfig:
    center: Vec3
    radius: float
    material: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SphereConfig:
        return cls(
            center=_vec(data, "center"),
            radius=_float(data, "radius"),
            material=_str(data, "material"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sphere": {
                "center": _list(self.center),
                "radius": self.radius,
                "material": self.material,
            }
        }


@dataclass
class PlaneConfig:
    point: Vec3
    normal: Vec3
    material: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlaneConfig:
        normal = _vec(data, "normal")
        if not np.any(normal):
            raise SceneError("Plane normal must be non-zero")
        return cls(
            point=_vec(data, "point"),
            normal=normal,
            material=_str(data, "material"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "plane": {
                "point": _list(self.point),
                "normal": _list(self.normal),
                "material": self.material,
            }
        }


@dataclass
class ModelConfig:
    """A mesh file placed with a transform. ``mesh`` is relative to mesh_dir."""

    mesh: str
    material: str
    transform: Transform = field(default_factory=Transform)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModelConfig:
        return cls(
            mesh=_str(data, "mesh"),
            material=_str(data, "material"),
            transform=_transform(data),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": {
                "mesh": self.mesh,
                "material": self.material,
                "transform": self.transform.to_dict(),
            }
        }


@dataclass
class SuperQuadricConfig:
    a: Vec3
    e1: float
    e2: float
    vslices: int
    hslices: int
    material: str
    transform: Transform = field(default_factory=Transform)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SuperQuadricConfig:
        if _int(data, "vslices") < 1 or _int(data, "hslices") < 3:
            raise SceneError("Superquadric needs vslices >= 1 and hslices >= 3")
        a = _vec(data, "a")
        if not np.all(a):
            raise SceneError(f"Superquadric radii must be non-zero, got {_list(a)}")
        return cls(
            a=a,
            e1=_float(data, "e1"),
            e2=_float(data, "e2"),
            vslices=_int(data, "vslices"),
            hslices=_int(data, "hslices"),
            material=_str(data, "material"),
            transform=_transform(data),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "superquadric": {
                "a": _list(self.a),
                "e1": self.e1,
                "e2": self.e2,
                "vslices": self.vslices,
                "hslices": self.hslices,
                "material": self.material,
                "transform": self.transform.to_dict(),
            }
        }


@dataclass
class BPatchConfig:
    """Bezier patch file tessellated into a mesh. ``fpath`` is relative to mesh_dir."""

    fpath: str
    material: str
    slices: int
    flip_normals: bool = False
    transform: Transform = field(default_factory=Transform)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BPatchConfig:
        if _int(data, "slices") < 1:
            raise SceneError("Bezier patch needs slices >= 1")
        return cls(
            fpath=_str(data, "fpath"),
            material=_str(data, "material"),
            slices=_int(data, "slices"),
            flip_normals=bool(data.get("flip_normals", False)),
            transform=_transform(data),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "bpatch": {
                "fpath": self.fpath,
                "material": self.material,
                "slices": self.slices,
                "flip_normals": self.flip_normals,
                "transform": self.transform.to_dict(),
            }
        }


ObjectConfig = Union[SphereConfig, PlaneConfig, ModelConfig, SuperQuadricConfig, BPatchConfig]
LightConfig = Union[PointLight, SpotLight]

_OBJECT_TYPES = {
    "sphere": SphereConfig,
    "plane": PlaneConfig,
    "model": ModelConfig,
    "superquadric": SuperQuadricConfig,
    "bpatch": BPatchConfig,
}


def _point_light(data: dict[str, Any]) -> PointLight:
    return PointLight(
        position=_vec(data, "position"),
        ambient=_color(data, "ambient", default=(0.0, 0.0, 0.0)),
        diffuse=_color(data, "diffuse", default=(1.0, 1.0, 1.0)),
        specular=_color(data, "specular", default=(1.0, 1.0, 1.0)),
    )


def _spot_light(data: dict[str, Any]) -> SpotLight:
    direction = _vec(data, "direction")
    if not np.any(direction):
        raise SceneError("Spot light direction must be non-zero")
    return SpotLight(
        position=_vec(data, "position"),
        direction=direction,
        angle=_float(data, "angle"),
        sharpness=_float(data, "sharpness", default=1.0),
        color=_color(data, "color", default=(1.0, 1.0, 1.0)),
    )


_LIGHT_TYPES = {
    "point": _point_light,
    "spot": _spot_light,
}


def _tagged(entry: Any, kinds: dict[str, Any], what: str):
    if not isinstance(entry, dict) or len(entry) != 1:
        raise SceneError(f"Each {what} must be a single-key mapping, got {entry!r}")
    tag, body = next(iter(entry.items()))
    factory = kinds.get(str(tag).lower())
    if factory is None:
        raise SceneError(f"Unknown {what} type {tag!r}; expected one of {sorted(kinds)}")
    if not isinstance(body, dict):
        raise SceneError(f"{what.capitalize()} {tag!r} must be a mapping")
    return factory(body)


def parse_object(entry: Any) -> ObjectConfig:
    """Parse one tagged object entry such as ``{"sphere": {...}}``."""
    return _tagged(entry, {k: v.from_dict for k, v in _OBJECT_TYPES.items()}, "object")


def parse_light(entry: Any) -> LightConfig:
    """Parse one tagged light entry such as ``{"point": {...}}``."""
    return _tagged(entry, _LIGHT_TYPES, "light")


# =============================================================================
# Scene configuration
# =============================================================================


@dataclass
class SceneConfig:
    """Complete description of a scene.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        camera: View parameters.
        bgcolor: Color returned for rays that hit nothing.
        ambient: Scene-wide ambient light color.
        objects: Object configurations in file order.
        lights: Lights in file order.
        materials: Inline material table entries, or None to load
            ``materials.yaml`` from ``base_dir``.
        mesh_dir: Directory mesh and patch paths are relative to.
        base_dir: Directory of the scene file.
    """

    width: int
    height: int
    camera: CameraConfig
    bgcolor: Vec3 = field(default_factory=lambda: np.zeros(3))
    ambient: Vec3 = field(default_factory=lambda: np.ones(3))
    objects: list[ObjectConfig] = field(default_factory=list)
    lights: list[LightConfig] = field(default_factory=list)
    materials: list[dict[str, Any]] | None = None
    mesh_dir: str | None = None
    base_dir: str = "."

    def resolve_mesh_path(self, name: str) -> str:
        mesh_dir = self.mesh_dir if self.mesh_dir is not None else "."
        return os.path.join(self.base_dir, mesh_dir, name)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "width": self.width,
            "height": self.height,
            "bgcolor": _list(self.bgcolor),
            "ambient": _list(self.ambient),
            "camera": self.camera.to_dict(),
            "objects": [obj.to_dict() for obj in self.objects],
            "lights": [_light_to_dict(light) for light in self.lights],
        }
        if self.materials is not None:
            result["materials"] = self.materials
        if self.mesh_dir is not None:
            result["mesh_dir"] = self.mesh_dir
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: str = ".") -> SceneConfig:
        """Create a SceneConfig from a parsed YAML mapping.

        Args:
            data: The scene mapping.
            base_dir: Directory relative paths are resolved against.

        Raises:
            SceneError: If the description is malformed.
        """
        if not isinstance(data, dict):
            raise SceneError("Scene file must contain a mapping")
        if "camera" not in data or not isinstance(data["camera"], dict):
            raise SceneError("Scene requires a 'camera' mapping")
        try:
            camera = CameraConfig.from_dict(data["camera"])
        except ValueError as e:
            raise SceneError(f"Invalid camera: {e}") from e

        width = _int(data, "width")
        height = _int(data, "height")
        if width < 2 or height < 2:
            raise SceneError(f"Image must be at least 2x2 pixels, got {width}x{height}")

        materials = data.get("materials")
        if materials is not None and not isinstance(materials, list):
            raise SceneError("'materials' must be a list")

        objects = data.get("objects") or []
        lights = data.get("lights") or []
        if not isinstance(objects, list) or not isinstance(lights, list):
            raise SceneError("'objects' and 'lights' must be lists")

        return cls(
            width=width,
            height=height,
            camera=camera,
            bgcolor=_color(data, "bgcolor", default=(0.0, 0.0, 0.0)),
            ambient=_color(data, "ambient", default=(1.0, 1.0, 1.0)),
            objects=[parse_object(entry) for entry in objects],
            lights=[parse_light(entry) for entry in lights],
            materials=materials,
            mesh_dir=data.get("mesh_dir"),
            base_dir=base_dir,
        )


def load_scene_config(path: str | os.PathLike) -> SceneConfig:
    """Read and parse a YAML scene file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        SceneError: If the description is malformed.
    """
    path = os.fspath(path)
    logger.info("Loading scene from %s", path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    config = SceneConfig.from_dict(data, base_dir=os.path.dirname(os.path.abspath(path)))
    logger.info(
        "Scene %dx%d with %d objects and %d lights",
        config.width,
        config.height,
        len(config.objects),
        len(config.lights),
    )
    return config


# =============================================================================
# Field helpers
# =============================================================================


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise SceneError(f"Missing required key {key!r}")
    return data[key]


def _vec(data: dict[str, Any], key: str) -> Vec3:
    value = _require(data, key)
    if isinstance(value, dict):
        value = (value.get("x"), value.get("y"), value.get("z"))
    try:
        result = as_vec3(value)
    except (TypeError, ValueError) as e:
        raise SceneError(f"{key!r} must be a 3-component vector, got {value!r}") from e
    if not np.all(np.isfinite(result)):
        raise SceneError(f"{key!r} must be a 3-component vector, got {value!r}")
    return result


def _color(data: dict[str, Any], key: str, default=None) -> Vec3:
    if key not in data and default is not None:
        return np.array(default, dtype=np.float64)
    try:
        return parse_color(_require(data, key))
    except ValueError as e:
        raise SceneError(f"{key!r}: {e}") from e


def _float(data: dict[str, Any], key: str, default: float | None = None) -> float:
    if key not in data and default is not None:
        return default
    try:
        return float(_require(data, key))
    except (TypeError, ValueError) as e:
        raise SceneError(f"{key!r} must be a number") from e


def _int(data: dict[str, Any], key: str) -> int:
    value = _require(data, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SceneError(f"{key!r} must be an integer, got {value!r}")
    return value


def _str(data: dict[str, Any], key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise SceneError(f"{key!r} must be a string, got {value!r}")
    return value


def _transform(data: dict[str, Any]) -> Transform:
    try:
        return Transform.from_dict(data.get("transform"))
    except (TypeError, ValueError) as e:
        raise SceneError(f"Invalid transform: {e}") from e


def _list(v) -> list[float]:
    return [float(c) for c in v]


def _light_to_dict(light: LightConfig) -> dict[str, Any]:
    if isinstance(light, SpotLight):
        return {
            "spot": {
                "position": _list(light.position),
                "direction": _list(light.direction),
                "angle": light.angle,
                "sharpness": light.sharpness,
                "color": _list(light.color),
            }
        }
    return {
        "point": {
            "position": _list(light.position),
            "ambient": _list(light.ambient),
            "diffuse": _list(light.diffuse),
            "specular": _list(light.specular),
        }
    }
