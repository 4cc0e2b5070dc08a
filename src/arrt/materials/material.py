"""Phong/Whitted surface materials and the material table.

Materials are immutable once a scene is loaded. Objects refer to them by an
integer identifier assigned by the MaterialMap; names are only used while
the scene is being built.

Example:
    >>> from arrt.materials.material import Material, MaterialMap
    >>> table = MaterialMap([Material(name="red", diffuse=(1.0, 0.0, 0.0))])
    >>> table.get_material(table.get_material_id("red")).kd
    1.0
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any

import numpy as np
import yaml

from arrt.core.ray import Vec3

logger = logging.getLogger(__name__)

_COLOR_FIELDS = ("ambient", "diffuse", "specular", "transmissive")
_SCALAR_FIELDS = ("ka", "kd", "ks", "kr", "kt", "ior", "shininess", "highlight")


def parse_color(value: Any) -> Vec3:
    """Convert ``[r, g, b]`` or ``{r:, g:, b:}`` into an RGB float array.

    Raises:
        ValueError: If the value is not a three-component color.
    """
    if isinstance(value, dict):
        try:
            value = (value["r"], value["g"], value["b"])
        except KeyError as e:
            raise ValueError(f"Color mapping is missing component {e}") from e
    try:
        color = np.array(value, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid color {value!r}") from e
    if color.shape != (3,):
        raise ValueError(f"Color must have 3 components, got {value!r}")
    return color


def black() -> Vec3:
    return np.zeros(3, dtype=np.float64)


@dataclass(frozen=True, eq=False)
class Material:
    """Surface description for Phong shading with reflection and refraction.

    Attributes:
        name: Unique name used by scene objects.
        ambient: Ambient reflectance color.
        diffuse: Diffuse reflectance color.
        specular: Specular color; also tints mirror reflection.
        transmissive: Color filter applied to transmitted light.
        ka: Ambient coefficient.
        kd: Diffuse coefficient.
        ks: Specular coefficient.
        kr: Mirror reflection coefficient; 0 disables reflection rays.
        kt: Transmission coefficient; 0 disables refraction rays.
        ior: Index of refraction of the material's interior.
        shininess: Phong exponent for the reflected highlight.
        highlight: Phong exponent for the highlight seen through a
            transmissive surface; 0 disables it.
    """

    name: str = ""
    ambient: Vec3 = field(default_factory=black)
    diffuse: Vec3 = field(default_factory=black)
    specular: Vec3 = field(default_factory=black)
    transmissive: Vec3 = field(default_factory=black)
    ka: float = 1.0
    kd: float = 1.0
    ks: float = 1.0
    kr: float = 0.0
    kt: float = 0.0
    ior: float = 1.0
    shininess: float = 1.0
    highlight: float = 0.0

    def __post_init__(self) -> None:
        for name in _COLOR_FIELDS:
            object.__setattr__(self, name, parse_color(getattr(self, name)))
        for name in _SCALAR_FIELDS:
            object.__setattr__(self, name, float(getattr(self, name)))
        if self.ior <= 0.0:
            raise ValueError(f"Material {self.name!r} needs a positive ior, got {self.ior}")

    @property
    def is_transmissive(self) -> bool:
        return self.kt > 0.0

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        for name in _COLOR_FIELDS:
            result[name] = [float(c) for c in getattr(self, name)]
        for name in _SCALAR_FIELDS:
            result[name] = getattr(self, name)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Material:
        """Build a Material from a mapping; absent keys keep their defaults.

        Raises:
            ValueError: On unknown keys or malformed values.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Material entry must be a mapping, got {data!r}")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown material keys: {sorted(unknown)}")
        kwargs = dict(data)
        for name in _SCALAR_FIELDS:
            if name in kwargs:
                try:
                    kwargs[name] = float(kwargs[name])
                except (TypeError, ValueError) as e:
                    raise ValueError(f"Material field {name!r} must be a number") from e
        return cls(**kwargs)


class MaterialMap:
    """Owns the material table and maps names to identifiers.

    Identifiers are list indices, so identifier lookups on the trace path
    are O(1).
    """

    def __init__(self, materials: list[Material] | None = None) -> None:
        self._materials: list[Material] = []
        self._name_to_id: dict[str, int] = {}
        for material in materials or []:
            self.add(material)

    def __len__(self) -> int:
        return len(self._materials)

    def __contains__(self, name: str) -> bool:
        return name in self._name_to_id

    def __iter__(self):
        return iter(self._materials)

    def add(self, material: Material) -> int:
        """Register a material and return its identifier.

        Raises:
            ValueError: If a material with the same name already exists.
        """
        if material.name in self._name_to_id:
            raise ValueError(f"Duplicate material name: {material.name!r}")
        material_id = len(self._materials)
        self._materials.append(material)
        self._name_to_id[material.name] = material_id
        return material_id

    def get_material_id(self, name: str) -> int:
        """Identifier for ``name``.

        Raises:
            KeyError: If no material has that name.
        """
        return self._name_to_id[name]

    def get_material(self, material_id: int) -> Material:
        return self._materials[material_id]

    def names(self) -> list[str]:
        return [m.name for m in self._materials]

    @classmethod
    def from_list(cls, entries: list[dict[str, Any]]) -> MaterialMap:
        if not isinstance(entries, list):
            raise ValueError("Material table must be a list of mappings")
        return cls([Material.from_dict(entry) for entry in entries])


def load_materials(path: str | os.PathLike) -> MaterialMap:
    """Load a YAML material table (a list of material mappings).

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If an entry is malformed.
    """
    path = os.fspath(path)
    logger.info("Loading materials from %s", path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    materials = MaterialMap.from_list(data or [])
    logger.info("Loaded %d materials: %s", len(materials), ", ".join(materials.names()))
    return materials
