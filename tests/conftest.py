"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules: small material
tables, in-memory scenes and a helper for writing scene files to a
temporary directory.
"""

from __future__ import annotations

import numpy as np
import pytest
import yaml


def basic_material_entries() -> list[dict]:
    """Material mappings shared by the scene fixtures."""
    return [
        {
            "name": "white",
            "ambient": [0.2, 0.2, 0.2],
            "diffuse": [0.8, 0.8, 0.8],
            "specular": [0.0, 0.0, 0.0],
            "ks": 0.0,
        },
        {
            "name": "mirror",
            "ambient": [0.0, 0.0, 0.0],
            "diffuse": [0.0, 0.0, 0.0],
            "specular": [1.0, 1.0, 1.0],
            "ks": 0.0,
            "kr": 1.0,
        },
        {
            "name": "glass",
            "ambient": [0.0, 0.0, 0.0],
            "diffuse": [0.0, 0.0, 0.0],
            "specular": [1.0, 1.0, 1.0],
            "transmissive": [1.0, 1.0, 1.0],
            "ks": 0.0,
            "kt": 1.0,
            "ior": 1.5,
        },
    ]


def basic_scene_dict(**overrides) -> dict:
    """A small valid scene mapping; keyword arguments replace top-level keys."""
    data = {
        "width": 16,
        "height": 12,
        "bgcolor": [0.1, 0.2, 0.3],
        "ambient": [0.0, 0.0, 0.0],
        "camera": {
            "eye": [0.0, 1.0, 6.0],
            "look_at": [0.0, 1.0, 0.0],
            "up": [0.0, 1.0, 0.0],
            "dist": 1.0,
            "fov": 60.0,
        },
        "objects": [
            {"plane": {"point": [0, 0, 0], "normal": [0, 1, 0], "material": "white"}},
            {"sphere": {"center": [-1, 1, 0], "radius": 1, "material": "white"}},
            {"sphere": {"center": [1.2, 0.7, 0.5], "radius": 0.7, "material": "mirror"}},
        ],
        "lights": [
            {
                "point": {
                    "position": [3, 5, 4],
                    "ambient": [0, 0, 0],
                    "diffuse": [1, 1, 1],
                    "specular": [1, 1, 1],
                }
            }
        ],
        "materials": basic_material_entries(),
    }
    data.update(overrides)
    return data


@pytest.fixture
def scene_dict():
    """Factory for scene mappings."""
    return basic_scene_dict


@pytest.fixture
def basic_scene():
    """A small in-memory scene with a floor, a diffuse and a mirror sphere."""
    from arrt.scene.config import SceneConfig
    from arrt.scene.scene import Scene

    return Scene(SceneConfig.from_dict(basic_scene_dict()))


@pytest.fixture
def write_scene(tmp_path):
    """Write a scene mapping (and optional extra files) into tmp_path.

    Returns a function ``write(data, files=None) -> path`` where ``files``
    maps relative file names to text contents.
    """

    def write(data: dict, files: dict[str, str] | None = None):
        for name, text in (files or {}).items():
            target = tmp_path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        path = tmp_path / "scene.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return write


@pytest.fixture
def rng():
    """Seeded random generator for reproducible randomized tests."""
    return np.random.default_rng(42)
