"""Scene module for scene files, lights and object construction.

Components:
    config: YAML scene parsing into configuration dataclasses
    lights: Point and spot lights
    scene: Validated Scene with camera and object factories
    intersection: Closest-hit query over a list of objects
    cornell_box: Built-in demonstration scene
"""

from .config import SceneConfig, SceneError, load_scene_config
from .cornell_box import create_cornell_box_scene
from .intersection import intersect_scene
from .lights import PointLight, SpotLight
from .scene import Scene

__all__ = [
    "SceneConfig",
    "SceneError",
    "load_scene_config",
    "create_cornell_box_scene",
    "intersect_scene",
    "PointLight",
    "SpotLight",
    "Scene",
]
