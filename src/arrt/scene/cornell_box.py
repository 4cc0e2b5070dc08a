"""Cornell box demonstration scene.

This module provides a factory for a mirror-sphere-in-a-box scene built
entirely in memory:

- 5 walls forming an open box (left, right, back, floor, ceiling)
- Left wall: red diffuse
- Right wall: green diffuse
- Back, floor, ceiling: white diffuse
- A mirror sphere and a glass sphere
- One point light below the ceiling

The box spans -1..1 on x and z and 0..2 on y, with the camera outside the
open front looking in. Because the walls are planes the mirror sphere's
reflections bounce around the box indefinitely, which makes the scene a
convenient check that recursion stops at the depth limit.

Example:
    >>> from arrt.scene.cornell_box import create_cornell_box_scene
    >>> from arrt.core.renderer import render_scene
    >>> scene = create_cornell_box_scene(width=128, height=128)
    >>> framebuffer = render_scene(scene, sampling_depth=2)
"""

from __future__ import annotations

from dataclasses import dataclass

from arrt.camera.pinhole import CameraConfig
from arrt.core.ray import vec3
from arrt.materials.material import Material, MaterialMap
from arrt.scene.config import PlaneConfig, SceneConfig, SphereConfig
from arrt.scene.lights import PointLight
from arrt.scene.scene import Scene

# =============================================================================
# Cornell Box Parameters
# =============================================================================


@dataclass
class CornellBoxParams:
    """Parameters for configuring a Cornell box scene.

    All parameters have defaults matching the classic look.

    Attributes:
        light_color: RGB color of the point light.
        left_wall_color: RGB diffuse color of the left wall.
        right_wall_color: RGB diffuse color of the right wall.
        white_wall_color: RGB diffuse color of back wall, floor and ceiling.
        mirror_reflectance: ``kr`` of the mirror sphere.
        glass_ior: Index of refraction of the glass sphere.

    Example:
        >>> params = CornellBoxParams()
        >>> params.left_wall_color
        (0.65, 0.05, 0.05)

        >>> # Custom parameters
        >>> custom = CornellBoxParams(
        ...     light_color=(1.0, 0.9, 0.8),  # Warm light
        ...     left_wall_color=(0.2, 0.2, 0.8),  # Blue wall
        ... )
    """

    light_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    left_wall_color: tuple[float, float, float] = (0.65, 0.05, 0.05)
    right_wall_color: tuple[float, float, float] = (0.12, 0.45, 0.15)
    white_wall_color: tuple[float, float, float] = (0.73, 0.73, 0.73)
    mirror_reflectance: float = 0.9
    glass_ior: float = 1.5


# =============================================================================
# Cornell Box Constants
# =============================================================================

BOX_HALF_WIDTH = 1.0
BOX_HEIGHT = 2.0

AMBIENT_COLOR = (0.1, 0.1, 0.1)
BACKGROUND_COLOR = (0.0, 0.0, 0.0)

MIRROR_SPHERE_CENTER = (-0.4, 0.45, -0.3)
MIRROR_SPHERE_RADIUS = 0.45
GLASS_SPHERE_CENTER = (0.45, 0.35, 0.2)
GLASS_SPHERE_RADIUS = 0.35

LIGHT_POSITION = (0.0, 1.9, 0.0)


def create_cornell_box_materials(params: CornellBoxParams | None = None) -> MaterialMap:
    """Materials used by :func:`create_cornell_box_scene`."""
    params = params or CornellBoxParams()

    def wall(name: str, color: tuple[float, float, float]) -> Material:
        return Material(
            name=name,
            ambient=color,
            diffuse=color,
            specular=(0.0, 0.0, 0.0),
            ks=0.0,
        )

    return MaterialMap(
        [
            wall("red", params.left_wall_color),
            wall("green", params.right_wall_color),
            wall("white", params.white_wall_color),
            Material(
                name="mirror",
                ambient=(0.05, 0.05, 0.05),
                diffuse=(0.05, 0.05, 0.05),
                specular=(1.0, 1.0, 1.0),
                shininess=64.0,
                kr=params.mirror_reflectance,
            ),
            Material(
                name="glass",
                ambient=(0.0, 0.0, 0.0),
                diffuse=(0.05, 0.05, 0.05),
                specular=(1.0, 1.0, 1.0),
                transmissive=(0.95, 0.95, 0.95),
                shininess=128.0,
                kr=0.1,
                kt=0.9,
                ior=params.glass_ior,
                highlight=32.0,
            ),
        ]
    )


def create_cornell_box_config(
    width: int = 256,
    height: int = 256,
    params: CornellBoxParams | None = None,
) -> SceneConfig:
    """Scene configuration for the Cornell box."""
    params = params or CornellBoxParams()
    w = BOX_HALF_WIDTH
    objects = [
        PlaneConfig(vec3(-w, 0.0, 0.0), vec3(1.0, 0.0, 0.0), "red"),
        PlaneConfig(vec3(w, 0.0, 0.0), vec3(-1.0, 0.0, 0.0), "green"),
        PlaneConfig(vec3(0.0, 0.0, -w), vec3(0.0, 0.0, 1.0), "white"),
        PlaneConfig(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0), "white"),
        PlaneConfig(vec3(0.0, BOX_HEIGHT, 0.0), vec3(0.0, -1.0, 0.0), "white"),
        SphereConfig(vec3(*MIRROR_SPHERE_CENTER), MIRROR_SPHERE_RADIUS, "mirror"),
        SphereConfig(vec3(*GLASS_SPHERE_CENTER), GLASS_SPHERE_RADIUS, "glass"),
    ]
    lights = [
        PointLight(
            position=vec3(*LIGHT_POSITION),
            ambient=vec3(0.0, 0.0, 0.0),
            diffuse=vec3(*params.light_color),
            specular=vec3(*params.light_color),
        )
    ]
    camera = CameraConfig(
        eye=vec3(0.0, 1.0, 3.4),
        look_at=vec3(0.0, 1.0, 0.0),
        up=vec3(0.0, 1.0, 0.0),
        dist=1.0,
        fov=45.0,
    )
    return SceneConfig(
        width=width,
        height=height,
        camera=camera,
        bgcolor=vec3(*BACKGROUND_COLOR),
        ambient=vec3(*AMBIENT_COLOR),
        objects=objects,
        lights=lights,
    )


def create_cornell_box_scene(
    width: int = 256,
    height: int = 256,
    params: CornellBoxParams | None = None,
) -> Scene:
    """Create the Cornell box Scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        params: Optional colors and material settings.

    Returns:
        A Scene ready for rendering.
    """
    return Scene(
        create_cornell_box_config(width, height, params),
        create_cornell_box_materials(params),
    )
