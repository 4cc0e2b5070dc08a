"""Whitted-style recursive ray tracing integrator.

This module turns a ray into a color by finding the nearest surface and
combining:

    - Local Phong illumination (diffuse + specular) from every light
    - Shadow rays, attenuated by transmissive occluders
    - Recursive mirror reflection (``kr``)
    - Recursive refraction through transmissive surfaces (``kt``), with a
      total internal reflection fallback
    - A scene-wide ambient term

Recursion is bounded by the ray's ``depth`` counter: a ray whose depth
exceeds ``max_depth`` contributes black without being intersected.

Example:
    >>> from arrt.core.integrator import Integrator
    >>> from arrt.scene.cornell_box import create_cornell_box_scene
    >>> scene = create_cornell_box_scene()
    >>> integrator = Integrator(scene, scene.make_objects())
    >>> color, hit = integrator.trace(scene.make_camera().ray_at(10.0, 10.0))
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from arrt.core.ray import Range, Ray, Vec3, dot, length, normalize, reflect, refract
from arrt.geometry.primitive import Primitive, Surfel
from arrt.materials.material import Material
from arrt.scene.intersection import T_MIN, default_range, intersect_scene
from arrt.scene.lights import Light

if TYPE_CHECKING:
    from arrt.scene.scene import Scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum reflection/refraction recursion depth
MAX_DEPTH = 5

# Shadow ray offset along the surface normal
SHADOW_EPSILON = 1e-4

# Light intensity kept per transmissive occluder crossed by a shadow ray
TRANSMISSIVE_ATTENUATION = 0.5

BLACK = np.zeros(3, dtype=np.float64)


def _offset_ray_origin(point: Vec3, normal: Vec3, direction: Vec3, offset: float) -> Vec3:
    """Push a secondary ray origin off the surface.

    The origin moves along the normal on the side the new ray travels to
    (above the surface for reflection, below it for refraction).
    """
    if dot(direction, normal) < 0.0:
        return point - offset * normal
    return point + offset * normal


class Integrator:
    """Recursive Whitted shading over a fixed object list.

    The integrator holds only read-only references, so one instance can be
    shared by every render worker.

    Attributes:
        scene: Source of materials, lights, background and ambient colors.
        objects: Objects to intersect (planes plus the BVH).
        max_depth: Deepest ray that is still traced.
    """

    def __init__(
        self,
        scene: Scene,
        objects: Sequence[Primitive],
        max_depth: int = MAX_DEPTH,
    ) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self.scene = scene
        self.objects = list(objects)
        self.max_depth = max_depth

    # =========================================================================
    # Tracing
    # =========================================================================

    def intersect(self, ray: Ray, t_range: Range | None = None) -> Surfel | None:
        return intersect_scene(self.objects, ray, t_range)

    def trace(self, ray: Ray) -> tuple[Vec3, bool]:
        """Color seen along a ray.

        Args:
            ray: The ray to trace. Its ``depth`` counts previous bounces.

        Returns:
            Tuple of (RGB color clamped to [0, 1], whether anything was hit).
            Rays deeper than ``max_depth`` return black; rays that hit
            nothing return the background color.
        """
        if ray.depth > self.max_depth:
            return BLACK.copy(), False

        surfel = self.intersect(ray, default_range())
        if surfel is None:
            return np.array(self.scene.bgcolor, dtype=np.float64), False

        return self.shade(ray, surfel), True

    def shade(self, ray: Ray, surfel: Surfel) -> Vec3:
        """Shade a hit: local lighting, reflection, refraction and ambient."""
        material = self.scene.material_for_surfel(surfel)
        point = surfel.point
        v = -normalize(ray.direction)

        # Light the side of the surface the ray arrived from.
        n = surfel.normal if dot(surfel.normal, v) >= 0.0 else -surfel.normal

        color = np.zeros(3, dtype=np.float64)
        for light in self.scene.lights:
            color += self.local_illumination(light, point, n, v, material)

        if material.kr > 0.0:
            color += material.kr * material.specular * self._reflected(ray, surfel, n, v)

        if material.kt > 0.0:
            color += self._transmitted(ray, surfel, v, material)

        color += self.scene.ambient * material.ka * material.ambient
        return np.clip(color, 0.0, 1.0)

    # =========================================================================
    # Local illumination and shadows
    # =========================================================================

    def local_illumination(
        self,
        light: Light,
        point: Vec3,
        n: Vec3,
        v: Vec3,
        material: Material,
    ) -> Vec3:
        """Phong diffuse and specular terms for one light.

        Args:
            light: The light source.
            point: Surface point.
            n: Unit normal facing the viewer.
            v: Unit direction from the point towards the viewer.
            material: Surface material.
        """
        to_light = light.direction_from(point)
        distance = math.sqrt(dot(to_light, to_light))
        if distance == 0.0:
            return BLACK.copy()
        l = to_light / distance

        intensity = light.intensity_at(l)
        if intensity <= 0.0:
            return BLACK.copy()

        # Shadow rays only for lights in front of the surface; a light behind
        # it still contributes a specular term.
        n_dot_l = dot(n, l)
        if n_dot_l > 0.0:
            intensity *= self.light_transmission(point + SHADOW_EPSILON * n, l, distance)
            if intensity <= 0.0:
                return BLACK.copy()

        half = l + v
        half_length = length(half)
        n_dot_h = max(0.0, dot(n, half) / half_length) if half_length > 0.0 else 0.0
        diffuse = (
            intensity * light.diffuse_color * material.kd * material.diffuse * max(0.0, n_dot_l)
        )
        specular = (
            intensity
            * light.specular_color
            * material.ks
            * material.specular
            * n_dot_h**material.shininess
        )
        return diffuse + specular

    def light_transmission(self, origin: Vec3, l: Vec3, distance: float) -> float:
        """Fraction of a light's intensity reaching ``origin``.

        Walks a shadow ray towards the light. Every transmissive surface
        crossed halves the intensity and the walk continues past it; the
        first opaque surface blocks the light completely.

        Args:
            origin: Shadow ray origin, already offset off the surface.
            l: Unit direction towards the light.
            distance: Distance to the light; hits beyond it are ignored.

        Returns:
            A factor in [0, 1].
        """
        shadow_ray = Ray(origin=origin, direction=l)
        t_range = Range(T_MIN, distance)
        factor = 1.0
        while True:
            hit = self.intersect(shadow_ray, t_range)
            if hit is None:
                return factor
            if self.scene.material_for_surfel(hit).kt <= 0.0:
                return 0.0
            factor *= TRANSMISSIVE_ATTENUATION
            t_range = Range(hit.t + hit.n_offset, distance)
            if t_range.min >= t_range.max:
                return factor

    # =========================================================================
    # Secondary rays
    # =========================================================================

    def _reflected(self, ray: Ray, surfel: Surfel, n: Vec3, v: Vec3) -> Vec3:
        direction = reflect(v, n)
        origin = _offset_ray_origin(surfel.point, n, direction, surfel.n_offset)
        color, _ = self.trace(Ray(origin=origin, direction=direction, depth=ray.depth + 1))
        return color

    def _transmitted(self, ray: Ray, surfel: Surfel, v: Vec3, material: Material) -> Vec3:
        """Refraction term, falling back to internal reflection on TIR."""
        n = surfel.normal
        eta = material.ior
        cos_i = dot(n, v)
        if cos_i < 0.0:
            # Leaving the medium: work on the inside of the surface.
            n = -n
            eta = 1.0 / material.ior
            cos_i = -cos_i

        direction = refract(v, n, cos_i, eta)
        if direction is None:
            direction = reflect(v, n)
            origin = _offset_ray_origin(surfel.point, n, direction, surfel.n_offset)
            color, _ = self.trace(Ray(origin=origin, direction=direction, depth=ray.depth + 1))
            return material.kt * material.transmissive * color

        origin = _offset_ray_origin(surfel.point, n, direction, surfel.n_offset)
        transmitted, _ = self.trace(Ray(origin=origin, direction=direction, depth=ray.depth + 1))
        color = material.kt * material.transmissive * transmitted

        if material.highlight > 0.0:
            color = color + self._transmitted_highlight(surfel, -n, direction, material)
        return color

    def _transmitted_highlight(
        self,
        surfel: Surfel,
        n_out: Vec3,
        direction: Vec3,
        material: Material,
    ) -> Vec3:
        """Specular highlight of lights seen through the surface.

        Args:
            surfel: The hit.
            n_out: Normal on the transmitted side.
            direction: Transmitted ray direction.
            material: Surface material.
        """
        color = np.zeros(3, dtype=np.float64)
        for light in self.scene.lights:
            to_light = light.direction_from(surfel.point)
            distance = math.sqrt(dot(to_light, to_light))
            if distance == 0.0:
                continue
            l = to_light / distance
            if dot(n_out, l) <= 0.0:
                continue
            intensity = light.intensity_at(l)
            if intensity <= 0.0:
                continue
            intensity *= self.light_transmission(
                surfel.point + SHADOW_EPSILON * n_out, l, distance
            )
            if intensity <= 0.0:
                continue
            t_dot_l = max(0.0, dot(direction, l))
            color += (
                intensity
                * light.specular_color
                * material.ks
                * material.specular
                * t_dot_l**material.highlight
            )
        return color
