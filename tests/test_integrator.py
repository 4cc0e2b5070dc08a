"""Unit tests for the Whitted integrator.

Tests cover:
- Background color for misses and the recursion depth limit
- Diffuse and specular local illumination
- Opaque and transmissive shadows
- Mirror reflection and termination between parallel mirrors
- Refraction through an index-matched surface
- Total internal reflection inside a sphere
"""

import numpy as np
import pytest


def make_scene(materials, lights=(), bgcolor=(0.0, 0.0, 0.0), ambient=(0.0, 0.0, 0.0)):
    """Scene holding only materials, lights and colors; objects are passed separately."""
    from arrt.camera.pinhole import CameraConfig
    from arrt.core.ray import vec3
    from arrt.materials.material import MaterialMap
    from arrt.scene.config import SceneConfig
    from arrt.scene.scene import Scene

    config = SceneConfig(
        width=4,
        height=4,
        camera=CameraConfig(vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0)),
        bgcolor=vec3(*bgcolor),
        ambient=vec3(*ambient),
        lights=list(lights),
    )
    return Scene(config, MaterialMap(materials))


def overhead_light(height=5.0):
    from arrt.core.ray import vec3
    from arrt.scene.lights import PointLight

    return PointLight(
        position=vec3(0.0, height, 0.0),
        ambient=vec3(0.0, 0.0, 0.0),
        diffuse=vec3(1.0, 1.0, 1.0),
        specular=vec3(1.0, 1.0, 1.0),
    )


def matte(name="matte"):
    from arrt.materials.material import Material

    return Material(name=name, diffuse=(0.8, 0.8, 0.8), ks=0.0)


def clear_glass(name="glass", ior=1.0):
    from arrt.materials.material import Material

    return Material(name=name, transmissive=(1.0, 1.0, 1.0), ks=0.0, kt=1.0, ior=ior)


def floor(material_id=0, height=0.0):
    from arrt.core.ray import vec3
    from arrt.geometry.plane import Plane

    return Plane(vec3(0.0, height, 0.0), vec3(0.0, 1.0, 0.0), material_id)


def down_ray(depth=0):
    from arrt.core.ray import Ray, vec3

    return Ray(vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0), depth)


class TestTrace:
    """Tests for misses and the depth limit."""

    def test_miss_returns_background(self):
        from arrt.core.integrator import Integrator

        scene = make_scene([matte()], bgcolor=(0.1, 0.2, 0.3))
        color, hit = Integrator(scene, []).trace(down_ray())
        assert not hit
        assert np.allclose(color, [0.1, 0.2, 0.3])

    def test_too_deep_is_black(self):
        from arrt.core.integrator import Integrator

        scene = make_scene([matte()], [overhead_light()], bgcolor=(1.0, 1.0, 1.0))
        integrator = Integrator(scene, [floor()], max_depth=3)
        color, hit = integrator.trace(down_ray(depth=4))
        assert not hit
        assert np.allclose(color, 0.0)

        color, hit = integrator.trace(down_ray(depth=3))
        assert hit

    def test_negative_max_depth(self):
        from arrt.core.integrator import Integrator

        with pytest.raises(ValueError):
            Integrator(make_scene([matte()]), [], max_depth=-1)


class TestLocalIllumination:
    """Tests for diffuse, specular and ambient terms."""

    def test_diffuse_floor(self):
        from arrt.core.integrator import Integrator

        scene = make_scene([matte()], [overhead_light()])
        color, hit = Integrator(scene, [floor()]).trace(down_ray())
        assert hit
        assert np.allclose(color, [0.8, 0.8, 0.8])

    def test_ambient_term(self):
        from arrt.core.integrator import Integrator
        from arrt.materials.material import Material

        material = Material(name="m", ambient=(0.5, 0.25, 0.0), ka=0.5)
        scene = make_scene([material], ambient=(1.0, 1.0, 0.5))
        color, _ = Integrator(scene, [floor()]).trace(down_ray())
        assert np.allclose(color, [0.25, 0.125, 0.0])

    def test_light_below_surface(self):
        from arrt.core.integrator import Integrator

        scene = make_scene([matte()], [overhead_light(height=-5.0)])
        color, hit = Integrator(scene, [floor()]).trace(down_ray())
        assert hit
        assert np.allclose(color, 0.0)

    def test_grazing_light_behind_surface_keeps_specular(self):
        """A light just below the horizon adds specular but no diffuse."""
        from arrt.core.integrator import Integrator
        from arrt.core.ray import normalize, vec3
        from arrt.materials.material import Material
        from arrt.scene.lights import PointLight

        light = PointLight(
            position=vec3(10.0, -0.5, 0.0),
            ambient=vec3(0.0, 0.0, 0.0),
            diffuse=vec3(1.0, 1.0, 1.0),
            specular=vec3(1.0, 1.0, 1.0),
        )
        material = Material(name="shiny", diffuse=(0.8, 0.8, 0.8), specular=(1.0, 1.0, 1.0), shininess=1.0)
        scene = make_scene([material], [light])
        color, hit = Integrator(scene, [floor()]).trace(down_ray())

        h = normalize(normalize(vec3(10.0, -0.5, 0.0)) + vec3(0.0, 1.0, 0.0))
        assert hit
        assert abs(h[1] - 0.689) < 1e-3
        assert np.allclose(color, h[1])

    def test_light_opposite_viewer_is_finite(self):
        """A light straight behind the surface has no half vector and adds nothing."""
        from arrt.core.integrator import Integrator
        from arrt.materials.material import Material

        material = Material(name="shiny", specular=(1.0, 1.0, 1.0), shininess=10.0)
        scene = make_scene([material], [overhead_light(height=-5.0)])
        color, _ = Integrator(scene, [floor()]).trace(down_ray())
        assert np.all(np.isfinite(color))
        assert np.allclose(color, 0.0)

    def test_specular_highlight(self):
        """Viewer and light along the normal: n.h = 1 for any shininess."""
        from arrt.core.integrator import Integrator
        from arrt.materials.material import Material

        material = Material(name="shiny", specular=(0.3, 0.6, 0.9), shininess=50.0)
        scene = make_scene([material], [overhead_light()])
        color, _ = Integrator(scene, [floor()]).trace(down_ray())
        assert np.allclose(color, [0.3, 0.6, 0.9])

    def test_spot_light_outside_cone(self):
        from arrt.core.integrator import Integrator
        from arrt.core.ray import vec3
        from arrt.scene.lights import SpotLight

        spot = SpotLight(
            position=vec3(10.0, 5.0, 0.0),
            direction=vec3(0.0, -1.0, 0.0),
            angle=10.0,
            sharpness=1.0,
            color=vec3(1.0, 1.0, 1.0),
        )
        scene = make_scene([matte()], [spot])
        color, _ = Integrator(scene, [floor()]).trace(down_ray())
        assert np.allclose(color, 0.0)

    def test_color_is_clamped(self):
        from arrt.core.integrator import Integrator
        from arrt.materials.material import Material

        material = Material(name="hot", diffuse=(3.0, 3.0, 3.0), ks=0.0)
        scene = make_scene([material], [overhead_light()])
        color, _ = Integrator(scene, [floor()]).trace(down_ray())
        assert np.allclose(color, [1.0, 1.0, 1.0])


class TestShadows:
    """Tests for shadow rays."""

    def test_opaque_occluder(self):
        from arrt.core.integrator import Integrator
        from arrt.core.ray import vec3
        from arrt.geometry.sphere import Sphere

        scene = make_scene([matte()], [overhead_light()])
        objects = [floor(), Sphere(vec3(0.0, 2.5, 0.0), 0.5, 0)]
        color, hit = Integrator(scene, objects).trace(down_ray())
        assert hit
        assert np.allclose(color, 0.0)

    def test_transmissive_occluder_halves_light(self):
        from arrt.core.integrator import Integrator

        scene = make_scene([matte(), clear_glass()], [overhead_light()])
        objects = [floor(0), floor(1, height=2.5)]
        color, _ = Integrator(scene, objects).trace(down_ray())
        assert np.allclose(color, [0.4, 0.4, 0.4])

    def test_two_transmissive_occluders(self):
        from arrt.core.integrator import Integrator

        scene = make_scene([matte(), clear_glass()], [overhead_light()])
        objects = [floor(0), floor(1, height=2.5), floor(1, height=3.5)]
        color, _ = Integrator(scene, objects).trace(down_ray())
        assert np.allclose(color, [0.2, 0.2, 0.2])

    def test_occluder_beyond_light_ignored(self):
        from arrt.core.integrator import Integrator

        scene = make_scene([matte()], [overhead_light(height=5.0)])
        objects = [floor(0), floor(0, height=6.0)]
        integrator = Integrator(scene, objects)
        color, _ = integrator.trace(down_ray())
        assert np.allclose(color, [0.8, 0.8, 0.8])

    def test_light_transmission_opaque(self):
        from arrt.core.integrator import Integrator
        from arrt.core.ray import vec3

        scene = make_scene([matte()])
        integrator = Integrator(scene, [floor(0, height=2.0)])
        assert integrator.light_transmission(vec3(), vec3(0.0, 1.0, 0.0), 5.0) == 0.0
        assert integrator.light_transmission(vec3(), vec3(0.0, 1.0, 0.0), 1.0) == 1.0


class TestReflection:
    """Tests for mirror reflection."""

    def test_mirror_shows_background(self):
        from arrt.core.integrator import Integrator
        from arrt.core.ray import Ray, normalize, vec3
        from arrt.materials.material import Material

        mirror = Material(name="mirror", specular=(1.0, 1.0, 1.0), ks=0.0, kr=1.0)
        scene = make_scene([mirror], bgcolor=(0.1, 0.2, 0.3))
        ray = Ray(vec3(0.0, 1.0, 0.0), normalize(vec3(1.0, -1.0, 0.0)))
        color, hit = Integrator(scene, [floor()]).trace(ray)
        assert hit
        assert np.allclose(color, [0.1, 0.2, 0.3])

    @pytest.mark.parametrize("max_depth,expected", [(0, 0.1), (2, 0.3), (5, 0.6)])
    def test_parallel_mirrors_terminate(self, max_depth, expected):
        """Each bounce adds the ambient term until the depth limit."""
        from arrt.core.integrator import Integrator
        from arrt.materials.material import Material

        mirror = Material(
            name="mirror", ambient=(0.1, 0.1, 0.1), specular=(1.0, 1.0, 1.0), ks=0.0, kr=1.0
        )
        scene = make_scene([mirror], ambient=(1.0, 1.0, 1.0))
        objects = [floor(0), floor(0, height=2.0)]
        color, _ = Integrator(scene, objects, max_depth=max_depth).trace(down_ray())
        assert np.all(np.isfinite(color))
        assert np.allclose(color, expected)


class TestRefraction:
    """Tests for transmitted rays."""

    def test_index_matched_surface_passes_through(self):
        """ior 1 bends nothing; the floor below is seen through one occluder."""
        from arrt.core.integrator import Integrator

        scene = make_scene([matte(), clear_glass(ior=1.0)], [overhead_light()])
        objects = [floor(0), floor(1, height=0.5)]
        color, _ = Integrator(scene, objects).trace(down_ray())
        assert np.allclose(color, [0.4, 0.4, 0.4])

    def test_total_internal_reflection_inside_sphere(self):
        """A grazing ray inside glass keeps reflecting, scaled by kt * transmissive."""
        from arrt.core.integrator import Integrator
        from arrt.core.ray import Ray, vec3
        from arrt.geometry.sphere import Sphere
        from arrt.materials.material import Material

        glass = Material(
            name="glass",
            ambient=(0.2, 0.2, 0.2),
            transmissive=(0.5, 0.5, 0.5),
            ks=0.0,
            kt=1.0,
            ior=1.5,
        )
        scene = make_scene([glass], ambient=(1.0, 1.0, 1.0))
        integrator = Integrator(scene, [Sphere(vec3(), 1.0, 0)], max_depth=5)
        color, hit = integrator.trace(Ray(vec3(0.0, 0.9, 0.0), vec3(1.0, 0.0, 0.0)))
        assert hit
        expected = 0.2 * sum(0.5**k for k in range(6))
        assert np.allclose(color, expected)

    def test_refraction_uses_facing_normal_for_planes(self):
        """A plane always looks like an entry surface, so it never reflects internally."""
        from arrt.core.integrator import Integrator
        from arrt.core.ray import Ray, normalize, vec3

        scene = make_scene([clear_glass(ior=1.5)], bgcolor=(0.5, 0.5, 0.5))
        integrator = Integrator(scene, [floor()])
        ray = Ray(vec3(0.0, -1.0, 0.0), normalize(vec3(3.0, 1.0, 0.0)))
        color, hit = integrator.trace(ray)
        assert hit
        assert np.allclose(color, [0.5, 0.5, 0.5])
