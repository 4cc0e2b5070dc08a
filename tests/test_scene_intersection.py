"""Unit tests for scene-level closest-hit queries.

Tests cover:
- Misses and the default range
- Closest hit across planes, spheres and a BVH
- Ties resolved in favor of the earlier object
- Caller ranges left untouched
"""

import pytest


def sphere(z, radius=0.5, material_id=0):
    from arrt.core.ray import vec3
    from arrt.geometry.sphere import Sphere

    return Sphere(vec3(0.0, 0.0, z), radius, material_id)


def forward_ray():
    from arrt.core.ray import Ray, vec3

    return Ray(vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0))


class TestIntersectScene:
    """Tests for intersect_scene."""

    def test_empty_list_misses(self):
        from arrt.scene.intersection import intersect_scene

        assert intersect_scene([], forward_ray()) is None

    def test_closest_of_two_spheres(self):
        from arrt.scene.intersection import intersect_scene

        hit = intersect_scene([sphere(-3.0, material_id=1), sphere(0.0, material_id=2)], forward_ray())
        assert hit is not None
        assert hit.material_id == 2
        assert abs(hit.t - 4.5) < 1e-9

    def test_plane_behind_bvh(self):
        from arrt.core.ray import vec3
        from arrt.geometry.bvh import Bvh
        from arrt.geometry.plane import Plane
        from arrt.scene.intersection import intersect_scene

        wall = Plane(vec3(0.0, 0.0, -10.0), vec3(0.0, 0.0, 1.0), 7)
        objects = [wall, Bvh([sphere(0.0, material_id=3), sphere(2.0, radius=0.25, material_id=4)])]
        hit = intersect_scene(objects, forward_ray())
        assert hit.material_id == 4
        assert abs(hit.t - 2.75) < 1e-9

    def test_tie_goes_to_first_object(self):
        from arrt.scene.intersection import intersect_scene

        hit = intersect_scene([sphere(0.0, material_id=1), sphere(0.0, material_id=2)], forward_ray())
        assert hit.material_id == 1

    def test_range_limits_hits(self):
        from arrt.core.ray import Range
        from arrt.scene.intersection import intersect_scene

        t_range = Range(0.0, 4.0)
        assert intersect_scene([sphere(0.0)], forward_ray(), t_range) is None
        assert t_range.max == 4.0

    def test_caller_range_not_narrowed(self):
        from arrt.core.ray import Range
        from arrt.scene.intersection import intersect_scene

        t_range = Range(0.0, 100.0)
        hit = intersect_scene([sphere(0.0)], forward_ray(), t_range)
        assert hit is not None
        assert t_range.max == 100.0

    @pytest.mark.parametrize("origin_z", [0.0, 0.4])
    def test_default_range_skips_origin(self, origin_z):
        """Rays starting inside a sphere report the exit point."""
        from arrt.core.ray import Ray, vec3
        from arrt.scene.intersection import T_MIN, intersect_scene

        ray = Ray(vec3(0.0, 0.0, origin_z), vec3(0.0, 0.0, -1.0))
        hit = intersect_scene([sphere(0.0)], ray)
        assert hit is not None
        assert hit.t > T_MIN
        assert abs(ray.point_at(hit.t)[2] + 0.5) < 1e-9
