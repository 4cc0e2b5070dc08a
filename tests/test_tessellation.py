"""Unit tests for superquadric and Bezier patch tessellation.

Tests cover:
- Superquadric vertex/triangle counts and surface shape
- Invalid tessellation parameters
- Patch file parsing and its error cases
- Bezier evaluation and patch tessellation
"""

import numpy as np
import pytest


def flat_patch_text(count=1):
    """Patch file whose control points lie on the unit square in z = 0."""
    lines = [str(count)]
    for _ in range(count):
        lines.append("3 3")
        for i in range(4):
            for j in range(4):
                lines.append(f"{j / 3.0} {i / 3.0} 0")
    return "\n".join(lines) + "\n"


class TestSuperquadric:
    """Tests for tessellate_superquadric."""

    def test_counts(self):
        from arrt.core.ray import vec3
        from arrt.geometry.superquadric import tessellate_superquadric

        mesh = tessellate_superquadric(vec3(1.0, 1.0, 1.0), 1.0, 1.0, 4, 8)
        assert len(mesh.vertices) == 5 * 8
        assert mesh.triangle_count == 2 * 4 * 8

    def test_unit_exponents_give_sphere(self):
        from arrt.core.ray import vec3
        from arrt.geometry.superquadric import tessellate_superquadric

        mesh = tessellate_superquadric(vec3(1.0, 1.0, 1.0), 1.0, 1.0, 6, 12)
        assert np.allclose(np.linalg.norm(mesh.vertices, axis=1), 1.0)
        assert np.allclose(mesh.normals, mesh.vertices, atol=1e-9)

    def test_radii_scale_extent(self):
        from arrt.core.ray import vec3
        from arrt.geometry.superquadric import tessellate_superquadric

        mesh = tessellate_superquadric(vec3(2.0, 3.0, 4.0), 1.0, 1.0, 8, 16)
        box = mesh.bbox()
        assert abs(box.max[1] - 3.0) < 1e-9
        assert abs(box.min[1] + 3.0) < 1e-9
        assert box.max[0] <= 2.0 + 1e-9
        assert box.max[2] <= 4.0 + 1e-9

    def test_normals_are_unit_and_finite(self):
        from arrt.core.ray import vec3
        from arrt.geometry.superquadric import tessellate_superquadric

        mesh = tessellate_superquadric(vec3(1.0, 1.0, 1.0), 0.2, 3.0, 6, 12)
        assert np.all(np.isfinite(mesh.normals))
        assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)

    def test_ray_hits_tessellated_sphere(self):
        from arrt.core.ray import Range, Ray, vec3
        from arrt.geometry.superquadric import tessellate_superquadric

        mesh = tessellate_superquadric(vec3(1.0, 1.0, 1.0), 1.0, 1.0, 16, 32)
        hit = mesh.intersect(Ray(vec3(0.01, 0.02, 5.0), vec3(0.0, 0.0, -1.0)), Range())
        assert hit is not None
        assert 4.0 <= hit.t < 4.1

    @pytest.mark.parametrize(
        "a,vslices,hslices",
        [
            ((1.0, 1.0, 1.0), 0, 8),
            ((1.0, 1.0, 1.0), 4, 2),
            ((1.0, 0.0, 1.0), 4, 8),
        ],
    )
    def test_invalid(self, a, vslices, hslices):
        from arrt.geometry.superquadric import tessellate_superquadric

        with pytest.raises(ValueError):
            tessellate_superquadric(np.array(a), 1.0, 1.0, vslices, hslices)


class TestPatchParsing:
    """Tests for parse_bpt and read_bpt."""

    def test_parse(self):
        from arrt.geometry.bpatch import parse_bpt

        patches = parse_bpt(flat_patch_text(2).splitlines())
        assert len(patches) == 2
        assert patches[0].shape == (4, 4, 3)
        assert np.allclose(patches[0][3, 3], [1.0, 1.0, 0.0])

    def test_empty(self):
        from arrt.geometry.bpatch import parse_bpt

        with pytest.raises(ValueError, match="empty"):
            parse_bpt([])

    def test_truncated(self):
        from arrt.geometry.bpatch import parse_bpt

        lines = flat_patch_text(1).splitlines()[:-3]
        with pytest.raises(ValueError, match="truncated"):
            parse_bpt(lines)

    def test_not_bicubic(self):
        from arrt.geometry.bpatch import parse_bpt

        lines = flat_patch_text(1).splitlines()
        lines[1] = "2 2"
        with pytest.raises(ValueError, match="bicubic"):
            parse_bpt(lines)

    def test_bad_count(self):
        from arrt.geometry.bpatch import parse_bpt

        with pytest.raises(ValueError):
            parse_bpt(["many"])

    def test_read_file(self, tmp_path):
        from arrt.geometry.bpatch import read_bpt

        path = tmp_path / "flat.bpt"
        path.write_text(flat_patch_text(), encoding="utf-8")
        assert len(read_bpt(path)) == 1


class TestPatchTessellation:
    """Tests for Bezier evaluation and tessellate_bpatch."""

    def test_bernstein_partition_of_unity(self):
        from arrt.geometry.bpatch import bernstein

        for u in (0.0, 0.3, 0.5, 1.0):
            assert abs(bernstein(u).sum() - 1.0) < 1e-12

    def test_evaluate_flat_patch(self):
        """Evenly spaced control points reproduce the parameter square."""
        from arrt.geometry.bpatch import evaluate_patch, parse_bpt

        patch = parse_bpt(flat_patch_text().splitlines())[0]
        assert np.allclose(evaluate_patch(patch, 0.25, 0.75), [0.25, 0.75, 0.0])
        assert np.allclose(evaluate_patch(patch, 0.0, 0.0), [0.0, 0.0, 0.0])

    def test_counts_and_normals(self):
        from arrt.geometry.bpatch import parse_bpt, tessellate_bpatch

        patches = parse_bpt(flat_patch_text(2).splitlines())
        mesh = tessellate_bpatch(patches, 3)
        assert len(mesh.vertices) == 2 * 16
        assert mesh.triangle_count == 2 * 2 * 9
        assert np.allclose(np.abs(mesh.normals[:, 2]), 1.0)

        flipped = tessellate_bpatch(patches, 3, flip_normals=True)
        assert np.allclose(flipped.normals, -mesh.normals)

    def test_invalid_slices(self):
        from arrt.geometry.bpatch import parse_bpt, tessellate_bpatch

        with pytest.raises(ValueError):
            tessellate_bpatch(parse_bpt(flat_patch_text().splitlines()), 0)
