"""Tests for the two-pass threaded renderer.

Tests cover:
- Row chunking
- Render settings validation
- Output independent of the worker count, including glass, mesh instances and spot lights
- Edge pixels keeping their primary color
- Statistics and progress callbacks
- Trace statistics merging
"""

import numpy as np
import pytest

TETRA_SMF = """v 0 0 1
v 0.866 0 -0.5
v -0.866 0 -0.5
v 0 1.2 0
f 1 3 2
f 1 2 4
f 2 3 4
f 3 1 4
"""


class TestRowChunks:
    def test_even_split(self):
        from arrt.core.renderer import row_chunks

        chunks = row_chunks(10, 3)
        assert [len(c) for c in chunks] == [4, 3, 3]
        assert [y for c in chunks for y in c] == list(range(10))

    def test_more_chunks_than_rows(self):
        from arrt.core.renderer import row_chunks

        chunks = row_chunks(2, 8)
        assert len(chunks) == 2
        assert [y for c in chunks for y in c] == [0, 1]


class TestRenderSettings:
    @pytest.mark.parametrize(
        "kwargs",
        [{"sampling_depth": 3}, {"workers": 0}, {"max_depth": -1}],
    )
    def test_invalid(self, kwargs):
        from arrt.core.renderer import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_defaults(self):
        from arrt.core.integrator import MAX_DEPTH
        from arrt.core.renderer import RenderSettings

        settings = RenderSettings()
        assert settings.sampling_depth == 0
        assert settings.workers >= 1
        assert settings.max_depth == MAX_DEPTH


class TestTraceStats:
    def test_combine(self):
        from arrt.core.tracer import TraceStats

        a = TraceStats(ray_count=3, hit_count=1, trace_sum=0.5, trace_max=0.2)
        b = TraceStats(ray_count=1, hit_count=1, trace_sum=0.25, trace_max=0.4)
        c = a.combine(b)
        assert c == b.combine(a)
        assert (c.ray_count, c.hit_count) == (4, 2)
        assert c.trace_sum == 0.75
        assert c.trace_max == 0.4
        assert c.hit_percent == 50.0

    def test_empty_stats(self):
        from arrt.core.tracer import TraceStats

        stats = TraceStats()
        assert stats.hit_percent == 0.0
        assert stats.trace_avg == 0.0

    def test_context_counts_rays(self, basic_scene):
        from arrt.core.tracer import RayTracer

        context = RayTracer(basic_scene).context()
        context.sample_point(8, 6)
        context.sample_coord(0.0, 0.0)
        assert context.stats.ray_count == 2


class TestRenderer:
    """Tests for Renderer.render."""

    def test_worker_count_does_not_change_image(self, basic_scene):
        from arrt.core.renderer import Renderer, RenderSettings

        single = Renderer(basic_scene, RenderSettings(sampling_depth=1, workers=1)).render()
        several = Renderer(basic_scene, RenderSettings(sampling_depth=1, workers=4)).render()
        assert np.array_equal(single.pixels, several.pixels)

    @pytest.mark.parametrize("sampling_depth", [0, 1])
    def test_worker_count_with_glass_model_and_spot(self, scene_dict, write_scene, sampling_depth):
        """Refraction, mesh instances and a spot light render identically across workers."""
        from arrt.core.renderer import Renderer, RenderSettings
        from arrt.scene.scene import Scene

        data = scene_dict(
            mesh_dir="meshes",
            objects=[
                {"plane": {"point": [0, 0, 0], "normal": [0, 1, 0], "material": "white"}},
                {"sphere": {"center": [-0.8, 1, 1], "radius": 0.9, "material": "glass"}},
                {
                    "model": {
                        "mesh": "tetra.smf",
                        "material": "mirror",
                        "transform": {
                            "translate": [1.2, 0, -0.5],
                            "rotate": [0, 30, 0],
                            "scale": [1.5, 1, 1],
                        },
                    }
                },
            ],
            lights=[
                {"point": {"position": [3, 5, 4]}},
                {
                    "spot": {
                        "position": [-2, 4, 3],
                        "direction": [0.5, -1, -0.5],
                        "angle": 30,
                        "sharpness": 2,
                        "color": [1, 1, 1],
                    }
                },
            ],
        )
        scene = Scene.from_file(write_scene(data, {"meshes/tetra.smf": TETRA_SMF}))

        single = Renderer(scene, RenderSettings(sampling_depth=sampling_depth, workers=1)).render()
        several = Renderer(scene, RenderSettings(sampling_depth=sampling_depth, workers=4)).render()
        assert np.array_equal(single.pixels, several.pixels)

    def test_edge_pixels_keep_primary_color(self, basic_scene):
        from arrt.core.renderer import Renderer, RenderSettings
        from arrt.core.tracer import RayTracer

        final = Renderer(basic_scene, RenderSettings(sampling_depth=0, workers=2)).render()
        context = RayTracer(basic_scene).context()
        for x in range(basic_scene.width):
            assert np.array_equal(final.get_color(x, 0), context.sample_point(x, 0))
        last = basic_scene.width - 1
        for y in range(basic_scene.height):
            assert np.array_equal(final.get_color(last, y), context.sample_point(last, y))

    def test_output_range(self, basic_scene):
        from arrt.core.renderer import render_scene

        fb = render_scene(basic_scene, sampling_depth=0, workers=2)
        assert fb.pixels.shape == (12, 16, 3)
        assert np.all(np.isfinite(fb.pixels))
        assert fb.pixels.min() >= 0.0
        assert fb.pixels.max() <= 1.0

    def test_stats_and_callback(self, basic_scene):
        from arrt.core.renderer import Renderer, RenderSettings

        progress = []
        renderer = Renderer(basic_scene, RenderSettings(sampling_depth=2, workers=3))
        renderer.render(callback=lambda name, done, total: progress.append((name, done, total)))

        assert renderer.stats["primary"].ray_count == 16 * 12
        assert renderer.stats["antialias"].ray_count == 0
        assert renderer.total_stats().ray_count == 16 * 12
        assert {name for name, _, _ in progress} == {"primary", "antialias"}
        assert ("primary", 12, 12) in progress
        assert ("antialias", 12, 12) in progress

    def test_empty_scene_is_background(self, scene_dict):
        from arrt.core.renderer import Renderer, RenderSettings
        from arrt.scene.config import SceneConfig
        from arrt.scene.scene import Scene

        scene = Scene(SceneConfig.from_dict(scene_dict(objects=[])))
        renderer = Renderer(scene, RenderSettings(sampling_depth=0, workers=2))
        fb = renderer.render()
        assert np.allclose(fb.pixels, [0.1, 0.2, 0.3])
        assert renderer.stats["primary"].hit_count == 0
        assert renderer.stats["antialias"].ray_count == 0

    def test_dimensions(self, basic_scene):
        from arrt.core.renderer import Renderer

        renderer = Renderer(basic_scene)
        assert (renderer.width, renderer.height) == (16, 12)
