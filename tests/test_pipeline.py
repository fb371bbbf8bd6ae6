import numpy as np
import pytest

from core.geometry import Rect, ScrollPosition
from core.lens_state import LensState
from core.settings import LensSettings
from image_processing import pipeline as pipeline_module
from image_processing.effects import NoiseTileCache
from image_processing.fallback import render_fallback_glow
from image_processing.pipeline import RenderContext, RenderingPipeline

@pytest.fixture
def lens():
    return LensState(id="hero", current_rect=Rect(40, 60, 120, 100), active=True)

@pytest.fixture
def pipeline():
    return RenderingPipeline(NoiseTileCache(seed=7))

def _context(lens, snapshot, **kwargs):
    return RenderContext(lens=lens, snapshot=snapshot, scroll=ScrollPosition(0, 0), **kwargs)

class TestPassOrder:
    """Passes run in a fixed order and disabled ones are reported as skipped."""

    def test_default_passes(self, pipeline, lens, snapshot):
        result = pipeline.render_lens(_context(lens, snapshot))
        assert not result.used_fallback
        assert result.executed == ["sample", "distortion", "blur", "specular", "noise",
                                   "edge_mask", "interior_mask", "gain"]
        skipped = [p.name for p in result.passes if p.skipped]
        assert skipped == ["band_mask"]
        assert not lens.surface.is_clear()

    def test_optional_passes_skipped(self, pipeline, lens, snapshot):
        lens.settings.specular.enabled = False
        lens.settings.noise.enabled = False
        lens.settings.band_mask.enabled = True
        result = pipeline.render_lens(_context(lens, snapshot, distortion=0.0, brightness_gain=1.0))
        assert result.executed == ["sample", "blur", "edge_mask", "interior_mask", "band_mask"]
        assert [p.name for p in result.passes] == ["sample", "distortion", "blur", "specular", "noise",
                                                    "edge_mask", "interior_mask", "band_mask", "gain"]

    def test_border_opaque_center_faded(self, pipeline, lens, snapshot):
        pipeline.render_lens(_context(lens, snapshot, distortion=0.0, brightness_gain=1.0))
        alpha = lens.surface.pixels[..., 3]
        assert alpha[50, 0] == 255
        assert alpha[50, 60] == 38
        assert alpha[50, 2] > alpha[50, 10]

class TestFailureHandling:

    def test_failing_pass_renders_fallback(self, pipeline, lens, snapshot, monkeypatch):
        def broken_blur(pixels, radius):
            raise RuntimeError("blur exploded")

        monkeypatch.setattr(pipeline_module, "apply_blur", broken_blur)
        result = pipeline.render_lens(_context(lens, snapshot))

        assert result.used_fallback
        assert result.failed_pass.name == "blur"
        assert result.failed_pass.error.pass_name == "blur"
        assert result.executed == ["sample", "distortion"]
        np.testing.assert_array_equal(lens.surface.pixels, render_fallback_glow(120, 100))

    def test_wrong_shape_is_a_failure(self, pipeline, lens, snapshot, monkeypatch):
        monkeypatch.setattr(pipeline_module, "apply_blur", lambda pixels, radius: pixels[:10])
        result = pipeline.render_lens(_context(lens, snapshot))
        assert result.used_fallback
        assert result.failed_pass.name == "blur"

    def test_failure_logged_as_warning(self, pipeline, lens, snapshot, monkeypatch, caplog):
        def broken_noise(pixels, settings, cache):
            raise ValueError("no noise")

        monkeypatch.setattr(pipeline_module, "apply_noise_overlay", broken_noise)
        with caplog.at_level("WARNING", logger="NeonGlassLens"):
            pipeline.render_lens(_context(lens, snapshot))
        assert any("noise" in record.getMessage() for record in caplog.records)

class TestMaskCaching:

    def test_masks_built_once_across_redraws(self, pipeline, lens, snapshot):
        for _ in range(3):
            pipeline.render_lens(_context(lens, snapshot))
        assert lens.edge_mask_cache.builds == 1
        assert lens.interior_mask_cache.builds == 1

    def test_parameter_change_rebuilds_mask(self, pipeline, lens, snapshot):
        pipeline.render_lens(_context(lens, snapshot))
        lens.settings.apply_changes({"edge_fade.fade_px": 9.0})
        pipeline.render_lens(_context(lens, snapshot))
        assert lens.edge_mask_cache.builds == 2
        assert lens.interior_mask_cache.builds == 1

    def test_resize_rebuilds_masks(self, pipeline, lens, snapshot):
        pipeline.render_lens(_context(lens, snapshot))
        lens.update_geometry(Rect(40, 60, 80, 80))
        pipeline.render_lens(_context(lens, snapshot))
        assert lens.edge_mask_cache.builds == 2
        assert lens.surface.size == (80, 80)

class TestEdgeCases:

    def test_empty_surface_runs_nothing(self, pipeline, snapshot):
        lens = LensState(id="empty", current_rect=Rect(0, 0, 0, 50), active=True)
        result = pipeline.render_lens(_context(lens, snapshot))
        assert result.passes == []
        assert not result.used_fallback

    def test_missing_anchor_uses_current_position(self, pipeline, lens, snapshot):
        settings = LensSettings()
        settings.specular.enabled = False
        settings.noise.enabled = False
        settings.blur_px = 0.0
        settings.edge_fade.min_alpha = 1.0
        settings.interior.start_px = 0.0
        lens.settings = settings
        pipeline.render_lens(_context(lens, snapshot, distortion=0.0, brightness_gain=1.0))
        np.testing.assert_array_equal(lens.surface.pixels, snapshot.pixels[60:160, 40:160])

    def test_render_fallback_directly(self, pipeline, lens):
        pipeline.render_fallback(lens)
        np.testing.assert_array_equal(lens.surface.pixels, render_fallback_glow(120, 100))
