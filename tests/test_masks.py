import numpy as np
import pytest

from core.geometry import CornerRadii
from core.settings import BandMaskSettings, EdgeFadeSettings, InteriorFalloffSettings
from image_processing.drawing import rounded_rect_coverage
from image_processing.masks import (apply_alpha_mask, band_mask_key, build_band_mask, build_edge_mask,
                                    build_interior_mask, edge_mask_key, falloff_profile, interior_mask_key,
                                    resolve_extents)

SQUARE = CornerRadii()

class TestEdgeMask:

    def test_outer_ring_is_opaque(self):
        mask = build_edge_mask(40, 30, EdgeFadeSettings(fade_px=5, min_alpha=0.15), SQUARE)
        assert mask.shape == (30, 40)
        assert np.all(mask[0, :] == 1.0)
        assert np.all(mask[-1, :] == 1.0)
        assert np.all(mask[:, 0] == 1.0)
        assert np.all(mask[:, -1] == 1.0)

    def test_min_alpha_at_fade_distance_and_beyond(self):
        mask = build_edge_mask(40, 30, EdgeFadeSettings(fade_px=5, min_alpha=0.15), SQUARE)
        assert mask[15, 5] == pytest.approx(0.15)
        assert mask[5, 20] == pytest.approx(0.15)
        assert mask[15, 20] == pytest.approx(0.15)
        assert mask[15, 40 - 1 - 5] == pytest.approx(0.15)

    def test_linear_ramp_inside_strip(self):
        mask = build_edge_mask(40, 30, EdgeFadeSettings(fade_px=5, min_alpha=0.15), SQUARE)
        assert mask[15, 2] == pytest.approx(1.0 + (0.15 - 1.0) * 0.4)
        assert mask[15, 37] == pytest.approx(1.0 + (0.15 - 1.0) * 0.4)

    def test_zero_fade_is_flat(self):
        mask = build_edge_mask(10, 10, EdgeFadeSettings(fade_px=0, min_alpha=0.4), SQUARE)
        assert np.allclose(mask, 0.4)

    def test_rounded_corners_cut_footprint(self):
        mask = build_edge_mask(60, 60, EdgeFadeSettings(), CornerRadii.uniform(12))
        assert mask[0, 0] < 0.05
        assert mask[59, 59] < 0.05
        assert mask[0, 30] == pytest.approx(1.0)

    def test_key_changes_with_parameters(self):
        base = edge_mask_key(10, 10, EdgeFadeSettings(), SQUARE)
        assert base == edge_mask_key(10, 10, EdgeFadeSettings(), SQUARE)
        assert base != edge_mask_key(10, 11, EdgeFadeSettings(), SQUARE)
        assert base != edge_mask_key(10, 10, EdgeFadeSettings(fade_px=6), SQUARE)
        assert base != edge_mask_key(10, 10, EdgeFadeSettings(), CornerRadii.uniform(2))

class TestInteriorMask:

    @pytest.fixture
    def settings(self):
        return InteriorFalloffSettings(rel_min_alpha=0.3)

    def test_center_holds_rel_min_alpha(self, settings):
        mask = build_interior_mask(200, 200, settings, SQUARE)
        assert mask[100, 100] == pytest.approx(0.3)

    def test_full_strength_up_to_start(self, settings):
        mask = build_interior_mask(200, 200, settings, SQUARE)
        assert np.allclose(mask[100, :6], 1.0)
        assert np.allclose(mask[:6, 100], 1.0)

    @pytest.mark.parametrize("path", ["row", "column", "diagonal"])
    def test_non_increasing_towards_center(self, settings, path):
        mask = build_interior_mask(200, 200, settings, SQUARE)
        idx = np.arange(0, 101)
        if path == "row":
            values = mask[100, idx]
        elif path == "column":
            values = mask[idx, 100]
        else:
            values = mask[idx, idx]
        assert np.all(np.diff(values) <= 1e-6)

    def test_sides_have_independent_extents(self, settings):
        mask = build_interior_mask(200, 200, settings, SQUARE)
        # top eases out by 50 + 14 px, left by 75 + 14 px
        assert mask[70, 100] == pytest.approx(0.3)
        assert mask[100, 70] > 0.3

    def test_default_rel_min_alpha_is_opaque(self):
        mask = build_interior_mask(120, 80, InteriorFalloffSettings(), SQUARE)
        assert np.allclose(mask, 1.0)

    def test_rounded_corners_stay_inside_footprint(self, settings):
        mask = build_interior_mask(200, 200, settings, CornerRadii.uniform(24))
        assert mask[0, 0] < 0.05
        assert 0.0 <= mask.min() and mask.max() <= 1.0 + 1e-6
        assert mask[100, 100] == pytest.approx(0.3)

    def test_rounded_corner_non_increasing_towards_center(self, settings):
        radii = CornerRadii.uniform(60)
        mask = build_interior_mask(300, 300, settings, radii)
        footprint = rounded_rect_coverage((300, 300), radii)
        idx = np.arange(0, 151)
        covered = idx[footprint[idx, idx] >= 1.0 - 1e-6]
        values = mask[covered, covered]
        assert covered[0] < 30
        assert np.all(np.diff(values) <= 1e-5)

    def test_rounded_corner_only_raises_strips(self, settings):
        square = build_interior_mask(300, 300, settings, SQUARE)
        rounded = build_interior_mask(300, 300, settings, CornerRadii.uniform(60))
        footprint = rounded_rect_coverage((300, 300), CornerRadii.uniform(60))
        inside = footprint >= 1.0 - 1e-6
        assert np.all(rounded[inside] >= square[inside] - 1e-6)

    def test_extents_clamped_to_lens(self):
        extents = resolve_extents(30, 20, InteriorFalloffSettings())
        assert extents.start == 5
        assert extents.top == 20
        assert extents.left == 30
        assert extents.feather == 14

    def test_zero_end_uses_fallback_span(self):
        extents = resolve_extents(300, 300, InteriorFalloffSettings(start_px=5, end_top_px=0))
        assert extents.top == 25

    def test_profile_smoothstep(self):
        values = falloff_profile(np.array([0.0, 5.0, 27.5, 50.0, 80.0]), 5, 50, 0.2)
        assert values[0] == pytest.approx(1.0)
        assert values[1] == pytest.approx(1.0)
        assert values[2] == pytest.approx(0.6)
        assert values[3] == pytest.approx(0.2)
        assert values[4] == pytest.approx(0.2)

    def test_key_tracks_every_parameter(self, settings):
        base = interior_mask_key(50, 50, settings, SQUARE)
        changed = InteriorFalloffSettings(rel_min_alpha=0.3, end_left_px=60)
        assert base != interior_mask_key(50, 50, changed, SQUARE)
        assert base == interior_mask_key(50, 50, InteriorFalloffSettings(rel_min_alpha=0.3), SQUARE)

class TestBandMask:

    def test_outside_band_untouched(self):
        factor = build_band_mask(100, 100, BandMaskSettings(enabled=True))
        assert np.all(factor[:12] == 1.0)
        assert np.all(factor[68:] == 1.0)
        assert np.all(factor[:, :16] == 1.0)

    def test_subtracts_more_towards_band_bottom(self):
        factor = build_band_mask(100, 100, BandMaskSettings(enabled=True, alpha_top=1.0, alpha_bottom=0.15))
        assert factor[13, 50] > 0.95
        assert factor[60, 50] < 0.5
        assert factor[60, 50] < factor[30, 50]

    def test_key_uses_clamped_geometry(self):
        a = band_mask_key(100, 100, BandMaskSettings(top=12.4))
        b = band_mask_key(100, 100, BandMaskSettings(top=12.0))
        assert a == b

class TestApplyAlphaMask:

    def test_multiplies_alpha_only(self, rng):
        pixels = rng.integers(0, 256, size=(8, 8, 4), dtype=np.uint8)
        mask = np.full((8, 8), 0.5, dtype=np.float32)
        out = apply_alpha_mask(pixels, mask)
        np.testing.assert_array_equal(out[..., :3], pixels[..., :3])
        np.testing.assert_array_equal(out[..., 3], np.floor(pixels[..., 3] * 0.5 + 0.5).astype(np.uint8))

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError):
            apply_alpha_mask(np.zeros((4, 4, 4), dtype=np.uint8), np.ones((4, 5), dtype=np.float32))
