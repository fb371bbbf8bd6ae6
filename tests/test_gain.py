import numpy as np
import pytest

from image_processing.effects.gain import apply_brightness_gain, build_gain_lut, is_identity_gain

class TestGainStage:

    @pytest.mark.parametrize("gain", [1.0, 1.0009, 0.9991, float("nan"), float("inf")])
    def test_identity_gain_leaves_buffer_unchanged(self, rng, gain):
        pixels = rng.integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
        assert is_identity_gain(gain)
        np.testing.assert_array_equal(apply_brightness_gain(pixels, gain), pixels)

    @pytest.mark.parametrize("gain", [1.01, 2.0, 4.0, 50.0])
    def test_gain_above_one_never_darkens(self, rng, gain):
        pixels = rng.integers(0, 256, size=(32, 32, 4), dtype=np.uint8)
        out = apply_brightness_gain(pixels, gain)
        assert np.all(out[..., :3] >= pixels[..., :3])
        np.testing.assert_array_equal(out[..., 3], pixels[..., 3])

    def test_lut_endpoints_and_monotonic(self):
        lut = build_gain_lut(4.0)
        assert lut.shape == (256,)
        assert lut[0] == 0
        assert lut[255] == 255
        assert np.all(np.diff(lut.astype(int)) >= 0)

    def test_gain_works_in_linear_light(self):
        # 0.5 encoded is ~0.214 linear; doubling gives ~0.428 linear, ~0.686 encoded.
        lut = build_gain_lut(2.0)
        assert lut[128] == pytest.approx(176, abs=1)

    def test_zero_gain_blacks_out(self):
        lut = build_gain_lut(0.0)
        assert not lut.any()

    def test_input_not_modified(self, rng):
        pixels = rng.integers(0, 256, size=(4, 4, 4), dtype=np.uint8)
        before = pixels.copy()
        apply_brightness_gain(pixels, 3.0)
        np.testing.assert_array_equal(pixels, before)
