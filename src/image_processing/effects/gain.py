import math
from functools import lru_cache

import numpy as np

from core.constants import AppConstants

def srgb_to_linear(values: np.ndarray) -> np.ndarray:
    return np.where(values <= 0.04045, values / 12.92, np.power((values + 0.055) / 1.055, 2.4))

def linear_to_srgb(values: np.ndarray) -> np.ndarray:
    return np.where(values <= 0.0031308, values * 12.92, 1.055 * np.power(values, 1.0 / 2.4) - 0.055)

def is_identity_gain(gain: float) -> bool:
    return not math.isfinite(gain) or abs(gain - 1.0) < AppConstants.GAIN_IDENTITY_EPSILON

@lru_cache(maxsize=32)
def build_gain_lut(gain: float) -> np.ndarray:
    """256-entry table mapping an encoded channel value through a linear-light gain."""
    encoded = np.arange(256, dtype=np.float64) / 255.0
    linear = np.minimum(1.0, srgb_to_linear(encoded) * max(float(gain), 0.0))
    out = np.floor(linear_to_srgb(linear) * 255.0 + 0.5)
    lut = np.clip(out, 0, 255).astype(np.uint8)
    lut.setflags(write=False)
    return lut

def apply_brightness_gain(pixels: np.ndarray, gain: float) -> np.ndarray:
    output = pixels.copy()
    if is_identity_gain(gain) or output.size == 0:
        return output
    output[..., :3] = build_gain_lut(float(gain))[pixels[..., :3]]
    return output
