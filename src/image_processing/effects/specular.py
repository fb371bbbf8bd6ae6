import logging

import numpy as np

from core.constants import AppConstants
from core.geometry import CornerRadii
from core.settings import SpecularSettings
from image_processing.drawing.shapes import band_box, rounded_rect_coverage

logger = logging.getLogger("NeonGlassLens")

LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)

def apply_specular_band(pixels: np.ndarray, settings: SpecularSettings) -> np.ndarray:
    """Brightens a rounded band near the top of the lens.

    The lift is proportional to the pixel's own luminance, so dark content
    stays dark, and fades linearly from the band top to its bottom.
    """
    output = pixels.copy()
    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        return output

    left, top, band_w, band_h = band_box(width, height, settings.top, settings.height, settings.left, settings.right)
    strength = max(0.0, min(1.0, float(settings.strength)))
    gamma = max(AppConstants.MIN_SPECULAR_GAMMA, float(settings.gamma))
    radius = max(0.0, min(AppConstants.MAX_SPECULAR_RADIUS, band_h / 2.0, float(settings.radius)))

    region = pixels[top:top + band_h, left:left + band_w, :3].astype(np.float64)
    rows, cols = region.shape[:2]
    if rows == 0 or cols == 0 or strength == 0:
        return output

    luminance = region @ LUMA_WEIGHTS
    lum_norm = np.power(luminance / 255.0, gamma)
    denom = (band_h - 1) or 1
    vertical = 1.0 - np.arange(rows, dtype=np.float64)[:, None] / denom
    lift = strength * vertical * lum_norm

    lifted = np.minimum(255.0, np.floor(region + (255.0 - region) * lift[..., None] + 0.5))

    coverage = rounded_rect_coverage((cols, rows), CornerRadii.uniform(radius),
                                     rect=(0.0, 0.0, float(band_w), float(band_h)))
    blended = region + (lifted - region) * coverage[..., None].astype(np.float64)
    output[top:top + rows, left:left + cols, :3] = np.clip(np.floor(blended + 0.5), 0, 255).astype(np.uint8)
    return output
