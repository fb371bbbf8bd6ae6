import numpy as np

from core.constants import AppConstants
from core.geometry import CornerRadii
from core.settings import BandMaskSettings
from image_processing.drawing.shapes import band_box, rounded_rect_coverage

def band_mask_key(width: int, height: int, settings: BandMaskSettings) -> tuple:
    left, top, band_w, band_h = band_box(width, height, settings.top, settings.height, settings.left, settings.right)
    return (int(width), int(height), top, band_h, left, band_w,
            float(settings.alpha_top), float(settings.alpha_bottom))

def build_band_mask(width: int, height: int, settings: BandMaskSettings) -> np.ndarray:
    """Alpha factor that subtracts opacity inside a rounded band, 1.0 elsewhere."""
    factor = np.ones((height, width), dtype=np.float64)
    if width == 0 or height == 0:
        return factor.astype(np.float32)

    left, top, band_w, band_h = band_box(width, height, settings.top, settings.height, settings.left, settings.right)
    rows = min(band_h, height - top)
    if rows <= 0:
        return factor.astype(np.float32)

    alpha_top = max(0.0, min(1.0, float(settings.alpha_top)))
    alpha_bottom = max(0.0, min(1.0, float(settings.alpha_bottom)))
    radius = min(band_h / 2.0, AppConstants.MAX_BAND_RADIUS)

    t = np.clip((np.arange(rows, dtype=np.float64) + 0.5) / band_h, 0.0, 1.0)
    removed = (1.0 - alpha_top) + ((1.0 - alpha_bottom) - (1.0 - alpha_top)) * t

    coverage = rounded_rect_coverage((band_w, rows), CornerRadii.uniform(radius),
                                     rect=(0.0, 0.0, float(band_w), float(band_h))).astype(np.float64)
    factor[top:top + rows, left:left + band_w] = 1.0 - removed[:, None] * coverage
    return factor.astype(np.float32)
