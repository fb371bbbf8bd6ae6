import math

import numpy as np

from core.geometry import CornerRadii
from core.settings import EdgeFadeSettings
from image_processing.drawing.shapes import rounded_rect_coverage
from image_processing.masks.compose import paint_strips

def edge_mask_key(width: int, height: int, settings: EdgeFadeSettings, radii: CornerRadii) -> tuple:
    return (int(width), int(height), float(settings.fade_px), float(settings.min_alpha), radii.as_key())

def build_edge_mask(width: int, height: int, settings: EdgeFadeSettings, radii: CornerRadii) -> np.ndarray:
    """Opaque at the border, easing linearly to ``min_alpha`` at ``fade_px`` inward."""
    min_alpha = max(0.0, min(1.0, float(settings.min_alpha)))
    fade_px = float(settings.fade_px)
    mask = np.full((height, width), min_alpha, dtype=np.float64)
    if width == 0 or height == 0:
        return mask.astype(np.float32)

    if fade_px > 0:
        strip = int(math.ceil(fade_px))

        def profile(distance: np.ndarray, _side: str) -> np.ndarray:
            return 1.0 + (min_alpha - 1.0) * np.minimum(1.0, distance / fade_px)

        paint_strips(mask, {"top": strip, "bottom": strip, "left": strip, "right": strip}, profile)

    mask *= rounded_rect_coverage((width, height), radii)
    return mask.astype(np.float32)
