import logging

import numpy as np
from PIL import Image

from core.main_controller import LensEffectController

logger = logging.getLogger("NeonGlassLens")

def _with_opacity(image: Image.Image, opacity: float) -> Image.Image:
    if opacity >= 1.0:
        return image
    pixels = np.array(image, dtype=np.uint8)
    pixels[..., 3] = np.floor(pixels[..., 3] * max(0.0, opacity) + 0.5).astype(np.uint8)
    return Image.fromarray(pixels)

def compose_lenses(viewport: Image.Image, controller: LensEffectController) -> Image.Image:
    """Alpha-composites every drawn lens surface over a viewport image.

    Lenses are placed at their current viewport rect at their own opacity;
    hidden surfaces and lenses partly outside the viewport are clipped.
    """
    result = viewport.convert("RGBA") if viewport.mode != "RGBA" else viewport.copy()
    canvas_w, canvas_h = result.size

    for lens in controller.lenses.values():
        surface = lens.surface
        if surface.hidden or surface.is_empty() or surface.is_clear():
            continue

        x = int(lens.current_rect.x)
        y = int(lens.current_rect.y)
        crop_left = max(0, -x)
        crop_top = max(0, -y)
        crop_right = min(surface.width, canvas_w - x)
        crop_bottom = min(surface.height, canvas_h - y)
        if crop_right <= crop_left or crop_bottom <= crop_top:
            continue

        layer = surface.to_image().crop((crop_left, crop_top, crop_right, crop_bottom))
        layer = _with_opacity(layer, lens.opacity)
        result.alpha_composite(layer, (x + crop_left, y + crop_top))

    return result
