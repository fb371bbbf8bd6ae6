from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from core.constants import AppConstants
from core.geometry import CornerRadii
from core.settings import InteriorFalloffSettings
from image_processing.drawing.shapes import (polygon_coverage, round_half_up, rounded_rect_coverage,
                                             sector_polygon)
from image_processing.masks.compose import paint_strips

logger = logging.getLogger("NeonGlassLens")

@dataclass(frozen=True)
class InteriorExtents:
    """Falloff distances in whole pixels, already clamped to the lens size."""
    start: int
    top: int
    right: int
    bottom: int
    left: int
    feather: int
    rel_min_alpha: float

def resolve_extents(width: int, height: int, settings: InteriorFalloffSettings) -> InteriorExtents:
    start = max(0, round_half_up(settings.start_px or 0.0))

    def end(value: float, limit: int) -> int:
        target = round_half_up(value) if value else start + AppConstants.INTERIOR_FALLBACK_SPAN_PX
        return max(start + 1, min(limit, target))

    return InteriorExtents(
        start=start,
        top=end(settings.end_top_px, height),
        right=end(settings.end_right_px, width),
        bottom=end(settings.end_bottom_px, height),
        left=end(settings.end_left_px, width),
        feather=max(0, round_half_up(settings.feather_px or 0.0)),
        rel_min_alpha=max(0.0, min(1.0, float(settings.rel_min_alpha))),
    )

def interior_mask_key(width: int, height: int, settings: InteriorFalloffSettings, radii: CornerRadii) -> tuple:
    return (
        int(width), int(height),
        float(settings.start_px),
        float(settings.end_top_px), float(settings.end_right_px),
        float(settings.end_bottom_px), float(settings.end_left_px),
        float(settings.rel_min_alpha), float(settings.feather_px),
        radii.as_key(),
    )

def smoothstep(t: np.ndarray) -> np.ndarray:
    return t * t * (3.0 - 2.0 * t)

def falloff_profile(distance: np.ndarray, start: float, end: float, rel_min_alpha: float) -> np.ndarray:
    """1.0 up to ``start``, eased down to ``rel_min_alpha`` at ``end``, flat beyond."""
    distance = np.asarray(distance, dtype=np.float64)
    span = end - start
    if span <= 0:
        return np.where(distance <= start, 1.0, rel_min_alpha)
    t = np.clip((distance - start) / span, 0.0, 1.0)
    return 1.0 + (rel_min_alpha - 1.0) * smoothstep(t)

def _paint_corner(mask: np.ndarray, start: int, rel_min_alpha: float, ef_max: int, corner: tuple[float, float],
                  center: tuple[float, float], arc_radius: float, angles: tuple[float, float],
                  box: tuple[float, float, float, float], rx: int, ry: int, r_corner: float) -> None:
    height, width = mask.shape
    s = start
    r_max = max(1, min(min(rx, ry), r_corner + ef_max))
    r_c = max(s + 1, min(r_max, min(rx, ry)))

    x0 = max(0, int(math.floor(box[0])))
    y0 = max(0, int(math.floor(box[1])))
    x1 = min(width, int(math.ceil(box[2])))
    y1 = min(height, int(math.ceil(box[3])))
    if x1 <= x0 or y1 <= y0:
        return

    clip = sector_polygon(corner, center, arc_radius, *angles)
    coverage = polygon_coverage([(px - x0, py - y0) for px, py in clip], (x1 - x0, y1 - y0)).astype(np.float64)

    ys, xs = np.mgrid[y0:y1, x0:x1]
    dist = np.hypot(xs + 0.5 - center[0], ys + 0.5 - center[1])
    values = falloff_profile(dist, s, r_c, rel_min_alpha)

    # source-over, so the corner only ever raises the strip values
    region = mask[y0:y1, x0:x1]
    region += coverage * values * (1.0 - region)

def build_interior_mask(width: int, height: int, settings: InteriorFalloffSettings,
                        radii: CornerRadii) -> np.ndarray:
    """Vignette holding full strength near the border and easing to
    ``rel_min_alpha`` further in, with independent end distances per side.

    Rounded corners get quarter radial falloffs around their arc centers so the
    fade follows the rounding instead of meeting at a square seam.
    """
    extents = resolve_extents(width, height, settings)
    a = extents.rel_min_alpha
    mask = np.full((height, width), a, dtype=np.float64)
    if width == 0 or height == 0:
        return mask.astype(np.float32)

    ef = {
        "top": min(height, extents.top + extents.feather),
        "bottom": min(height, extents.bottom + extents.feather),
        "left": min(width, extents.left + extents.feather),
        "right": min(width, extents.right + extents.feather),
    }

    def profile(distance: np.ndarray, side: str) -> np.ndarray:
        return falloff_profile(distance, extents.start, ef[side], a)

    paint_strips(mask, ef, profile)

    tl, tr, br, bl = radii.as_key()
    etf, erf, ebf, elf = ef["top"], ef["right"], ef["bottom"], ef["left"]
    w, h = float(width), float(height)
    pi = math.pi
    corner_args = (extents.start, a, max(ef.values()))

    if tl > 0:
        _paint_corner(mask, *corner_args, (0.0, 0.0), (tl, tl), min(extents.top, extents.left),
                      (pi, 1.5 * pi), (0.0, 0.0, min(elf, tl + etf), min(etf, tl + elf)), elf, etf, tl)
    if tr > 0:
        _paint_corner(mask, *corner_args, (w, 0.0), (w - tr, tr), min(extents.top, extents.right),
                      (-0.5 * pi, 0.0), (w - min(erf, tr + etf), 0.0, w, min(etf, tr + erf)), erf, etf, tr)
    if br > 0:
        _paint_corner(mask, *corner_args, (w, h), (w - br, h - br), min(extents.bottom, extents.right),
                      (0.0, 0.5 * pi), (w - min(erf, br + ebf), h - min(ebf, br + erf), w, h), erf, ebf, br)
    if bl > 0:
        _paint_corner(mask, *corner_args, (0.0, h), (bl, h - bl), min(extents.bottom, extents.left),
                      (0.5 * pi, pi), (0.0, h - min(ebf, bl + elf), min(elf, bl + ebf), h), elf, ebf, bl)

    mask *= rounded_rect_coverage((width, height), radii)
    return mask.astype(np.float32)
