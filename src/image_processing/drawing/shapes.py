import logging
import math
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw

from core.constants import AppConstants
from core.geometry import CornerRadii

logger = logging.getLogger("NeonGlassLens")

Point = tuple[float, float]

def _quadratic_points(p0: Point, control: Point, p1: Point, segments: int = AppConstants.CURVE_SEGMENTS) -> list[Point]:
    points = []
    for i in range(1, segments + 1):
        t = i / segments
        u = 1.0 - t
        points.append((
            u * u * p0[0] + 2 * u * t * control[0] + t * t * p1[0],
            u * u * p0[1] + 2 * u * t * control[1] + t * t * p1[1],
        ))
    return points

def rounded_rect_polygon(x: float, y: float, w: float, h: float, radii: CornerRadii) -> list[Point]:
    """Outline of a rounded rectangle whose corners are quadratic curves
    with the control point on the rectangle corner."""
    tl, tr, br, bl = radii.as_key()
    points: list[Point] = [(x + tl, y), (x + w - tr, y)]
    points += _quadratic_points((x + w - tr, y), (x + w, y), (x + w, y + tr))
    points.append((x + w, y + h - br))
    points += _quadratic_points((x + w, y + h - br), (x + w, y + h), (x + w - br, y + h))
    points.append((x + bl, y + h))
    points += _quadratic_points((x + bl, y + h), (x, y + h), (x, y + h - bl))
    points.append((x, y + tl))
    points += _quadratic_points((x, y + tl), (x, y), (x + tl, y))
    return points

def sector_polygon(corner: Point, center: Point, radius: float, start_angle: float, end_angle: float,
                   segments: int = AppConstants.CURVE_SEGMENTS) -> list[Point]:
    """Corner point, then a clockwise arc around ``center``, closed back to the corner."""
    points: list[Point] = [corner]
    for i in range(segments + 1):
        a = start_angle + (end_angle - start_angle) * i / segments
        points.append((center[0] + radius * math.cos(a), center[1] + radius * math.sin(a)))
    return points

def polygon_coverage(points: Sequence[Point], size: tuple[int, int],
                     supersample: int = AppConstants.MASK_SUPERSAMPLE) -> np.ndarray:
    """Anti-aliased area coverage of a polygon, float32 in [0, 1], shape (h, w).

    The polygon is drawn at ``supersample`` times the resolution and box
    filtered down, so pixels fully inside a straight edge get exactly 1.0.
    """
    width, height = size
    if width <= 0 or height <= 0:
        return np.zeros((max(0, height), max(0, width)), dtype=np.float32)

    scale = max(1, int(supersample))
    big = Image.new("L", (width * scale, height * scale), 0)
    draw = ImageDraw.Draw(big)
    scaled = [(px * scale - 0.5, py * scale - 0.5) for px, py in points]
    if len(scaled) >= 3:
        draw.polygon(scaled, fill=255)
    if scale > 1:
        big = big.resize((width, height), Image.Resampling.BOX)
    return np.asarray(big, dtype=np.float32) / 255.0

def rounded_rect_coverage(size: tuple[int, int], radii: CornerRadii,
                          rect: tuple[float, float, float, float] | None = None) -> np.ndarray:
    width, height = size
    x, y, w, h = rect if rect is not None else (0.0, 0.0, float(width), float(height))
    if radii.is_square() and (x, y, w, h) == (0.0, 0.0, float(width), float(height)):
        return np.ones((height, width), dtype=np.float32)
    return polygon_coverage(rounded_rect_polygon(x, y, w, h, radii), size)

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def band_box(width: int, height: int, top: float, band_height: float, left: float, right: float) -> tuple[int, int, int, int]:
    """Clamps a horizontal band inset from the lens edges.

    Returns ``(left, top, band_width, band_height)``; the band is at least one
    pixel wide and tall but may start on the bottom edge of the surface.
    """
    top_px = max(0, min(height, round_half_up(top)))
    height_px = max(1, min(height - top_px, round_half_up(band_height)))
    left_px = max(0, min(width - 1, round_half_up(left)))
    right_px = max(0, min(width - left_px - 1, round_half_up(right)))
    band_w = max(1, width - left_px - right_px)
    return left_px, top_px, band_w, height_px
