from .shapes import (band_box, polygon_coverage, round_half_up, rounded_rect_coverage, rounded_rect_polygon,
                     sector_polygon)

__all__ = [
    "band_box",
    "polygon_coverage",
    "round_half_up",
    "rounded_rect_coverage",
    "rounded_rect_polygon",
    "sector_polygon",
]
