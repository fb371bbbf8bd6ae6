import logging
import math

import numpy as np

from core.constants import AppConstants

logger = logging.getLogger("NeonGlassLens")

def apply_edge_distortion(pixels: np.ndarray, strength: float,
                          threshold: float = AppConstants.DISTORTION_EDGE_THRESHOLD) -> np.ndarray:
    """Barrel distortion of the outer ring of the lens.

    Every pixel whose edge proximity exceeds ``threshold`` is backward mapped
    towards the center with nearest sampling; all other pixels, and ring
    pixels whose source falls outside the buffer, are copied unchanged.
    """
    output = pixels.copy()
    height, width = pixels.shape[:2]
    if width == 0 or height == 0 or not strength or strength <= 0:
        return output

    cx = width / 2.0
    cy = height / 2.0
    ys, xs = np.mgrid[0:height, 0:width]
    dx = xs.astype(np.float64) - cx
    dy = ys.astype(np.float64) - cy

    edge = np.maximum(np.abs(dx) / cx, np.abs(dy) / cy)
    ring = edge > threshold
    if not ring.any():
        return output

    dx = dx[ring]
    dy = dy[ring]
    edge_factor = (edge[ring] - threshold) / (1.0 - threshold)
    amount = strength * edge_factor * edge_factor * AppConstants.DISTORTION_AMOUNT_SCALE
    max_distance = math.hypot(cx, cy)
    distortion = 1.0 + amount * (np.hypot(dx, dy) / max_distance)

    src_x = cx + dx / distortion
    src_y = cy + dy / distortion
    valid = (src_x >= 0) & (src_x < width - 1) & (src_y >= 0) & (src_y < height - 1)
    if not valid.any():
        return output

    dst_y = ys[ring][valid]
    dst_x = xs[ring][valid]
    sx = np.floor(src_x[valid]).astype(np.intp)
    sy = np.floor(src_y[valid]).astype(np.intp)
    output[dst_y, dst_x] = pixels[sy, sx]
    return output
