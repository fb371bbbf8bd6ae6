from typing import Callable

import numpy as np

StripProfile = Callable[[np.ndarray, str], np.ndarray]

def paint_strips(mask: np.ndarray, extents: dict[str, int], profile: StripProfile) -> None:
    """Paints the top, bottom, left and right border strips of ``mask`` in place.

    ``profile(distance, side)`` maps the index distance from that side's border
    to a mask value. Where strips overlap the larger value is kept.
    """
    height, width = mask.shape
    top = max(0, min(int(extents.get("top", 0)), height))
    bottom = max(0, min(int(extents.get("bottom", 0)), height))
    left = max(0, min(int(extents.get("left", 0)), width))
    right = max(0, min(int(extents.get("right", 0)), width))

    if top:
        values = profile(np.arange(top, dtype=np.float64), "top")[:, None]
        np.maximum(mask[:top], values, out=mask[:top])
    if bottom:
        values = profile(np.arange(bottom, dtype=np.float64)[::-1], "bottom")[:, None]
        np.maximum(mask[height - bottom:], values, out=mask[height - bottom:])
    if left:
        values = profile(np.arange(left, dtype=np.float64), "left")[None, :]
        np.maximum(mask[:, :left], values, out=mask[:, :left])
    if right:
        values = profile(np.arange(right, dtype=np.float64)[::-1], "right")[None, :]
        np.maximum(mask[:, width - right:], values, out=mask[:, width - right:])

def apply_alpha_mask(pixels: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Multiplies the alpha channel by ``mask``, the destination-in composite."""
    if mask.shape != pixels.shape[:2]:
        raise ValueError(f"Mask shape {mask.shape} does not match surface {pixels.shape[:2]}")
    output = pixels.copy()
    alpha = pixels[..., 3].astype(np.float64) * mask
    output[..., 3] = np.clip(np.floor(alpha + 0.5), 0, 255).astype(np.uint8)
    return output
