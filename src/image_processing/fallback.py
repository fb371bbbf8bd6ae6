import numpy as np

from core.constants import AppConstants

def render_fallback_glow(width: int, height: int) -> np.ndarray:
    """Soft white radial glow shown when a lens cannot be rendered from the snapshot."""
    glow = np.zeros((max(0, height), max(0, width), 4), dtype=np.uint8)
    if width <= 0 or height <= 0:
        return glow

    radius = max(width, height) / 2.0
    ys, xs = np.mgrid[0:height, 0:width]
    dist = np.hypot(xs + 0.5 - width / 2.0, ys + 0.5 - height / 2.0)
    t = np.clip(dist / radius, 0.0, 1.0)
    center_alpha = AppConstants.FALLBACK_GLOW_CENTER_ALPHA
    edge_alpha = AppConstants.FALLBACK_GLOW_EDGE_ALPHA
    alpha = center_alpha + (edge_alpha - center_alpha) * t

    glow[..., :3] = AppConstants.FALLBACK_GLOW_COLOR
    glow[..., 3] = np.floor(alpha * 255.0 + 0.5).astype(np.uint8)
    return glow
