import logging
import math

import numpy as np
from PIL import Image

from core.geometry import Rect, ScrollPosition, SourceRect
from core.snapshot import Snapshot
from image_processing.resize import resample_image

logger = logging.getLogger("NeonGlassLens")

def compute_source_rect(
    lens_rect: Rect,
    anchor_doc_x: float,
    anchor_doc_y: float,
    scroll: ScrollPosition,
    capture_scroll: ScrollPosition,
    magnification: float,
    snapshot_width: int,
    snapshot_height: int,
) -> SourceRect:
    """Projects a lens onto the snapshot.

    The anchor is shifted by the scroll delta since capture so the page slides
    under a stationary lens, then a rect of ``lens / magnification`` is centered
    under the lens and clamped into the snapshot.
    """
    base_sx = anchor_doc_x - (scroll.x - capture_scroll.x)
    base_sy = anchor_doc_y - (scroll.y - capture_scroll.y)

    src_w = lens_rect.width / magnification
    src_h = lens_rect.height / magnification
    src_x = base_sx + (lens_rect.width - src_w) / 2
    src_y = base_sy + (lens_rect.height - src_h) / 2

    src_x = max(0.0, min(snapshot_width - src_w, src_x))
    src_y = max(0.0, min(snapshot_height - src_h, src_y))
    sx = int(math.floor(src_x))
    sy = int(math.floor(src_y))

    sw = max(0, min(int(math.floor(src_w)), snapshot_width - sx))
    sh = max(0, min(int(math.floor(src_h)), snapshot_height - sy))
    return SourceRect(sx, sy, sw, sh)

def sample_snapshot(snapshot: Snapshot, source: SourceRect, target_size: tuple[int, int],
                    interpolation_method: str | None = None) -> np.ndarray | None:
    """Scales the source region of the snapshot onto a buffer of ``target_size``.

    Returns None for a degenerate source or target.
    """
    width, height = target_size
    if source.is_empty() or width <= 0 or height <= 0:
        return None

    x0, y0, x1, y1 = source.as_box()
    region = Image.fromarray(np.ascontiguousarray(snapshot.pixels[y0:y1, x0:x1]))
    scaled = resample_image(region, (width, height), interpolation_method)
    return np.array(scaled, dtype=np.uint8)
