from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable

import numpy as np
from PIL import Image

from core.constants import AppConstants
from core.geometry import CornerRadii, Rect, ScrollPosition
from core.settings import LensSettings

logger = logging.getLogger("NeonGlassLens")

@dataclass
class MaskCacheSlot:
    """One cached mask buffer, valid only while its key is unchanged."""
    key: Hashable | None = None
    buffer: np.ndarray | None = None
    builds: int = 0

    def get_or_build(self, key: Hashable, build: Callable[[], np.ndarray]) -> np.ndarray:
        if self.buffer is not None and self.key == key:
            return self.buffer
        buffer = build()
        buffer.setflags(write=False)
        self.key = key
        self.buffer = buffer
        self.builds += 1
        return buffer

    def clear(self) -> None:
        self.key = None
        self.buffer = None

class LensSurface:
    """RGBA pixel buffer a lens renders into, shape (height, width, 4)."""

    def __init__(self, width: int = 0, height: int = 0):
        self.pixels = np.zeros((max(0, height), max(0, width), 4), dtype=np.uint8)
        self.hidden = False

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def resize(self, width: int, height: int) -> bool:
        width, height = max(0, int(width)), max(0, int(height))
        if (width, height) == self.size:
            return False
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        return True

    def clear(self) -> None:
        self.pixels.fill(0)

    def is_clear(self) -> bool:
        return not self.pixels.any()

    def replace(self, pixels: np.ndarray) -> None:
        if pixels.shape != self.pixels.shape:
            raise ValueError(f"Surface buffer shape {pixels.shape} does not match {self.pixels.shape}")
        self.pixels[...] = pixels

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels.copy())

@dataclass
class LensState:
    id: str
    current_rect: Rect
    settings: LensSettings = field(default_factory=LensSettings)
    corner_radii: CornerRadii = field(default_factory=CornerRadii)
    anchor_doc_x: int | None = None
    anchor_doc_y: int | None = None
    active: bool = False
    surface: LensSurface = field(default_factory=LensSurface)
    edge_mask_cache: MaskCacheSlot = field(default_factory=MaskCacheSlot)
    interior_mask_cache: MaskCacheSlot = field(default_factory=MaskCacheSlot)
    band_mask_cache: MaskCacheSlot = field(default_factory=MaskCacheSlot)
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.sync_surface_size()

    @property
    def opacity(self) -> float:
        return self.settings.opacity

    def sync_surface_size(self) -> bool:
        width, height = self.current_rect.surface_size()
        resized = self.surface.resize(width, height)
        if resized:
            logger.debug(f"Lens '{self.id}' surface resized to {width}x{height}")
        return resized

    def update_geometry(self, rect: Rect, corner_radii: CornerRadii | None = None) -> None:
        self.current_rect = rect
        if corner_radii is not None:
            self.corner_radii = corner_radii
        self.sync_surface_size()

    def record_anchor(self, capture_scroll: ScrollPosition) -> None:
        self.anchor_doc_x = int(math.floor(self.current_rect.x + capture_scroll.x))
        self.anchor_doc_y = int(math.floor(self.current_rect.y + capture_scroll.y))

    def combined_magnification(self, global_magnification: float) -> float:
        local = self.settings.magnification
        if not local or not math.isfinite(local):
            local = 1.0
        combined = local * global_magnification
        if not math.isfinite(combined):
            combined = AppConstants.DEFAULT_MAGNIFICATION
        return max(AppConstants.MIN_MAGNIFICATION, combined)

    def clear(self) -> None:
        self.surface.clear()

    def release(self) -> None:
        """Clears the surface and drops every cached mask."""
        self.surface.clear()
        for slot in (self.edge_mask_cache, self.interior_mask_cache, self.band_mask_cache):
            slot.clear()
