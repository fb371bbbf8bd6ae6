from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Callable

import numpy as np
from PIL import Image, ImageChops

from core.constants import AppConstants
from core.settings import NoiseSettings

logger = logging.getLogger("NeonGlassLens")

BlendFn = Callable[[Image.Image, Image.Image], Image.Image]

class NoiseTileCache:
    """Random RGBA tiles keyed by ``(tile_size, monochrome)``, generated once."""

    def __init__(self, seed: int | None = None):
        self._rng = np.random.default_rng(seed)
        self._tiles: dict[tuple[int, bool], np.ndarray] = {}

    def __len__(self) -> int:
        return len(self._tiles)

    def get_tile(self, tile_size: int, monochrome: bool) -> np.ndarray:
        key = (int(tile_size), bool(monochrome))
        tile = self._tiles.get(key)
        if tile is None:
            tile = self._generate(*key)
            tile.setflags(write=False)
            self._tiles[key] = tile
            logger.debug(f"Generated {'mono' if monochrome else 'color'} noise tile {tile_size}x{tile_size}")
        return tile

    def _generate(self, tile_size: int, monochrome: bool) -> np.ndarray:
        tile = np.empty((tile_size, tile_size, 4), dtype=np.uint8)
        if monochrome:
            values = self._rng.integers(0, 255, size=(tile_size, tile_size), dtype=np.uint8)
            tile[..., 0] = values
            tile[..., 1] = values
            tile[..., 2] = values
        else:
            tile[..., :3] = self._rng.integers(0, 255, size=(tile_size, tile_size, 3), dtype=np.uint8)
        tile[..., 3] = 255
        return tile

    def clear(self) -> None:
        self._tiles.clear()

@lru_cache(maxsize=None)
def resolve_blend_mode() -> tuple[str, BlendFn]:
    """Soft light when this Pillow has it, overlay otherwise."""
    soft_light = getattr(ImageChops, "soft_light", None)
    if soft_light is not None:
        return "soft-light", soft_light
    logger.debug("ImageChops.soft_light unavailable, noise overlay uses overlay blending")
    return "overlay", ImageChops.overlay

def tile_over(tile: np.ndarray, width: int, height: int) -> np.ndarray:
    size_y, size_x = tile.shape[:2]
    reps = (math.ceil(height / size_y), math.ceil(width / size_x), 1)
    return np.tile(tile, reps)[:height, :width]

def composite_blend(backdrop: np.ndarray, source: np.ndarray, alpha: float, blend: BlendFn) -> np.ndarray:
    """Separable-blend source-over compositing of ``source`` at constant ``alpha``."""
    base_rgb = np.ascontiguousarray(backdrop[..., :3])
    src_rgb = np.ascontiguousarray(source[..., :3])
    mixed = np.asarray(blend(Image.fromarray(base_rgb), Image.fromarray(src_rgb)), dtype=np.float64) / 255.0

    cb = base_rgb.astype(np.float64) / 255.0
    cs = src_rgb.astype(np.float64) / 255.0
    ab = backdrop[..., 3:4].astype(np.float64) / 255.0
    a_s = alpha * (source[..., 3:4].astype(np.float64) / 255.0)

    a_o = a_s + ab * (1.0 - a_s)
    co = a_s * (1.0 - ab) * cs + a_s * ab * mixed + (1.0 - a_s) * ab * cb
    color = np.divide(co, a_o, out=np.zeros_like(co), where=a_o > 0)

    output = np.empty_like(backdrop)
    output[..., :3] = np.clip(np.floor(color * 255.0 + 0.5), 0, 255).astype(np.uint8)
    output[..., 3] = np.clip(np.floor(a_o[..., 0] * 255.0 + 0.5), 0, 255).astype(np.uint8)
    return output

def apply_noise_overlay(pixels: np.ndarray, settings: NoiseSettings, cache: NoiseTileCache) -> np.ndarray:
    alpha = max(0.0, min(1.0, float(settings.alpha)))
    height, width = pixels.shape[:2]
    if alpha == 0 or width == 0 or height == 0:
        return pixels.copy()

    tile_size = max(AppConstants.MIN_NOISE_TILE_SIZE, int(settings.tile_size))
    tile = cache.get_tile(tile_size, settings.monochrome)
    _, blend = resolve_blend_mode()
    return composite_blend(pixels, tile_over(tile, width, height), alpha, blend)
