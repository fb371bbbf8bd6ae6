from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from core.constants import AppConstants, PassName
from core.exceptions import PassFailure
from core.geometry import ScrollPosition
from core.lens_state import LensState
from core.snapshot import Snapshot
from image_processing.effects import (NoiseTileCache, apply_blur, apply_brightness_gain, apply_edge_distortion,
                                      apply_noise_overlay, apply_specular_band, is_identity_gain)
from image_processing.fallback import render_fallback_glow
from image_processing.masks import (apply_alpha_mask, band_mask_key, build_band_mask, build_edge_mask,
                                    build_interior_mask, edge_mask_key, interior_mask_key)
from image_processing.sampler import compute_source_rect, sample_snapshot

logger = logging.getLogger("NeonGlassLens")

PassFn = Callable[[np.ndarray], Optional[np.ndarray]]

@dataclass(frozen=True)
class PassResult:
    name: str
    ok: bool = True
    skipped: bool = False
    error: Optional[BaseException] = None

@dataclass
class LensRenderResult:
    lens_id: str
    passes: list[PassResult] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def failed_pass(self) -> Optional[PassResult]:
        for result in self.passes:
            if not result.ok:
                return result
        return None

    @property
    def executed(self) -> list[str]:
        return [r.name for r in self.passes if r.ok and not r.skipped]

@dataclass
class RenderContext:
    lens: LensState
    snapshot: Snapshot
    scroll: ScrollPosition
    global_magnification: float = AppConstants.DEFAULT_MAGNIFICATION
    distortion: float = AppConstants.DEFAULT_DISTORTION
    brightness_gain: float = AppConstants.DEFAULT_BRIGHTNESS_GAIN
    interpolation_method: str = AppConstants.DEFAULT_INTERPOLATION_METHOD

class RenderingPipeline:
    """Renders one lens surface from the snapshot in a fixed pass order.

    Passes run on a working copy; the surface is only written once all of
    them succeeded, otherwise it receives the fallback glow.
    """

    def __init__(self, noise_cache: Optional[NoiseTileCache] = None):
        self.noise_cache = noise_cache or NoiseTileCache()

    def _passes(self, ctx: RenderContext) -> list[tuple[PassName, Optional[PassFn]]]:
        lens = ctx.lens
        settings = lens.settings
        width, height = lens.surface.size
        radii = lens.corner_radii

        def sample(_buffer: np.ndarray) -> Optional[np.ndarray]:
            return self._sample(ctx)

        def edge_mask(buffer: np.ndarray) -> np.ndarray:
            mask = lens.edge_mask_cache.get_or_build(
                edge_mask_key(width, height, settings.edge_fade, radii),
                lambda: build_edge_mask(width, height, settings.edge_fade, radii),
            )
            return apply_alpha_mask(buffer, mask)

        def interior_mask(buffer: np.ndarray) -> np.ndarray:
            mask = lens.interior_mask_cache.get_or_build(
                interior_mask_key(width, height, settings.interior, radii),
                lambda: build_interior_mask(width, height, settings.interior, radii),
            )
            return apply_alpha_mask(buffer, mask)

        def band_mask(buffer: np.ndarray) -> np.ndarray:
            mask = lens.band_mask_cache.get_or_build(
                band_mask_key(width, height, settings.band_mask),
                lambda: build_band_mask(width, height, settings.band_mask),
            )
            return apply_alpha_mask(buffer, mask)

        distortion_on = math.isfinite(ctx.distortion) and ctx.distortion > 0
        return [
            (PassName.SAMPLE, sample),
            (PassName.DISTORTION, (lambda b: apply_edge_distortion(b, ctx.distortion)) if distortion_on else None),
            (PassName.BLUR, lambda b: apply_blur(b, settings.blur_px)),
            (PassName.SPECULAR, (lambda b: apply_specular_band(b, settings.specular)) if settings.specular.enabled else None),
            (PassName.NOISE, (lambda b: apply_noise_overlay(b, settings.noise, self.noise_cache)) if settings.noise.enabled else None),
            (PassName.EDGE_MASK, edge_mask),
            (PassName.INTERIOR_MASK, interior_mask),
            (PassName.BAND_MASK, band_mask if settings.band_mask.enabled else None),
            (PassName.GAIN, None if is_identity_gain(ctx.brightness_gain) else (lambda b: apply_brightness_gain(b, ctx.brightness_gain))),
        ]

    def _sample(self, ctx: RenderContext) -> Optional[np.ndarray]:
        lens = ctx.lens
        rect = lens.current_rect
        snapshot = ctx.snapshot
        capture_scroll = ScrollPosition(snapshot.capture_scroll_x, snapshot.capture_scroll_y)

        anchor_x = lens.anchor_doc_x
        anchor_y = lens.anchor_doc_y
        if anchor_x is None or anchor_y is None:
            anchor_x = math.floor(rect.x + capture_scroll.x)
            anchor_y = math.floor(rect.y + capture_scroll.y)

        source = compute_source_rect(
            rect, anchor_x, anchor_y, ctx.scroll, capture_scroll,
            lens.combined_magnification(ctx.global_magnification),
            snapshot.width, snapshot.height,
        )
        return sample_snapshot(snapshot, source, lens.surface.size, ctx.interpolation_method)

    def _run_pass(self, name: PassName, fn: PassFn, buffer: np.ndarray, lens_id: str) -> tuple[PassResult, np.ndarray]:
        try:
            result = fn(buffer)
            if result is None:
                return PassResult(name.value), buffer
            if result.shape != buffer.shape or result.dtype != np.uint8:
                raise ValueError(f"pass produced {result.dtype} buffer of shape {result.shape}, expected {buffer.shape}")
            return PassResult(name.value), result
        except Exception as e:
            failure = PassFailure(name.value, lens_id, e)
            failure.__cause__ = e
            return PassResult(name.value, ok=False, error=failure), buffer

    def render_lens(self, ctx: RenderContext) -> LensRenderResult:
        lens = ctx.lens
        surface = lens.surface
        report = LensRenderResult(lens.id)

        surface.clear()
        if surface.is_empty():
            return report

        buffer = np.zeros_like(surface.pixels)
        for name, fn in self._passes(ctx):
            if fn is None:
                report.passes.append(PassResult(name.value, skipped=True))
                continue
            result, buffer = self._run_pass(name, fn, buffer, lens.id)
            report.passes.append(result)
            if not result.ok:
                logger.warning(f"{result.error}; rendering fallback", exc_info=result.error)
                self.render_fallback(lens)
                report.used_fallback = True
                return report

        surface.replace(buffer)
        return report

    def render_fallback(self, lens: LensState) -> None:
        width, height = lens.surface.size
        lens.surface.replace(render_fallback_glow(width, height))
