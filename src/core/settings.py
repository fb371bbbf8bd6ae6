from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Mapping

from core.constants import AppConstants

logger = logging.getLogger("NeonGlassLens")

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))

def _attr(attributes: Mapping[str, Any], key: str) -> Any:
    value = attributes.get(key)
    if value is None:
        value = attributes.get(f"data-{key}")
    return value

def _parse_float(attributes: Mapping[str, Any], key: str, default: float) -> float:
    raw = _attr(attributes, key)
    if raw is None or raw == "":
        return float(default)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Attribute '{key}' has non-numeric value {raw!r}, using default {default}")
        return float(default)
    if not math.isfinite(value):
        logger.warning(f"Attribute '{key}' is not finite ({raw!r}), using default {default}")
        return float(default)
    return value

def _parse_int(attributes: Mapping[str, Any], key: str, default: int) -> int:
    raw = _attr(attributes, key)
    if raw is None or raw == "":
        return int(default)
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Attribute '{key}' has non-integer value {raw!r}, using default {default}")
        return int(default)

def _field_names(obj: Any) -> set[str]:
    return {f.name for f in fields(obj)}

def _flag_default_on(attributes: Mapping[str, Any], key: str) -> bool:
    raw = _attr(attributes, key)
    if isinstance(raw, bool):
        return raw
    return str(raw if raw not in (None, "") else "true").strip().lower() != "false"

def _flag_default_off(attributes: Mapping[str, Any], key: str) -> bool:
    raw = _attr(attributes, key)
    if isinstance(raw, bool):
        return raw
    return str(raw if raw not in (None, "") else "false").strip().lower() == "true"

@dataclass
class SpecularSettings:
    enabled: bool = True
    top: float = AppConstants.DEFAULT_SPECULAR_TOP
    height: float = AppConstants.DEFAULT_SPECULAR_HEIGHT
    left: float = AppConstants.DEFAULT_SPECULAR_LEFT
    right: float = AppConstants.DEFAULT_SPECULAR_RIGHT
    strength: float = AppConstants.DEFAULT_SPECULAR_STRENGTH
    radius: float = AppConstants.DEFAULT_SPECULAR_RADIUS
    gamma: float = AppConstants.DEFAULT_SPECULAR_GAMMA

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> "SpecularSettings":
        return cls(
            enabled=_flag_default_on(attributes, "lens-specular-enabled"),
            top=_parse_float(attributes, "lens-specular-top", AppConstants.DEFAULT_SPECULAR_TOP),
            height=_parse_float(attributes, "lens-specular-height", AppConstants.DEFAULT_SPECULAR_HEIGHT),
            left=_parse_float(attributes, "lens-specular-left", AppConstants.DEFAULT_SPECULAR_LEFT),
            right=_parse_float(attributes, "lens-specular-right", AppConstants.DEFAULT_SPECULAR_RIGHT),
            strength=_clamp(_parse_float(attributes, "lens-specular-strength", AppConstants.DEFAULT_SPECULAR_STRENGTH), 0.0, 1.0),
            radius=max(0.0, _parse_float(attributes, "lens-specular-radius", AppConstants.DEFAULT_SPECULAR_RADIUS)),
            gamma=max(AppConstants.MIN_SPECULAR_GAMMA, _parse_float(attributes, "lens-specular-gamma", AppConstants.DEFAULT_SPECULAR_GAMMA)),
        )

    def clamp(self) -> None:
        self.strength = _clamp(float(self.strength), 0.0, 1.0)
        self.radius = max(0.0, float(self.radius))
        self.gamma = max(AppConstants.MIN_SPECULAR_GAMMA, float(self.gamma))

@dataclass
class BandMaskSettings:
    enabled: bool = False
    top: float = AppConstants.DEFAULT_BAND_TOP
    height: float = AppConstants.DEFAULT_BAND_HEIGHT
    left: float = AppConstants.DEFAULT_BAND_LEFT
    right: float = AppConstants.DEFAULT_BAND_RIGHT
    alpha_top: float = AppConstants.DEFAULT_BAND_ALPHA_TOP
    alpha_bottom: float = AppConstants.DEFAULT_BAND_ALPHA_BOTTOM

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> "BandMaskSettings":
        return cls(
            enabled=_flag_default_off(attributes, "lens-band-enabled"),
            top=_parse_float(attributes, "lens-band-top", AppConstants.DEFAULT_BAND_TOP),
            height=_parse_float(attributes, "lens-band-height", AppConstants.DEFAULT_BAND_HEIGHT),
            left=_parse_float(attributes, "lens-band-left", AppConstants.DEFAULT_BAND_LEFT),
            right=_parse_float(attributes, "lens-band-right", AppConstants.DEFAULT_BAND_RIGHT),
            alpha_top=_clamp(_parse_float(attributes, "lens-band-alpha-top", AppConstants.DEFAULT_BAND_ALPHA_TOP), 0.0, 1.0),
            alpha_bottom=_clamp(_parse_float(attributes, "lens-band-alpha-bottom", AppConstants.DEFAULT_BAND_ALPHA_BOTTOM), 0.0, 1.0),
        )

    def clamp(self) -> None:
        self.alpha_top = _clamp(float(self.alpha_top), 0.0, 1.0)
        self.alpha_bottom = _clamp(float(self.alpha_bottom), 0.0, 1.0)

@dataclass
class NoiseSettings:
    enabled: bool = True
    alpha: float = AppConstants.DEFAULT_NOISE_ALPHA
    tile_size: int = AppConstants.DEFAULT_NOISE_TILE_SIZE
    monochrome: bool = True

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> "NoiseSettings":
        return cls(
            enabled=_flag_default_on(attributes, "lens-noise-enabled"),
            alpha=_clamp(_parse_float(attributes, "lens-noise-alpha", AppConstants.DEFAULT_NOISE_ALPHA), 0.0, 1.0),
            tile_size=max(AppConstants.MIN_NOISE_TILE_SIZE, _parse_int(attributes, "lens-noise-size", AppConstants.DEFAULT_NOISE_TILE_SIZE)),
            monochrome=_flag_default_on(attributes, "lens-noise-mono"),
        )

    def clamp(self) -> None:
        self.alpha = _clamp(float(self.alpha), 0.0, 1.0)
        self.tile_size = max(AppConstants.MIN_NOISE_TILE_SIZE, int(self.tile_size))

@dataclass
class EdgeFadeSettings:
    fade_px: float = AppConstants.DEFAULT_EDGE_FADE_PX
    min_alpha: float = AppConstants.DEFAULT_EDGE_MIN_ALPHA

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> "EdgeFadeSettings":
        return cls(
            fade_px=max(0.0, _parse_float(attributes, "lens-edge-fade", AppConstants.DEFAULT_EDGE_FADE_PX)),
            min_alpha=_clamp(_parse_float(attributes, "lens-edge-min-alpha", AppConstants.DEFAULT_EDGE_MIN_ALPHA), 0.0, 1.0),
        )

    def clamp(self) -> None:
        self.fade_px = max(0.0, float(self.fade_px))
        self.min_alpha = _clamp(float(self.min_alpha), 0.0, 1.0)

@dataclass
class InteriorFalloffSettings:
    start_px: float = AppConstants.DEFAULT_INTERIOR_START_PX
    end_top_px: float = AppConstants.DEFAULT_INTERIOR_END_TOP_PX
    end_right_px: float = AppConstants.DEFAULT_INTERIOR_END_RIGHT_PX
    end_bottom_px: float = AppConstants.DEFAULT_INTERIOR_END_BOTTOM_PX
    end_left_px: float = AppConstants.DEFAULT_INTERIOR_END_LEFT_PX
    rel_min_alpha: float = AppConstants.DEFAULT_INTERIOR_REL_MIN_ALPHA
    feather_px: float = AppConstants.DEFAULT_INTERIOR_FEATHER_PX

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> "InteriorFalloffSettings":
        return cls(
            start_px=max(0.0, _parse_float(attributes, "lens-interior-start", AppConstants.DEFAULT_INTERIOR_START_PX)),
            end_top_px=_parse_float(attributes, "lens-interior-end-top", AppConstants.DEFAULT_INTERIOR_END_TOP_PX),
            end_right_px=_parse_float(attributes, "lens-interior-end-right", AppConstants.DEFAULT_INTERIOR_END_RIGHT_PX),
            end_bottom_px=_parse_float(attributes, "lens-interior-end-bottom", AppConstants.DEFAULT_INTERIOR_END_BOTTOM_PX),
            end_left_px=_parse_float(attributes, "lens-interior-end-left", AppConstants.DEFAULT_INTERIOR_END_LEFT_PX),
            rel_min_alpha=_clamp(_parse_float(attributes, "lens-interior-min-alpha", AppConstants.DEFAULT_INTERIOR_REL_MIN_ALPHA), 0.0, 1.0),
            feather_px=max(0.0, _parse_float(attributes, "lens-interior-feather", AppConstants.DEFAULT_INTERIOR_FEATHER_PX)),
        )

    def clamp(self) -> None:
        self.start_px = max(0.0, float(self.start_px))
        self.rel_min_alpha = _clamp(float(self.rel_min_alpha), 0.0, 1.0)
        self.feather_px = max(0.0, float(self.feather_px))

@dataclass
class LensSettings:
    magnification: float = AppConstants.DEFAULT_MAGNIFICATION
    opacity: float = AppConstants.DEFAULT_OPACITY
    blur_px: float = AppConstants.DEFAULT_BLUR_PX
    specular: SpecularSettings = field(default_factory=SpecularSettings)
    band_mask: BandMaskSettings = field(default_factory=BandMaskSettings)
    noise: NoiseSettings = field(default_factory=NoiseSettings)
    edge_fade: EdgeFadeSettings = field(default_factory=EdgeFadeSettings)
    interior: InteriorFalloffSettings = field(default_factory=InteriorFalloffSettings)

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any] | None) -> "LensSettings":
        attributes = attributes or {}
        return cls(
            magnification=_parse_float(attributes, "lens-magnification", AppConstants.DEFAULT_MAGNIFICATION),
            opacity=_clamp(_parse_float(attributes, "lens-opacity", AppConstants.DEFAULT_OPACITY), 0.0, 1.0),
            blur_px=max(0.0, _parse_float(attributes, "lens-blur", AppConstants.DEFAULT_BLUR_PX)),
            specular=SpecularSettings.from_attributes(attributes),
            band_mask=BandMaskSettings.from_attributes(attributes),
            noise=NoiseSettings.from_attributes(attributes),
            edge_fade=EdgeFadeSettings.from_attributes(attributes),
            interior=InteriorFalloffSettings.from_attributes(attributes),
        )

    def clamp(self) -> None:
        self.opacity = _clamp(float(self.opacity), 0.0, 1.0)
        self.blur_px = max(0.0, float(self.blur_px))
        for group in (self.specular, self.band_mask, self.noise, self.edge_fade, self.interior):
            group.clamp()

    def clone(self) -> "LensSettings":
        return copy.deepcopy(self)

    def apply_changes(self, changes: Mapping[str, Any]) -> None:
        """Applies dotted-path overrides such as ``{"specular.strength": 0.5}``.

        Values are held to the same limits as parsed attributes.
        """
        for path, value in changes.items():
            target = self
            parts = path.split(".")
            for part in parts[:-1]:
                if part not in _field_names(target) or not is_dataclass(getattr(target, part)):
                    raise AttributeError(f"Unknown lens setting group '{part}' in '{path}'")
                target = getattr(target, part)
            if parts[-1] not in _field_names(target):
                raise AttributeError(f"Unknown lens setting '{path}'")
            setattr(target, parts[-1], value)
        self.clamp()

@dataclass
class GlobalSettings:
    magnification: float = AppConstants.DEFAULT_MAGNIFICATION
    distortion: float = AppConstants.DEFAULT_DISTORTION
    enabled: bool = True
    brightness_gain: float = AppConstants.DEFAULT_BRIGHTNESS_GAIN
    interpolation_method: str = AppConstants.DEFAULT_INTERPOLATION_METHOD
    noise_seed: int | None = None
