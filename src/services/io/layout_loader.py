from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from core.exceptions import LayoutError
from core.geometry import CornerRadii, Rect, ScrollPosition
from core.interfaces import GeometryProvider
from core.settings import GlobalSettings

logger = logging.getLogger("NeonGlassLens")

@dataclass
class LensSpec:
    id: str
    rect: Rect
    corner_radii: CornerRadii = field(default_factory=CornerRadii)
    attributes: dict[str, Any] = field(default_factory=dict)
    fixed: bool = False

@dataclass
class PageLayout:
    page_path: str
    viewport_width: int
    viewport_height: int
    scroll: ScrollPosition = field(default_factory=ScrollPosition)
    lenses: list[LensSpec] = field(default_factory=list)
    global_settings: GlobalSettings = field(default_factory=GlobalSettings)

def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LayoutError(f"{where} must be a number, got {value!r}")
    return float(value)

def _parse_rect(value: Any, where: str) -> Rect:
    if isinstance(value, Mapping):
        try:
            parts = [value["x"], value["y"], value["width"], value["height"]]
        except KeyError as e:
            raise LayoutError(f"{where} is missing {e.args[0]!r}") from e
    elif isinstance(value, (list, tuple)) and len(value) == 4:
        parts = list(value)
    else:
        raise LayoutError(f"{where} must be [x, y, width, height] or an object, got {value!r}")
    x, y, w, h = (_number(p, where) for p in parts)
    if w < 0 or h < 0:
        raise LayoutError(f"{where} has a negative size")
    return Rect(x, y, w, h)

def _parse_radii(value: Any, where: str) -> CornerRadii:
    if value is None:
        return CornerRadii()
    if isinstance(value, (list, tuple)):
        if len(value) != 4:
            raise LayoutError(f"{where} needs four radii (tl, tr, br, bl)")
        return CornerRadii(*(_number(v, where) for v in value)).clamped()
    return CornerRadii.uniform(_number(value, where)).clamped()

def _parse_global(value: Any) -> GlobalSettings:
    settings = GlobalSettings()
    if value is None:
        return settings
    if not isinstance(value, Mapping):
        raise LayoutError("'global' must be an object")
    if "magnification" in value:
        settings.magnification = _number(value["magnification"], "global.magnification")
    if "distortion" in value:
        settings.distortion = _number(value["distortion"], "global.distortion")
    if "gain" in value:
        settings.brightness_gain = _number(value["gain"], "global.gain")
    if "interpolation" in value:
        settings.interpolation_method = str(value["interpolation"]).upper()
    if "enabled" in value:
        settings.enabled = bool(value["enabled"])
    if value.get("seed") is not None:
        settings.noise_seed = int(_number(value["seed"], "global.seed"))
    return settings

def parse_layout(data: Any, base_dir: str = "") -> PageLayout:
    if not isinstance(data, Mapping):
        raise LayoutError("Layout root must be an object")

    page = data.get("page")
    if not isinstance(page, str) or not page:
        raise LayoutError("Layout needs a 'page' image path")
    page_path = page if os.path.isabs(page) else os.path.join(base_dir, page)

    viewport = data.get("viewport") or {}
    if not isinstance(viewport, Mapping):
        raise LayoutError("'viewport' must be an object")
    vw = int(_number(viewport.get("width", 0), "viewport.width"))
    vh = int(_number(viewport.get("height", 0), "viewport.height"))

    scroll_data = data.get("scroll") or {}
    if not isinstance(scroll_data, Mapping):
        raise LayoutError("'scroll' must be an object")
    scroll = ScrollPosition(_number(scroll_data.get("x", 0), "scroll.x"), _number(scroll_data.get("y", 0), "scroll.y"))

    lenses_data = data.get("lenses")
    if not isinstance(lenses_data, list) or not lenses_data:
        raise LayoutError("Layout needs a non-empty 'lenses' list")

    lenses: list[LensSpec] = []
    seen: set[str] = set()
    for index, entry in enumerate(lenses_data):
        where = f"lenses[{index}]"
        if not isinstance(entry, Mapping):
            raise LayoutError(f"{where} must be an object")
        lens_id = str(entry.get("id") or f"lens-{index}")
        if lens_id in seen:
            raise LayoutError(f"Duplicate lens id '{lens_id}'")
        seen.add(lens_id)
        attributes = entry.get("attributes") or {}
        if not isinstance(attributes, Mapping):
            raise LayoutError(f"{where}.attributes must be an object")
        lenses.append(LensSpec(
            id=lens_id,
            rect=_parse_rect(entry.get("rect"), f"{where}.rect"),
            corner_radii=_parse_radii(entry.get("radius"), f"{where}.radius"),
            attributes=dict(attributes),
            fixed=bool(entry.get("fixed", False)),
        ))

    return PageLayout(page_path, vw, vh, scroll, lenses, _parse_global(data.get("global")))

def load_layout(path: str) -> PageLayout:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise LayoutError(f"Cannot read layout {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LayoutError(f"Layout {path} is not valid JSON: {e}") from e
    layout = parse_layout(data, os.path.dirname(os.path.abspath(path)))
    logger.info(f"Loaded layout {path} with {len(layout.lenses)} lens(es)")
    return layout

class LayoutGeometryProvider(GeometryProvider):
    """Geometry of a static page layout under a movable scroll position.

    Regular lenses live in document coordinates and move with the page;
    ``fixed`` lenses keep their viewport position.
    """

    def __init__(self, layout: PageLayout):
        self.layout = layout
        self._specs = {spec.id: spec for spec in layout.lenses}
        self._scroll = layout.scroll
        self._viewport = (layout.viewport_width, layout.viewport_height)

    def lens_ids(self) -> list[str]:
        return list(self._specs)

    def spec(self, lens_id: str) -> LensSpec:
        try:
            return self._specs[lens_id]
        except KeyError:
            raise LayoutError(f"Unknown lens '{lens_id}'") from None

    def lens_rect(self, lens_id: str) -> Rect:
        spec = self.spec(lens_id)
        if spec.fixed:
            return spec.rect
        return Rect(spec.rect.x - self._scroll.x, spec.rect.y - self._scroll.y, spec.rect.width, spec.rect.height)

    def corner_radii(self, lens_id: str) -> CornerRadii:
        return self.spec(lens_id).corner_radii

    def scroll_position(self) -> ScrollPosition:
        return self._scroll

    def set_scroll(self, x: float, y: float) -> None:
        self._scroll = ScrollPosition(float(x), float(y))

    def viewport_size(self) -> tuple[int, int]:
        return self._viewport

    def set_viewport_size(self, width: int, height: int) -> None:
        self._viewport = (int(width), int(height))
