from __future__ import annotations

from dataclasses import dataclass

from core.constants import AppConstants

@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def surface_size(self) -> tuple[int, int]:
        return max(0, int(self.width)), max(0, int(self.height))

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

@dataclass(frozen=True)
class ScrollPosition:
    x: float = 0.0
    y: float = 0.0

@dataclass(frozen=True)
class CornerRadii:
    top_left: float = 0.0
    top_right: float = 0.0
    bottom_right: float = 0.0
    bottom_left: float = 0.0

    @classmethod
    def uniform(cls, radius: float) -> "CornerRadii":
        return cls(radius, radius, radius, radius)

    def clamped(self) -> "CornerRadii":
        return CornerRadii(
            max(0.0, float(self.top_left or 0.0)),
            max(0.0, float(self.top_right or 0.0)),
            max(0.0, float(self.bottom_right or 0.0)),
            max(0.0, float(self.bottom_left or 0.0)),
        )

    def as_key(self) -> tuple[float, float, float, float]:
        c = self.clamped()
        return (c.top_left, c.top_right, c.bottom_right, c.bottom_left)

    def is_square(self) -> bool:
        return not any(self.as_key())

@dataclass(frozen=True)
class SourceRect:
    x: int
    y: int
    width: int
    height: int

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_box(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)

def is_near_viewport(rect: Rect, viewport_width: float, viewport_height: float,
                     margin: float = AppConstants.VISIBILITY_ROOT_MARGIN_PX) -> bool:
    """Intersection test with a vertical root margin, as used for lens visibility."""
    if rect.is_empty() or viewport_width <= 0 or viewport_height <= 0:
        return False
    top = -float(margin)
    bottom = float(viewport_height) + float(margin)
    inter_w = min(rect.right, float(viewport_width)) - max(rect.x, 0.0)
    inter_h = min(rect.bottom, bottom) - max(rect.y, top)
    return inter_w > 0 and inter_h > 0
