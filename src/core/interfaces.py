from __future__ import annotations

from abc import ABC, abstractmethod

from core.geometry import CornerRadii, Rect, ScrollPosition

class GeometryProvider(ABC):
    """Live layout queries; the controller never caches these across frames."""

    @abstractmethod
    def lens_rect(self, lens_id: str) -> Rect:
        raise NotImplementedError

    def corner_radii(self, lens_id: str) -> CornerRadii:
        return CornerRadii()

    @abstractmethod
    def scroll_position(self) -> ScrollPosition:
        raise NotImplementedError

    def viewport_size(self) -> tuple[int, int]:
        return (0, 0)

class SurfaceHost(ABC):

    @abstractmethod
    def set_surfaces_hidden(self, hidden: bool) -> None:
        raise NotImplementedError
