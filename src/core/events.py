from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, runtime_checkable

from core.geometry import ScrollPosition

@runtime_checkable
class Event(Protocol):
    pass

T = TypeVar('T', bound=Event)

@dataclass(frozen=True)
class LensVisibilityChangedEvent:
    lens_id: str
    visible: bool

@dataclass(frozen=True)
class GlobalMagnificationChangedEvent:
    magnification: float

@dataclass(frozen=True)
class GlobalDistortionChangedEvent:
    distortion: float

@dataclass(frozen=True)
class LensEffectToggledEvent:
    enabled: bool

@dataclass(frozen=True)
class LensParametersChangedEvent:
    lens_id: str
    changes: dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class ScrollChangedEvent:
    position: ScrollPosition

@dataclass(frozen=True)
class ViewportResizedEvent:
    width: int
    height: int

@dataclass(frozen=True)
class SnapshotCapturedEvent:
    width: int
    height: int

@dataclass(frozen=True)
class SnapshotCaptureFailedEvent:
    error: str

@dataclass(frozen=True)
class LensRenderedEvent:
    lens_id: str
    used_fallback: bool
    failed_pass: str | None = None
