from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Union

import numpy as np
from PIL import Image

from core.exceptions import CaptureFailure
from core.geometry import ScrollPosition

logger = logging.getLogger("NeonGlassLens")

CaptureResult = Union[Image.Image, tuple]
CaptureCallable = Callable[[], Union[CaptureResult, Awaitable[CaptureResult]]]

def _pixels_from_capture(result: Any) -> np.ndarray:
    if isinstance(result, Image.Image):
        image = result if result.mode == "RGBA" else result.convert("RGBA")
        return np.array(image, dtype=np.uint8)

    if isinstance(result, tuple) and len(result) == 3:
        pixels, width, height = result
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise CaptureFailure(f"Capture returned empty dimensions {width}x{height}")
        if isinstance(pixels, (bytes, bytearray, memoryview)):
            buffer = np.frombuffer(pixels, dtype=np.uint8)
        else:
            buffer = np.asarray(pixels, dtype=np.uint8)
        if buffer.size != width * height * 4:
            raise CaptureFailure(
                f"Capture buffer holds {buffer.size} bytes, expected {width * height * 4} for {width}x{height} RGBA"
            )
        return buffer.reshape((height, width, 4)).copy()

    raise CaptureFailure(f"Unsupported capture result of type {type(result).__name__}")

@dataclass(frozen=True)
class Snapshot:
    pixels: np.ndarray
    width: int
    height: int
    capture_scroll_x: float = 0.0
    capture_scroll_y: float = 0.0

    @classmethod
    def from_capture(cls, result: Any, scroll: ScrollPosition | None = None) -> "Snapshot":
        pixels = _pixels_from_capture(result)
        pixels.setflags(write=False)
        scroll = scroll or ScrollPosition()
        height, width = pixels.shape[:2]
        if width <= 0 or height <= 0:
            raise CaptureFailure(f"Capture produced an empty image {width}x{height}")
        return cls(pixels, int(width), int(height), float(scroll.x), float(scroll.y))

class SnapshotState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    READY = "ready"
    FAILED = "failed"

class SnapshotStore:
    """Holds the single full-page capture of a session.

    Acquisition runs at most once. Calls made while a capture is in flight,
    after it succeeded, or after it failed return without capturing again.
    """

    def __init__(self):
        self._snapshot: Snapshot | None = None
        self._state = SnapshotState.IDLE
        self.last_error: BaseException | None = None

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    @property
    def state(self) -> SnapshotState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SnapshotState.READY

    @property
    def has_failed(self) -> bool:
        return self._state is SnapshotState.FAILED

    async def acquire(self, capture: CaptureCallable, scroll: ScrollPosition | None = None) -> Snapshot | None:
        if self._state is not SnapshotState.IDLE:
            logger.debug(f"Snapshot acquisition skipped, store is {self._state.value}")
            return self._snapshot

        self._state = SnapshotState.CAPTURING
        try:
            result = capture()
            if inspect.isawaitable(result):
                result = await result
            if result is None:
                raise CaptureFailure("Capture returned no image")
            snapshot = Snapshot.from_capture(result, scroll)
        except Exception as e:
            self.last_error = e
            self._state = SnapshotState.FAILED
            logger.error(f"Snapshot capture failed, lenses will use the fallback glow: {e}", exc_info=True)
            return None

        self._snapshot = snapshot
        self._state = SnapshotState.READY
        logger.info(f"Snapshot captured: {snapshot.width}x{snapshot.height} at scroll ({snapshot.capture_scroll_x}, {snapshot.capture_scroll_y})")
        return snapshot
