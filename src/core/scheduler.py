import logging
from typing import Callable, Optional

from PyQt6.QtCore import QTimer

from core.constants import AppConstants
from core.geometry import ScrollPosition

logger = logging.getLogger("NeonGlassLens")

ScheduleFn = Callable[[int, Callable[[], None]], None]

def qt_single_shot(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)

class RedrawScheduler:
    """Coalesces redraw requests into at most one pending frame callback."""

    def __init__(self, callback: Callable[[], None], schedule_fn: Optional[ScheduleFn] = None,
                 interval_ms: int = AppConstants.FRAME_INTERVAL_MS):
        self._callback = callback
        self._schedule_fn = schedule_fn or qt_single_shot
        self._interval_ms = interval_ms
        self._pending_reasons: set[str] = set()
        self._flush_scheduled = False

    @property
    def is_pending(self) -> bool:
        return self._flush_scheduled

    @property
    def pending_reasons(self) -> frozenset:
        return frozenset(self._pending_reasons)

    def request(self, reason: str = "update") -> None:
        self._pending_reasons.add(reason)
        if not self._flush_scheduled:
            self._flush_scheduled = True
            self._schedule_fn(self._interval_ms, self._flush)

    def flush_now(self) -> bool:
        if not self._flush_scheduled:
            return False
        self._flush()
        return True

    def _flush(self) -> None:
        if not self._flush_scheduled:
            return
        reasons = self._pending_reasons.copy()
        self._pending_reasons.clear()
        self._flush_scheduled = False
        logger.debug(f"Redraw flush, reasons: {sorted(reasons)}")
        self._callback()

class ScrollWatcher:
    """Polls the scroll position once per frame and reports changes.

    Catches programmatic scrolls that never emit a scroll notification.
    """

    def __init__(self, read_scroll: Callable[[], ScrollPosition], on_change: Callable[[ScrollPosition], None],
                 schedule_fn: Optional[ScheduleFn] = None, interval_ms: int = AppConstants.FRAME_INTERVAL_MS):
        self._read_scroll = read_scroll
        self._on_change = on_change
        self._schedule_fn = schedule_fn or qt_single_shot
        self._interval_ms = interval_ms
        self._last: ScrollPosition | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._last = self._read_scroll()
        self._schedule_fn(self._interval_ms, self._tick)

    def stop(self) -> None:
        self._running = False

    def tick(self) -> bool:
        current = self._read_scroll()
        changed = self._last is not None and current != self._last
        self._last = current
        if changed:
            self._on_change(current)
        return changed

    def _tick(self) -> None:
        if not self._running:
            return
        try:
            self.tick()
        except Exception as e:
            logger.error(f"Scroll watcher tick failed: {e}", exc_info=True)
        if self._running:
            self._schedule_fn(self._interval_ms, self._tick)
