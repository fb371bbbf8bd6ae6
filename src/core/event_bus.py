from __future__ import annotations

import logging
import weakref
from collections import defaultdict
from typing import Callable, Any, Union, Type, TypeVar

from core.events import Event

logger = logging.getLogger("NeonGlassLens")

T = TypeVar('T', bound=Event)

class _StrongRefWrapper:
    def __init__(self, callback: Callable[[Any], None]):
        self._callback = callback

    def __call__(self) -> Callable[[Any], None] | None:
        return self._callback

def _is_lambda(callback: Callable) -> bool:
    return getattr(callback, '__name__', None) == '<lambda>'

class EventBus:
    """Synchronous typed pub/sub.

    Bound methods are held weakly so a destroyed controller stops receiving
    events without unsubscribing. Lambdas and plain callables that cannot be
    weakly referenced are held strongly.
    """

    def __init__(self):
        self._subscribers: dict[type, list[Union[weakref.ref, weakref.WeakMethod, _StrongRefWrapper]]] = defaultdict(list)

    def subscribe(self, event_type: Type[T], callback: Callable[[T], None]) -> None:
        for existing_weak_cb in self._subscribers[event_type]:
            existing_cb = existing_weak_cb()
            if existing_cb is not None and existing_cb == callback:
                return

        if _is_lambda(callback):
            weak_cb = _StrongRefWrapper(callback)
        elif getattr(callback, '__self__', None) is not None:
            try:
                weak_cb = weakref.WeakMethod(callback)
            except TypeError:
                logger.debug(f"EventBus: WeakMethod failed for {callback}, using strong reference")
                weak_cb = _StrongRefWrapper(callback)
        else:
            try:
                weak_cb = weakref.ref(callback)
            except TypeError:
                logger.debug(f"EventBus: weakref not supported for {callback}, using strong reference")
                weak_cb = _StrongRefWrapper(callback)

        self._subscribers[event_type].append(weak_cb)

    def unsubscribe(self, event_type: Type[T], callback: Callable[[T], None]) -> None:
        if event_type not in self._subscribers:
            return

        self._subscribers[event_type] = [
            weak_cb for weak_cb in self._subscribers[event_type]
            if weak_cb() is not None and weak_cb() != callback
        ]

    def emit(self, event: Event) -> None:
        event_type = type(event)
        if event_type not in self._subscribers:
            return

        for weak_cb in list(self._subscribers[event_type]):
            cb = weak_cb()
            if cb is None:
                continue
            try:
                cb(event)
            except Exception as e:
                logger.error(f"EventBus error in callback for event '{event_type.__name__}': {e}", exc_info=True)

        self._subscribers[event_type] = [
            weak_cb for weak_cb in self._subscribers[event_type] if weak_cb() is not None
        ]

    def subscriber_count(self, event_type: type) -> int:
        return sum(1 for weak_cb in self._subscribers.get(event_type, []) if weak_cb() is not None)
