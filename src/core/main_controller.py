from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from core.event_bus import EventBus
from core.events import (GlobalDistortionChangedEvent, GlobalMagnificationChangedEvent, LensEffectToggledEvent,
                         LensParametersChangedEvent, LensRenderedEvent, LensVisibilityChangedEvent,
                         ScrollChangedEvent, SnapshotCapturedEvent, SnapshotCaptureFailedEvent,
                         ViewportResizedEvent)
from core.interfaces import GeometryProvider, SurfaceHost
from core.lens_state import LensState
from core.scheduler import RedrawScheduler, ScheduleFn, ScrollWatcher
from core.settings import GlobalSettings, LensSettings
from core.snapshot import CaptureCallable, SnapshotState, SnapshotStore
from image_processing.effects import NoiseTileCache
from image_processing.pipeline import LensRenderResult, RenderContext, RenderingPipeline

logger = logging.getLogger("NeonGlassLens")

class LensEffectController:
    """Owns the lenses and the snapshot and drives redraws.

    Every lens is redrawn in one synchronous pass per scheduled frame. Until
    the snapshot is available, or once capture has failed, every lens shows
    the fallback glow instead.
    """

    def __init__(
        self,
        geometry: GeometryProvider,
        settings: Optional[GlobalSettings] = None,
        event_bus: Optional[EventBus] = None,
        schedule_fn: Optional[ScheduleFn] = None,
        surface_host: Optional[SurfaceHost] = None,
        pipeline: Optional[RenderingPipeline] = None,
    ):
        self.geometry = geometry
        self.settings = settings or GlobalSettings()
        self.event_bus = event_bus or EventBus()
        self.surface_host = surface_host
        self.snapshot_store = SnapshotStore()
        self.pipeline = pipeline or RenderingPipeline(NoiseTileCache(self.settings.noise_seed))
        self.scheduler = RedrawScheduler(self.render_all, schedule_fn)
        self._schedule_fn = schedule_fn
        self._scroll_watcher: Optional[ScrollWatcher] = None

        self.lenses: dict[str, LensState] = {}
        self.last_results: dict[str, LensRenderResult] = {}
        self.redraw_count = 0

        self._connect_events()

    def _connect_events(self):
        bus = self.event_bus
        bus.subscribe(LensVisibilityChangedEvent, self._on_visibility_changed)
        bus.subscribe(GlobalMagnificationChangedEvent, self._on_magnification_changed)
        bus.subscribe(GlobalDistortionChangedEvent, self._on_distortion_changed)
        bus.subscribe(LensEffectToggledEvent, self._on_effect_toggled)
        bus.subscribe(LensParametersChangedEvent, self._on_parameters_changed)
        bus.subscribe(ScrollChangedEvent, self._on_scroll_changed)
        bus.subscribe(ViewportResizedEvent, self._on_viewport_resized)

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def add_lens(self, lens_id: str, settings: Optional[LensSettings] = None,
                 attributes: Optional[Mapping[str, Any]] = None, active: bool = False) -> LensState:
        if lens_id in self.lenses:
            raise ValueError(f"Lens '{lens_id}' is already registered")
        attributes = dict(attributes or {})
        lens = LensState(
            id=lens_id,
            current_rect=self.geometry.lens_rect(lens_id),
            settings=settings or LensSettings.from_attributes(attributes),
            corner_radii=self.geometry.corner_radii(lens_id),
            active=active,
            attributes=attributes,
        )
        self.lenses[lens_id] = lens
        logger.debug(f"Registered lens '{lens_id}' at {lens.current_rect}")
        if active:
            self.request_redraw("lens-added")
        return lens

    def remove_lens(self, lens_id: str) -> None:
        lens = self.lenses.pop(lens_id, None)
        self.last_results.pop(lens_id, None)
        if lens is not None:
            lens.release()

    def teardown(self) -> None:
        self.stop_scroll_watch()
        for lens_id in list(self.lenses):
            self.remove_lens(lens_id)
        self.pipeline.noise_cache.clear()

    def request_redraw(self, reason: str = "update") -> None:
        if not self.enabled:
            return
        self.scheduler.request(reason)

    def _set_surfaces_hidden(self, hidden: bool) -> None:
        for lens in self.lenses.values():
            lens.surface.hidden = hidden
        if self.surface_host is not None:
            self.surface_host.set_surfaces_hidden(hidden)

    async def capture_snapshot(self, capture: CaptureCallable) -> bool:
        """Captures the page once. Lens surfaces are hidden while capturing."""
        store = self.snapshot_store
        if store.state is not SnapshotState.IDLE:
            return store.is_ready
        if not self.enabled:
            logger.debug("Snapshot capture skipped while the lens effect is disabled")
            return False

        capture_scroll = self.geometry.scroll_position()
        self._set_surfaces_hidden(True)
        try:
            snapshot = await store.acquire(capture, capture_scroll)
        finally:
            self._set_surfaces_hidden(False)

        if snapshot is None:
            self.event_bus.emit(SnapshotCaptureFailedEvent(str(store.last_error)))
            self.request_redraw("capture-failed")
            return False

        for lens in self.lenses.values():
            self._refresh_geometry(lens)
            lens.record_anchor(capture_scroll)
        self.event_bus.emit(SnapshotCapturedEvent(snapshot.width, snapshot.height))
        self.request_redraw("snapshot")
        return True

    def _refresh_geometry(self, lens: LensState) -> None:
        lens.update_geometry(self.geometry.lens_rect(lens.id), self.geometry.corner_radii(lens.id))

    def _render_context(self, lens: LensState, snapshot, scroll) -> RenderContext:
        return RenderContext(
            lens=lens,
            snapshot=snapshot,
            scroll=scroll,
            global_magnification=self.settings.magnification,
            distortion=self.settings.distortion,
            brightness_gain=self.settings.brightness_gain,
            interpolation_method=self.settings.interpolation_method,
        )

    def render_all(self) -> None:
        if not self.enabled:
            return
        self.redraw_count += 1
        snapshot = self.snapshot_store.snapshot
        scroll = self.geometry.scroll_position()

        for lens in self.lenses.values():
            try:
                self._refresh_geometry(lens)
                if snapshot is None:
                    self.pipeline.render_fallback(lens)
                    result = LensRenderResult(lens.id, used_fallback=True)
                elif not lens.active:
                    lens.clear()
                    continue
                else:
                    result = self.pipeline.render_lens(self._render_context(lens, snapshot, scroll))
            except Exception as e:
                logger.error(f"Redraw of lens '{lens.id}' failed: {e}", exc_info=True)
                self.pipeline.render_fallback(lens)
                result = LensRenderResult(lens.id, used_fallback=True)

            self.last_results[lens.id] = result
            failed = result.failed_pass
            self.event_bus.emit(LensRenderedEvent(lens.id, result.used_fallback, failed.name if failed else None))

    def render_lens(self, lens_id: str) -> LensRenderResult | None:
        lens = self.lenses.get(lens_id)
        snapshot = self.snapshot_store.snapshot
        if lens is None or not self.enabled:
            return None
        self._refresh_geometry(lens)
        if snapshot is None:
            self.pipeline.render_fallback(lens)
            return LensRenderResult(lens_id, used_fallback=True)
        return self.pipeline.render_lens(self._render_context(lens, snapshot, self.geometry.scroll_position()))

    def start_scroll_watch(self) -> ScrollWatcher:
        if self._scroll_watcher is None:
            self._scroll_watcher = ScrollWatcher(
                self.geometry.scroll_position,
                lambda position: self.request_redraw("scroll-poll"),
                self._schedule_fn,
            )
        self._scroll_watcher.start()
        return self._scroll_watcher

    def stop_scroll_watch(self) -> None:
        if self._scroll_watcher is not None:
            self._scroll_watcher.stop()

    def _on_visibility_changed(self, event: LensVisibilityChangedEvent):
        lens = self.lenses.get(event.lens_id)
        if lens is None:
            logger.debug(f"Visibility change for unknown lens '{event.lens_id}'")
            return
        lens.active = bool(event.visible)
        if lens.active:
            self.request_redraw("visible")
        else:
            lens.clear()

    def _on_magnification_changed(self, event: GlobalMagnificationChangedEvent):
        self.settings.magnification = float(event.magnification)
        self.request_redraw("magnification")

    def _on_distortion_changed(self, event: GlobalDistortionChangedEvent):
        self.settings.distortion = float(event.distortion)
        self.request_redraw("distortion")

    def _on_effect_toggled(self, event: LensEffectToggledEvent):
        enabled = bool(event.enabled)
        if enabled == self.settings.enabled:
            return
        self.settings.enabled = enabled
        if enabled:
            logger.info("Lens effect enabled")
            self.request_redraw("enabled")
        else:
            logger.info("Lens effect disabled")
            for lens in self.lenses.values():
                lens.clear()

    def _on_parameters_changed(self, event: LensParametersChangedEvent):
        lens = self.lenses.get(event.lens_id)
        if lens is None:
            logger.debug(f"Parameter change for unknown lens '{event.lens_id}'")
            return
        lens.settings.apply_changes(event.changes)
        self.request_redraw("parameters")

    def _on_scroll_changed(self, event: ScrollChangedEvent):
        self.request_redraw("scroll")

    def _on_viewport_resized(self, event: ViewportResizedEvent):
        for lens in self.lenses.values():
            self._refresh_geometry(lens)
        self.request_redraw("resize")
