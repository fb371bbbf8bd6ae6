import logging

from PIL import Image
from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import (QCheckBox, QHBoxLayout, QLabel, QMainWindow, QScrollBar, QSlider, QVBoxLayout,
                             QWidget)

from core.events import (GlobalDistortionChangedEvent, GlobalMagnificationChangedEvent, LensEffectToggledEvent,
                         LensRenderedEvent, LensVisibilityChangedEvent, ScrollChangedEvent, ViewportResizedEvent)
from core.geometry import is_near_viewport
from core.interfaces import SurfaceHost
from core.main_controller import LensEffectController
from image_processing.qt_conversion import pil_to_qimage, surface_to_qpixmap
from services.io.layout_loader import LayoutGeometryProvider

logger = logging.getLogger("NeonGlassLens")

class CanvasSurfaceHost(SurfaceHost):
    def __init__(self, canvas: "LensCanvas"):
        self.canvas = canvas

    def set_surfaces_hidden(self, hidden: bool) -> None:
        self.canvas.set_surfaces_hidden(hidden)

class LensCanvas(QWidget):
    """Paints the visible slice of the page with the lens surfaces on top."""

    def __init__(self, page: Image.Image, controller: LensEffectController,
                 geometry: LayoutGeometryProvider, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.geometry = geometry
        self._page_image = pil_to_qimage(page)
        self._surfaces_hidden = False
        self._visibility: dict[str, bool] = {}
        self.setMinimumSize(320, 240)

        controller.event_bus.subscribe(LensRenderedEvent, self._on_lens_rendered)

    def set_surfaces_hidden(self, hidden: bool) -> None:
        self._surfaces_hidden = hidden
        self.update()

    def _on_lens_rendered(self, event: LensRenderedEvent):
        self.update()

    def refresh_visibility(self):
        vw, vh = self.width(), self.height()
        for lens_id in self.geometry.lens_ids():
            visible = is_near_viewport(self.geometry.lens_rect(lens_id), vw, vh)
            if self._visibility.get(lens_id) != visible:
                self._visibility[lens_id] = visible
                self.controller.event_bus.emit(LensVisibilityChangedEvent(lens_id, visible))

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.geometry.set_viewport_size(self.width(), self.height())
        self.controller.event_bus.emit(ViewportResizedEvent(self.width(), self.height()))
        self.refresh_visibility()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), Qt.GlobalColor.black)

        if self._page_image is not None:
            scroll = self.geometry.scroll_position()
            source = QRectF(scroll.x, scroll.y, self.width(), self.height())
            painter.drawImage(QRectF(0, 0, self.width(), self.height()), self._page_image, source)

        if self._surfaces_hidden:
            return

        for lens in self.controller.lenses.values():
            surface = lens.surface
            if surface.hidden or surface.is_empty():
                continue
            pixmap = surface_to_qpixmap(surface.pixels, lens.opacity)
            if pixmap is not None:
                painter.drawPixmap(int(lens.current_rect.x), int(lens.current_rect.y), pixmap)

class PreviewWindow(QMainWindow):
    def __init__(self, page: Image.Image, controller: LensEffectController, geometry: LayoutGeometryProvider):
        super().__init__()
        self.controller = controller
        self.geometry = geometry
        self.page_size = page.size
        self.setWindowTitle("Neon Glass Lens")

        self.canvas = LensCanvas(page, controller, geometry)
        controller.surface_host = CanvasSurfaceHost(self.canvas)

        self.scroll_bar = QScrollBar(Qt.Orientation.Vertical)
        self.scroll_bar.valueChanged.connect(self._on_scroll)

        self.magnification_slider = self._make_slider(50, 400, int(controller.settings.magnification * 100))
        self.magnification_slider.valueChanged.connect(
            lambda v: controller.event_bus.emit(GlobalMagnificationChangedEvent(v / 100.0)))
        self.distortion_slider = self._make_slider(0, 300, int(controller.settings.distortion * 100))
        self.distortion_slider.valueChanged.connect(
            lambda v: controller.event_bus.emit(GlobalDistortionChangedEvent(v / 100.0)))
        self.enabled_check = QCheckBox("Lens effect")
        self.enabled_check.setChecked(controller.enabled)
        self.enabled_check.toggled.connect(lambda on: controller.event_bus.emit(LensEffectToggledEvent(on)))

        controls = QHBoxLayout()
        controls.addWidget(self.enabled_check)
        controls.addWidget(QLabel("Magnification"))
        controls.addWidget(self.magnification_slider)
        controls.addWidget(QLabel("Distortion"))
        controls.addWidget(self.distortion_slider)

        view = QHBoxLayout()
        view.addWidget(self.canvas, 1)
        view.addWidget(self.scroll_bar)

        root = QVBoxLayout()
        root.addLayout(controls)
        root.addLayout(view, 1)
        container = QWidget()
        container.setLayout(root)
        self.setCentralWidget(container)

        vw, vh = geometry.viewport_size()
        if vw > 0 and vh > 0:
            self.canvas.resize(vw, vh)
            self.resize(vw + self.scroll_bar.sizeHint().width(), vh + 48)
        self._update_scroll_range()
        self.scroll_bar.setValue(int(geometry.scroll_position().y))

    def _make_slider(self, low: int, high: int, value: int) -> QSlider:
        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setRange(low, high)
        slider.setValue(max(low, min(high, value)))
        return slider

    def _update_scroll_range(self):
        self.scroll_bar.setRange(0, max(0, self.page_size[1] - self.canvas.height()))
        self.scroll_bar.setPageStep(max(1, self.canvas.height()))

    def _on_scroll(self, value: int):
        self.geometry.set_scroll(self.geometry.scroll_position().x, value)
        self.controller.event_bus.emit(ScrollChangedEvent(self.geometry.scroll_position()))
        self.canvas.refresh_visibility()
        self.canvas.update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._update_scroll_range()

    def closeEvent(self, event):
        self.controller.teardown()
        super().closeEvent(event)
