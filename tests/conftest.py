import os

import numpy as np
import pytest
from PIL import Image

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from core.geometry import CornerRadii, Rect, ScrollPosition
from core.interfaces import GeometryProvider, SurfaceHost
from core.snapshot import Snapshot

class ManualScheduler:
    """Collects scheduled callbacks so tests decide when a frame runs."""

    def __init__(self):
        self.pending = []
        self.calls = 0

    def __call__(self, delay_ms, callback):
        self.calls += 1
        self.pending.append(callback)

    def run_pending(self):
        callbacks, self.pending = self.pending, []
        for callback in callbacks:
            callback()
        return len(callbacks)

class StaticGeometry(GeometryProvider):
    def __init__(self, rects, radii=None, scroll=None):
        self.rects = dict(rects)
        self.radii = dict(radii or {})
        self.scroll = scroll or ScrollPosition()

    def lens_rect(self, lens_id):
        return self.rects[lens_id]

    def corner_radii(self, lens_id):
        return self.radii.get(lens_id, CornerRadii())

    def scroll_position(self):
        return self.scroll

class RecordingHost(SurfaceHost):
    def __init__(self):
        self.calls = []

    def set_surfaces_hidden(self, hidden):
        self.calls.append(hidden)

def gradient_pixels(width, height):
    xs = np.linspace(0, 255, width, dtype=np.float64)[None, :]
    ys = np.linspace(0, 255, height, dtype=np.float64)[:, None]
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = np.broadcast_to(xs, (height, width)).astype(np.uint8)
    pixels[..., 1] = np.broadcast_to(ys, (height, width)).astype(np.uint8)
    pixels[..., 2] = 128
    pixels[..., 3] = 255
    return pixels

@pytest.fixture
def scheduler():
    return ManualScheduler()

@pytest.fixture
def page_image():
    return Image.fromarray(gradient_pixels(400, 800))

@pytest.fixture
def snapshot(page_image):
    return Snapshot.from_capture(page_image, ScrollPosition(0, 0))

@pytest.fixture
def rng():
    return np.random.default_rng(1234)
