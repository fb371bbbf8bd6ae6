import numpy as np
import pytest
from PIL import Image

from conftest import StaticGeometry
from core.geometry import Rect
from core.main_controller import LensEffectController
from image_processing.compositing import compose_lenses

@pytest.fixture
def controller(scheduler):
    geometry = StaticGeometry({"a": Rect(10, 10, 20, 20)})
    controller = LensEffectController(geometry, schedule_fn=scheduler)
    controller.add_lens("a", active=True)
    return controller

def _paint(lens, color):
    lens.surface.pixels[...] = color

class TestComposeLenses:

    def test_lens_placed_with_opacity(self, controller):
        lens = controller.lenses["a"]
        _paint(lens, (255, 255, 255, 255))
        lens.settings.opacity = 0.5
        viewport = Image.new("RGBA", (50, 50), (0, 0, 0, 255))

        result = np.array(compose_lenses(viewport, controller))
        assert tuple(result[0, 0]) == (0, 0, 0, 255)
        assert abs(int(result[20, 20, 0]) - 128) <= 1
        assert result[20, 20, 3] == 255

    def test_viewport_not_modified(self, controller):
        _paint(controller.lenses["a"], (255, 0, 0, 255))
        viewport = Image.new("RGB", (50, 50), (0, 0, 0))
        result = compose_lenses(viewport, controller)
        assert result.mode == "RGBA"
        assert viewport.getpixel((20, 20)) == (0, 0, 0)

    def test_negative_position_clipped(self, controller):
        lens = controller.lenses["a"]
        controller.geometry.rects["a"] = Rect(-10, -5, 20, 20)
        lens.update_geometry(Rect(-10, -5, 20, 20))
        lens.settings.opacity = 1.0
        _paint(lens, (0, 255, 0, 255))
        result = np.array(compose_lenses(Image.new("RGBA", (50, 50), (0, 0, 0, 255)), controller))
        assert tuple(result[0, 0]) == (0, 255, 0, 255)
        assert tuple(result[14, 9]) == (0, 255, 0, 255)
        assert tuple(result[15, 10]) == (0, 0, 0, 255)

    def test_hidden_and_clear_surfaces_skipped(self, controller):
        lens = controller.lenses["a"]
        viewport = Image.new("RGBA", (50, 50), (0, 0, 0, 255))
        assert np.array_equal(np.array(compose_lenses(viewport, controller)), np.array(viewport))
        _paint(lens, (255, 255, 255, 255))
        lens.surface.hidden = True
        assert np.array_equal(np.array(compose_lenses(viewport, controller)), np.array(viewport))

    def test_lens_outside_viewport(self, controller):
        lens = controller.lenses["a"]
        lens.update_geometry(Rect(100, 100, 20, 20))
        _paint(lens, (255, 255, 255, 255))
        viewport = Image.new("RGBA", (50, 50), (0, 0, 0, 255))
        assert np.array_equal(np.array(compose_lenses(viewport, controller)), np.array(viewport))
