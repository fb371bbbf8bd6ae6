import json

import pytest

from core.exceptions import CaptureFailure, LayoutError
from core.geometry import CornerRadii, Rect, ScrollPosition
from services.io.image_loader import ImageFileCapture, load_rgba_image
from services.io.layout_loader import LayoutGeometryProvider, load_layout, parse_layout

def _layout_data(**overrides):
    data = {
        "page": "page.png",
        "viewport": {"width": 400, "height": 300},
        "scroll": {"x": 0, "y": 50},
        "lenses": [
            {"id": "hero", "rect": [20, 100, 160, 80], "radius": 12,
             "attributes": {"lens-blur": "3"}},
            {"id": "badge", "rect": {"x": 300, "y": 10, "width": 60, "height": 40},
             "radius": [4, 8, 0, 2], "fixed": True},
        ],
        "global": {"magnification": 1.5, "gain": 2, "interpolation": "lanczos", "seed": 3},
    }
    data.update(overrides)
    return data

class TestParseLayout:

    def test_full_layout(self):
        layout = parse_layout(_layout_data(), "/pages")
        assert layout.page_path == "/pages/page.png"
        assert (layout.viewport_width, layout.viewport_height) == (400, 300)
        assert layout.scroll == ScrollPosition(0, 50)
        hero, badge = layout.lenses
        assert hero.rect == Rect(20, 100, 160, 80)
        assert hero.corner_radii == CornerRadii.uniform(12)
        assert hero.attributes == {"lens-blur": "3"}
        assert badge.corner_radii == CornerRadii(4, 8, 0, 2)
        assert badge.fixed
        settings = layout.global_settings
        assert settings.magnification == 1.5
        assert settings.brightness_gain == 2.0
        assert settings.interpolation_method == "LANCZOS"
        assert settings.noise_seed == 3

    def test_negative_radii_clamped(self):
        data = _layout_data(lenses=[{"id": "a", "rect": [0, 0, 10, 10], "radius": -5}])
        assert parse_layout(data).lenses[0].corner_radii == CornerRadii()

    def test_generated_ids(self):
        data = _layout_data(lenses=[{"rect": [0, 0, 10, 10]}, {"rect": [0, 20, 10, 10]}])
        assert [spec.id for spec in parse_layout(data).lenses] == ["lens-0", "lens-1"]

    @pytest.mark.parametrize("overrides", [
        {"page": ""},
        {"lenses": []},
        {"lenses": [{"id": "a", "rect": [0, 0, 10]}]},
        {"lenses": [{"id": "a", "rect": [0, 0, -1, 10]}]},
        {"lenses": [{"id": "a", "rect": [0, 0, 1, 1]}, {"id": "a", "rect": [0, 0, 1, 1]}]},
        {"lenses": [{"id": "a", "rect": {"x": 0, "y": 0, "width": 5}}]},
        {"lenses": [{"id": "a", "rect": [0, 0, 5, 5], "radius": [1, 2]}]},
        {"global": {"magnification": "big"}},
        {"viewport": [400, 300]},
    ])
    def test_invalid_layouts(self, overrides):
        with pytest.raises(LayoutError):
            parse_layout(_layout_data(**overrides))

class TestLoadLayout:

    def test_reads_file_relative_to_layout(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps(_layout_data()), encoding="utf-8")
        layout = load_layout(str(path))
        assert layout.page_path == str(tmp_path / "page.png")

    def test_missing_file(self, tmp_path):
        with pytest.raises(LayoutError):
            load_layout(str(tmp_path / "nope.json"))

    def test_bad_json(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(LayoutError):
            load_layout(str(path))

class TestLayoutGeometryProvider:

    @pytest.fixture
    def geometry(self):
        return LayoutGeometryProvider(parse_layout(_layout_data()))

    def test_document_lens_moves_with_scroll(self, geometry):
        assert geometry.lens_rect("hero") == Rect(20, 50, 160, 80)
        geometry.set_scroll(0, 80)
        assert geometry.lens_rect("hero") == Rect(20, 20, 160, 80)

    def test_fixed_lens_stays_put(self, geometry):
        geometry.set_scroll(0, 200)
        assert geometry.lens_rect("badge") == Rect(300, 10, 60, 40)

    def test_viewport_and_radii(self, geometry):
        assert geometry.viewport_size() == (400, 300)
        geometry.set_viewport_size(640, 480)
        assert geometry.viewport_size() == (640, 480)
        assert geometry.corner_radii("badge") == CornerRadii(4, 8, 0, 2)
        assert geometry.lens_ids() == ["hero", "badge"]

    def test_unknown_lens(self, geometry):
        with pytest.raises(LayoutError):
            geometry.lens_rect("missing")

class TestImageLoader:

    def test_load_converts_to_rgba(self, tmp_path, page_image):
        path = tmp_path / "page.png"
        page_image.convert("RGB").save(path)
        image = load_rgba_image(str(path))
        assert image.mode == "RGBA"
        assert image.size == (400, 800)

    def test_unreadable_image(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")
        with pytest.raises(CaptureFailure):
            load_rgba_image(str(path))

    def test_capture_counts_calls(self, tmp_path, page_image):
        path = tmp_path / "page.png"
        page_image.save(path)
        capture = ImageFileCapture(path)
        assert capture().size == (400, 800)
        assert capture.calls == 1
