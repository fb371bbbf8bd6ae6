import argparse
import asyncio
import logging
import sys

from core.constants import AppConstants
from core.exceptions import CaptureFailure, LayoutError
from core.geometry import is_near_viewport
from core.logging import setup_logging
from core.main_controller import LensEffectController
from image_processing.compositing import compose_lenses
from services.io.image_loader import ImageFileCapture, load_rgba_image
from services.io.layout_loader import LayoutGeometryProvider, load_layout

logger = logging.getLogger("NeonGlassLens")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Neon Glass Lens - render glass lenses over a page capture")
    parser.add_argument("--layout", required=True, help="JSON layout describing the page image and lens regions.")
    parser.add_argument("--output", help="Write the composed viewport with lenses to this image file.")
    parser.add_argument("--magnification", type=float, help="Global magnification multiplier.")
    parser.add_argument("--distortion", type=float, help="Global edge distortion strength, 0 disables it.")
    parser.add_argument("--gain", type=float, help="Linear-light brightness gain applied last.")
    parser.add_argument("--interpolation", choices=sorted(AppConstants.INTERPOLATION_METHODS_MAP),
                        help="Resampling filter used when scaling the snapshot.")
    parser.add_argument("--seed", type=int, help="Seed for the noise tiles.")
    parser.add_argument("--show", action="store_true", help="Open an interactive preview window.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for this session.")
    return parser

def _apply_overrides(settings, args) -> None:
    if args.magnification is not None:
        settings.magnification = args.magnification
    if args.distortion is not None:
        settings.distortion = args.distortion
    if args.gain is not None:
        settings.brightness_gain = args.gain
    if args.interpolation:
        settings.interpolation_method = args.interpolation
    if args.seed is not None:
        settings.noise_seed = args.seed

def _create_controller(layout, geometry, schedule_fn=None) -> LensEffectController:
    controller = LensEffectController(geometry, settings=layout.global_settings, schedule_fn=schedule_fn)
    vw, vh = geometry.viewport_size()
    for spec in layout.lenses:
        active = is_near_viewport(geometry.lens_rect(spec.id), vw, vh) if vw and vh else True
        controller.add_lens(spec.id, attributes=spec.attributes, active=active)
    return controller

def _render_headless(layout, args) -> int:
    geometry = LayoutGeometryProvider(layout)
    controller = _create_controller(layout, geometry, schedule_fn=lambda _delay, _callback: None)

    capture = ImageFileCapture(layout.page_path)
    asyncio.run(controller.capture_snapshot(capture.capture_async))
    controller.scheduler.request("initial")
    controller.scheduler.flush_now()

    if not args.output:
        for lens_id, result in controller.last_results.items():
            status = "fallback" if result.used_fallback else "ok"
            print(f"{lens_id}: {status} ({', '.join(result.executed) or 'no passes'})")
        return 0

    try:
        page = load_rgba_image(layout.page_path)
    except CaptureFailure as e:
        logger.error(f"{e}")
        return 1

    vw, vh = geometry.viewport_size()
    scroll = geometry.scroll_position()
    if vw > 0 and vh > 0:
        left, top = int(scroll.x), int(scroll.y)
        viewport = page.crop((left, top, left + vw, top + vh))
    else:
        viewport = page
    compose_lenses(viewport, controller).save(args.output)
    logger.info(f"Wrote {args.output}")
    return 0

def _run_preview(layout) -> int:
    from PyQt6.QtWidgets import QApplication

    from ui.preview_window import PreviewWindow

    app = QApplication.instance() or QApplication(sys.argv)
    geometry = LayoutGeometryProvider(layout)
    controller = _create_controller(layout, geometry)
    try:
        page = load_rgba_image(layout.page_path)
    except CaptureFailure as e:
        logger.error(f"{e}")
        return 1

    window = PreviewWindow(page, controller, geometry)
    asyncio.run(controller.capture_snapshot(lambda: page))
    controller.start_scroll_watch()
    window.show()
    return app.exec()

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(debug_enabled=args.debug)

    try:
        layout = load_layout(args.layout)
    except LayoutError as e:
        logger.error(f"{e}")
        return 2
    _apply_overrides(layout.global_settings, args)

    if args.show:
        return _run_preview(layout)
    return _render_headless(layout, args)

if __name__ == "__main__":
    sys.exit(main())
