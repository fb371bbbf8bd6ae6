import asyncio
import logging
import os

from PIL import Image

from core.exceptions import CaptureFailure

logger = logging.getLogger("NeonGlassLens")

def load_rgba_image(path: str) -> Image.Image:
    try:
        with Image.open(path) as img:
            pil_img = img.convert("RGBA")
            pil_img.load()
    except (OSError, ValueError) as e:
        raise CaptureFailure(f"Failed to load page image {path}: {e}") from e
    return pil_img

class ImageFileCapture:
    """Capture collaborator backed by a pre-rendered full-page image file."""

    def __init__(self, path: str):
        self.path = os.fspath(path)
        self.calls = 0

    def __call__(self) -> Image.Image:
        self.calls += 1
        logger.info(f"Capturing page from {self.path}")
        return load_rgba_image(self.path)

    async def capture_async(self) -> Image.Image:
        return await asyncio.to_thread(self)
