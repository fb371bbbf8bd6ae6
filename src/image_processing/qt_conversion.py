import logging
from typing import Optional

import numpy as np
from PIL import Image
from PyQt6.QtGui import QImage, QPixmap

logger = logging.getLogger("NeonGlassLens")

def array_to_qimage(pixels: np.ndarray) -> Optional[QImage]:
    """Wraps an (h, w, 4) RGBA array in a QImage without copying."""
    if pixels is None or pixels.ndim != 3 or pixels.shape[2] != 4:
        logger.warning(f"Cannot convert array of shape {getattr(pixels, 'shape', None)} to QImage")
        return None

    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        return QImage()

    img_array = pixels if pixels.flags['C_CONTIGUOUS'] else np.ascontiguousarray(pixels)
    try:
        qimage = QImage(memoryview(img_array), width, height, width * 4, QImage.Format.Format_RGBA8888)
        if qimage.isNull():
            raise ValueError("QImage creation returned null")
    except (TypeError, ValueError):
        qimage = QImage(img_array.tobytes(), width, height, width * 4, QImage.Format.Format_RGBA8888)

    qimage._pixels_ref = img_array
    return qimage

def pil_to_qimage(pil_image: Image.Image) -> Optional[QImage]:
    if pil_image is None:
        return None
    if pil_image.mode != 'RGBA':
        pil_image = pil_image.convert('RGBA')
    return array_to_qimage(np.asarray(pil_image, dtype=np.uint8))

def surface_to_qpixmap(pixels: np.ndarray, opacity: float = 1.0) -> Optional[QPixmap]:
    """Detached pixmap of a lens surface with its alpha scaled by ``opacity``."""
    if opacity < 1.0:
        pixels = pixels.copy()
        pixels[..., 3] = np.floor(pixels[..., 3] * max(0.0, opacity) + 0.5).astype(np.uint8)
    qimage = array_to_qimage(pixels)
    if qimage is None or qimage.isNull():
        return None
    return QPixmap.fromImage(qimage).copy()
