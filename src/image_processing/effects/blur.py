import numpy as np
from PIL import Image, ImageFilter

def apply_blur(pixels: np.ndarray, radius: float) -> np.ndarray:
    output = pixels.copy()
    if not radius or radius <= 0 or output.size == 0:
        return output

    # Alpha is left as sampled so the masks see the unblurred footprint.
    rgb = Image.fromarray(np.ascontiguousarray(pixels[..., :3]))
    blurred = rgb.filter(ImageFilter.GaussianBlur(radius=float(radius)))
    output[..., :3] = np.asarray(blurred, dtype=np.uint8)
    return output
