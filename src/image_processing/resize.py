import logging

from PIL import Image

from core.constants import AppConstants

logger = logging.getLogger("NeonGlassLens")

_METHOD_MAP = {
    "NEAREST": Image.Resampling.NEAREST,
    "BILINEAR": Image.Resampling.BILINEAR,
    "BICUBIC": Image.Resampling.BICUBIC,
    "LANCZOS": Image.Resampling.LANCZOS,
    "BOX": Image.Resampling.BOX,
}

def resolve_resampling(method_name: str | None) -> Image.Resampling:
    name = (method_name or AppConstants.DEFAULT_INTERPOLATION_METHOD).upper()
    method = _METHOD_MAP.get(name)
    if method is None:
        logger.debug(f"Unknown interpolation method '{method_name}', using {AppConstants.DEFAULT_INTERPOLATION_METHOD}")
        method = _METHOD_MAP[AppConstants.DEFAULT_INTERPOLATION_METHOD]
    return method

def resample_image(pil_image: Image.Image, target_size: tuple[int, int], method_name: str | None = None) -> Image.Image:
    if pil_image.size == tuple(target_size):
        return pil_image.copy()
    return pil_image.resize(target_size, resolve_resampling(method_name))
