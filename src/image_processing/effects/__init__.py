from .distortion import apply_edge_distortion
from .blur import apply_blur
from .specular import apply_specular_band
from .noise import NoiseTileCache, apply_noise_overlay, resolve_blend_mode
from .gain import apply_brightness_gain, build_gain_lut, is_identity_gain

__all__ = [
    'apply_edge_distortion',
    'apply_blur',
    'apply_specular_band',
    'NoiseTileCache',
    'apply_noise_overlay',
    'resolve_blend_mode',
    'apply_brightness_gain',
    'build_gain_lut',
    'is_identity_gain',
]
