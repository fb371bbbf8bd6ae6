from enum import StrEnum

class AppConstants:
    APP_NAME = "Neon-Glass-Lens"
    LOGGER_NAME = "NeonGlassLens"

    MIN_MAGNIFICATION = 0.5
    DEFAULT_MAGNIFICATION = 1.0
    DEFAULT_DISTORTION = 1.0
    DEFAULT_OPACITY = 0.4
    DEFAULT_BLUR_PX = 6.0
    DEFAULT_BRIGHTNESS_GAIN = 4.0
    GAIN_IDENTITY_EPSILON = 1e-3

    DISTORTION_EDGE_THRESHOLD = 0.85
    DISTORTION_AMOUNT_SCALE = 2.0

    DEFAULT_SPECULAR_TOP = 12.0
    DEFAULT_SPECULAR_HEIGHT = 56.0
    DEFAULT_SPECULAR_LEFT = 16.0
    DEFAULT_SPECULAR_RIGHT = 16.0
    DEFAULT_SPECULAR_STRENGTH = 0.35
    DEFAULT_SPECULAR_RADIUS = 12.0
    DEFAULT_SPECULAR_GAMMA = 1.0
    MIN_SPECULAR_GAMMA = 0.1
    MAX_SPECULAR_RADIUS = 64.0

    DEFAULT_BAND_TOP = 12.0
    DEFAULT_BAND_HEIGHT = 56.0
    DEFAULT_BAND_LEFT = 16.0
    DEFAULT_BAND_RIGHT = 16.0
    DEFAULT_BAND_ALPHA_TOP = 1.0
    DEFAULT_BAND_ALPHA_BOTTOM = 0.15
    MAX_BAND_RADIUS = 16.0

    DEFAULT_NOISE_ALPHA = 0.15
    DEFAULT_NOISE_TILE_SIZE = 128
    MIN_NOISE_TILE_SIZE = 16

    DEFAULT_EDGE_FADE_PX = 5.0
    DEFAULT_EDGE_MIN_ALPHA = 0.15

    DEFAULT_INTERIOR_START_PX = 5.0
    DEFAULT_INTERIOR_END_TOP_PX = 50.0
    DEFAULT_INTERIOR_END_RIGHT_PX = 75.0
    DEFAULT_INTERIOR_END_BOTTOM_PX = 50.0
    DEFAULT_INTERIOR_END_LEFT_PX = 75.0
    DEFAULT_INTERIOR_REL_MIN_ALPHA = 1.0
    DEFAULT_INTERIOR_FEATHER_PX = 14.0
    INTERIOR_FALLBACK_SPAN_PX = 20

    FALLBACK_GLOW_COLOR = (255, 255, 255)
    FALLBACK_GLOW_CENTER_ALPHA = 0.1
    FALLBACK_GLOW_EDGE_ALPHA = 0.02

    MASK_SUPERSAMPLE = 4
    CURVE_SEGMENTS = 16

    FRAME_INTERVAL_MS = 16
    VISIBILITY_ROOT_MARGIN_PX = 200

    DEFAULT_INTERPOLATION_METHOD = "BILINEAR"
    INTERPOLATION_METHODS_MAP = {
        "NEAREST": "Nearest Neighbor",
        "BILINEAR": "Bilinear",
        "BICUBIC": "Bicubic",
        "LANCZOS": "Lanczos",
    }

class PassName(StrEnum):

    SAMPLE = "sample"
    DISTORTION = "distortion"
    BLUR = "blur"
    SPECULAR = "specular"
    NOISE = "noise"
    EDGE_MASK = "edge_mask"
    INTERIOR_MASK = "interior_mask"
    BAND_MASK = "band_mask"
    GAIN = "gain"
