from .compose import apply_alpha_mask, paint_strips
from .edge_mask import build_edge_mask, edge_mask_key
from .interior_mask import build_interior_mask, falloff_profile, interior_mask_key, resolve_extents
from .band_mask import band_mask_key, build_band_mask

__all__ = [
    'apply_alpha_mask',
    'paint_strips',
    'build_edge_mask',
    'edge_mask_key',
    'build_interior_mask',
    'falloff_profile',
    'interior_mask_key',
    'resolve_extents',
    'band_mask_key',
    'build_band_mask',
]
