"""
ViewportLib - Zoom, pan and coordinate mapping

Maps pointer positions to normalized image-space coordinates under
zoom, pan and rotation.
"""

from PX_Libs.ViewportLib.viewport import (
    RenderedRect,
    Viewport,
    clamp_zoom,
    display_dimensions,
    fit_zoom,
    is_normalized_inside,
    normalize_rotation,
    normalized_to_pointer,
    pointer_to_normalized,
)

__all__ = [
    "RenderedRect",
    "Viewport",
    "clamp_zoom",
    "display_dimensions",
    "fit_zoom",
    "is_normalized_inside",
    "normalize_rotation",
    "normalized_to_pointer",
    "pointer_to_normalized",
]
