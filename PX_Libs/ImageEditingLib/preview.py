"""
Live preview compositor for Pixelargon.

Builds the display surface from the natural preview image and the pending
edits: rotation, flips, display filters, then pixelate strokes. The
function is pure; it never mutates the base image or the stroke lists, so
an in-progress stroke can be shown without being committed.
"""

from typing import Any, Optional, Sequence

from PX_Libs.ImageEditingLib.image_editing_ops import (
    apply_preview_filters,
    flip_image,
    rotate_image,
)
from PX_Libs.PixelateLib.pixelate_filter import PixelateStroke, apply_pixelate_strokes


def render_preview(
    base: Any,
    rotation: int = 0,
    flip_h: bool = False,
    flip_v: bool = False,
    grayscale: bool = False,
    brightness: float = 0.0,
    contrast: float = 0.0,
    strokes: Sequence[PixelateStroke] = (),
    block_size: int = 10,
    in_progress: Optional[PixelateStroke] = None,
) -> Any:
    """
    Render the display-space preview surface.

    Args:
        base: Natural (unrotated) preview image
        rotation: Clockwise rotation in degrees (0/90/180/270)
        flip_h: Mirror left-right after rotating
        flip_v: Mirror top-bottom after rotating
        grayscale: Display grayscale filter
        brightness: Brightness delta in [-1, 1]
        contrast: Contrast delta in [-1, 1]
        strokes: Committed strokes in commit order
        block_size: Pixelate cell size in pixels
        in_progress: Stroke still being painted, rendered last

    Returns:
        New RGBA PIL Image sized to the display dimensions
    """
    surface = rotate_image(base.convert("RGBA"), rotation)
    surface = flip_image(surface, flip_h, flip_v)
    surface = apply_preview_filters(surface, grayscale, brightness, contrast)
    return apply_pixelate_strokes(surface, strokes, block_size, in_progress)
