"""
PixelateLib - Freehand pixelate strokes

Stroke capture with undo/redo and the block-averaging redaction filter.
"""

from PX_Libs.PixelateLib.pixelate_filter import (
    PixelateStroke,
    apply_pixelate_strokes,
    pixelate_region,
    pixelate_strokes_in_place,
    round_half_up,
)
from PX_Libs.PixelateLib.stroke_engine import StrokeEngine

__all__ = [
    "PixelateStroke",
    "StrokeEngine",
    "apply_pixelate_strokes",
    "pixelate_region",
    "pixelate_strokes_in_place",
    "round_half_up",
]
