"""
ImageEditingLib - Core image editing functionality

This module provides image models, transform/filter operations, chroma key,
the live preview compositor and the pending edit state for Pixelargon.
"""

from PX_Libs.ImageEditingLib.image_models import ImageSession, RgbaColor, RgbColor
from PX_Libs.ImageEditingLib.image_editing_ops import (
    apply_brightness_contrast,
    apply_preview_filters,
    crop_normalized,
    fit_to_target,
    flip_image,
    rotate_image,
    scale_then_crop,
    to_grayscale,
)
from PX_Libs.ImageEditingLib.chroma_key import (
    apply_chroma_key,
    color_to_hex,
    normalize_tolerance,
    sample_color,
)
from PX_Libs.ImageEditingLib.preview import render_preview
from PX_Libs.ImageEditingLib.edit_state import EditState

__all__ = [
    "ImageSession",
    "RgbaColor",
    "RgbColor",
    "apply_brightness_contrast",
    "apply_preview_filters",
    "crop_normalized",
    "fit_to_target",
    "flip_image",
    "rotate_image",
    "scale_then_crop",
    "to_grayscale",
    "apply_chroma_key",
    "color_to_hex",
    "normalize_tolerance",
    "sample_color",
    "render_preview",
    "EditState",
]
