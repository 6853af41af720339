"""
Core image editing operations for Pixelargon.

This module provides the transform and filter stages shared by the live
preview and the image processor: rotation, flips, grayscale,
brightness/contrast, normalized cropping and fitting to a target size.

Functions:
    rotate_image: Rotate clockwise by 0/90/180/270 degrees
    flip_image: Mirror horizontally and/or vertically
    to_grayscale: Luminance conversion that keeps the alpha channel
    apply_brightness_contrast: Baked brightness/contrast (additive/linear)
    apply_preview_filters: Display brightness/contrast as (1 + delta) factors
    crop_normalized: Crop with a normalized rectangle
    scale_then_crop: Scale to cover a target, then centre-crop to it
    fit_to_target: Bring an image to exact target dimensions
"""

from typing import Any

import numpy as np

from PX_Libs.constants import SCALE_MODES, SCALE_THEN_CROP
from PX_Libs.pillow_compat import Image, ImageEnhance, ImageOps, LANCZOS
from PX_Libs.PixelateLib.pixelate_filter import round_half_up
from PX_Libs.ViewportLib.viewport import normalize_rotation

# Clockwise rotations expressed as PIL transposes (PIL rotates counter-clockwise)
_ROTATE_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def rotate_image(image: Any, rotation: int) -> Any:
    """
    Rotate an image clockwise.

    Args:
        image: PIL Image
        rotation: Degrees, any multiple of 90

    Returns:
        Rotated PIL Image (a copy for 0 degrees)

    Raises:
        ValueError: If rotation is not a multiple of 90
    """
    rotation = normalize_rotation(rotation)
    if rotation == 0:
        return image.copy()
    return image.transpose(_ROTATE_TRANSPOSE[rotation])


def flip_image(image: Any, flip_h: bool = False, flip_v: bool = False) -> Any:
    result = image
    if flip_h:
        result = result.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    if flip_v:
        result = result.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    return result if result is not image else image.copy()


def to_grayscale(image: Any) -> Any:
    """Convert to grayscale RGBA, keeping the original alpha channel."""
    rgba = image.convert("RGBA")
    # Transparent pixels stay transparent; the result is not flattened to opaque
    gray = ImageOps.grayscale(rgba)
    return Image.merge("RGBA", (gray, gray, gray, rgba.getchannel("A")))


def apply_brightness_contrast(image: Any, brightness: float, contrast: float) -> Any:
    """
    Apply baked brightness and contrast to the RGB channels.

    v' = clamp((v - 128) * (1 + contrast) + 128 + trunc(brightness * 255), 0, 255)

    Args:
        image: PIL Image (converted to RGBA)
        brightness: Delta in [-1, 1]
        contrast: Delta in [-1, 1]

    Returns:
        New RGBA PIL Image; alpha untouched
    """
    rgba = image.convert("RGBA")
    if brightness == 0 and contrast == 0:
        return rgba.copy()

    pixels = np.array(rgba, dtype=np.float64)
    offset = int(brightness * 255.0)
    factor = contrast + 1.0
    pixels[..., :3] = np.clip((pixels[..., :3] - 128.0) * factor + 128.0 + offset, 0.0, 255.0)
    return Image.fromarray(pixels.astype(np.uint8), "RGBA")


def apply_preview_filters(
    image: Any,
    grayscale: bool = False,
    brightness: float = 0.0,
    contrast: float = 0.0,
) -> Any:
    """
    Display-only filters for the live preview.

    Brightness and contrast deltas act as multiplicative factors (1 + delta).
    The processor's apply_brightness_contrast() is what gets baked.
    """
    result = image.convert("RGBA")
    if grayscale:
        result = to_grayscale(result)
    if brightness == 0 and contrast == 0:
        return result if result is not image else result.copy()

    alpha = result.getchannel("A")
    rgb = result.convert("RGB")
    if brightness != 0:
        rgb = ImageEnhance.Brightness(rgb).enhance(max(0.0, 1.0 + brightness))
    if contrast != 0:
        rgb = ImageEnhance.Contrast(rgb).enhance(max(0.0, 1.0 + contrast))
    result = rgb.convert("RGBA")
    result.putalpha(alpha)
    return result


def crop_normalized(image: Any, crop: Any) -> Any:
    """
    Crop with a normalized rectangle.

    Args:
        image: PIL Image
        crop: Object with x, y, width, height fractions (e.g. CropRect)

    Returns:
        Cropped PIL Image, at least 1x1 and never outside the source
    """
    image_w, image_h = image.size
    left = round_half_up(crop.x * image_w)
    top = round_half_up(crop.y * image_h)
    crop_w = max(1, round_half_up(crop.width * image_w))
    crop_h = max(1, round_half_up(crop.height * image_h))

    left = max(0, min(left, image_w - 1))
    top = max(0, min(top, image_h - 1))
    crop_w = min(crop_w, image_w - left)
    crop_h = min(crop_h, image_h - top)
    return image.crop((left, top, left + crop_w, top + crop_h))


def scale_then_crop(image: Any, target_width: int, target_height: int) -> Any:
    """Scale to cover the target (aspect preserved), then centre-crop to it."""
    image_w, image_h = image.size
    scale = max(target_width / image_w, target_height / image_h)
    scaled_w = max(1, round_half_up(image_w * scale))
    scaled_h = max(1, round_half_up(image_h * scale))
    scaled = image.resize((scaled_w, scaled_h), LANCZOS)

    offset_x = max(0, scaled_w - target_width) // 2
    offset_y = max(0, scaled_h - target_height) // 2
    return scaled.crop((
        offset_x,
        offset_y,
        offset_x + min(target_width, scaled_w),
        offset_y + min(target_height, scaled_h),
    ))


def fit_to_target(image: Any, target_width: int, target_height: int, scale_mode: str) -> Any:
    """
    Bring a (cropped) image to the exact target size.

    Args:
        image: PIL Image
        target_width: Output width; <= 0 skips the stage
        target_height: Output height; <= 0 skips the stage
        scale_mode: 'scale_then_crop' or 'crop_then_scale'

    Returns:
        PIL Image of target size (or the input when skipped)

    Raises:
        ValueError: If scale_mode is unknown
    """
    if scale_mode not in SCALE_MODES:
        raise ValueError(
            f"Unknown scale_mode: {scale_mode}. "
            f"Valid modes: {', '.join(SCALE_MODES)}"
        )
    if target_width <= 0 or target_height <= 0:
        return image

    if scale_mode == SCALE_THEN_CROP:
        return scale_then_crop(image, target_width, target_height)
    return image.resize((target_width, target_height), LANCZOS)
