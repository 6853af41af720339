"""
Chroma key (background removal) and colour sampling for Pixelargon.

Pixels whose Manhattan RGB distance to the key colour is within the
tolerance become fully transparent. Pixels up to twice the tolerance away
are feathered: their alpha is scaled by (distance - tol) / tol.

Functions:
    apply_chroma_key: Make pixels near a key colour transparent
    sample_color: Read the RGB colour under a normalized point
    color_to_hex: Format an RGB triple as "#rrggbb"
    normalize_tolerance: Convert a 0-100 UI tolerance to a 0-1 fraction
"""

from typing import Any, Optional, Sequence, Tuple

import numpy as np

from PX_Libs.constants import TOLERANCE_SCALE
from PX_Libs.ImageEditingLib.image_models import RgbColor
from PX_Libs.pillow_compat import Image
from PX_Libs.PixelateLib.pixelate_filter import round_half_up


def normalize_tolerance(tolerance: int) -> float:
    """Convert a tolerance on the 0-100 UI scale into a fraction in [0, 1]."""
    return max(0, min(TOLERANCE_SCALE, int(tolerance))) / TOLERANCE_SCALE


def apply_chroma_key(image: Any, color: Sequence[int], tolerance: float) -> Any:
    """
    Remove a background colour.

    Args:
        image: PIL Image (converted to RGBA)
        color: Key colour as (r, g, b)
        tolerance: Fraction in [0, 1]; scaled to 0-255 and truncated

    Returns:
        New RGBA PIL Image

    Raises:
        ValueError: If color does not have 3 components or tolerance is outside [0, 1]
    """
    if len(color) != 3:
        raise ValueError(f"color must be an (r, g, b) triple, got {color}")
    if not (0.0 <= tolerance <= 1.0):
        raise ValueError(f"tolerance must be 0 <= t <= 1, got {tolerance}")

    pixels = np.array(image.convert("RGBA"), dtype=np.int64)
    key = np.array(color, dtype=np.int64)
    distance = np.abs(pixels[..., :3] - key).sum(axis=2)
    tol = int(tolerance * 255.0)

    alpha = pixels[..., 3].astype(np.float64)
    inside = distance <= tol
    alpha[inside] = 0.0
    if tol > 0:
        feather = (distance > tol) & (distance <= tol * 2)
        factor = (distance[feather] - tol) / tol
        alpha[feather] = np.clip(alpha[feather] * factor, 0.0, 255.0)

    pixels[..., 3] = alpha.astype(np.int64)
    return Image.fromarray(pixels.astype(np.uint8), "RGBA")


def sample_color(surface: Any, point: Tuple[float, float]) -> Optional[RgbColor]:
    """
    Read the colour under a normalized point of a surface.

    Args:
        surface: PIL Image (the rendered preview)
        point: Normalized (x, y)

    Returns:
        (r, g, b), or None when the point falls outside the surface
    """
    width, height = surface.size
    x = round_half_up(point[0] * width)
    y = round_half_up(point[1] * height)
    if not (0 <= x < width and 0 <= y < height):
        return None

    pixel = surface.convert("RGBA").getpixel((x, y))
    return int(pixel[0]), int(pixel[1]), int(pixel[2])


def color_to_hex(color: Sequence[int]) -> str:
    r, g, b = (int(c) for c in color[:3])
    return f"#{r:02x}{g:02x}{b:02x}"
