"""
Pixelate (mosaic redaction) filter for Pixelargon.

Each point of a stroke defines a square box around it. The box is split
into a grid of block_size x block_size cells (the last row/column may be
narrower), and every pixel of a cell is replaced with the cell's mean
RGBA value, rounded to the nearest integer.

Strokes are applied in commit order and each point in capture order, so a
later stroke averages pixels an earlier one has already averaged.

Example:
    >>> from PIL import Image
    >>> img = Image.open("photo.png").convert("RGBA")
    >>> stroke = PixelateStroke(points=((0.5, 0.5),), radius=0.1)
    >>> redacted = apply_pixelate_strokes(img, [stroke], block_size=10)
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple
import math

import numpy as np

from PX_Libs.pillow_compat import Image

Point = Tuple[float, float]


@dataclass(frozen=True)
class PixelateStroke:
    """One committed freehand pixelate gesture.

    Attributes:
        points: Normalized (x, y) points in capture order
        radius: Brush radius as a fraction of max(display width, height)
    """
    points: Tuple[Point, ...]
    radius: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "points": [[x, y] for x, y in self.points],
            "radius": self.radius,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PixelateStroke":
        """Create from dictionary."""
        points = tuple((float(x), float(y)) for x, y in data.get("points", []))
        return cls(points=points, radius=float(data.get("radius", 0.0)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def validate_block_size(block_size: int) -> int:
    block_size = int(block_size)
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")
    return block_size


def pixelate_region(
    pixels: np.ndarray,
    center_x: int,
    center_y: int,
    radius: int,
    block_size: int,
) -> None:
    """
    Block-average the box around a point, in place.

    Args:
        pixels: uint8 array of shape (height, width, 4)
        center_x: Box centre column in pixels
        center_y: Box centre row in pixels
        radius: Half the box side in pixels
        block_size: Cell side in pixels (>= 1)
    """
    height, width = pixels.shape[:2]
    x1 = max(0, center_x - radius)
    y1 = max(0, center_y - radius)
    x2 = min(width, center_x + radius)
    y2 = min(height, center_y + radius)
    if x2 <= x1 or y2 <= y1:
        return

    box_w = x2 - x1
    box_h = y2 - y1
    region = pixels[y1:y2, x1:x2].astype(np.int64)

    row_starts = np.arange(0, box_h, block_size)
    col_starts = np.arange(0, box_w, block_size)
    row_sizes = np.diff(np.append(row_starts, box_h))
    col_sizes = np.diff(np.append(col_starts, box_w))

    sums = np.add.reduceat(np.add.reduceat(region, row_starts, axis=0), col_starts, axis=1)
    counts = np.outer(row_sizes, col_sizes)[:, :, np.newaxis]
    # Integer form of floor(sum / count + 0.5)
    means = (2 * sums + counts) // (2 * counts)

    expanded = np.repeat(np.repeat(means, row_sizes, axis=0), col_sizes, axis=1)
    pixels[y1:y2, x1:x2] = expanded.astype(np.uint8)


def pixelate_strokes_in_place(
    pixels: np.ndarray,
    strokes: Iterable[PixelateStroke],
    block_size: int,
) -> None:
    """Apply strokes to an RGBA array in order, in place."""
    block_size = validate_block_size(block_size)
    height, width = pixels.shape[:2]
    max_dim = max(width, height)

    for stroke in strokes:
        radius_px = round_half_up(stroke.radius * max_dim)
        for nx, ny in stroke.points:
            pixelate_region(
                pixels,
                round_half_up(nx * width),
                round_half_up(ny * height),
                radius_px,
                block_size,
            )


def apply_pixelate_strokes(
    image: Any,
    strokes: Sequence[PixelateStroke],
    block_size: int,
    in_progress: Optional[PixelateStroke] = None,
) -> Any:
    """
    Render strokes over a copy of an image.

    The input image is never modified. An in-progress stroke is rendered
    after the committed ones, exactly as if it were already committed.

    Args:
        image: PIL Image (converted to RGBA)
        strokes: Committed strokes in commit order
        block_size: Cell side in pixels (>= 1)
        in_progress: Optional stroke still being painted

    Returns:
        New RGBA PIL Image

    Raises:
        ValueError: If block_size < 1
        TypeError: If image is not a PIL Image
    """
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    block_size = validate_block_size(block_size)
    all_strokes = list(strokes)
    if in_progress is not None:
        all_strokes.append(in_progress)

    if not all_strokes:
        return image.convert("RGBA").copy()

    pixels = np.array(image.convert("RGBA"), dtype=np.uint8)
    pixelate_strokes_in_place(pixels, all_strokes, block_size)
    return Image.fromarray(pixels, "RGBA")
