"""
Crop rectangle model and drag-handle state machine for Pixelargon.

The crop rectangle is held in normalized coordinates of the displayed
(post-rotation) image. Every mutation goes through clamp_crop(), so the
rectangle always satisfies:

    0 <= x, 0 <= y, x + width <= 1, y + height <= 1,
    width >= MIN_CROP_FRACTION, height >= MIN_CROP_FRACTION

Classes:
    CropRect: Normalized crop rectangle (immutable)
    AspectPresetResult: Outcome of selecting an aspect preset
    CropStateMachine: Idle / Dragging(mode) gesture tracker

Functions:
    clamp_crop: Enforce the rectangle invariants
    target_aspect: Aspect ratio of the target size, or None if degenerate
    apply_crop_drag: Compute the rectangle for a drag delta
    hit_test: Find the handle (or body) under a pointer
    parse_aspect_ratio: Parse "16:9" style preset keys
    apply_aspect_preset: Recompute target size and rectangle for a preset
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import logging
import math

from PX_Libs.constants import (
    ASPECT_PRESET_CUSTOM,
    ASPECT_PRESET_FREE,
    CROP_HANDLE_TOLERANCE_PX,
    CROP_HANDLES,
    CROP_MODE_MOVE,
    MIN_CROP_FRACTION,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# Corners are tested before edge midpoints so they win where they overlap
_CORNER_HANDLES = ("nw", "ne", "se", "sw")
_EDGE_HANDLES = ("n", "e", "s", "w")


@dataclass(frozen=True)
class CropRect:
    """Crop region as fractions of the displayed image's width and height."""
    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0

    @classmethod
    def full_frame(cls) -> "CropRect":
        return cls()

    def is_full_frame(self) -> bool:
        """True when the rectangle covers the whole image (no crop)."""
        return not (self.x > 0 or self.y > 0 or self.width < 1 or self.height < 1)

    def handle_position(self, handle: str) -> Point:
        """Normalized position of a compass handle on this rectangle."""
        if "w" in handle:
            hx = self.x
        elif "e" in handle:
            hx = self.x + self.width
        else:
            hx = self.x + self.width / 2
        if "n" in handle:
            hy = self.y
        elif "s" in handle:
            hy = self.y + self.height
        else:
            hy = self.y + self.height / 2
        return hx, hy

    def contains(self, point: Point) -> bool:
        nx, ny = point
        return (
            self.x <= nx <= self.x + self.width
            and self.y <= ny <= self.y + self.height
        )

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CropRect":
        """Create from dictionary."""
        return cls(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 1.0)),
            height=float(data.get("height", 1.0)),
        )


def clamp_crop(x: float, y: float, width: float, height: float) -> CropRect:
    """
    Enforce the crop rectangle invariants.

    Size is clamped to [MIN_CROP_FRACTION, 1] first, then the origin to
    [0, 1 - size]. The order keeps the rectangle inside the unit square
    even for extreme drag deltas.
    """
    width = max(MIN_CROP_FRACTION, min(1.0, width))
    height = max(MIN_CROP_FRACTION, min(1.0, height))
    x = max(0.0, min(1.0 - width, x))
    y = max(0.0, min(1.0 - height, y))
    return CropRect(x=x, y=y, width=width, height=height)


def target_aspect(target_width: float, target_height: float) -> Optional[float]:
    """Return target_width / target_height, or None when either is not positive."""
    if target_width <= 0 or target_height <= 0:
        return None
    return target_width / target_height


def _validate_mode(mode: str) -> str:
    if mode != CROP_MODE_MOVE and mode not in CROP_HANDLES:
        raise ValueError(
            f"Unknown crop drag mode: {mode}. "
            f"Valid modes: {CROP_MODE_MOVE}, {', '.join(CROP_HANDLES)}"
        )
    return mode


def apply_crop_drag(
    start: CropRect,
    mode: str,
    dx: float,
    dy: float,
    aspect: Optional[float] = None,
) -> CropRect:
    """
    Compute the crop rectangle for a drag gesture.

    Args:
        start: Rectangle snapshot taken at gesture start
        mode: 'move' or a compass handle ('n', 's', 'e', 'w', 'ne', 'nw', 'se', 'sw')
        dx: Normalized horizontal pointer delta since gesture start
        dy: Normalized vertical pointer delta since gesture start
        aspect: Locked width/height ratio, or None when aspect lock is off

    Returns:
        New clamped CropRect

    Raises:
        ValueError: If mode is not recognised
    """
    _validate_mode(mode)
    x, y, w, h = start.x, start.y, start.width, start.height

    if mode == CROP_MODE_MOVE:
        x += dx
        y += dy
    else:
        if "w" in mode:
            x += dx
            w -= dx
        if "e" in mode:
            w += dx
        if "n" in mode:
            y += dy
            h -= dy
        if "s" in mode:
            h += dy

        if aspect:
            if "e" in mode or "w" in mode:
                h = w / aspect
            else:
                w = h * aspect

    return clamp_crop(x, y, w, h)


def hit_test(
    crop: CropRect,
    point: Point,
    rendered_size: Tuple[float, float],
    tolerance_px: float = CROP_HANDLE_TOLERANCE_PX,
) -> Optional[str]:
    """
    Find what a pointer is over: a handle, the rectangle body, or nothing.

    Args:
        crop: Current crop rectangle
        point: Pointer in normalized coordinates
        rendered_size: (width, height) of the rendered image in pixels
        tolerance_px: Handle grab distance in display pixels

    Returns:
        Handle name, 'move' for the body, or None
    """
    rendered_w, rendered_h = rendered_size
    if rendered_w <= 0 or rendered_h <= 0:
        return None

    tol_x = tolerance_px / rendered_w
    tol_y = tolerance_px / rendered_h
    nx, ny = point

    for handle in _CORNER_HANDLES + _EDGE_HANDLES:
        hx, hy = crop.handle_position(handle)
        if abs(nx - hx) <= tol_x and abs(ny - hy) <= tol_y:
            return handle

    if crop.contains(point):
        return CROP_MODE_MOVE
    return None


class CropStateMachine:
    """
    Tracks a crop drag gesture.

    States are Idle (mode is None) and Dragging(mode). A drag starts only
    over a handle or the rectangle body and ends on pointer release or when
    the pointer leaves the surface.

    Example:
        >>> machine = CropStateMachine()
        >>> machine.begin_drag("se", (0.9, 0.9), CropRect(0.1, 0.1, 0.8, 0.8))
        >>> rect = machine.drag_to((0.8, 0.8))
        >>> machine.end_drag()
    """

    def __init__(self) -> None:
        self._mode: Optional[str] = None
        self._start_point: Point = (0.0, 0.0)
        self._start_rect: CropRect = CropRect()

    @property
    def mode(self) -> Optional[str]:
        return self._mode

    @property
    def is_dragging(self) -> bool:
        return self._mode is not None

    def begin_drag(self, mode: str, point: Point, crop: CropRect) -> None:
        """Enter Dragging(mode), snapshotting the pointer and rectangle."""
        self._mode = _validate_mode(mode)
        self._start_point = point
        self._start_rect = crop
        logger.debug(f"Crop drag started: mode={mode} rect={crop}")

    def drag_to(self, point: Point, aspect: Optional[float] = None) -> CropRect:
        """
        Rectangle for the pointer's current position.

        Returns the start rectangle unchanged when idle.
        """
        if self._mode is None:
            return self._start_rect

        dx = point[0] - self._start_point[0]
        dy = point[1] - self._start_point[1]
        return apply_crop_drag(self._start_rect, self._mode, dx, dy, aspect)

    def end_drag(self) -> None:
        if self._mode is not None:
            logger.debug(f"Crop drag ended: mode={self._mode}")
        self._mode = None


# ============================================================================
# Aspect presets
# ============================================================================

@dataclass(frozen=True)
class AspectPresetResult:
    """Crop state after an aspect preset is selected."""
    crop: CropRect
    target_width: int
    target_height: int
    lock_aspect: bool


def parse_aspect_ratio(preset: str) -> Tuple[int, int]:
    """
    Parse an aspect preset key such as "16:9".

    Raises:
        ValueError: If the key is malformed or either side is not positive
    """
    parts = str(preset).split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid aspect preset: {preset}")
    try:
        ratio_w, ratio_h = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid aspect preset: {preset}")
    if ratio_w <= 0 or ratio_h <= 0:
        raise ValueError(f"Aspect preset sides must be positive: {preset}")
    return ratio_w, ratio_h


def apply_aspect_preset(
    preset: str,
    crop: CropRect,
    target_width: int,
    target_height: int,
    lock_aspect: bool,
) -> AspectPresetResult:
    """
    Apply an aspect preset to the crop state.

    - "free" clears aspect lock, rectangle and target size untouched.
    - "custom" changes nothing.
    - "W:H" keeps the current target width (W * 100 if it is not positive),
      derives the target height from the ratio, enables aspect lock and
      shrinks the rectangle's width or height to match the ratio.

    Args:
        preset: Preset key
        crop: Current crop rectangle
        target_width: Current target width field
        target_height: Current target height field
        lock_aspect: Current aspect-lock flag

    Returns:
        AspectPresetResult with the new state
    """
    if preset == ASPECT_PRESET_FREE:
        return AspectPresetResult(crop, target_width, target_height, False)
    if preset == ASPECT_PRESET_CUSTOM:
        return AspectPresetResult(crop, target_width, target_height, lock_aspect)

    ratio_w, ratio_h = parse_aspect_ratio(preset)
    new_width = int(target_width) if target_width and target_width > 0 else ratio_w * 100
    new_height = max(1, int(math.floor(new_width * (ratio_h / ratio_w) + 0.5)))

    aspect = ratio_w / ratio_h
    w, h = crop.width, crop.height
    if w / h > aspect:
        w = h * aspect
    else:
        h = w / aspect

    adjusted = clamp_crop(crop.x, crop.y, w, h)
    logger.debug(f"Aspect preset {preset}: target={new_width}x{new_height} rect={adjusted}")
    return AspectPresetResult(adjusted, new_width, new_height, True)
