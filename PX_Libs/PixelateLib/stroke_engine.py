"""
Pixelate stroke engine for Pixelargon.

Captures freehand pixelate gestures and keeps linear undo/redo history.

States are Idle and Painting. A gesture may only start on the image; while
painting, points on the image are appended and points off the image are
skipped without aborting the stroke. Ending the gesture (pointer release or
pointer leaving the surface) commits the stroke and clears the redo stack.

Undo and redo move whole strokes between two stacks. Block averaging is
lossy, so rendering always starts again from the clean base surface.
"""

from typing import List, Optional, Tuple
import logging

from PX_Libs.constants import DEFAULT_BLOCK_SIZE, DEFAULT_BRUSH_SIZE
from PX_Libs.PixelateLib.pixelate_filter import (
    PixelateStroke,
    apply_pixelate_strokes,
    validate_block_size,
)
from PX_Libs.ViewportLib.viewport import is_normalized_inside

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class StrokeEngine:
    """
    Owns committed strokes, the redo stack and the stroke in progress.

    Example:
        >>> engine = StrokeEngine(brush_size=20, block_size=10)
        >>> engine.begin_stroke((0.5, 0.5), display_size=(800, 600))
        True
        >>> engine.extend_stroke((0.52, 0.5))
        True
        >>> engine.end_stroke()
        >>> preview = engine.render(base_image)
    """

    def __init__(
        self,
        brush_size: int = DEFAULT_BRUSH_SIZE,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        self.brush_size = int(brush_size)
        self._block_size = validate_block_size(block_size)
        self._applied: List[PixelateStroke] = []
        self._redo: List[PixelateStroke] = []
        self._current_points: Optional[List[Point]] = None
        self._current_radius: float = 0.0

    @property
    def block_size(self) -> int:
        return self._block_size

    @block_size.setter
    def block_size(self, value: int) -> None:
        self._block_size = validate_block_size(value)

    @property
    def applied_strokes(self) -> Tuple[PixelateStroke, ...]:
        return tuple(self._applied)

    @property
    def redo_strokes(self) -> Tuple[PixelateStroke, ...]:
        return tuple(self._redo)

    @property
    def is_painting(self) -> bool:
        return self._current_points is not None

    @property
    def can_undo(self) -> bool:
        return bool(self._applied)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def in_progress_stroke(self) -> Optional[PixelateStroke]:
        """Snapshot of the stroke being painted, or None when idle."""
        if self._current_points is None:
            return None
        return PixelateStroke(points=tuple(self._current_points), radius=self._current_radius)

    def begin_stroke(self, point: Point, display_size: Tuple[int, int]) -> bool:
        """
        Start painting at a normalized point.

        The radius is captured as brush_size / max(display width, height).

        Args:
            point: Normalized pointer position
            display_size: (width, height) of the displayed image in pixels

        Returns:
            True if painting started, False if the point is off the image
        """
        if not is_normalized_inside(point):
            return False

        max_dim = max(display_size)
        if max_dim <= 0:
            return False

        self._current_points = [(float(point[0]), float(point[1]))]
        self._current_radius = self.brush_size / max_dim
        logger.debug(f"Stroke started at {point} radius={self._current_radius:.4f}")
        return True

    def extend_stroke(self, point: Point) -> bool:
        """Append a point while painting. Off-image points are skipped."""
        if self._current_points is None or not is_normalized_inside(point):
            return False
        self._current_points.append((float(point[0]), float(point[1])))
        return True

    def end_stroke(self) -> Optional[PixelateStroke]:
        """
        Commit the stroke in progress and clear the redo stack.

        Returns:
            The committed stroke, or None when no stroke was in progress
        """
        stroke = self.in_progress_stroke()
        if stroke is None:
            return None

        self._applied.append(stroke)
        self._redo.clear()
        self._current_points = None
        self._current_radius = 0.0
        logger.debug(f"Stroke committed with {len(stroke.points)} points ({len(self._applied)} applied)")
        return stroke

    def undo(self) -> Optional[PixelateStroke]:
        if not self._applied:
            return None
        stroke = self._applied.pop()
        self._redo.append(stroke)
        logger.debug(f"Undo stroke ({len(self._applied)} applied, {len(self._redo)} redo)")
        return stroke

    def redo(self) -> Optional[PixelateStroke]:
        if not self._redo:
            return None
        stroke = self._redo.pop()
        self._applied.append(stroke)
        logger.debug(f"Redo stroke ({len(self._applied)} applied, {len(self._redo)} redo)")
        return stroke

    def clear(self) -> None:
        """Drop all strokes, redo history and any stroke in progress."""
        self._applied.clear()
        self._redo.clear()
        self._current_points = None
        self._current_radius = 0.0

    def render(self, base_image, include_in_progress: bool = True):
        """
        Render committed strokes (and the stroke in progress) over a copy of base_image.

        The stroke in progress is never added to the committed strokes.
        """
        in_progress = self.in_progress_stroke() if include_in_progress else None
        return apply_pixelate_strokes(base_image, self._applied, self._block_size, in_progress)
