"""
Coordinate and viewport model for Pixelargon.

Maps pointer positions on the display surface to normalized image-space
coordinates and back, accounting for rotation, zoom and pan.

Normalized coordinates are fractions of the *displayed* (post-rotation)
image's width and height. They are independent of zoom, so crop rectangles
and pixelate strokes captured at one zoom level stay valid at any other.

Classes:
    RenderedRect: Where the displayed image currently sits in the container
    Viewport: Zoom factor and pan offset

Functions:
    normalize_rotation: Fold any multiple of 90 degrees into 0/90/180/270
    display_dimensions: Natural dimensions swapped for 90/270 rotation
    pointer_to_normalized: Container pixel position to normalized coordinates
    normalized_to_pointer: Normalized coordinates to container pixel position
    is_normalized_inside: Check a normalized point lies on the image
    fit_zoom: Largest zoom <= 1 that fits the image in a container
    clamp_zoom: Clamp a zoom factor into [MIN_ZOOM, MAX_ZOOM]
"""

from dataclasses import dataclass
from typing import Tuple
import logging

from PX_Libs.constants import (
    FIT_MARGIN,
    MAX_ZOOM,
    MIN_ZOOM,
    VALID_ROTATIONS,
    WHEEL_ZOOM_IN,
    WHEEL_ZOOM_OUT,
    ZOOM_STEP,
)

logger = logging.getLogger(__name__)

Size = Tuple[float, float]
Point = Tuple[float, float]


def normalize_rotation(rotation: int) -> int:
    """
    Fold a rotation in degrees into the set {0, 90, 180, 270}.

    Args:
        rotation: Rotation in degrees, any multiple of 90 (negative allowed)

    Returns:
        Equivalent rotation in [0, 360)

    Raises:
        ValueError: If rotation is not a multiple of 90
    """
    folded = int(rotation) % 360
    if folded not in VALID_ROTATIONS:
        raise ValueError(f"rotation must be a multiple of 90, got {rotation}")
    return folded


def display_dimensions(width: int, height: int, rotation: int) -> Tuple[int, int]:
    """
    Return the displayed image size for a rotation.

    For 90 and 270 degrees the natural width and height are swapped,
    otherwise they are returned unchanged.
    """
    if normalize_rotation(rotation) in (90, 270):
        return height, width
    return width, height


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, float(zoom)))


def fit_zoom(container_size: Size, display_size: Size, margin: float = FIT_MARGIN) -> float:
    """
    Largest zoom <= 1 so the displayed image plus margin fits the container.

    Args:
        container_size: (width, height) of the container in pixels
        display_size: (width, height) of the displayed (rotated) image
        margin: Total margin subtracted from each container axis

    Returns:
        min((cw - margin) / dw, (ch - margin) / dh, 1), before zoom clamping

    Raises:
        ValueError: If the display size is not positive
    """
    container_w, container_h = container_size
    display_w, display_h = display_size
    if display_w <= 0 or display_h <= 0:
        raise ValueError(f"display size must be positive, got {display_size}")

    return min(
        (container_w - margin) / display_w,
        (container_h - margin) / display_h,
        1.0,
    )


@dataclass(frozen=True)
class RenderedRect:
    """Rectangle occupied by the displayed image, in container pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def size(self) -> Size:
        return self.width, self.height

    def contains(self, point: Point) -> bool:
        x, y = point
        return (
            self.left <= x <= self.left + self.width
            and self.top <= y <= self.top + self.height
        )


def pointer_to_normalized(pointer: Point, rendered_rect: RenderedRect) -> Point:
    """
    Convert a container pixel position into normalized image coordinates.

    The result may fall outside [0, 1] when the pointer is outside the
    rendered image; callers check bounds with is_normalized_inside().
    """
    if rendered_rect.width <= 0 or rendered_rect.height <= 0:
        return -1.0, -1.0

    px, py = pointer
    return (
        (px - rendered_rect.left) / rendered_rect.width,
        (py - rendered_rect.top) / rendered_rect.height,
    )


def normalized_to_pointer(point: Point, rendered_rect: RenderedRect) -> Point:
    nx, ny = point
    return (
        rendered_rect.left + nx * rendered_rect.width,
        rendered_rect.top + ny * rendered_rect.height,
    )


def is_normalized_inside(point: Point) -> bool:
    nx, ny = point
    return 0.0 <= nx <= 1.0 and 0.0 <= ny <= 1.0


@dataclass
class Viewport:
    """
    Zoom/pan transform between display space and the container.

    Attributes:
        zoom: Scale factor, always kept within [MIN_ZOOM, MAX_ZOOM]
        pan_x: Horizontal pan offset in container pixels (unconstrained)
        pan_y: Vertical pan offset in container pixels (unconstrained)
    """
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def __post_init__(self) -> None:
        self.zoom = clamp_zoom(self.zoom)

    def set_zoom(self, zoom: float) -> float:
        self.zoom = clamp_zoom(zoom)
        logger.debug(f"Zoom set to {self.zoom:.3f}")
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom * ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom / ZOOM_STEP)

    def zoom_by_wheel(self, delta_y: float) -> float:
        """Zoom out for positive wheel deltas (scrolling down), in otherwise."""
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        return self.set_zoom(self.zoom * factor)

    def fit(self, container_size: Size, display_size: Size) -> float:
        """Zoom to fit the container and reset the pan offset."""
        self.pan_x = 0.0
        self.pan_y = 0.0
        return self.set_zoom(fit_zoom(container_size, display_size))

    def pan_to(self, pan_x: float, pan_y: float) -> None:
        self.pan_x = float(pan_x)
        self.pan_y = float(pan_y)

    def rendered_rect(self, container_size: Size, display_size: Size) -> RenderedRect:
        """
        Place the displayed image in the container.

        The image is centred in the container, then offset by the pan.

        Args:
            container_size: (width, height) of the container in pixels
            display_size: (width, height) of the displayed (rotated) image

        Returns:
            RenderedRect in container pixel coordinates
        """
        container_w, container_h = container_size
        display_w, display_h = display_size
        width = display_w * self.zoom
        height = display_h * self.zoom
        return RenderedRect(
            left=container_w / 2 + self.pan_x - width / 2,
            top=container_h / 2 + self.pan_y - height / 2,
            width=width,
            height=height,
        )
