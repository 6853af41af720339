"""
Pending edit state for Pixelargon.

EditState collects every edit that has not been baked yet for the current
image. It is owned by the editor session, reset whenever a new image
session starts, and read (never mutated) when apply/export requests are
built.

Brightness, contrast and background tolerance are held on their integer
UI scales; the *_delta / *_fraction properties give the normalized values
that cross the processor boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple
import logging

from PX_Libs.constants import (
    ADJUSTMENT_MAX,
    ADJUSTMENT_MIN,
    ADJUSTMENT_SCALE,
    ASPECT_PRESET_CUSTOM,
    ASPECT_PRESET_FREE,
    DEFAULT_BG_COLOR,
    DEFAULT_BG_TOLERANCE,
    DEFAULT_BLOCK_SIZE,
    DEFAULT_TARGET_HEIGHT,
    DEFAULT_TARGET_WIDTH,
    ROTATION_STEP,
    SCALE_MODES,
    SCALE_THEN_CROP,
)
from PX_Libs.CropLib.crop_state import (
    CropRect,
    apply_aspect_preset,
    target_aspect,
)
from PX_Libs.ImageEditingLib.chroma_key import normalize_tolerance
from PX_Libs.ImageEditingLib.image_models import RgbColor
from PX_Libs.ImageEditingLib.preview import render_preview
from PX_Libs.PixelateLib.stroke_engine import StrokeEngine
from PX_Libs.ViewportLib.viewport import display_dimensions, normalize_rotation

logger = logging.getLogger(__name__)


def _clamp_adjustment(value: int) -> int:
    return max(ADJUSTMENT_MIN, min(ADJUSTMENT_MAX, int(value)))


@dataclass
class EditState:
    """
    Edits pending against the current image session.

    Attributes:
        rotation: Clockwise rotation, always one of 0/90/180/270
        flip_h: Mirror left-right
        flip_v: Mirror top-bottom
        grayscale: Convert to grayscale
        brightness: Brightness on the -100..100 UI scale
        contrast: Contrast on the -100..100 UI scale
        crop: Normalized crop rectangle of the displayed image
        target_width: Output width in pixels
        target_height: Output height in pixels
        lock_aspect: Keep crop drags at target_width / target_height
        scale_mode: 'scale_then_crop' or 'crop_then_scale'
        pixelate: Stroke engine holding applied and redo strokes
        bg_enabled: Background removal on/off
        bg_color: Background key colour (r, g, b)
        bg_tolerance: Background tolerance on the 0..100 UI scale
    """
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False
    grayscale: bool = False
    brightness: int = 0
    contrast: int = 0
    crop: CropRect = field(default_factory=CropRect)
    target_width: int = DEFAULT_TARGET_WIDTH
    target_height: int = DEFAULT_TARGET_HEIGHT
    lock_aspect: bool = False
    scale_mode: str = SCALE_THEN_CROP
    pixelate: StrokeEngine = field(default_factory=StrokeEngine)
    bg_enabled: bool = False
    bg_color: RgbColor = DEFAULT_BG_COLOR
    bg_tolerance: int = DEFAULT_BG_TOLERANCE

    def __post_init__(self) -> None:
        self.rotation = normalize_rotation(self.rotation)
        self.brightness = _clamp_adjustment(self.brightness)
        self.contrast = _clamp_adjustment(self.contrast)
        self.set_scale_mode(self.scale_mode)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self, natural_width: int, natural_height: int) -> None:
        """
        Return every pending edit to its default for a new image session.

        The target size becomes the natural size. Tool preferences
        (brush size, aspect lock, scale mode) are kept.
        """
        self.rotation = 0
        self.flip_h = False
        self.flip_v = False
        self.grayscale = False
        self.brightness = 0
        self.contrast = 0
        self.crop = CropRect.full_frame()
        self.target_width = int(natural_width)
        self.target_height = int(natural_height)
        self.pixelate.clear()
        self.pixelate.block_size = DEFAULT_BLOCK_SIZE
        self.bg_enabled = False
        self.bg_color = DEFAULT_BG_COLOR
        self.bg_tolerance = DEFAULT_BG_TOLERANCE
        logger.debug(f"Edit state reset for {natural_width}x{natural_height}")

    def has_pending_adjustments(self) -> bool:
        """True when there is something for apply to bake."""
        return (
            self.rotation != 0
            or self.flip_h
            or self.flip_v
            or self.grayscale
            or self.brightness != 0
            or self.contrast != 0
            or self.pixelate.can_undo
        )

    # ------------------------------------------------------------------
    # Transforms and adjustments
    # ------------------------------------------------------------------

    def set_rotation(self, rotation: int) -> None:
        self.rotation = normalize_rotation(rotation)

    def rotate_right(self) -> int:
        self.rotation = normalize_rotation(self.rotation + ROTATION_STEP)
        return self.rotation

    def rotate_left(self) -> int:
        self.rotation = normalize_rotation(self.rotation - ROTATION_STEP)
        return self.rotation

    def toggle_flip_h(self) -> bool:
        self.flip_h = not self.flip_h
        return self.flip_h

    def toggle_flip_v(self) -> bool:
        self.flip_v = not self.flip_v
        return self.flip_v

    def set_brightness(self, value: int) -> None:
        self.brightness = _clamp_adjustment(value)

    def set_contrast(self, value: int) -> None:
        self.contrast = _clamp_adjustment(value)

    @property
    def brightness_delta(self) -> float:
        return self.brightness / ADJUSTMENT_SCALE

    @property
    def contrast_delta(self) -> float:
        return self.contrast / ADJUSTMENT_SCALE

    def display_size(self, natural_width: int, natural_height: int) -> Tuple[int, int]:
        return display_dimensions(natural_width, natural_height, self.rotation)

    # ------------------------------------------------------------------
    # Crop target
    # ------------------------------------------------------------------

    def set_target_size(self, width: Any, height: Any) -> None:
        """Set the output size; missing or non-positive values fall back to 800x600."""
        self.target_width = _positive_int_or(width, DEFAULT_TARGET_WIDTH)
        self.target_height = _positive_int_or(height, DEFAULT_TARGET_HEIGHT)

    def set_scale_mode(self, scale_mode: str) -> None:
        if scale_mode not in SCALE_MODES:
            raise ValueError(
                f"Unknown scale_mode: {scale_mode}. "
                f"Valid modes: {', '.join(SCALE_MODES)}"
            )
        self.scale_mode = scale_mode

    def select_aspect_preset(self, preset: str) -> None:
        result = apply_aspect_preset(
            preset,
            self.crop,
            self.target_width,
            self.target_height,
            self.lock_aspect,
        )
        self.crop = result.crop
        self.target_width = result.target_width
        self.target_height = result.target_height
        self.lock_aspect = result.lock_aspect

    @property
    def aspect_preset_name(self) -> str:
        """Preset that describes the current lock state without changing it."""
        return ASPECT_PRESET_CUSTOM if self.lock_aspect else ASPECT_PRESET_FREE

    @property
    def locked_aspect(self) -> Optional[float]:
        """Aspect ratio enforced on crop drags, or None when unlocked or degenerate."""
        if not self.lock_aspect:
            return None
        return target_aspect(self.target_width, self.target_height)

    # ------------------------------------------------------------------
    # Background removal
    # ------------------------------------------------------------------

    def set_bg_color(self, color: RgbColor) -> None:
        r, g, b = (max(0, min(255, int(c))) for c in color)
        self.bg_color = (r, g, b)

    @property
    def bg_tolerance_fraction(self) -> float:
        return normalize_tolerance(self.bg_tolerance)

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def render_preview(self, base: Any) -> Any:
        """Render the live preview of these edits over a natural preview image."""
        return render_preview(
            base,
            rotation=self.rotation,
            flip_h=self.flip_h,
            flip_v=self.flip_v,
            grayscale=self.grayscale,
            brightness=self.brightness_delta,
            contrast=self.contrast_delta,
            strokes=self.pixelate.applied_strokes,
            block_size=self.pixelate.block_size,
            in_progress=self.pixelate.in_progress_stroke(),
        )


def _positive_int_or(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
