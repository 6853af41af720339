"""
Request models for the apply and export round trips.

These dataclasses are the payloads handed to the image processor. Their
to_dict()/from_dict() use the snake_case keys of the processor's wire
format so a request can be logged, stored or sent over a process boundary
unchanged.

Classes:
    BgRemovalSettings: Chroma key parameters
    ApplyRequest: Bake pending edits into a new backing file
    ExportRequest: Produce a final output file
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from PX_Libs.constants import (
    DEFAULT_BG_COLOR,
    DEFAULT_BLOCK_SIZE,
    DEFAULT_JPEG_QUALITY,
    FORMAT_JPEG,
    FORMAT_PNG,
    OUTPUT_FORMATS,
    SCALE_MODES,
    SCALE_THEN_CROP,
)
from PX_Libs.CropLib.crop_state import CropRect
from PX_Libs.PixelateLib.pixelate_filter import PixelateStroke


def normalize_output_format(output_format: str) -> str:
    """
    Canonical output format name.

    "jpg" is accepted as an alias of "jpeg".

    Raises:
        ValueError: If the format is not png or jpeg
    """
    value = str(output_format).lower()
    if value == "jpg":
        value = FORMAT_JPEG
    if value not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unknown output format: {output_format}. "
            f"Valid formats: {', '.join(OUTPUT_FORMATS)}"
        )
    return value


def output_extension(output_format: str) -> str:
    """File extension for an output format: 'jpg' for jpeg, else 'png'."""
    return "jpg" if normalize_output_format(output_format) == FORMAT_JPEG else "png"


def _strokes_from_list(items: Any) -> Tuple[PixelateStroke, ...]:
    return tuple(PixelateStroke.from_dict(item) for item in (items or []))


@dataclass(frozen=True)
class BgRemovalSettings:
    """Chroma key parameters; tolerance is a fraction in [0, 1]."""
    enabled: bool = False
    color: Tuple[int, int, int] = DEFAULT_BG_COLOR
    tolerance: float = 0.3

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "color": list(self.color),
            "tolerance": self.tolerance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BgRemovalSettings":
        r, g, b = (int(c) for c in data.get("color", DEFAULT_BG_COLOR))
        return cls(
            enabled=bool(data.get("enabled", False)),
            color=(r, g, b),
            tolerance=float(data.get("tolerance", 0.3)),
        )


@dataclass(frozen=True)
class ApplyRequest:
    """
    Payload for ImageProcessor.apply_edits().

    Attributes:
        source_path: Image file the edits are relative to
        rotation: Clockwise rotation (0/90/180/270)
        flip_h: Mirror left-right
        flip_v: Mirror top-bottom
        grayscale: Grayscale conversion
        brightness: Delta in [-1, 1]
        contrast: Delta in [-1, 1]
        pixelate_strokes: Committed strokes in commit order
        pixelate_block_size: Cell size in pixels
        crop: Optional normalized crop of the transformed image
        resize_width: Optional exact resize width (0 = none)
        resize_height: Optional exact resize height (0 = none)
    """
    source_path: str
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False
    grayscale: bool = False
    brightness: float = 0.0
    contrast: float = 0.0
    pixelate_strokes: Tuple[PixelateStroke, ...] = field(default_factory=tuple)
    pixelate_block_size: int = DEFAULT_BLOCK_SIZE
    crop: Optional[CropRect] = None
    resize_width: int = 0
    resize_height: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_path": self.source_path,
            "rotation": self.rotation,
            "flip_h": self.flip_h,
            "flip_v": self.flip_v,
            "grayscale": self.grayscale,
            "brightness": self.brightness,
            "contrast": self.contrast,
            "pixelate_strokes": [stroke.to_dict() for stroke in self.pixelate_strokes],
            "pixelate_block_size": self.pixelate_block_size,
            "crop": self.crop.to_dict() if self.crop is not None else None,
            "resize_width": self.resize_width,
            "resize_height": self.resize_height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplyRequest":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        filtered["pixelate_strokes"] = _strokes_from_list(filtered.get("pixelate_strokes"))
        if filtered.get("crop") is not None:
            filtered["crop"] = CropRect.from_dict(filtered["crop"])
        return cls(**filtered)


@dataclass(frozen=True)
class ExportRequest:
    """
    Payload for ImageProcessor.export_image().

    Geometry (crop, stroke points and radii) is normalized; the processor
    converts it to pixels against the source image after rotation and flips.
    mode selects the order of the final fit stage: 'scale_then_crop' covers
    the target then centre-crops, 'crop_then_scale' resizes exactly.
    """
    source_path: str
    output_path: str
    output_format: str = FORMAT_PNG
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    target_width: int = 0
    target_height: int = 0
    crop: Optional[CropRect] = None
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False
    grayscale: bool = False
    brightness: float = 0.0
    contrast: float = 0.0
    pixelate_strokes: Tuple[PixelateStroke, ...] = field(default_factory=tuple)
    pixelate_block_size: int = DEFAULT_BLOCK_SIZE
    bg_removal: Optional[BgRemovalSettings] = None
    mode: str = SCALE_THEN_CROP

    def __post_init__(self) -> None:
        object.__setattr__(self, "output_format", normalize_output_format(self.output_format))
        if self.mode not in SCALE_MODES:
            raise ValueError(
                f"Unknown scale mode: {self.mode}. "
                f"Valid modes: {', '.join(SCALE_MODES)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_path": self.source_path,
            "output_path": self.output_path,
            "output_format": self.output_format,
            "jpeg_quality": self.jpeg_quality,
            "target_width": self.target_width,
            "target_height": self.target_height,
            "crop": self.crop.to_dict() if self.crop is not None else None,
            "rotation": self.rotation,
            "flip_h": self.flip_h,
            "flip_v": self.flip_v,
            "grayscale": self.grayscale,
            "brightness": self.brightness,
            "contrast": self.contrast,
            "pixelate_strokes": [stroke.to_dict() for stroke in self.pixelate_strokes],
            "pixelate_block_size": self.pixelate_block_size,
            "bg_removal": self.bg_removal.to_dict() if self.bg_removal is not None else None,
            "mode": self.mode,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportRequest":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        filtered["pixelate_strokes"] = _strokes_from_list(filtered.get("pixelate_strokes"))
        if filtered.get("crop") is not None:
            filtered["crop"] = CropRect.from_dict(filtered["crop"])
        if filtered.get("bg_removal") is not None:
            filtered["bg_removal"] = BgRemovalSettings.from_dict(filtered["bg_removal"])
        return cls(**filtered)

    def get_save_kwargs(self) -> Dict[str, Any]:
        """PIL Image.save() kwargs for the requested format."""
        if self.output_format == FORMAT_JPEG:
            return {"format": "JPEG", "quality": max(1, min(100, int(self.jpeg_quality)))}
        return {"format": "PNG"}
