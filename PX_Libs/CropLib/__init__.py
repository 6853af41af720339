"""
CropLib - Crop rectangle and drag-handle state machine

Normalized crop rectangle, handle hit-testing, drag interpretation with
aspect lock, and aspect preset selection.
"""

from PX_Libs.CropLib.crop_state import (
    AspectPresetResult,
    CropRect,
    CropStateMachine,
    apply_aspect_preset,
    apply_crop_drag,
    clamp_crop,
    hit_test,
    parse_aspect_ratio,
    target_aspect,
)

__all__ = [
    "AspectPresetResult",
    "CropRect",
    "CropStateMachine",
    "apply_aspect_preset",
    "apply_crop_drag",
    "clamp_crop",
    "hit_test",
    "parse_aspect_ratio",
    "target_aspect",
]
