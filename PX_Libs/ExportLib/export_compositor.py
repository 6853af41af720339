"""
Edit/Export compositor for Pixelargon.

Turns the pending EditState into processor requests and interprets the
responses.

- A crop is sent only when it differs from the full frame.
- Background removal is sent only when enabled, with the 0-100 tolerance
  normalized to a fraction.
- Brightness and contrast are sent as deltas in [-1, 1].
- Apply replaces the image session with the baked backing file and resets
  the edit state; export leaves both untouched.

Only one apply or export may be outstanding at a time. A failed request
leaves the edit state and image session exactly as they were.

Functions:
    build_apply_request: ApplyRequest for the current edits
    build_export_request: ExportRequest for the current edits
    default_export_name: Default output file name for a format

Classes:
    ExportCompositor: Runs apply/export round trips against a processor
"""

from pathlib import Path
from typing import Any, Optional, Union
import logging

from PX_Libs.constants import DEFAULT_JPEG_QUALITY, FORMAT_PNG
from PX_Libs.errors import NoPendingEditsError, RequestInFlightError
from PX_Libs.ExportLib.export_models import (
    ApplyRequest,
    BgRemovalSettings,
    ExportRequest,
    output_extension,
)
from PX_Libs.ImageEditingLib.edit_state import EditState
from PX_Libs.ImageEditingLib.image_models import ImageSession

logger = logging.getLogger(__name__)


def default_export_name(output_format: str) -> str:
    return f"export.{output_extension(output_format)}"


def build_apply_request(session: ImageSession, edit_state: EditState) -> ApplyRequest:
    """Request that bakes the transforms, adjustments and strokes."""
    return ApplyRequest(
        source_path=str(session.source_path),
        rotation=edit_state.rotation,
        flip_h=edit_state.flip_h,
        flip_v=edit_state.flip_v,
        grayscale=edit_state.grayscale,
        brightness=edit_state.brightness_delta,
        contrast=edit_state.contrast_delta,
        pixelate_strokes=edit_state.pixelate.applied_strokes,
        pixelate_block_size=edit_state.pixelate.block_size,
    )


def build_export_request(
    session: ImageSession,
    edit_state: EditState,
    output_path: Union[str, Path],
    output_format: str = FORMAT_PNG,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> ExportRequest:
    """
    Request for a final export of the current edits.

    Args:
        session: Loaded image session
        edit_state: Pending edits (read only)
        output_path: Destination file
        output_format: 'png' or 'jpeg'
        jpeg_quality: JPEG quality, clamped by the processor

    Returns:
        ExportRequest
    """
    crop = None if edit_state.crop.is_full_frame() else edit_state.crop

    bg_removal: Optional[BgRemovalSettings] = None
    if edit_state.bg_enabled:
        bg_removal = BgRemovalSettings(
            enabled=True,
            color=edit_state.bg_color,
            tolerance=edit_state.bg_tolerance_fraction,
        )

    return ExportRequest(
        source_path=str(session.source_path),
        output_path=str(output_path),
        output_format=output_format,
        jpeg_quality=int(jpeg_quality),
        target_width=edit_state.target_width,
        target_height=edit_state.target_height,
        crop=crop,
        rotation=edit_state.rotation,
        flip_h=edit_state.flip_h,
        flip_v=edit_state.flip_v,
        grayscale=edit_state.grayscale,
        brightness=edit_state.brightness_delta,
        contrast=edit_state.contrast_delta,
        pixelate_strokes=edit_state.pixelate.applied_strokes,
        pixelate_block_size=edit_state.pixelate.block_size,
        bg_removal=bg_removal,
        mode=edit_state.scale_mode,
    )


class ExportCompositor:
    """
    Runs apply and export round trips, one at a time.

    Args:
        processor: Object providing apply_edits(ApplyRequest) -> ImageSession
            and export_image(ExportRequest) -> Path (see ImageProcessor)
    """

    def __init__(self, processor: Any) -> None:
        self.processor = processor
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def _acquire(self, action: str) -> None:
        if self._in_flight:
            raise RequestInFlightError(f"Cannot {action}: another request is still running")
        self._in_flight = True

    def apply(self, session: ImageSession, edit_state: EditState) -> ImageSession:
        """
        Bake pending edits and continue from the new backing file.

        On success the edit state is reset for the new image, with the
        target size set to its natural size.

        Returns:
            The new ImageSession

        Raises:
            NoPendingEditsError: If there is nothing to bake
            RequestInFlightError: If another request is outstanding
            ProcessingError: If the processor fails; state is left unchanged
        """
        if not edit_state.has_pending_adjustments():
            raise NoPendingEditsError("No adjustments to apply")

        self._acquire("apply")
        try:
            request = build_apply_request(session, edit_state)
            new_session = self.processor.apply_edits(request)
        finally:
            self._in_flight = False

        edit_state.reset(new_session.width, new_session.height)
        logger.info(f"Applied edits; continuing from {new_session.source_path}")
        return new_session

    def export(
        self,
        session: ImageSession,
        edit_state: EditState,
        output_path: Union[str, Path],
        output_format: str = FORMAT_PNG,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> Path:
        """
        Export the edited image without touching the session or edit state.

        Raises:
            RequestInFlightError: If another request is outstanding
            ProcessingError: If the processor fails
        """
        self._acquire("export")
        try:
            request = build_export_request(
                session, edit_state, output_path, output_format, jpeg_quality
            )
            written = self.processor.export_image(request)
        finally:
            self._in_flight = False

        logger.info(f"Exported to {written}")
        return Path(written)
