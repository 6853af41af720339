"""
Image processor for Pixelargon.

The processor is the editor's only route to image files. It decodes images
for editing, bakes pending edits into a backing file ("apply") and renders
final output files ("export"). It also owns the recent-files list in the
application data directory.

Both apply and export run the same pipeline over the full-resolution
source:

    rotate -> flip -> grayscale -> brightness/contrast -> pixelate strokes
    -> background removal (export only) -> crop -> fit to target

Normalized geometry in the requests is converted to pixels against the
source image after rotation and flips, which is the image the user saw
while editing.

Classes:
    ImageProcessor: Open, apply, export and recent-files round trips
"""

from pathlib import Path
from typing import Any, List, Optional, Sequence, Union
import logging

from PX_Libs.constants import APPLIED_FILE_NAME, MIN_EXPORT_BLOCK_SIZE, get_data_dir
from PX_Libs.errors import ImageDecodeError, ProcessingError
from PX_Libs.ExportLib.export_models import ApplyRequest, ExportRequest
from PX_Libs.ImageEditingLib.chroma_key import apply_chroma_key
from PX_Libs.ImageEditingLib.image_editing_ops import (
    apply_brightness_contrast,
    crop_normalized,
    fit_to_target,
    flip_image,
    rotate_image,
    to_grayscale,
)
from PX_Libs.ImageEditingLib.image_models import ImageSession
from PX_Libs.PixelateLib.pixelate_filter import PixelateStroke, apply_pixelate_strokes
from PX_Libs.pillow_compat import Image, LANCZOS
from PX_Libs.ProjStoreLib.recent_files import RecentFilesStore

logger = logging.getLogger(__name__)


def _load_rgba(path: Path) -> Any:
    with Image.open(path) as img:
        img.load()
        return img.convert("RGBA")


def _run_edit_pipeline(
    image: Any,
    rotation: int,
    flip_h: bool,
    flip_v: bool,
    grayscale: bool,
    brightness: float,
    contrast: float,
    strokes: Sequence[PixelateStroke],
    block_size: int,
) -> Any:
    """Shared head of the apply and export pipelines."""
    result = rotate_image(image, rotation)
    result = flip_image(result, flip_h, flip_v)
    if grayscale:
        result = to_grayscale(result)
    if brightness != 0 or contrast != 0:
        result = apply_brightness_contrast(result, brightness, contrast)
    if strokes:
        result = apply_pixelate_strokes(
            result, strokes, max(MIN_EXPORT_BLOCK_SIZE, int(block_size))
        )
    return result


class ImageProcessor:
    """
    Reference implementation of the editor's image-processing collaborator.

    Args:
        data_dir: Application data directory; defaults to get_data_dir()

    Example:
        >>> processor = ImageProcessor(tmp_path)
        >>> session = processor.open_image("photo.jpg")
        >>> session.width, session.height
        (800, 600)
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else get_data_dir()
        self._recent = RecentFilesStore(self.data_dir)

    # ------------------------------------------------------------------
    # Open
    # ------------------------------------------------------------------

    def open_image(self, path: Union[str, Path]) -> ImageSession:
        """
        Decode an image file for editing.

        Returns:
            ImageSession with natural dimensions and an RGBA preview

        Raises:
            ImageDecodeError: If the file is missing, unreadable or not an image
        """
        source = Path(path)
        try:
            preview = _load_rgba(source)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning(f"Failed to open image {source}: {e}")
            raise ImageDecodeError(f"Failed to open image {source}: {e}") from e

        width, height = preview.size
        logger.info(f"Opened {source} ({width}x{height})")
        return ImageSession(source_path=source, width=width, height=height, preview=preview)

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def get_applied_path(self) -> Path:
        """Backing file written by the most recent apply_edits()."""
        return self.data_dir / APPLIED_FILE_NAME

    def apply_edits(self, request: ApplyRequest) -> ImageSession:
        """
        Bake edits into the backing file and return it as a new session.

        An exact resize runs only when both resize dimensions are positive
        and differ from the image's current size.

        Raises:
            ProcessingError: If any stage fails; nothing is written in that case
        """
        logger.debug(f"apply_edits: {request.to_dict()}")
        try:
            image = _load_rgba(Path(request.source_path))
            image = _run_edit_pipeline(
                image,
                request.rotation,
                request.flip_h,
                request.flip_v,
                request.grayscale,
                request.brightness,
                request.contrast,
                request.pixelate_strokes,
                request.pixelate_block_size,
            )
            if request.crop is not None:
                image = crop_normalized(image, request.crop)
            if request.resize_width > 0 and request.resize_height > 0:
                if image.size != (request.resize_width, request.resize_height):
                    image = image.resize((request.resize_width, request.resize_height), LANCZOS)

            applied_path = self.get_applied_path()
            self.data_dir.mkdir(parents=True, exist_ok=True)
            image.save(applied_path, format="PNG")
        except (OSError, ValueError) as e:
            logger.warning(f"Apply failed for {request.source_path}: {e}")
            raise ProcessingError(f"Apply failed: {e}") from e

        width, height = image.size
        logger.info(f"Applied edits to {request.source_path} -> {applied_path} ({width}x{height})")
        return ImageSession(source_path=applied_path, width=width, height=height, preview=image)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_image(self, request: ExportRequest) -> Path:
        """
        Render the edited image to request.output_path.

        JPEG output drops alpha and uses jpeg_quality clamped to 1-100;
        every other format is written as PNG.

        Returns:
            Path of the written file

        Raises:
            ProcessingError: If any stage fails
        """
        logger.debug(f"export_image: {request.to_dict()}")
        output_path = Path(request.output_path)
        try:
            image = _load_rgba(Path(request.source_path))
            image = _run_edit_pipeline(
                image,
                request.rotation,
                request.flip_h,
                request.flip_v,
                request.grayscale,
                request.brightness,
                request.contrast,
                request.pixelate_strokes,
                request.pixelate_block_size,
            )
            bg = request.bg_removal
            if bg is not None and bg.enabled:
                image = apply_chroma_key(image, bg.color, bg.tolerance)
            if request.crop is not None:
                image = crop_normalized(image, request.crop)
            image = fit_to_target(image, request.target_width, request.target_height, request.mode)

            save_kwargs = request.get_save_kwargs()
            if save_kwargs["format"] == "JPEG":
                image = image.convert("RGB")
            image.save(output_path, **save_kwargs)
        except (OSError, ValueError) as e:
            logger.warning(f"Export failed for {request.source_path}: {e}")
            raise ProcessingError(f"Export failed: {e}") from e

        logger.info(f"Exported {request.source_path} -> {output_path} ({image.width}x{image.height})")
        return output_path

    # ------------------------------------------------------------------
    # Recent files
    # ------------------------------------------------------------------

    def get_recent_files(self) -> List[str]:
        return self._recent.load()

    def set_recent_files(self, files: Sequence[str]) -> None:
        """
        Replace the stored recent-files list.

        Raises:
            OSError: If the list cannot be written
        """
        self._recent.save(files)
