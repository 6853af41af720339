"""
Image editing data models for Pixelargon.

This module defines core data structures used throughout the image editing system.

Classes:
    ImageSession: The currently loaded image and its preview surface

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
    RgbColor: A tuple of 3 integers representing RGB color values (0-255)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from PX_Libs.pillow_compat import Image

RgbaColor = Tuple[int, int, int, int]
RgbColor = Tuple[int, int, int]


@dataclass
class ImageSession:
    """
    A loaded image.

    width and height always describe the natural (unrotated, unflipped)
    orientation; rotation and flips are pending edits, not image state.
    """
    source_path: Path
    width: int
    height: int
    preview: 'Image.Image'

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height
