"""
ProcessingLib - Full-resolution image processing

Opens images for editing and runs the apply/export pipelines that bake
edits into files.
"""

from PX_Libs.ProcessingLib.image_processor import ImageProcessor

__all__ = [
    "ImageProcessor",
]
