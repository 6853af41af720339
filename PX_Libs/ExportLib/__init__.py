"""
ExportLib - Apply/export requests

Request models for the image processor and the compositor that builds
them from the pending edit state.
"""

from PX_Libs.ExportLib.export_models import (
    ApplyRequest,
    BgRemovalSettings,
    ExportRequest,
    normalize_output_format,
    output_extension,
)
from PX_Libs.ExportLib.export_compositor import (
    ExportCompositor,
    build_apply_request,
    build_export_request,
    default_export_name,
)

__all__ = [
    "ApplyRequest",
    "BgRemovalSettings",
    "ExportRequest",
    "normalize_output_format",
    "output_extension",
    "ExportCompositor",
    "build_apply_request",
    "build_export_request",
    "default_export_name",
]
