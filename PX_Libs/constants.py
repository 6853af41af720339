"""
Constants and configuration values for Pixelargon.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

import os
from pathlib import Path

# Viewport constants
MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
FIT_MARGIN = 40
ZOOM_STEP = 1.25
WHEEL_ZOOM_IN = 1.1
WHEEL_ZOOM_OUT = 0.9

# Rotation
VALID_ROTATIONS = (0, 90, 180, 270)
ROTATION_STEP = 90

# Crop constants
MIN_CROP_FRACTION = 0.02
CROP_HANDLE_TOLERANCE_PX = 8
DEFAULT_TARGET_WIDTH = 800
DEFAULT_TARGET_HEIGHT = 600

# Crop drag modes
CROP_MODE_MOVE = "move"
CROP_HANDLES = ("n", "s", "e", "w", "ne", "nw", "se", "sw")

# Aspect presets
ASPECT_PRESET_FREE = "free"
ASPECT_PRESET_CUSTOM = "custom"
ASPECT_PRESETS = (
    ASPECT_PRESET_FREE,
    ASPECT_PRESET_CUSTOM,
    "1:1",
    "4:3",
    "3:2",
    "16:9",
    "9:16",
    "3:4",
    "2:3",
)

# Pixelate constants
DEFAULT_BRUSH_SIZE = 20
DEFAULT_BLOCK_SIZE = 10
MIN_EXPORT_BLOCK_SIZE = 4

# Background removal
DEFAULT_BG_COLOR = (0, 0, 0)
DEFAULT_BG_TOLERANCE = 30
TOLERANCE_SCALE = 100

# Brightness / contrast UI scale
ADJUSTMENT_MIN = -100
ADJUSTMENT_MAX = 100
ADJUSTMENT_SCALE = 100

# Tools
TOOL_SELECT = "select"
TOOL_CROP = "crop"
TOOL_PIXELATE = "pixelate"
TOOL_EYEDROPPER = "eyedropper"
TOOLS = (TOOL_SELECT, TOOL_CROP, TOOL_PIXELATE, TOOL_EYEDROPPER)

# Scale modes
SCALE_THEN_CROP = "scale_then_crop"
CROP_THEN_SCALE = "crop_then_scale"
SCALE_MODES = (SCALE_THEN_CROP, CROP_THEN_SCALE)

# Output formats
FORMAT_PNG = "png"
FORMAT_JPEG = "jpeg"
OUTPUT_FORMATS = (FORMAT_PNG, FORMAT_JPEG)
DEFAULT_JPEG_QUALITY = 92

# Supported input formats
SUPPORTED_OPEN_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}
OPEN_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.webp)"

# Persistence
RECENT_FILES_NAME = "recent_files.json"
MAX_RECENT_FILES = 10
APPLIED_FILE_NAME = "_applied.png"

# Data directory
DATA_DIR_ENV = "PIXELARGON_DATA_DIR"
LOG_LEVEL_ENV = "PIXELARGON_LOG_LEVEL"
DEFAULT_DATA_DIR_NAME = ".pixelargon"

# UI constants
DEFAULT_WINDOW_WIDTH = 1400
DEFAULT_WINDOW_HEIGHT = 850
SIDE_PANEL_WIDTH = 300
CANVAS_BACKGROUND_COLOR = "#1e1e1e"
CROP_OVERLAY_COLOR = "#f0f0f0"
CROP_SHADE_COLOR = "#000000"
CROP_SHADE_ALPHA = 120


def get_data_dir() -> Path:
    """Return the application data directory (not created here)."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / DEFAULT_DATA_DIR_NAME
