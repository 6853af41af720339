"""
Editor session for Pixelargon.

EditorSession is the single owner of everything the editor mutates: the
loaded image session, the pending EditState, the viewport and the crop
drag state. The window forwards raw pointer, wheel and key events here in
container pixel coordinates and repaints from render_preview() and
rendered_rect() afterwards. Nothing in this module touches Qt, so the
whole interaction model runs headless in tests.

Pointer routing by tool:

- select: drag pans the viewport
- crop: drag on a handle resizes, drag on the rectangle body moves
- pixelate: drag paints a stroke (committed on release or leave)
- eyedropper: click samples the preview colour as the background key
"""

from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union
import logging

from PX_Libs.constants import (
    CROP_HANDLE_TOLERANCE_PX,
    DEFAULT_JPEG_QUALITY,
    FORMAT_PNG,
    SUPPORTED_OPEN_EXTENSIONS,
    TOOL_CROP,
    TOOL_EYEDROPPER,
    TOOL_PIXELATE,
    TOOL_SELECT,
    TOOLS,
)
from PX_Libs.CropLib.crop_state import CropStateMachine, hit_test
from PX_Libs.errors import ImageDecodeError
from PX_Libs.ExportLib.export_compositor import ExportCompositor
from PX_Libs.ImageEditingLib.chroma_key import sample_color
from PX_Libs.ImageEditingLib.edit_state import EditState
from PX_Libs.ImageEditingLib.image_models import ImageSession, RgbColor
from PX_Libs.ProcessingLib.image_processor import ImageProcessor
from PX_Libs.ProjStoreLib.recent_files import add_recent_file
from PX_Libs.ViewportLib.viewport import (
    RenderedRect,
    Viewport,
    normalized_to_pointer,
    pointer_to_normalized,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# Results of handle_key() that the window has to act on itself
ACTION_OPEN = "open"
ACTION_EXPORT = "export"


def is_openable_path(path: Union[str, Path]) -> bool:
    """True if the file extension is one the editor can open."""
    return Path(path).suffix.lower() in SUPPORTED_OPEN_EXTENSIONS


def first_openable_path(paths: Iterable[Union[str, Path]]) -> Optional[str]:
    """
    Pick the file to open from a drop.

    Returns:
        The first path with a supported extension, or None
    """
    for path in paths:
        if path and is_openable_path(path):
            return str(path)
    return None


class EditorSession:
    """
    Owns the editing state and routes input events to it.

    Args:
        processor: Image processor; defaults to ImageProcessor() on the
            application data directory

    Example:
        >>> editor = EditorSession(ImageProcessor(tmp_path))
        >>> editor.set_container_size(1000, 800)
        >>> editor.open_image("photo.png")
        >>> editor.set_tool("pixelate")
        >>> editor.pointer_down(500, 400)
        >>> editor.pointer_up(500, 400)
        >>> preview = editor.render_preview()
    """

    def __init__(self, processor: Optional[Any] = None) -> None:
        self.processor = processor if processor is not None else ImageProcessor()
        self.compositor = ExportCompositor(self.processor)
        self.session: Optional[ImageSession] = None
        self.edit_state = EditState()
        self.viewport = Viewport()
        self.crop_machine = CropStateMachine()
        self.tool = TOOL_SELECT
        self.container_size: Tuple[int, int] = (0, 0)
        self._pan_start: Optional[Tuple[Point, Point]] = None

    # ------------------------------------------------------------------
    # Image lifecycle
    # ------------------------------------------------------------------

    @property
    def has_image(self) -> bool:
        return self.session is not None

    def open_image(self, path: Union[str, Path]) -> ImageSession:
        """
        Open an image and start a fresh editing session on it.

        Raises:
            ImageDecodeError: If the file cannot be decoded; state is untouched
        """
        try:
            session = self.processor.open_image(path)
        except ImageDecodeError:
            logger.warning(f"Keeping current session; could not open {path}")
            raise
        self._cancel_gestures()
        self.session = session
        self.edit_state.reset(session.width, session.height)
        self.zoom_fit()
        self._remember_recent(session.source_path)
        return session

    def _remember_recent(self, path: Union[str, Path]) -> None:
        try:
            files = add_recent_file(self.processor.get_recent_files(), path)
            self.processor.set_recent_files(files)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not update recent files: {e}")

    def recent_files(self) -> List[str]:
        try:
            return list(self.processor.get_recent_files())
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read recent files: {e}")
            return []

    def apply_edits(self) -> ImageSession:
        """
        Bake pending edits and continue from the result.

        Raises:
            NoPendingEditsError: If there is nothing to apply
            ProcessingError: If the processor fails; state is untouched
            RuntimeError: If no image is loaded
        """
        session = self._require_session()
        self._cancel_gestures()
        self.session = self.compositor.apply(session, self.edit_state)
        return self.session

    def export_image(
        self,
        output_path: Union[str, Path],
        output_format: str = FORMAT_PNG,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> Path:
        """
        Export the edited image; the session and edit state are not changed.

        Raises:
            ProcessingError: If the processor fails
            RuntimeError: If no image is loaded
        """
        session = self._require_session()
        return self.compositor.export(
            session, self.edit_state, output_path, output_format, jpeg_quality
        )

    def _require_session(self) -> ImageSession:
        if self.session is None:
            raise RuntimeError("No image is open")
        return self.session

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def set_container_size(self, width: int, height: int) -> None:
        self.container_size = (int(width), int(height))

    def display_size(self) -> Tuple[int, int]:
        """Size of the image as displayed (rotation applied), before zoom."""
        if self.session is None:
            return 0, 0
        return self.edit_state.display_size(self.session.width, self.session.height)

    def rendered_rect(self) -> RenderedRect:
        return self.viewport.rendered_rect(self.container_size, self.display_size())

    def to_normalized(self, x: float, y: float) -> Point:
        return pointer_to_normalized((x, y), self.rendered_rect())

    def to_pointer(self, point: Point) -> Point:
        """Container pixel position of a normalized display-space point."""
        return normalized_to_pointer(point, self.rendered_rect())

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def zoom_fit(self) -> float:
        if self.session is None:
            return self.viewport.zoom
        return self.viewport.fit(self.container_size, self.display_size())

    def set_zoom(self, zoom: float) -> float:
        return self.viewport.set_zoom(zoom)

    def zoom_in(self) -> float:
        return self.viewport.zoom_in()

    def zoom_out(self) -> float:
        return self.viewport.zoom_out()

    def wheel(self, delta_y: float) -> float:
        return self.viewport.zoom_by_wheel(delta_y)

    # ------------------------------------------------------------------
    # Tools and pointer events
    # ------------------------------------------------------------------

    def set_tool(self, tool: str) -> None:
        """
        Switch the active tool, ending any gesture in progress.

        Raises:
            ValueError: If tool is not one of TOOLS
        """
        if tool not in TOOLS:
            raise ValueError(f"Unknown tool: {tool}. Valid tools: {', '.join(TOOLS)}")
        self._cancel_gestures()
        self.tool = tool
        logger.debug(f"Tool set to {tool}")

    def crop_mode_at(self, x: float, y: float) -> Optional[str]:
        """Handle or 'move' under the pointer, or None (used for cursors too)."""
        if self.session is None:
            return None
        rect = self.rendered_rect()
        return hit_test(
            self.edit_state.crop,
            self.to_normalized(x, y),
            rect.size,
            CROP_HANDLE_TOLERANCE_PX,
        )

    def pointer_down(self, x: float, y: float) -> bool:
        """
        Start a gesture for the active tool.

        Returns:
            True if the preview or overlay needs repainting
        """
        if self.session is None:
            return False

        if self.tool == TOOL_SELECT:
            self._pan_start = ((x, y), (self.viewport.pan_x, self.viewport.pan_y))
            return False

        point = self.to_normalized(x, y)
        if self.tool == TOOL_PIXELATE:
            return self.edit_state.pixelate.begin_stroke(point, self.display_size())
        if self.tool == TOOL_EYEDROPPER:
            return self.pick_color(point) is not None
        if self.tool == TOOL_CROP:
            mode = self.crop_mode_at(x, y)
            if mode is None:
                return False
            self.crop_machine.begin_drag(mode, point, self.edit_state.crop)
            return True
        return False

    def pointer_move(self, x: float, y: float) -> bool:
        """Continue the gesture in progress. Returns True if a repaint is needed."""
        if self._pan_start is not None:
            (start_x, start_y), (pan_x, pan_y) = self._pan_start
            self.viewport.pan_to(pan_x + (x - start_x), pan_y + (y - start_y))
            return True

        if self.crop_machine.is_dragging:
            self.edit_state.crop = self.crop_machine.drag_to(
                self.to_normalized(x, y), self.edit_state.locked_aspect
            )
            return True

        if self.edit_state.pixelate.is_painting:
            return self.edit_state.pixelate.extend_stroke(self.to_normalized(x, y))
        return False

    def pointer_up(self, x: float = 0.0, y: float = 0.0) -> bool:
        """End the gesture in progress. Returns True if a repaint is needed."""
        return self._cancel_gestures()

    def pointer_leave(self) -> bool:
        """Leaving the canvas ends a gesture exactly like releasing the pointer."""
        return self._cancel_gestures()

    def _cancel_gestures(self) -> bool:
        changed = False
        if self._pan_start is not None:
            self._pan_start = None
        if self.crop_machine.is_dragging:
            self.crop_machine.end_drag()
            changed = True
        if self.edit_state.pixelate.end_stroke() is not None:
            changed = True
        return changed

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def pick_color(self, point: Point) -> Optional[RgbColor]:
        """Sample the rendered preview at a normalized point as the background key colour."""
        surface = self.render_preview()
        if surface is None:
            return None
        color = sample_color(surface, point)
        if color is not None:
            self.edit_state.set_bg_color(color)
            logger.debug(f"Picked background colour {color}")
        return color

    def undo(self) -> bool:
        return self.edit_state.pixelate.undo() is not None

    def redo(self) -> bool:
        return self.edit_state.pixelate.redo() is not None

    def render_preview(self) -> Optional[Any]:
        """Preview surface in display space, or None when no image is open."""
        if self.session is None:
            return None
        return self.edit_state.render_preview(self.session.preview)

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def handle_key(self, key: str, ctrl: bool = False, shift: bool = False) -> Optional[str]:
        """
        Handle a keyboard shortcut.

        Ctrl+O and Ctrl+S need a file dialog, so they are returned as
        ACTION_OPEN / ACTION_EXPORT for the window to carry out. Export is
        only offered while an image is open.

        Returns:
            The action taken ('open', 'export', 'undo', 'redo', 'zoom_fit',
            'zoom_actual') or None if the key is not a shortcut
        """
        key = key.lower()
        if ctrl and key == "o":
            return ACTION_OPEN
        if ctrl and key == "s":
            return ACTION_EXPORT if self.has_image else None
        if ctrl and shift and key == "z":
            self.redo()
            return "redo"
        if ctrl and key == "z":
            self.undo()
            return "undo"
        if not ctrl and key == "1":
            self.zoom_fit()
            return "zoom_fit"
        if not ctrl and key == "2":
            self.set_zoom(1.0)
            return "zoom_actual"
        return None
