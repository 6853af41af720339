"""
Unit tests for the editor_session module.

Drives the headless editor with container-pixel pointer events the way
the window does, against a real ImageProcessor in a temporary directory.
"""

import pytest
from PIL import Image

from PX_Libs.errors import ImageDecodeError, NoPendingEditsError
from PX_Libs.EditorLib.editor_session import (
    ACTION_EXPORT,
    ACTION_OPEN,
    EditorSession,
    first_openable_path,
    is_openable_path,
)
from PX_Libs.ProcessingLib.image_processor import ImageProcessor


@pytest.fixture
def wide_png(tmp_path):
    """400x200 PNG: red left half, blue right half."""
    image = Image.new("RGBA", (400, 200), (255, 0, 0, 255))
    image.paste((0, 0, 255, 255), (200, 0, 400, 200))
    path = tmp_path / "wide.png"
    image.save(path, format="PNG")
    return path


@pytest.fixture
def editor(data_dir, wide_png):
    """
    Editor with the wide image open in a 1000x800 container.

    The image fits at 100%, so it is rendered at (300, 300)-(700, 500).
    """
    editor = EditorSession(ImageProcessor(data_dir))
    editor.set_container_size(1000, 800)
    editor.open_image(wide_png)
    return editor


class TestOpenImage:
    """Tests for opening images."""

    def test_open_fits_and_resets(self, editor):
        """Should fit the view and reset the target to the natural size."""
        rect = editor.rendered_rect()
        assert editor.viewport.zoom == 1.0
        assert (rect.left, rect.top, rect.width, rect.height) == (300, 300, 400, 200)
        assert (editor.edit_state.target_width, editor.edit_state.target_height) == (400, 200)

    def test_recent_files_updated(self, editor, wide_png):
        """Should record the opened file in recent files."""
        assert editor.recent_files() == [str(wide_png)]

    def test_failed_open_keeps_session(self, editor, tmp_path, wide_png):
        """Should leave the current session untouched when decoding fails."""
        broken = tmp_path / "broken.png"
        broken.write_text("nope")
        editor.edit_state.rotate_right()

        with pytest.raises(ImageDecodeError):
            editor.open_image(broken)

        assert editor.session.source_path == wide_png
        assert editor.edit_state.rotation == 90

    def test_no_image(self, data_dir):
        """Should ignore pointer input and render nothing without an image."""
        editor = EditorSession(ImageProcessor(data_dir))
        assert not editor.pointer_down(10, 10)
        assert editor.render_preview() is None
        with pytest.raises(RuntimeError):
            editor.export_image("out.png")


class TestSelectTool:
    """Tests for panning with the select tool."""

    def test_drag_pans(self, editor):
        """Should pan by the pointer delta."""
        editor.pointer_down(500, 400)
        assert editor.pointer_move(520, 390)
        editor.pointer_up(520, 390)

        assert (editor.viewport.pan_x, editor.viewport.pan_y) == (20, -10)
        assert not editor.pointer_move(600, 600)


class TestCropTool:
    """Tests for crop dragging."""

    def test_corner_drag(self, editor):
        """Should resize from the south-east handle."""
        editor.set_tool("crop")
        assert editor.crop_mode_at(700, 500) == "se"
        assert editor.pointer_down(700, 500)

        editor.pointer_move(600, 450)
        editor.pointer_up(600, 450)

        crop = editor.edit_state.crop
        assert crop.width == pytest.approx(0.75)
        assert crop.height == pytest.approx(0.75)
        assert not editor.crop_machine.is_dragging

    def test_locked_aspect_drag(self, editor):
        """Should keep the target aspect while locked."""
        editor.set_tool("crop")
        editor.edit_state.set_target_size(100, 100)
        editor.edit_state.lock_aspect = True

        editor.pointer_down(700, 400)
        editor.pointer_move(600, 400)
        editor.pointer_leave()

        crop = editor.edit_state.crop
        assert crop.width == pytest.approx(0.75)
        assert crop.height == pytest.approx(0.75)

    def test_press_outside_does_nothing(self, editor):
        """Should not start a drag off the rectangle."""
        editor.set_tool("crop")
        assert not editor.pointer_down(100, 100)
        assert not editor.crop_machine.is_dragging


class TestPixelateTool:
    """Tests for painting pixelate strokes."""

    def test_leave_commits_stroke(self, editor):
        """Should commit the stroke when the pointer leaves the canvas."""
        editor.set_tool("pixelate")
        assert editor.pointer_down(500, 400)
        editor.pointer_move(520, 400)
        assert editor.pointer_leave()

        strokes = editor.edit_state.pixelate.applied_strokes
        assert len(strokes) == 1
        assert strokes[0].points == ((0.5, 0.5), (0.55, 0.5))
        assert strokes[0].radius == pytest.approx(20 / 400)

    def test_press_off_image_ignored(self, editor):
        """Should not start a stroke outside the image."""
        editor.set_tool("pixelate")
        assert not editor.pointer_down(50, 50)
        assert editor.edit_state.pixelate.applied_strokes == ()

    def test_undo_redo_keys(self, editor):
        """Should undo with Ctrl+Z and redo with Ctrl+Shift+Z."""
        editor.set_tool("pixelate")
        editor.pointer_down(500, 400)
        editor.pointer_up(500, 400)

        assert editor.handle_key("z", ctrl=True) == "undo"
        assert editor.edit_state.pixelate.applied_strokes == ()
        assert editor.handle_key("Z", ctrl=True, shift=True) == "redo"
        assert len(editor.edit_state.pixelate.applied_strokes) == 1


class TestEyedropper:
    """Tests for the eyedropper tool."""

    def test_samples_preview(self, editor):
        """Should set the background colour without enabling removal."""
        editor.set_tool("eyedropper")
        assert editor.pointer_down(350, 400)
        assert editor.edit_state.bg_color == (255, 0, 0)
        assert not editor.edit_state.bg_enabled

    def test_samples_rotated_preview(self, editor):
        """Should sample the displayed (rotated) image."""
        editor.edit_state.rotate_right()
        editor.zoom_fit()
        editor.set_tool("eyedropper")
        # Rotated clockwise, the blue half is at the bottom
        rect = editor.rendered_rect()
        editor.pointer_down(rect.left + rect.width / 2, rect.top + rect.height * 0.9)
        assert editor.edit_state.bg_color == (0, 0, 255)


class TestKeys:
    """Tests for keyboard shortcuts."""

    def test_file_actions(self, editor, data_dir):
        """Should return open always and export only with an image."""
        assert editor.handle_key("o", ctrl=True) == ACTION_OPEN
        assert editor.handle_key("s", ctrl=True) == ACTION_EXPORT
        assert EditorSession(ImageProcessor(data_dir)).handle_key("s", ctrl=True) is None

    def test_zoom_keys(self, editor):
        """Should zoom to fit with 1 and to 100% with 2."""
        editor.set_zoom(3.0)
        assert editor.handle_key("1") == "zoom_fit"
        assert editor.viewport.zoom == 1.0
        editor.set_zoom(0.5)
        assert editor.handle_key("2") == "zoom_actual"
        assert editor.viewport.zoom == 1.0

    def test_other_keys(self, editor):
        """Should ignore unbound keys."""
        assert editor.handle_key("x") is None
        assert editor.handle_key("1", ctrl=True) is None

    def test_invalid_tool(self, editor):
        """Should reject unknown tools."""
        with pytest.raises(ValueError):
            editor.set_tool("lasso")


class TestApplyAndExport:
    """Tests for apply and export through the editor."""

    def test_apply_continues_from_backing_file(self, editor, data_dir):
        """Should bake pending edits and reset the edit state."""
        editor.edit_state.rotate_right()

        session = editor.apply_edits()

        assert session.source_path == data_dir / "_applied.png"
        assert session.size == (200, 400)
        assert editor.edit_state.rotation == 0
        assert (editor.edit_state.target_width, editor.edit_state.target_height) == (200, 400)

    def test_apply_without_edits(self, editor):
        """Should refuse to apply when nothing is pending."""
        with pytest.raises(NoPendingEditsError):
            editor.apply_edits()

    def test_export_writes_target_size(self, editor, tmp_path):
        """Should export at the target size and keep pending edits."""
        editor.edit_state.grayscale = True
        output = editor.export_image(tmp_path / "out.jpg", "jpeg", 90)

        with Image.open(output) as saved:
            assert saved.size == (400, 200)
            assert saved.mode == "RGB"
        assert editor.edit_state.grayscale


class TestViewControls:
    """Tests for zoom step buttons and overlay mapping."""

    def test_zoom_steps(self, editor):
        """Should step zoom by 1.25 and clamp at the limits."""
        assert editor.zoom_in() == pytest.approx(1.25)
        assert editor.zoom_out() == pytest.approx(1.0)
        for _ in range(30):
            editor.zoom_in()
        assert editor.viewport.zoom == 5.0

    def test_to_pointer_tracks_viewport(self, editor):
        """Should place crop handles at container pixels under zoom and pan."""
        assert editor.to_pointer((1.0, 1.0)) == (700, 500)
        editor.set_zoom(2.0)
        editor.viewport.pan_to(10, -20)
        assert editor.to_pointer((0.0, 0.0)) == (110, 180)
        assert editor.to_normalized(*editor.to_pointer((0.25, 0.75))) == pytest.approx((0.25, 0.75))


class TestDroppedFiles:
    """Tests for choosing a dropped file to open."""

    def test_supported_extensions(self):
        """Should accept png, jpeg and webp regardless of case."""
        assert is_openable_path("/photos/a.PNG")
        assert is_openable_path("b.jpeg")
        assert is_openable_path("c.webp")
        assert not is_openable_path("notes.txt")
        assert not is_openable_path("folder")

    def test_first_supported_wins(self):
        """Should skip unsupported and empty entries."""
        assert first_openable_path(["", "a.txt", "b.jpg", "c.png"]) == "b.jpg"
        assert first_openable_path(["a.txt"]) is None
        assert first_openable_path([]) is None

    def test_dropped_path_opens(self, data_dir, wide_png):
        """Should open the chosen path like any other image."""
        editor = EditorSession(ImageProcessor(data_dir))
        editor.set_container_size(1000, 800)
        editor.open_image(first_openable_path(["readme.md", str(wide_png)]))
        assert editor.session.size == (400, 200)
