from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from PyQt5.QtCore import QRectF, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QPainter, QPen, QPixmap
from PyQt5.QtWidgets import (
    QButtonGroup,
    QCheckBox,
    QColorDialog,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSlider,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from PX_Libs.constants import (
    ADJUSTMENT_MAX,
    ADJUSTMENT_MIN,
    ASPECT_PRESETS,
    ASPECT_PRESET_CUSTOM,
    CANVAS_BACKGROUND_COLOR,
    CROP_HANDLES,
    CROP_OVERLAY_COLOR,
    CROP_SHADE_ALPHA,
    CROP_SHADE_COLOR,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    FORMAT_JPEG,
    MAX_ZOOM,
    MIN_ZOOM,
    OPEN_FILE_FILTER,
    OUTPUT_FORMATS,
    SCALE_MODES,
    SIDE_PANEL_WIDTH,
    TOLERANCE_SCALE,
    TOOL_CROP,
    TOOL_SELECT,
    TOOLS,
)
from PX_Libs.EditorLib.editor_session import (
    ACTION_EXPORT,
    ACTION_OPEN,
    EditorSession,
    first_openable_path,
)
from PX_Libs.errors import NoPendingEditsError, PixelargonError
from PX_Libs.ExportLib.export_compositor import default_export_name
from PX_Libs.ImageEditingLib.chroma_key import color_to_hex

_HANDLE_SIZE = 8

_HANDLE_CURSORS = {
    "n": Qt.SizeVerCursor,
    "s": Qt.SizeVerCursor,
    "e": Qt.SizeHorCursor,
    "w": Qt.SizeHorCursor,
    "ne": Qt.SizeBDiagCursor,
    "sw": Qt.SizeBDiagCursor,
    "nw": Qt.SizeFDiagCursor,
    "se": Qt.SizeFDiagCursor,
    "move": Qt.SizeAllCursor,
}


def _to_png_bytes(image: Any) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class EditorCanvas(QWidget):
    """Paints the preview at the viewport's rendered rect and forwards input to the editor."""

    edited = pyqtSignal()
    view_changed = pyqtSignal()
    file_dropped = pyqtSignal(str)

    def __init__(self, editor: EditorSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.editor = editor
        self._pixmap: Optional[QPixmap] = None
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setAcceptDrops(True)
        self.setMinimumSize(400, 300)

    def refresh(self) -> None:
        """Re-render the preview surface and repaint."""
        preview = self.editor.render_preview()
        if preview is None:
            self._pixmap = None
        else:
            pixmap = QPixmap()
            self._pixmap = pixmap if pixmap.loadFromData(_to_png_bytes(preview), "PNG") else None
        self.update()

    def resizeEvent(self, event) -> None:
        self.editor.set_container_size(self.width(), self.height())
        super().resizeEvent(event)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(CANVAS_BACKGROUND_COLOR))
        if self._pixmap is None:
            painter.setPen(QColor(CROP_OVERLAY_COLOR))
            painter.drawText(self.rect(), Qt.AlignCenter, "Open an image to start (Ctrl+O)")
            painter.end()
            return

        rect = self.editor.rendered_rect()
        target = QRectF(rect.left, rect.top, rect.width, rect.height)
        painter.setRenderHint(QPainter.SmoothPixmapTransform, self.editor.viewport.zoom < 1)
        painter.drawPixmap(target, self._pixmap, QRectF(self._pixmap.rect()))

        if self.editor.tool == TOOL_CROP:
            self._paint_crop_overlay(painter, target)
        painter.end()

    def _paint_crop_overlay(self, painter: QPainter, image_rect: QRectF) -> None:
        crop = self.editor.edit_state.crop
        left, top = self.editor.to_pointer((crop.x, crop.y))
        right, bottom = self.editor.to_pointer((crop.x + crop.width, crop.y + crop.height))
        crop_rect = QRectF(left, top, right - left, bottom - top)

        shade = QColor(CROP_SHADE_COLOR)
        shade.setAlpha(CROP_SHADE_ALPHA)
        painter.fillRect(QRectF(image_rect.left(), image_rect.top(), image_rect.width(), crop_rect.top() - image_rect.top()), shade)
        painter.fillRect(QRectF(image_rect.left(), crop_rect.bottom(), image_rect.width(), image_rect.bottom() - crop_rect.bottom()), shade)
        painter.fillRect(QRectF(image_rect.left(), crop_rect.top(), crop_rect.left() - image_rect.left(), crop_rect.height()), shade)
        painter.fillRect(QRectF(crop_rect.right(), crop_rect.top(), image_rect.right() - crop_rect.right(), crop_rect.height()), shade)

        overlay = QColor(CROP_OVERLAY_COLOR)
        painter.setPen(QPen(overlay, 1))
        painter.drawRect(crop_rect)

        half = _HANDLE_SIZE / 2
        for handle in CROP_HANDLES:
            cx, cy = self.editor.to_pointer(crop.handle_position(handle))
            painter.fillRect(QRectF(cx - half, cy - half, _HANDLE_SIZE, _HANDLE_SIZE), overlay)

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.LeftButton:
            return
        if self.editor.pointer_down(event.x(), event.y()):
            self._after_edit()
        if self.editor.tool == TOOL_SELECT:
            self.setCursor(Qt.ClosedHandCursor)

    def mouseMoveEvent(self, event) -> None:
        if self.editor.pointer_move(event.x(), event.y()):
            self._after_edit()
        self._update_cursor(event.x(), event.y())

    def mouseReleaseEvent(self, event) -> None:
        if event.button() != Qt.LeftButton:
            return
        if self.editor.pointer_up(event.x(), event.y()):
            self._after_edit()
        self._update_cursor(event.x(), event.y())

    def leaveEvent(self, event) -> None:
        if self.editor.pointer_leave():
            self._after_edit()
        super().leaveEvent(event)

    def wheelEvent(self, event) -> None:
        self.editor.wheel(-event.angleDelta().y())
        self.update()
        self.view_changed.emit()

    def _dropped_path(self, event) -> Optional[str]:
        mime = event.mimeData()
        if not mime.hasUrls():
            return None
        return first_openable_path(url.toLocalFile() for url in mime.urls() if url.isLocalFile())

    def dragEnterEvent(self, event) -> None:
        if self._dropped_path(event) is not None:
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event) -> None:
        path = self._dropped_path(event)
        if path is None:
            event.ignore()
            return
        event.acceptProposedAction()
        self.file_dropped.emit(path)

    def _after_edit(self) -> None:
        self.refresh()
        self.edited.emit()

    def _update_cursor(self, x: float, y: float) -> None:
        tool = self.editor.tool
        if tool == TOOL_CROP:
            mode = self.editor.crop_machine.mode or self.editor.crop_mode_at(x, y)
            self.setCursor(_HANDLE_CURSORS.get(mode, Qt.ArrowCursor))
        elif tool == TOOL_SELECT:
            self.setCursor(Qt.OpenHandCursor)
        else:
            self.setCursor(Qt.CrossCursor)


class PixelargonWindow(QMainWindow):
    def __init__(self, editor: Optional[EditorSession] = None) -> None:
        super().__init__()
        self.editor = editor if editor is not None else EditorSession()
        self.setWindowTitle("Pixelargon")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self._build_ui()
        self._connect_signals()
        self._sync_controls()
        self._refresh_recent_files()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        root = QHBoxLayout(central)

        self.canvas = EditorCanvas(self.editor, central)

        panel = QWidget()
        panel_layout = QVBoxLayout(panel)

        self.btn_open = QPushButton("Open Image...")
        self.recent_list = QListWidget()
        self.recent_list.setMaximumHeight(120)
        panel_layout.addWidget(self.btn_open)
        panel_layout.addWidget(QLabel("Recent Files"))
        panel_layout.addWidget(self.recent_list)

        tools_box = QGroupBox("Tools")
        tools_layout = QHBoxLayout(tools_box)
        self.tool_group = QButtonGroup(self)
        self.tool_buttons = {}
        for tool in TOOLS:
            button = QPushButton(tool.capitalize())
            button.setCheckable(True)
            self.tool_group.addButton(button)
            self.tool_buttons[tool] = button
            tools_layout.addWidget(button)
        panel_layout.addWidget(tools_box)

        view_box = QGroupBox("View")
        view_layout = QVBoxLayout(view_box)
        zoom_row = QHBoxLayout()
        self.btn_zoom_fit = QPushButton("Fit")
        self.btn_zoom_out = QPushButton("-")
        self.btn_zoom_in = QPushButton("+")
        self.label_zoom = QLabel()
        for widget in (self.btn_zoom_fit, self.btn_zoom_out, self.btn_zoom_in, self.label_zoom):
            zoom_row.addWidget(widget)
        self.slider_zoom = QSlider(Qt.Horizontal)
        self.slider_zoom.setRange(int(MIN_ZOOM * 100), int(MAX_ZOOM * 100))
        view_layout.addLayout(zoom_row)
        view_layout.addWidget(self.slider_zoom)
        panel_layout.addWidget(view_box)

        transform_box = QGroupBox("Transform")
        transform_layout = QHBoxLayout(transform_box)
        self.btn_rotate_left = QPushButton("Rotate L")
        self.btn_rotate_right = QPushButton("Rotate R")
        self.btn_flip_h = QPushButton("Flip H")
        self.btn_flip_v = QPushButton("Flip V")
        for button in (self.btn_rotate_left, self.btn_rotate_right, self.btn_flip_h, self.btn_flip_v):
            transform_layout.addWidget(button)
        panel_layout.addWidget(transform_box)

        crop_box = QGroupBox("Crop")
        crop_layout = QFormLayout(crop_box)
        self.combo_aspect = QComboBox()
        self.combo_aspect.addItems(ASPECT_PRESETS)
        self.spin_target_w = QSpinBox()
        self.spin_target_h = QSpinBox()
        for spin in (self.spin_target_w, self.spin_target_h):
            spin.setRange(1, 20000)
        self.check_lock_aspect = QCheckBox("Lock aspect")
        self.combo_scale_mode = QComboBox()
        self.combo_scale_mode.addItems(SCALE_MODES)
        crop_layout.addRow("Aspect", self.combo_aspect)
        crop_layout.addRow("Width", self.spin_target_w)
        crop_layout.addRow("Height", self.spin_target_h)
        crop_layout.addRow(self.check_lock_aspect)
        crop_layout.addRow("Scale mode", self.combo_scale_mode)
        panel_layout.addWidget(crop_box)

        adjust_box = QGroupBox("Adjust")
        adjust_layout = QFormLayout(adjust_box)
        self.check_grayscale = QCheckBox("Grayscale")
        self.slider_brightness = QSlider(Qt.Horizontal)
        self.slider_contrast = QSlider(Qt.Horizontal)
        for slider in (self.slider_brightness, self.slider_contrast):
            slider.setRange(ADJUSTMENT_MIN, ADJUSTMENT_MAX)
        adjust_layout.addRow(self.check_grayscale)
        adjust_layout.addRow("Brightness", self.slider_brightness)
        adjust_layout.addRow("Contrast", self.slider_contrast)
        panel_layout.addWidget(adjust_box)

        pixelate_box = QGroupBox("Pixelate")
        pixelate_layout = QFormLayout(pixelate_box)
        self.spin_brush = QSpinBox()
        self.spin_brush.setRange(1, 500)
        self.spin_block = QSpinBox()
        self.spin_block.setRange(1, 200)
        undo_row = QHBoxLayout()
        self.btn_undo = QPushButton("Undo")
        self.btn_redo = QPushButton("Redo")
        undo_row.addWidget(self.btn_undo)
        undo_row.addWidget(self.btn_redo)
        pixelate_layout.addRow("Brush size", self.spin_brush)
        pixelate_layout.addRow("Block size", self.spin_block)
        pixelate_layout.addRow(undo_row)
        panel_layout.addWidget(pixelate_box)

        bg_box = QGroupBox("Background Removal")
        bg_layout = QFormLayout(bg_box)
        self.check_bg_enabled = QCheckBox("Enabled")
        self.label_bg_color = QLabel()
        self.btn_bg_color = QPushButton("Choose...")
        self.slider_tolerance = QSlider(Qt.Horizontal)
        self.slider_tolerance.setRange(0, TOLERANCE_SCALE)
        color_row = QHBoxLayout()
        color_row.addWidget(self.label_bg_color)
        color_row.addWidget(self.btn_bg_color)
        bg_layout.addRow(self.check_bg_enabled)
        bg_layout.addRow("Colour", color_row)
        bg_layout.addRow("Tolerance", self.slider_tolerance)
        panel_layout.addWidget(bg_box)

        output_box = QGroupBox("Output")
        output_layout = QFormLayout(output_box)
        self.btn_apply = QPushButton("Apply")
        self.combo_format = QComboBox()
        self.combo_format.addItems(OUTPUT_FORMATS)
        self.spin_quality = QSpinBox()
        self.spin_quality.setRange(1, 100)
        self.spin_quality.setValue(DEFAULT_JPEG_QUALITY)
        self.btn_export = QPushButton("Export...")
        output_layout.addRow(self.btn_apply)
        output_layout.addRow("Format", self.combo_format)
        output_layout.addRow("JPEG quality", self.spin_quality)
        output_layout.addRow(self.btn_export)
        panel_layout.addWidget(output_box)

        self.label_info = QLabel("No image")
        panel_layout.addWidget(self.label_info)
        panel_layout.addStretch(1)

        scroll = QScrollArea()
        scroll.setWidget(panel)
        scroll.setWidgetResizable(True)
        scroll.setFixedWidth(SIDE_PANEL_WIDTH)

        root.addWidget(self.canvas, stretch=1)
        root.addWidget(scroll)

    def _connect_signals(self) -> None:
        self.btn_open.clicked.connect(self.open_image_dialog)
        self.recent_list.itemDoubleClicked.connect(lambda item: self.open_image(item.text()))
        for tool, button in self.tool_buttons.items():
            button.clicked.connect(lambda _checked, t=tool: self.set_tool(t))

        self.btn_zoom_fit.clicked.connect(lambda: self._view(self.editor.zoom_fit))
        self.btn_zoom_out.clicked.connect(lambda: self._view(self.editor.zoom_out))
        self.btn_zoom_in.clicked.connect(lambda: self._view(self.editor.zoom_in))
        self.slider_zoom.valueChanged.connect(lambda v: self._view(self.editor.set_zoom, v / 100))

        self.btn_rotate_left.clicked.connect(lambda: self._edit(self.editor.edit_state.rotate_left))
        self.btn_rotate_right.clicked.connect(lambda: self._edit(self.editor.edit_state.rotate_right))
        self.btn_flip_h.clicked.connect(lambda: self._edit(self.editor.edit_state.toggle_flip_h))
        self.btn_flip_v.clicked.connect(lambda: self._edit(self.editor.edit_state.toggle_flip_v))

        self.combo_aspect.activated.connect(lambda index: self.on_aspect_preset(self.combo_aspect.itemText(index)))
        self.spin_target_w.valueChanged.connect(self.on_target_size_changed)
        self.spin_target_h.valueChanged.connect(self.on_target_size_changed)
        self.check_lock_aspect.toggled.connect(self.on_lock_aspect_toggled)
        self.combo_scale_mode.activated.connect(
            lambda index: self.editor.edit_state.set_scale_mode(self.combo_scale_mode.itemText(index))
        )

        self.check_grayscale.toggled.connect(self.on_grayscale_toggled)
        self.slider_brightness.valueChanged.connect(lambda v: self._edit(self.editor.edit_state.set_brightness, v))
        self.slider_contrast.valueChanged.connect(lambda v: self._edit(self.editor.edit_state.set_contrast, v))

        self.spin_brush.valueChanged.connect(self.on_brush_size_changed)
        self.spin_block.valueChanged.connect(self.on_block_size_changed)
        self.btn_undo.clicked.connect(lambda: self._edit(self.editor.undo))
        self.btn_redo.clicked.connect(lambda: self._edit(self.editor.redo))

        self.check_bg_enabled.toggled.connect(self.on_bg_enabled_toggled)
        self.btn_bg_color.clicked.connect(self.choose_bg_color)
        self.slider_tolerance.valueChanged.connect(self.on_tolerance_changed)

        self.btn_apply.clicked.connect(self.apply_edits)
        self.btn_export.clicked.connect(self.export_image_dialog)

        self.canvas.edited.connect(self._sync_controls)
        self.canvas.view_changed.connect(self._sync_controls)
        self.canvas.file_dropped.connect(self.open_image)

    # ------------------------------------------------------------------
    # State <-> controls
    # ------------------------------------------------------------------

    def _edit(self, action, *args) -> None:
        action(*args)
        self.canvas.refresh()
        self._sync_controls()

    def _view(self, action, *args) -> None:
        action(*args)
        self.canvas.update()
        self._sync_controls()

    def _sync_controls(self) -> None:
        state = self.editor.edit_state
        zoom = self.editor.viewport.zoom
        widgets = (
            self.slider_zoom,
            self.spin_target_w,
            self.spin_target_h,
            self.check_lock_aspect,
            self.combo_scale_mode,
            self.check_grayscale,
            self.slider_brightness,
            self.slider_contrast,
            self.spin_brush,
            self.spin_block,
            self.check_bg_enabled,
            self.slider_tolerance,
        )
        for widget in widgets:
            widget.blockSignals(True)
        self.slider_zoom.setValue(int(round(zoom * 100)))
        self.spin_target_w.setValue(state.target_width)
        self.spin_target_h.setValue(state.target_height)
        self.check_lock_aspect.setChecked(state.lock_aspect)
        self.combo_scale_mode.setCurrentText(state.scale_mode)
        self.check_grayscale.setChecked(state.grayscale)
        self.slider_brightness.setValue(state.brightness)
        self.slider_contrast.setValue(state.contrast)
        self.spin_brush.setValue(state.pixelate.brush_size)
        self.spin_block.setValue(state.pixelate.block_size)
        self.check_bg_enabled.setChecked(state.bg_enabled)
        self.slider_tolerance.setValue(state.bg_tolerance)
        for widget in widgets:
            widget.blockSignals(False)

        self.label_zoom.setText(f"{zoom * 100:.0f}%")
        hex_color = color_to_hex(state.bg_color)
        self.label_bg_color.setText(hex_color)
        self.label_bg_color.setStyleSheet(f"background: {hex_color}; color: #ffffff; padding: 2px;")
        self.tool_buttons[self.editor.tool].setChecked(True)
        self.btn_undo.setEnabled(state.pixelate.can_undo)
        self.btn_redo.setEnabled(state.pixelate.can_redo)

        has_image = self.editor.has_image
        self.btn_apply.setEnabled(has_image)
        self.btn_export.setEnabled(has_image)
        if has_image:
            session = self.editor.session
            self.label_info.setText(f"{session.source_path.name}: {session.width} x {session.height}")

    def _refresh_recent_files(self) -> None:
        self.recent_list.clear()
        self.recent_list.addItems(self.editor.recent_files())

    def set_tool(self, tool: str) -> None:
        self.editor.set_tool(tool)
        self.canvas.refresh()
        self._sync_controls()

    def on_aspect_preset(self, preset: str) -> None:
        self._edit(self.editor.edit_state.select_aspect_preset, preset)

    def on_target_size_changed(self, _value: int) -> None:
        self.editor.edit_state.set_target_size(self.spin_target_w.value(), self.spin_target_h.value())
        self.combo_aspect.setCurrentText(ASPECT_PRESET_CUSTOM)

    def on_lock_aspect_toggled(self, checked: bool) -> None:
        self.editor.edit_state.lock_aspect = checked

    def on_grayscale_toggled(self, checked: bool) -> None:
        self.editor.edit_state.grayscale = checked
        self.canvas.refresh()

    def on_brush_size_changed(self, value: int) -> None:
        self.editor.edit_state.pixelate.brush_size = value

    def on_block_size_changed(self, value: int) -> None:
        self._edit(setattr, self.editor.edit_state.pixelate, "block_size", value)

    def on_bg_enabled_toggled(self, checked: bool) -> None:
        self.editor.edit_state.bg_enabled = checked

    def on_tolerance_changed(self, value: int) -> None:
        self.editor.edit_state.bg_tolerance = value

    def choose_bg_color(self) -> None:
        r, g, b = self.editor.edit_state.bg_color
        color = QColorDialog.getColor(QColor(r, g, b), self, "Background colour")
        if not color.isValid():
            return
        self._edit(self.editor.edit_state.set_bg_color, (color.red(), color.green(), color.blue()))

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    def open_image_dialog(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Open Image", "", OPEN_FILE_FILTER)
        if file_path:
            self.open_image(file_path)

    def open_image(self, path: str) -> None:
        try:
            self.editor.open_image(path)
        except PixelargonError as e:
            self._show_warning("Open Failed", str(e))
            return
        self.combo_aspect.setCurrentText(self.editor.edit_state.aspect_preset_name)
        self.canvas.refresh()
        self._sync_controls()
        self._refresh_recent_files()

    def apply_edits(self) -> None:
        try:
            self.editor.apply_edits()
        except NoPendingEditsError as e:
            self._show_warning("Nothing to Apply", str(e))
            return
        except PixelargonError as e:
            self._show_warning("Apply Failed", str(e))
            return
        self.canvas.refresh()
        self._sync_controls()
        self.statusBar().showMessage("Adjustments applied", 3000)

    def export_image_dialog(self) -> None:
        if not self.editor.has_image:
            return
        output_format = self.combo_format.currentText()
        start_dir = self.editor.session.source_path.parent
        save_path, _ = QFileDialog.getSaveFileName(
            self,
            "Export Image",
            str(start_dir / default_export_name(output_format)),
            "JPEG Images (*.jpg *.jpeg)" if output_format == FORMAT_JPEG else "PNG Images (*.png)",
        )
        if not save_path:
            return

        try:
            written = self.editor.export_image(Path(save_path), output_format, self.spin_quality.value())
        except PixelargonError as e:
            self._show_warning("Export Failed", str(e))
            return
        self.statusBar().showMessage(f"Exported to {written}", 5000)

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def keyPressEvent(self, event) -> None:
        modifiers = event.modifiers()
        ctrl = bool(modifiers & (Qt.ControlModifier | Qt.MetaModifier))
        shift = bool(modifiers & Qt.ShiftModifier)
        key = event.key()
        key_text = chr(key).lower() if key <= 0x10FFFF else ""
        action = self.editor.handle_key(key_text, ctrl, shift)
        if action is None:
            super().keyPressEvent(event)
            return

        if action == ACTION_OPEN:
            self.open_image_dialog()
        elif action == ACTION_EXPORT:
            self.export_image_dialog()
        else:
            self.canvas.refresh()
            self._sync_controls()

    def _show_warning(self, title: str, message: str) -> None:
        QMessageBox.warning(self, title, message)
