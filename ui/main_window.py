from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional
from PIL import Image

from PySide6.QtCore import Qt, QEvent, QObject
from PySide6.QtGui import QAction, QImage, QKeySequence, QIcon
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QFileDialog, QVBoxLayout, QHBoxLayout, QLabel,
    QSpinBox, QSlider, QCheckBox, QPushButton, QMessageBox, QDockWidget, QGroupBox, QScrollArea
)

from core.constants import (
    APP_NAME,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    EXPORT_FILENAME,
    FILTER_RANGES,
    IMAGE_EXTENSIONS,
    MAX_OUTPUT_DIM,
    MIN_OUTPUT_DIM,
    ZOOM_DEFAULT_PERCENT,
    ZOOM_MAX_PERCENT,
    ZOOM_MIN_PERCENT,
    ZOOM_STEP_PERCENT,
)
from core.io import DecodedImage, save_png
from core.session import EditorSession
from core.shortcuts import resolve_shortcut
from core.state import EditState
from ui.canvas_widget import CanvasWidget
from ui.loader import ImageLoader

_SHORTCUT_KEYS = {Qt.Key_Z: "z", Qt.Key_Y: "y"}


def pil_rgba_to_qimage(img: Image.Image) -> QImage:
    img = img.convert("RGBA")
    w, h = img.size
    data = img.tobytes("raw", "RGBA")
    qimg = QImage(data, w, h, QImage.Format_RGBA8888)
    # Important: keep a copy because Python-owned bytes may be freed
    return qimg.copy()


class MainWindow(QMainWindow):
    def __init__(self, logo_path: Optional[Path] = None):
        super().__init__()
        if logo_path is not None and logo_path.exists():
            self.setWindowIcon(QIcon(str(logo_path)))
        self.setWindowTitle(f"{APP_NAME} - Photo Editor")

        self.session = EditorSession()
        self.loader = ImageLoader(self)
        self.loader.decoded.connect(self._on_decoded)
        self.loader.failed.connect(self._on_load_failed)

        self._act_undo: Optional[QAction] = None
        self._act_redo: Optional[QAction] = None
        self._filter_sliders: Dict[str, QSlider] = {}
        self._filter_spins: Dict[str, QSpinBox] = {}
        self._filter_labels: Dict[str, QLabel] = {}
        self._filter_titles: Dict[str, tuple[str, str]] = {}

        # Central
        self.canvas = CanvasWidget(on_zoom_step=self._step_zoom)
        self.canvas.setAcceptDrops(True)

        central = QWidget()
        lay = QVBoxLayout()
        lay.addWidget(self.canvas)
        central.setLayout(lay)
        self.setCentralWidget(central)

        self._build_menu()
        self._build_controls_dock()
        self._build_zoom_bar()

        self.session.add_render_listener(self._on_rendered)
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self)

        self.setAcceptDrops(True)
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)
        self._on_rendered(self.session.output, self.session.state)

    # ---------------------------
    # Menu / Actions
    # ---------------------------
    def _build_menu(self) -> None:
        open_act = QAction("Upload…", self)
        open_act.setShortcut(QKeySequence.StandardKey.Open)
        open_act.triggered.connect(self.open_file)

        export_act = QAction("Download…", self)
        export_act.setShortcut(QKeySequence.StandardKey.SaveAs)
        export_act.triggered.connect(self.export_png)

        # Undo/redo combos are handled in eventFilter so spin boxes never
        # swallow them; the actions only carry the menu entries.
        self._act_undo = QAction("Undo\tCtrl+Z", self)
        self._act_undo.triggered.connect(self._undo)

        self._act_redo = QAction("Redo\tCtrl+Y / Ctrl+Shift+Z", self)
        self._act_redo.triggered.connect(self._redo)

        reset_act = QAction("Reset All", self)
        reset_act.triggered.connect(self.session.reset_all)

        reset_zoom = QAction("Reset Zoom", self)
        reset_zoom.triggered.connect(lambda: self.zoom_slider.setValue(ZOOM_DEFAULT_PERCENT))

        quit_act = QAction("Quit", self)
        quit_act.setShortcut(QKeySequence.StandardKey.Quit)
        quit_act.triggered.connect(self.close)

        mfile = self.menuBar().addMenu("File")
        mfile.addAction(open_act)
        mfile.addAction(export_act)
        mfile.addSeparator()
        mfile.addAction(quit_act)

        medit = self.menuBar().addMenu("Edit")
        medit.addAction(self._act_undo)
        medit.addAction(self._act_redo)
        medit.addSeparator()
        medit.addAction(reset_act)

        mview = self.menuBar().addMenu("View")
        mview.addAction(reset_zoom)

    def eventFilter(self, obj: QObject, e: QEvent) -> bool:
        if e.type() == QEvent.KeyPress:
            mods = e.modifiers()
            action = resolve_shortcut(
                _SHORTCUT_KEYS.get(e.key(), ""),
                ctrl=bool(mods & Qt.ControlModifier),
                meta=bool(mods & Qt.MetaModifier),
                shift=bool(mods & Qt.ShiftModifier),
            )
            if action == "undo":
                self._undo()
                return True
            if action == "redo":
                self._redo()
                return True
        return super().eventFilter(obj, e)

    # ---------------------------
    # Controls dock
    # ---------------------------
    def _build_controls_dock(self) -> None:
        dock = QDockWidget("Tools", self)
        dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)

        root = QWidget()
        root_lay = QVBoxLayout(root)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        self._controls_panel = QWidget()
        v = QVBoxLayout(self._controls_panel)

        g_size, gl_size = self._make_group("Resize")
        self.out_w = QSpinBox()
        self.out_w.setRange(MIN_OUTPUT_DIM, MAX_OUTPUT_DIM)
        self.out_w.valueChanged.connect(lambda val: self.session.update_size(w=val))
        self._add_labeled_row(gl_size, "Width (px)", self.out_w)
        self.out_h = QSpinBox()
        self.out_h.setRange(MIN_OUTPUT_DIM, MAX_OUTPUT_DIM)
        self.out_h.valueChanged.connect(lambda val: self.session.update_size(h=val))
        self._add_labeled_row(gl_size, "Height (px)", self.out_h)
        self.natural_label = QLabel("0 × 0")
        self._add_labeled_row(gl_size, "Natural", self.natural_label)
        self.hq_chk = QCheckBox("High quality resample")
        self.hq_chk.setChecked(self.session.high_quality)
        self.hq_chk.toggled.connect(self._on_resample_changed)
        gl_size.addWidget(self.hq_chk)
        self.nearest_chk = QCheckBox("Nearest neighbor")
        self.nearest_chk.setChecked(self.session.nearest_neighbor)
        self.nearest_chk.toggled.connect(self._on_resample_changed)
        gl_size.addWidget(self.nearest_chk)
        v.addWidget(g_size)

        g_tone, gl_tone = self._make_group("Tone")
        self._add_filter_row(gl_tone, "brightness", "Brightness")
        self._add_filter_row(gl_tone, "contrast", "Contrast")
        self._add_filter_row(gl_tone, "saturation", "Saturation")
        v.addWidget(g_tone)

        g_color, gl_color = self._make_group("Color")
        self._add_filter_row(gl_color, "hue", "Hue", suffix="°")
        self._add_filter_row(gl_color, "warm", "Warm (sepia)")
        self._add_filter_row(gl_color, "cool", "Cool (invert)")
        v.addWidget(g_color)

        g_fx, gl_fx = self._make_group("Effects")
        self._add_filter_row(gl_fx, "blur", "Blur", suffix="px")
        v.addWidget(g_fx)

        v.addStretch(1)
        scroll.setWidget(self._controls_panel)
        root_lay.addWidget(scroll, 1)

        footer = QHBoxLayout()
        self.reset_btn = QPushButton("Reset All")
        self.reset_btn.clicked.connect(self.session.reset_all)
        footer.addWidget(self.reset_btn)
        upload_btn = QPushButton("Upload")
        upload_btn.clicked.connect(self.open_file)
        footer.addWidget(upload_btn)
        self.export_btn = QPushButton("Download")
        self.export_btn.clicked.connect(self.export_png)
        footer.addWidget(self.export_btn)
        root_lay.addLayout(footer)

        dock.setWidget(root)
        self.addDockWidget(Qt.RightDockWidgetArea, dock)

    def _add_filter_row(self, layout: QVBoxLayout, name: str, title: str, suffix: str = "") -> None:
        lo, hi = FILTER_RANGES[name]
        label = QLabel(title)
        layout.addWidget(label)
        row = QHBoxLayout()
        slider = QSlider(Qt.Horizontal)
        slider.setRange(lo, hi)
        slider.valueChanged.connect(lambda val, n=name: self.session.update_filter(n, val))
        row.addWidget(slider, 1)
        spin = QSpinBox()
        spin.setRange(lo, hi)
        if suffix:
            spin.setSuffix(suffix)
        spin.valueChanged.connect(lambda val, n=name: self.session.update_filter(n, val))
        row.addWidget(spin)
        layout.addLayout(row)
        self._filter_sliders[name] = slider
        self._filter_spins[name] = spin
        self._filter_labels[name] = label
        self._filter_titles[name] = (title, suffix)

    def _build_zoom_bar(self) -> None:
        bar = QWidget()
        row = QHBoxLayout(bar)
        row.setContentsMargins(0, 0, 0, 0)
        row.addWidget(QLabel("Zoom"))
        self.zoom_slider = QSlider(Qt.Horizontal)
        self.zoom_slider.setRange(ZOOM_MIN_PERCENT, ZOOM_MAX_PERCENT)
        self.zoom_slider.setSingleStep(ZOOM_STEP_PERCENT)
        self.zoom_slider.setPageStep(ZOOM_STEP_PERCENT)
        self.zoom_slider.setValue(ZOOM_DEFAULT_PERCENT)
        self.zoom_slider.valueChanged.connect(self._on_zoom_changed)
        row.addWidget(self.zoom_slider)
        self.zoom_label = QLabel(f"{ZOOM_DEFAULT_PERCENT}%")
        row.addWidget(self.zoom_label)
        self.statusBar().addPermanentWidget(bar)
        self.canvas.set_zoom_percent(ZOOM_DEFAULT_PERCENT)

    # ---------------------------
    # File IO
    # ---------------------------
    def open_file(self) -> None:
        patterns = " ".join(f"*{ext}" for ext in IMAGE_EXTENSIONS)
        path, _ = QFileDialog.getOpenFileName(self, "Upload Image", "", f"Images ({patterns})")
        if not path:
            return
        self._load_path(path)

    def _load_path(self, path: str) -> None:
        self.statusBar().showMessage(f"Loading {Path(path).name}…")
        self.loader.load(path)

    def _on_decoded(self, decoded: DecodedImage) -> None:
        self.session.on_decoded(decoded)

    def _on_load_failed(self, path: str) -> None:
        self.statusBar().showMessage(f"Could not open {Path(path).name}", 4000)

    def export_png(self) -> None:
        if self.session.output is None:
            QMessageBox.information(self, "Nothing to save", "Upload an image first.")
            return

        path, _ = QFileDialog.getSaveFileName(self, "Download", EXPORT_FILENAME, "PNG (*.png)")
        if not path:
            return
        if not path.lower().endswith(".png"):
            path += ".png"

        try:
            save_png(path, self.session.output)
        except Exception as e:
            QMessageBox.critical(self, "Save failed", str(e))
            return

    # ---------------------------
    # Drag & drop support
    # ---------------------------
    def dragEnterEvent(self, e) -> None:
        if e.mimeData().hasUrls():
            e.acceptProposedAction()

    def dropEvent(self, e) -> None:
        urls = e.mimeData().urls()
        if not urls:
            return
        path = urls[0].toLocalFile()
        if path:
            self._load_path(path)

    # ---------------------------
    # History
    # ---------------------------
    def _undo(self) -> None:
        if self.session.history.can_undo:
            self.session.undo()

    def _redo(self) -> None:
        if self.session.history.can_redo:
            self.session.redo()

    def _update_undo_redo_actions(self) -> None:
        if self._act_undo is not None:
            self._act_undo.setEnabled(self.session.history.can_undo)
        if self._act_redo is not None:
            self._act_redo.setEnabled(self.session.history.can_redo)

    # ---------------------------
    # View
    # ---------------------------
    def _on_zoom_changed(self, v: int) -> None:
        self.zoom_label.setText(f"{v}%")
        self.canvas.set_zoom_percent(v)

    def _step_zoom(self, direction: int) -> None:
        self.zoom_slider.setValue(self.zoom_slider.value() + direction * ZOOM_STEP_PERCENT)

    def _on_resample_changed(self, _) -> None:
        self.session.set_resample(self.hq_chk.isChecked(), self.nearest_chk.isChecked())

    # ---------------------------
    # Rendering
    # ---------------------------
    def _on_rendered(self, img: Optional[Image.Image], state: EditState) -> None:
        if img is None:
            self.canvas.set_preview(None, state.output_size.as_tuple())
        else:
            self.canvas.set_preview(pil_rgba_to_qimage(img), state.output_size.as_tuple())
        self._sync_ui_from_state(state)
        self._update_undo_redo_actions()
        self._update_status(state)

    def _sync_ui_from_state(self, state: EditState) -> None:
        self._controls_panel.setEnabled(state.image_loaded)
        self.reset_btn.setEnabled(state.image_loaded)
        self.export_btn.setEnabled(state.image_loaded)

        for spin, value in ((self.out_w, state.output_size.w), (self.out_h, state.output_size.h)):
            spin.blockSignals(True)
            spin.setValue(int(value))
            spin.blockSignals(False)
        self.natural_label.setText(f"{state.natural_size.w} × {state.natural_size.h}")

        for name, value in state.filters.as_dict().items():
            for w in (self._filter_sliders[name], self._filter_spins[name]):
                w.blockSignals(True)
                w.setValue(int(round(value)))
                w.blockSignals(False)
            title, suffix = self._filter_titles[name]
            self._filter_labels[name].setText(f"{title} ({value}{suffix})")

    def _update_status(self, state: EditState) -> None:
        if not state.image_loaded:
            self.statusBar().showMessage("No image loaded")
            return
        h = self.session.history
        msg = (
            f"Source: {state.natural_size.w}x{state.natural_size.h} | "
            f"Output: {state.output_size.w}x{state.output_size.h} | "
            f"History: {len(h.past)} back, {len(h.future)} forward"
        )
        self.statusBar().showMessage(msg)

    def _make_group(self, title: str) -> tuple[QGroupBox, QVBoxLayout]:
        g = QGroupBox(title)
        gl = QVBoxLayout()
        g.setLayout(gl)
        return g, gl

    def _add_labeled_row(self, layout: QVBoxLayout, label: str, widget: Optional[QWidget]) -> None:
        row = QHBoxLayout()
        row.addWidget(QLabel(label))
        if widget is not None:
            row.addWidget(widget, 1)
        layout.addLayout(row)
