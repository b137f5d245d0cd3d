from __future__ import annotations
from typing import Optional, Callable, Tuple

from PySide6.QtCore import Qt, QRectF
from PySide6.QtGui import QPainter, QImage, QPixmap, QColor, QPen
from PySide6.QtWidgets import QWidget

from core.view import zoom_scale


class CanvasWidget(QWidget):
    """
    Shows the rendered surface (QImage) centered, scaled by the display zoom.
    Zoom only changes presentation; the pixels come from the render as-is.
      - wheel: step the zoom (calls on_zoom_step(+1/-1))
    """
    def __init__(
        self,
        on_zoom_step: Optional[Callable[[int], None]] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.setFocusPolicy(Qt.StrongFocus)

        self._preview: Optional[QImage] = None
        self._out_size: Tuple[int, int] = (1, 1)
        self._zoom = 1.0
        self._on_zoom_step = on_zoom_step

    def set_preview(self, qimg: Optional[QImage], out_size: Tuple[int, int]) -> None:
        self._preview = qimg
        self._out_size = out_size
        self.update()

    def set_zoom_percent(self, percent: int) -> None:
        self._zoom = zoom_scale(percent)
        self.update()

    def paintEvent(self, _) -> None:
        p = QPainter(self)
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)

        p.fillRect(self.rect(), QColor(30, 30, 30))

        if self._preview is None:
            p.setPen(QPen(QColor(220, 220, 220)))
            p.drawText(self.rect(), Qt.AlignCenter, "Upload an image to start editing")
            return

        out_w, out_h = self._out_size
        draw_w = out_w * self._zoom
        draw_h = out_h * self._zoom
        x0 = self.width() * 0.5 - draw_w * 0.5
        y0 = self.height() * 0.5 - draw_h * 0.5

        # Checkerboard underlay (to visualize transparency)
        self._draw_checkerboard(p, QRectF(x0, y0, draw_w, draw_h), int(16 * self._zoom))

        pm = QPixmap.fromImage(self._preview)
        p.drawPixmap(int(x0), int(y0), int(draw_w), int(draw_h), pm)

        p.setPen(QPen(QColor(240, 240, 240), 1))
        p.drawRect(QRectF(x0, y0, draw_w, draw_h))

    def _draw_checkerboard(self, p: QPainter, r: QRectF, cell: int) -> None:
        if cell < 4:
            cell = 4
        c1 = QColor(60, 60, 60)
        c2 = QColor(90, 90, 90)

        x0 = int(r.left())
        y0 = int(r.top())
        x1 = int(r.right())
        y1 = int(r.bottom())

        for y in range(y0, y1, cell):
            for x in range(x0, x1, cell):
                use_c1 = ((x // cell) + (y // cell)) % 2 == 0
                p.fillRect(x, y, cell, cell, c1 if use_c1 else c2)

    def wheelEvent(self, e) -> None:
        delta = e.angleDelta().y()
        if delta == 0 or self._on_zoom_step is None:
            return
        self._on_zoom_step(1 if delta > 0 else -1)
        e.accept()
