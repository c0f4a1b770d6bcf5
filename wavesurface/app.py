# -*- coding: utf-8 -*-
"""
Wave view demo: a PySide6 widget hosting WaveRenderer.

Run: python -m wavesurface.app [--params waves.json] [--mask mask.png]
"""
from __future__ import annotations

import argparse
import logging
import sys
import traceback
from typing import Any

from PIL import Image
from PySide6.QtCore import QTimer
from PySide6.QtGui import QImage, QPainter
from PySide6.QtWidgets import QApplication, QMessageBox, QWidget

from wavesurface.core.renderer import WaveRenderer
from wavesurface.core.surface import open_image
from wavesurface.core.waves import WaveParameters, load_parameters
from wavesurface.utils.image_ops import RasterSurface

logger = logging.getLogger(__name__)


def qimage_from_pil(pil_img: Image.Image) -> QImage:
    rgba = pil_img.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    # QImage does not own `data`; copy before it goes out of scope.
    return QImage(data, rgba.width, rgba.height, QImage.Format_RGBA8888).copy()


class WaveWidget(QWidget):
    """Widget that renders waves on every timer tick while a frame is requested."""

    def __init__(self, params: WaveParameters | None = None, fps: int = 60, parent: QWidget | None = None):
        super().__init__(parent)
        self.renderer = WaveRenderer(self, params)
        self.surface = RasterSurface(self.width(), self.height())
        self._frame_requested = True
        self._frame: QImage | None = None

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.on_tick)
        self.timer.start(max(1, int(1000 / max(1, fps))))

    # host

    def surface_size(self) -> tuple[int, int]:
        return (self.width(), self.height())

    def request_frame(self) -> None:
        self._frame_requested = True

    def decode(self, resource: Any) -> Image.Image | None:
        return open_image(resource)

    # Qt

    def on_tick(self):
        if not self._frame_requested:
            return
        self._frame_requested = False
        self.surface.resize(self.width(), self.height())
        self.renderer.render(self.surface)
        self._frame = qimage_from_pil(self.surface.image)
        self.update()

    def paintEvent(self, event):
        if self._frame is None:
            return
        painter = QPainter(self)
        painter.drawImage(0, 0, self._frame)
        painter.end()

    def closeEvent(self, event):
        self.timer.stop()
        self.renderer.close()
        super().closeEvent(event)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wavesurface", description="Animated sine wave view")
    parser.add_argument("--params", help="JSON file with wave parameters")
    parser.add_argument("--mask", help="image whose alpha channel clips the waves")
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--size", type=int, nargs=2, default=(480, 320), metavar=("W", "H"))
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        params = load_parameters(args.params) if args.params else WaveParameters()
        app = QApplication(sys.argv[:1])
        w = WaveWidget(params, fps=args.fps)
        w.setWindowTitle("wavesurface")
        w.resize(*args.size)
        if args.mask:
            w.renderer.set_mask_resource(args.mask)
        w.show()
        sys.exit(app.exec())
    except Exception as e:
        error_msg = f"Startup failed:\n\n{e}\n\n{traceback.format_exc()}"
        logger.error(error_msg)
        if QApplication.instance() is not None:
            msg = QMessageBox()
            msg.setIcon(QMessageBox.Critical)
            msg.setWindowTitle("wavesurface")
            msg.setText(error_msg)
            msg.exec()
        sys.exit(1)


if __name__ == "__main__":
    main()
