"""
Overlay window: Qt dispatches redraw, key and resize events to the compositor.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from PySide6.QtCore import QTimer, Qt
from PySide6.QtGui import QSurfaceFormat
from PySide6.QtOpenGLWidgets import QOpenGLWidget
from PySide6.QtWidgets import QApplication

from ..compositor import Compositor
from ..detection import ArucoMarkerDetector
from ..errors import EXIT_OK
from .renderer import GLRenderer

if TYPE_CHECKING:
    from ..app import AppContext

logger = logging.getLogger(__name__)


def configure_surface_format() -> None:
    """
    Request a double-buffered compatibility context with a depth buffer.

    Must run before the QApplication is created.
    """
    fmt = QSurfaceFormat()
    fmt.setRenderableType(QSurfaceFormat.RenderableType.OpenGL)
    fmt.setProfile(QSurfaceFormat.OpenGLContextProfile.CompatibilityProfile)
    fmt.setVersion(2, 1)
    fmt.setDepthBufferSize(24)
    fmt.setSwapBehavior(QSurfaceFormat.SwapBehavior.DoubleBuffer)
    QSurfaceFormat.setDefaultFormat(fmt)


class OverlayWindow(QOpenGLWidget):
    """
    Window showing the camera image with marker overlays.

    Esc quits the application with exit code 0.
    """

    def __init__(self, compositor: Compositor, renderer: GLRenderer, title: str = ""):
        super().__init__()
        self.compositor = compositor
        self.renderer = renderer
        self.setWindowTitle(title)

        # Redraw whenever the event loop is idle
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.update)
        self.timer.start(0)

    def initializeGL(self):
        self.renderer.initialize()

    def resizeGL(self, width: int, height: int):
        self.renderer.resize(width, height)

    def paintGL(self):
        self.compositor.render()

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Escape:
            logger.info("Exit requested")
            QApplication.instance().exit(EXIT_OK)
            return
        super().keyPressEvent(event)


def run_overlay(context: "AppContext") -> int:
    """
    Render phase: create the window and run the Qt event loop.

    Args:
        context: Application context with an open source and loaded calibration

    Returns:
        Process exit code
    """
    configure_surface_format()
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("calibar")

    renderer = GLRenderer()
    compositor = Compositor(
        source=context.source,
        detector=ArucoMarkerDetector(context.config.marker),
        renderer=renderer,
        calibration=context.calibration,
    )

    window = OverlayWindow(compositor, renderer, context.config.window_title)
    window.resize(context.config.window_width, context.config.window_height)
    window.show()

    return app.exec()
