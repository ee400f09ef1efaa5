"""
Fixed-function OpenGL implementation of the compositor's Renderer.

Must be called with a current compatibility-profile context (inside
QOpenGLWidget.initializeGL / paintGL / resizeGL).
"""

from __future__ import annotations

import numpy as np
from OpenGL import GL

from ..projection import FALLBACK_FOV_Y, perspective_matrix

CLEAR_COLOR = (0.0, 0.0, 1.0, 1.0)


class GLRenderer:
    """Issues legacy OpenGL calls for the compositor."""

    def initialize(self) -> None:
        GL.glClearColor(*CLEAR_COLOR)
        GL.glEnable(GL.GL_DEPTH_TEST)
        GL.glPixelStorei(GL.GL_UNPACK_ALIGNMENT, 1)

    def resize(self, width: int, height: int) -> None:
        """Set the viewport and the symmetric projection used before the first frame."""
        GL.glViewport(0, 0, width, height)
        GL.glMatrixMode(GL.GL_PROJECTION)
        GL.glLoadMatrixf(perspective_matrix(FALLBACK_FOV_Y, width / max(height, 1)))
        GL.glMatrixMode(GL.GL_MODELVIEW)

    # ------------------------------------------------------------------
    # Renderer protocol
    # ------------------------------------------------------------------

    def clear(self) -> None:
        GL.glClear(GL.GL_COLOR_BUFFER_BIT | GL.GL_DEPTH_BUFFER_BIT)

    def set_depth_write(self, enabled: bool) -> None:
        GL.glDepthMask(GL.GL_TRUE if enabled else GL.GL_FALSE)

    def draw_background(self, rgb: np.ndarray) -> None:
        height, width = rgb.shape[:2]
        GL.glWindowPos2i(0, 0)
        GL.glDrawPixels(width, height, GL.GL_RGB, GL.GL_UNSIGNED_BYTE, rgb)

    def load_projection(self, matrix: np.ndarray) -> None:
        GL.glMatrixMode(GL.GL_PROJECTION)
        GL.glLoadMatrixf(matrix)
        GL.glMatrixMode(GL.GL_MODELVIEW)

    def load_modelview(self, matrix: np.ndarray) -> None:
        GL.glMatrixMode(GL.GL_MODELVIEW)
        GL.glLoadMatrixf(matrix)

    def push_matrix(self) -> None:
        GL.glPushMatrix()

    def pop_matrix(self) -> None:
        GL.glPopMatrix()

    def scale(self, factor: float) -> None:
        GL.glScalef(factor, factor, factor)

    def translate(self, x: float, y: float, z: float) -> None:
        GL.glTranslatef(x, y, z)

    def set_line_width(self, width: float) -> None:
        GL.glLineWidth(width)

    def draw_triangle_strip(self, vertices: np.ndarray, colors: np.ndarray) -> None:
        GL.glEnableClientState(GL.GL_VERTEX_ARRAY)
        GL.glEnableClientState(GL.GL_COLOR_ARRAY)
        GL.glVertexPointer(vertices.shape[1], GL.GL_FLOAT, 0, vertices)
        GL.glColorPointer(4, GL.GL_UNSIGNED_BYTE, 0, colors)
        GL.glDrawArrays(GL.GL_TRIANGLE_STRIP, 0, len(vertices))
        GL.glDisableClientState(GL.GL_COLOR_ARRAY)
        GL.glDisableClientState(GL.GL_VERTEX_ARRAY)

    def draw_lines(self, vertices: np.ndarray, color: tuple[float, ...]) -> None:
        GL.glEnableClientState(GL.GL_VERTEX_ARRAY)
        GL.glColor4f(*color)
        GL.glVertexPointer(vertices.shape[1], GL.GL_FLOAT, 0, vertices)
        GL.glDrawArrays(GL.GL_LINES, 0, len(vertices))
        GL.glDisableClientState(GL.GL_VERTEX_ARRAY)

    def present(self) -> None:
        # QOpenGLWidget swaps buffers once paintGL returns
        GL.glFlush()
