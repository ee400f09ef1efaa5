"""
Per-frame compositing of the camera image and the marker overlays.

The compositor only talks to capability interfaces, so it runs unchanged
against the real OpenGL renderer or a recording fake.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import numpy as np

from .capture import to_detector, to_display
from .projection import build_projection_matrix, to_column_major
from .types import CalibrationParameters, Frame

logger = logging.getLogger(__name__)


# ============================================================================
# Overlay geometry
# ============================================================================

IDENTITY = to_column_major(np.eye(4))

LINE_WIDTH = 3.0
AXIS_SCALE = 0.5
AXIS_OFFSET = 0.1  # towards the camera, keeps axes off the quad

# Unit quad centred on the marker, triangle strip order
QUAD_VERTICES = np.array(
    [
        [-0.5, -0.5],
        [0.5, -0.5],
        [-0.5, 0.5],
        [0.5, 0.5],
    ],
    dtype=np.float32,
)

QUAD_COLORS = np.array(
    [
        [255, 255, 0, 255],
        [0, 255, 255, 255],
        [0, 0, 0, 0],
        [255, 0, 255, 255],
    ],
    dtype=np.uint8,
)

# (segment vertices, RGBA color) for X, Y, Z
AXES = (
    (np.array([[0, 0, 0], [1, 0, 0]], dtype=np.float32), (1.0, 0.0, 0.0, 1.0)),
    (np.array([[0, 0, 0], [0, 1, 0]], dtype=np.float32), (0.0, 1.0, 0.0, 1.0)),
    (np.array([[0, 0, 0], [0, 0, 1]], dtype=np.float32), (0.0, 0.0, 1.0, 1.0)),
)


# ============================================================================
# Collaborator interfaces
# ============================================================================


class FrameSource(Protocol):
    @property
    def is_open(self) -> bool: ...

    def read(self) -> Frame | None: ...


class Detector(Protocol):
    def detect(
        self, frame: Frame, calibration: CalibrationParameters
    ) -> Sequence[np.ndarray]:
        """Column-major 4x4 marker poses found in a BGRA frame."""
        ...


class Renderer(Protocol):
    def clear(self) -> None: ...

    def set_depth_write(self, enabled: bool) -> None: ...

    def draw_background(self, rgb: np.ndarray) -> None: ...

    def load_projection(self, matrix: np.ndarray) -> None: ...

    def load_modelview(self, matrix: np.ndarray) -> None: ...

    def push_matrix(self) -> None: ...

    def pop_matrix(self) -> None: ...

    def scale(self, factor: float) -> None: ...

    def translate(self, x: float, y: float, z: float) -> None: ...

    def set_line_width(self, width: float) -> None: ...

    def draw_triangle_strip(self, vertices: np.ndarray, colors: np.ndarray) -> None: ...

    def draw_lines(self, vertices: np.ndarray, color: tuple[float, ...]) -> None: ...

    def present(self) -> None: ...


# ============================================================================
# Compositor
# ============================================================================


class Compositor:
    """
    Draws one composite frame per redraw request.

    Holds no state between frames besides its collaborators and the
    read-only calibration.
    """

    def __init__(
        self,
        source: FrameSource,
        detector: Detector,
        renderer: Renderer,
        calibration: CalibrationParameters,
    ):
        self.source = source
        self.detector = detector
        self.renderer = renderer
        self.calibration = calibration

    def render(self) -> int:
        """
        Compose and present one frame.

        Returns:
            Number of marker overlays drawn
        """
        renderer = self.renderer
        renderer.clear()

        if not self.source.is_open:
            renderer.present()
            return 0

        frame = self.source.read()
        if frame is None or frame.empty:
            renderer.present()
            return 0

        # Background never occludes the overlay
        renderer.set_depth_write(False)
        renderer.draw_background(to_display(frame))

        poses = self.detector.detect(to_detector(frame), self.calibration)

        # Intrinsics are in frame pixels, so the frustum follows the frame size
        projection = build_projection_matrix(self.calibration, frame.width, frame.height)
        renderer.load_projection(projection)
        renderer.load_modelview(IDENTITY)
        renderer.set_depth_write(True)
        renderer.set_line_width(LINE_WIDTH)

        for pose in poses:
            self._draw_marker(pose)

        renderer.present()
        return len(poses)

    def _draw_marker(self, pose: np.ndarray) -> None:
        renderer = self.renderer
        renderer.push_matrix()
        try:
            renderer.load_modelview(np.asarray(pose, dtype=np.float32).ravel())
            renderer.draw_triangle_strip(QUAD_VERTICES, QUAD_COLORS)

            renderer.scale(AXIS_SCALE)
            renderer.translate(0.0, 0.0, AXIS_OFFSET)
            for vertices, color in AXES:
                renderer.draw_lines(vertices, color)
        finally:
            renderer.pop_matrix()
