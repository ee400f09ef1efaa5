"""
ArUco marker detector producing OpenGL modelview matrices.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from .capture import to_gray
from .projection import to_column_major
from .types import CalibrationParameters, Frame, MarkerConfig

logger = logging.getLogger(__name__)


# ============================================================================
# ArUco Dictionary Reference
# ============================================================================

ARUCO_DICTIONARIES = {
    "DICT_4X4_50": cv2.aruco.DICT_4X4_50,
    "DICT_4X4_100": cv2.aruco.DICT_4X4_100,
    "DICT_4X4_250": cv2.aruco.DICT_4X4_250,
    "DICT_5X5_50": cv2.aruco.DICT_5X5_50,
    "DICT_5X5_100": cv2.aruco.DICT_5X5_100,
    "DICT_5X5_250": cv2.aruco.DICT_5X5_250,
    "DICT_6X6_50": cv2.aruco.DICT_6X6_50,
    "DICT_6X6_100": cv2.aruco.DICT_6X6_100,
    "DICT_6X6_250": cv2.aruco.DICT_6X6_250,
    "DICT_7X7_50": cv2.aruco.DICT_7X7_50,
    "DICT_ARUCO_ORIGINAL": cv2.aruco.DICT_ARUCO_ORIGINAL,
}

# OpenCV camera frame (x right, y down, z forward) to the frame the
# off-axis projection expects: all three axes negated
CV_TO_GL = np.diag([-1.0, -1.0, -1.0, 1.0])


def get_dictionary(name: str) -> cv2.aruco.Dictionary:
    """Predefined dictionary by name, DICT_4X4_50 if unknown."""
    dict_int = ARUCO_DICTIONARIES.get(name, cv2.aruco.DICT_4X4_50)
    return cv2.aruco.getPredefinedDictionary(dict_int)


def generate_marker_image(
    config: MarkerConfig,
    marker_id: int = 0,
    side_px: int = 200,
    margin_px: int = 40,
) -> np.ndarray:
    """
    Printable marker with a white quiet zone.

    Returns:
        (side + 2 * margin) square uint8 image
    """
    marker = cv2.aruco.generateImageMarker(get_dictionary(config.dictionary), marker_id, side_px)
    return cv2.copyMakeBorder(
        marker, margin_px, margin_px, margin_px, margin_px, cv2.BORDER_CONSTANT, value=255
    )


def marker_object_points(marker_length: float) -> np.ndarray:
    """
    Marker corners in detectMarkers order (top-left, clockwise), z = 0.

    Returns:
        (4, 3) float32
    """
    half = marker_length / 2.0
    return np.array(
        [
            [-half, half, 0.0],
            [half, half, 0.0],
            [half, -half, 0.0],
            [-half, -half, 0.0],
        ],
        dtype=np.float32,
    )


def pose_to_modelview(rvec: np.ndarray, tvec: np.ndarray) -> np.ndarray:
    """
    Convert an OpenCV pose to a column-major modelview matrix.

    Args:
        rvec: Rodrigues rotation (3,)
        tvec: Translation (3,)

    Returns:
        (16,) float32 column-major matrix
    """
    rotation, _ = cv2.Rodrigues(np.asarray(rvec, dtype=np.float64).reshape(3, 1))
    transform = np.eye(4, dtype=np.float64)
    transform[0:3, 0:3] = rotation
    transform[0:3, 3] = np.asarray(tvec, dtype=np.float64).ravel()
    return to_column_major(CV_TO_GL @ transform)


class ArucoMarkerDetector:
    """
    Detects square ArUco markers and solves their pose with solvePnP.
    """

    def __init__(self, config: MarkerConfig | None = None):
        self.config = config or MarkerConfig()
        self._detector = cv2.aruco.ArucoDetector(
            get_dictionary(self.config.dictionary), cv2.aruco.DetectorParameters()
        )
        self._object_points = marker_object_points(self.config.marker_length)

    def detect(self, frame: Frame, calibration: CalibrationParameters) -> list[np.ndarray]:
        """
        Find markers in a frame.

        Args:
            frame: BGRA (or BGR/GRAY) frame
            calibration: Camera intrinsics and distortion

        Returns:
            Column-major modelview matrices, in detection order
        """
        gray = to_gray(frame)
        corners, ids, _rejected = self._detector.detectMarkers(gray)
        if ids is None or len(ids) == 0:
            return []

        poses = []
        for marker_corners in corners:
            success, rvec, tvec = cv2.solvePnP(
                self._object_points,
                marker_corners.reshape(4, 2).astype(np.float32),
                calibration.intrinsic,
                calibration.distortion,
                flags=cv2.SOLVEPNP_IPPE_SQUARE,
            )
            if not success:
                continue
            poses.append(pose_to_modelview(rvec, tvec))

        logger.debug("Detected %d marker(s), %d posed", len(ids), len(poses))
        return poses
