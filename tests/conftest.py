"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import cv2
import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def sample_intrinsics_matrix():
    """Typical VGA camera intrinsics matrix."""
    return np.array([
        [800.0, 0.0, 320.0],
        [0.0, 800.0, 240.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


@pytest.fixture
def sample_distortion():
    """Typical distortion coefficients (k1, k2, p1, p2)."""
    return np.array([0.1, -0.25, 0.001, -0.001], dtype=np.float64)


@pytest.fixture
def sample_calibration(sample_intrinsics_matrix, sample_distortion):
    """Sample CalibrationParameters dataclass."""
    from calibar.types import CalibrationParameters
    return CalibrationParameters(
        intrinsic=sample_intrinsics_matrix,
        distortion=sample_distortion,
    )


@pytest.fixture
def chessboard_config():
    """Default 10x7 inner-corner board with 24mm squares."""
    from calibar.types import ChessboardConfig
    return ChessboardConfig()


@pytest.fixture
def chessboard_image(chessboard_config):
    """Clean synthetic grayscale board, 40px squares, 40px margin."""
    from calibar.calibration.chessboard import render_chessboard
    return render_chessboard(chessboard_config, square_px=40, margin_px=40)


def make_view(
    board_image: np.ndarray,
    intrinsic: np.ndarray,
    rvec,
    mm_per_px: float = 0.6,
    depth: float = 650.0,
    size: tuple[int, int] = (640, 480),
) -> np.ndarray:
    """
    Render the flat board image as seen by a pinhole camera.

    The board plane is centred on the optical axis at the given depth and
    rotated by rvec about its centre.
    """
    h, w = board_image.shape[:2]
    rotation, _ = cv2.Rodrigues(np.asarray(rvec, dtype=np.float64).reshape(3, 1))

    # Board pixel -> plane coordinates (mm), centred
    to_plane = np.array([
        [mm_per_px, 0.0, -mm_per_px * w / 2.0],
        [0.0, mm_per_px, -mm_per_px * h / 2.0],
        [0.0, 0.0, 1.0],
    ])
    extrinsic = np.column_stack([rotation[:, 0], rotation[:, 1], [0.0, 0.0, depth]])
    homography = intrinsic @ extrinsic @ to_plane

    return cv2.warpPerspective(
        board_image,
        homography,
        size,
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=255,
    )


@pytest.fixture
def view_factory():
    return make_view
