"""
OpenGL projection matrices from camera intrinsics.

Pure functions - no GL calls. All 16-element outputs are column-major
float32, ready for glLoadMatrixf.
"""

from __future__ import annotations

import math

import numpy as np

from .types import CalibrationParameters

NEAR_CLIP = 0.01
FAR_CLIP = 100.0
FALLBACK_FOV_Y = 30.0  # degrees, used until the first frame is drawn

# The off-axis matrix negates the x scale relative to gluPerspective
HORIZONTAL_MIRROR = np.diag([-1.0, 1.0, 1.0, 1.0])


# ============================================================================
# Layout helpers
# ============================================================================


def to_column_major(matrix: np.ndarray) -> np.ndarray:
    """4x4 row-indexed matrix to flat column-major (16,) float32."""
    return np.asarray(matrix, dtype=np.float32).reshape(4, 4).flatten(order="F")


def from_column_major(data: np.ndarray) -> np.ndarray:
    """Flat column-major (16,) to 4x4 row-indexed float64 matrix."""
    return np.asarray(data, dtype=np.float64).reshape(4, 4, order="F")


# ============================================================================
# Projection matrices
# ============================================================================


def build_projection_matrix(
    intrinsic: np.ndarray | CalibrationParameters,
    width: int,
    height: int,
    near: float = NEAR_CLIP,
    far: float = FAR_CLIP,
) -> np.ndarray:
    """
    Off-axis perspective projection reproducing a calibrated pinhole camera.

    The principal point becomes an asymmetric frustum offset instead of
    being assumed at the viewport centre. width and height must be
    positive; zero gives a degenerate matrix.

    Args:
        intrinsic: 3x3 camera matrix or CalibrationParameters
        width: Viewport width in pixels
        height: Viewport height in pixels
        near: Near clip distance
        far: Far clip distance

    Returns:
        (16,) float32 column-major projection matrix
    """
    if isinstance(intrinsic, CalibrationParameters):
        intrinsic = intrinsic.intrinsic
    k = np.asarray(intrinsic, dtype=np.float64)
    fx, fy = k[0, 0], k[1, 1]
    cx, cy = k[0, 2], k[1, 2]

    m = np.zeros(16, dtype=np.float64)
    # Negated x scale pairs with detection.CV_TO_GL; change both together
    m[0] = -2.0 * fx / width
    m[5] = 2.0 * fy / height
    m[8] = 2.0 * cx / width - 1.0
    m[9] = 2.0 * cy / height - 1.0
    m[10] = -(far + near) / (far - near)
    m[11] = -1.0
    m[14] = -2.0 * far * near / (far - near)

    return m.astype(np.float32)


def perspective_matrix(
    fov_y: float,
    aspect: float,
    near: float = NEAR_CLIP,
    far: float = FAR_CLIP,
) -> np.ndarray:
    """
    Symmetric perspective projection, equivalent to gluPerspective.

    Args:
        fov_y: Vertical field of view in degrees
        aspect: Width / height

    Returns:
        (16,) float32 column-major projection matrix
    """
    f = 1.0 / math.tan(math.radians(fov_y) / 2.0)

    m = np.zeros((4, 4), dtype=np.float64)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = 2.0 * far * near / (near - far)
    m[3, 2] = -1.0

    return to_column_major(m)


def vertical_fov(intrinsic: np.ndarray | CalibrationParameters, height: int) -> float:
    """Vertical field of view in degrees implied by fy over height pixels."""
    if isinstance(intrinsic, CalibrationParameters):
        intrinsic = intrinsic.intrinsic
    fy = float(np.asarray(intrinsic)[1, 1])
    return math.degrees(2.0 * math.atan(height / (2.0 * fy)))
