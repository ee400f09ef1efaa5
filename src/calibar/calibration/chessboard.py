"""
Chessboard pattern search and geometry.

Pure functions - no classes, no state.
"""

from __future__ import annotations

import cv2
import numpy as np

from ..types import ChessboardConfig


# ============================================================================
# Search parameters
# ============================================================================

# Live preview: tolerate uneven lighting, reject empty frames early
FAST_SEARCH_FLAGS = (
    cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE | cv2.CALIB_CB_FAST_CHECK
)
# Stored samples: full search
FULL_SEARCH_FLAGS = cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE

SUBPIX_WINDOW = (11, 11)
SUBPIX_ZERO_ZONE = (-1, -1)
SUBPIX_MAX_ITER = 30
SUBPIX_EPS = 0.1


# ============================================================================
# Detection
# ============================================================================


def find_pattern(
    gray: np.ndarray,
    config: ChessboardConfig,
    fast: bool = False,
) -> np.ndarray | None:
    """
    Locate the inner corners of the chessboard.

    Args:
        gray: Single-channel image
        config: ChessboardConfig for the board
        fast: Use the early-reject check (for live preview)

    Returns:
        (n, 1, 2) float32 pixel-accurate corners, or None if not found
    """
    flags = FAST_SEARCH_FLAGS if fast else FULL_SEARCH_FLAGS
    found, corners = cv2.findChessboardCorners(gray, config.pattern_size, None, flags)
    if not found or corners is None:
        return None
    return corners


def refine_corners(gray: np.ndarray, corners: np.ndarray) -> np.ndarray:
    """
    Refine corners to sub-pixel accuracy.

    Returns:
        (n, 2) float32 refined corners
    """
    criteria = (
        cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_COUNT,
        SUBPIX_MAX_ITER,
        SUBPIX_EPS,
    )
    refined = cv2.cornerSubPix(
        gray,
        np.ascontiguousarray(corners, dtype=np.float32).reshape(-1, 1, 2),
        SUBPIX_WINDOW,
        SUBPIX_ZERO_ZONE,
        criteria,
    )
    return refined.reshape(-1, 2)


def draw_pattern(image: np.ndarray, config: ChessboardConfig, corners: np.ndarray) -> None:
    """Draw detected corners onto image in place."""
    cv2.drawChessboardCorners(image, config.pattern_size, corners, True)


# ============================================================================
# Geometry
# ============================================================================


def chessboard_object_points(config: ChessboardConfig) -> np.ndarray:
    """
    Physical corner layout in the pattern's own frame.

    Row-major, matching the corner order of findChessboardCorners:
    x runs along columns, y along rows, z = 0.

    Returns:
        (rows * columns, 3) float32
    """
    points = np.zeros((config.point_count, 3), dtype=np.float32)
    grid = np.mgrid[0 : config.columns, 0 : config.rows].T.reshape(-1, 2)
    points[:, :2] = grid * config.square_size
    return points


def render_chessboard(
    config: ChessboardConfig,
    square_px: int = 40,
    margin_px: int = 40,
) -> np.ndarray:
    """
    Synthesize a grayscale image of the board for testing and printing.

    The board has (rows + 1) x (columns + 1) squares with a white margin.

    Returns:
        (h, w) uint8 image
    """
    squares_y = config.rows + 1
    squares_x = config.columns + 1
    height = squares_y * square_px + 2 * margin_px
    width = squares_x * square_px + 2 * margin_px

    image = np.full((height, width), 255, dtype=np.uint8)
    for row in range(squares_y):
        for col in range(squares_x):
            if (row + col) % 2 == 0:
                y0 = margin_px + row * square_px
                x0 = margin_px + col * square_px
                image[y0 : y0 + square_px, x0 : x0 + square_px] = 0

    return image
