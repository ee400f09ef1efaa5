"""
Tests for calibar.calibration.chessboard.
"""

import numpy as np
import pytest

from calibar.calibration.chessboard import (
    chessboard_object_points,
    find_pattern,
    refine_corners,
    render_chessboard,
)
from calibar.types import ChessboardConfig


def expected_corners(config, square_px=40, margin_px=40):
    """Inner corner pixel positions of render_chessboard output."""
    xs = margin_px + square_px * np.arange(1, config.columns + 1) - 0.5
    ys = margin_px + square_px * np.arange(1, config.rows + 1) - 0.5
    return np.array([[x, y] for y in ys for x in xs])


def max_match_distance(found, expected):
    """Largest distance from an expected corner to its nearest found corner."""
    distances = np.linalg.norm(expected[:, None, :] - found[None, :, :], axis=2)
    return distances.min(axis=1).max()


class TestObjectPoints:
    def test_shape_and_plane(self):
        config = ChessboardConfig(columns=10, rows=7, square_size=24.0)
        points = chessboard_object_points(config)

        assert points.shape == (70, 3)
        assert points.dtype == np.float32
        assert np.all(points[:, 2] == 0)

    def test_row_major_order(self):
        config = ChessboardConfig(columns=3, rows=2, square_size=10.0)
        points = chessboard_object_points(config)

        np.testing.assert_array_equal(points[:, :2], [
            [0, 0], [10, 0], [20, 0],
            [0, 10], [10, 10], [20, 10],
        ])

    def test_pitch(self):
        config = ChessboardConfig(square_size=24.0)
        points = chessboard_object_points(config)

        assert points[1, 0] - points[0, 0] == pytest.approx(24.0)
        assert points[config.columns, 1] - points[0, 1] == pytest.approx(24.0)


class TestRenderChessboard:
    def test_image_size(self, chessboard_config):
        image = render_chessboard(chessboard_config, square_px=40, margin_px=40)
        assert image.shape == (8 * 40 + 80, 11 * 40 + 80)
        assert image.dtype == np.uint8

    def test_margin_is_white(self, chessboard_image):
        assert np.all(chessboard_image[:40, :] == 255)
        assert np.all(chessboard_image[:, :40] == 255)


class TestFindPattern:
    @pytest.mark.parametrize("fast", [False, True])
    def test_finds_synthetic_board(self, chessboard_config, chessboard_image, fast):
        corners = find_pattern(chessboard_image, chessboard_config, fast=fast)

        assert corners is not None
        assert corners.reshape(-1, 2).shape == (70, 2)

    def test_blank_image_not_found(self, chessboard_config):
        blank = np.full((480, 640), 128, dtype=np.uint8)
        assert find_pattern(blank, chessboard_config, fast=True) is None

    def test_wrong_pattern_size_not_found(self, chessboard_image):
        assert find_pattern(chessboard_image, ChessboardConfig(columns=5, rows=4)) is None


class TestRefineCorners:
    def test_refined_corners_are_subpixel_accurate(self, chessboard_config, chessboard_image):
        corners = find_pattern(chessboard_image, chessboard_config)
        refined = refine_corners(chessboard_image, corners)

        assert refined.shape == (70, 2)
        assert max_match_distance(refined, expected_corners(chessboard_config)) < 1.0

    def test_keeps_point_order(self, chessboard_config, chessboard_image):
        corners = find_pattern(chessboard_image, chessboard_config)
        refined = refine_corners(chessboard_image, corners)

        # Refinement only nudges points
        assert np.abs(refined - corners.reshape(-1, 2)).max() < 2.0
