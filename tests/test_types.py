"""
Tests for calibar.types dataclasses.
"""

from pathlib import Path

import numpy as np
import pytest

from calibar.types import (
    AppConfig,
    CalibrationParameters,
    ChessboardConfig,
    Frame,
    MarkerConfig,
    ObservationSet,
)


class TestCalibrationParameters:
    def test_creation(self, sample_intrinsics_matrix, sample_distortion):
        calibration = CalibrationParameters(
            intrinsic=sample_intrinsics_matrix,
            distortion=sample_distortion,
        )
        assert calibration.intrinsic.shape == (3, 3)
        assert calibration.distortion.shape == (4,)
        assert calibration.fx == 800.0
        assert calibration.fy == 800.0
        assert calibration.cx == 320.0
        assert calibration.cy == 240.0

    def test_distortion_column_vector_is_flattened(self, sample_intrinsics_matrix):
        calibration = CalibrationParameters(
            intrinsic=sample_intrinsics_matrix,
            distortion=np.zeros((4, 1)),
        )
        assert calibration.distortion.shape == (4,)

    def test_rejects_non_positive_focal_length(self, sample_intrinsics_matrix):
        bad = sample_intrinsics_matrix.copy()
        bad[1, 1] = 0.0
        with pytest.raises(ValueError, match="positive"):
            CalibrationParameters(intrinsic=bad, distortion=np.zeros(4))

    def test_rejects_wrong_matrix_shape(self):
        with pytest.raises(ValueError, match="3x3"):
            CalibrationParameters(intrinsic=np.eye(4), distortion=np.zeros(4))

    def test_rejects_wrong_distortion_length(self, sample_intrinsics_matrix):
        with pytest.raises(ValueError, match="4 coefficients"):
            CalibrationParameters(intrinsic=sample_intrinsics_matrix, distortion=np.zeros(5))

    def test_frozen(self, sample_calibration):
        with pytest.raises(AttributeError):
            sample_calibration.intrinsic = np.eye(3)


class TestChessboardConfig:
    def test_defaults(self):
        config = ChessboardConfig()
        assert config.columns == 10
        assert config.rows == 7
        assert config.square_size == 24.0

    def test_pattern_size_is_columns_first(self):
        config = ChessboardConfig(columns=9, rows=6)
        assert config.pattern_size == (9, 6)
        assert config.point_count == 54

    def test_frozen(self):
        config = ChessboardConfig()
        with pytest.raises(AttributeError):
            config.rows = 5


class TestObservationSet:
    def test_matching_lengths(self):
        observation = ObservationSet(
            image_points=np.zeros((70, 2), dtype=np.float32),
            object_points=np.zeros((70, 3), dtype=np.float32),
        )
        assert len(observation.image_points) == 70

    def test_mismatched_lengths_rejected(self):
        with pytest.raises(ValueError, match="mismatch"):
            ObservationSet(
                image_points=np.zeros((69, 2), dtype=np.float32),
                object_points=np.zeros((70, 3), dtype=np.float32),
            )


class TestFrame:
    def test_color_frame_properties(self):
        frame = Frame(pixels=np.zeros((480, 640, 3), dtype=np.uint8))
        assert frame.width == 640
        assert frame.height == 480
        assert frame.channels == 3
        assert frame.stride == 640 * 3
        assert frame.layout == "BGR"
        assert not frame.empty

    def test_bgra_stride(self):
        frame = Frame(pixels=np.zeros((10, 20, 4), dtype=np.uint8), layout="BGRA")
        assert frame.stride == 80
        assert frame.channels == 4

    def test_gray_frame(self):
        frame = Frame(pixels=np.zeros((10, 20), dtype=np.uint8), layout="GRAY")
        assert frame.channels == 1
        assert frame.stride == 20

    def test_empty(self):
        frame = Frame(pixels=np.zeros((0, 0, 3), dtype=np.uint8))
        assert frame.empty


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.camera_index == 0
        assert config.calibration_path == Path("camera.xml")
        assert config.target_samples == 0
        assert config.chessboard == ChessboardConfig()
        assert config.marker == MarkerConfig()
        assert (config.window_width, config.window_height) == (640, 480)

    def test_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.camera_index = 1
