"""
Tests for the calibar command line.
"""

from unittest.mock import patch

import cv2
import pytest

from calibar.cli import main
from calibar.config import load_app_config, save_app_config, save_calibration
from calibar.errors import (
    EXIT_CALIBRATION_UNREADABLE,
    EXIT_DEVICE_UNAVAILABLE,
    EXIT_USAGE,
    CalibrationFileUnreadableError,
    DeviceUnavailableError,
)
from calibar.types import AppConfig


@pytest.fixture
def config_path(temp_dir):
    """Config file whose calibration lives next to it."""
    path = temp_dir / "calibar.toml"
    save_app_config(AppConfig(calibration_path=temp_dir / "camera.yml"), path)
    return path


def test_help(capsys):
    assert main(["--help"]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_unknown_command(capsys):
    assert main(["explode"]) == EXIT_USAGE
    assert "Unknown command" in capsys.readouterr().out


def test_init_config_writes_defaults(temp_dir):
    path = temp_dir / "nested" / "calibar.toml"

    assert main(["init-config", str(path)]) == 0

    config = load_app_config(path)
    assert config.chessboard.pattern_size == (10, 7)
    assert config.camera_index == 0


@pytest.mark.parametrize("command", ["init-config", "board", "marker"])
def test_path_required(command, capsys):
    assert main([command]) == EXIT_USAGE
    assert "PATH" in capsys.readouterr().out


def test_show_without_calibration(config_path, capsys):
    assert main(["show", "--config", str(config_path)]) == EXIT_CALIBRATION_UNREADABLE
    assert "No valid calibration" in capsys.readouterr().out


def test_show_prints_calibration(config_path, sample_calibration, capsys):
    save_calibration(load_app_config(config_path).calibration_path, sample_calibration)

    assert main(["show", "--config", str(config_path)]) == 0
    out = capsys.readouterr().out
    assert "intrinsic" in out
    assert "800." in out


def test_board_image(config_path, temp_dir):
    out = temp_dir / "board.png"

    assert main(["board", str(out), "--config", str(config_path)]) == 0

    image = cv2.imread(str(out), cv2.IMREAD_GRAYSCALE)
    assert image is not None
    found, _ = cv2.findChessboardCorners(image, (10, 7))
    assert found


def test_marker_image(config_path, temp_dir):
    out = temp_dir / "marker.png"

    assert main(["marker", str(out), "--config", str(config_path)]) == 0

    assert cv2.imread(str(out), cv2.IMREAD_GRAYSCALE) is not None


class TestRunExitCodes:
    def test_default_command_runs(self, config_path):
        with patch("calibar.app.run", return_value=0) as mock_run:
            assert main(["--config", str(config_path)]) == 0

        _, kwargs = mock_run.call_args
        assert kwargs["force_calibration"] is False

    def test_calibrate_forces_recalibration(self, config_path):
        with patch("calibar.app.run", return_value=0) as mock_run:
            main(["calibrate", "--config", str(config_path)])

        _, kwargs = mock_run.call_args
        assert kwargs["force_calibration"] is True

    def test_device_unavailable(self, config_path):
        with patch("calibar.app.run", side_effect=DeviceUnavailableError("no camera")):
            assert main(["run", "--config", str(config_path)]) == 1

    def test_calibration_unreadable(self, config_path):
        with patch("calibar.app.run", side_effect=CalibrationFileUnreadableError("bad file")):
            assert main(["run", "--config", str(config_path)]) == 2

    def test_usage_error_distinct_from_device_failure(self):
        assert EXIT_USAGE not in (EXIT_DEVICE_UNAVAILABLE, EXIT_CALIBRATION_UNREADABLE)

    def test_malformed_calibration_exits_cleanly(self, config_path):
        calibration_path = load_app_config(config_path).calibration_path
        calibration_path.write_text("%YAML:1.0\n---\nintrinsic: 5\ndistortion: 6\n")

        with patch("calibar.app.VideoSource") as mock_source_class:
            mock_source_class.return_value.open.return_value = True
            assert main(["run", "--config", str(config_path)]) == EXIT_CALIBRATION_UNREADABLE

        mock_source_class.return_value.release.assert_called_once()
