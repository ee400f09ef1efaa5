"""
Configuration loading/saving.

Pure functions operating on dataclasses.
- TOML for application configuration
- OpenCV FileStorage (XML/YAML/JSON) for the calibration file
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np
import rtoml

from .types import AppConfig, CalibrationParameters, ChessboardConfig, MarkerConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("calibar.toml")

# Field names inside the calibration file
INTRINSIC_KEY = "intrinsic"
DISTORTION_KEY = "distortion"


# ============================================================================
# TOML Application Configuration
# ============================================================================


def load_app_config(path: Path) -> AppConfig:
    """
    Load application configuration from TOML file.

    A relative calibration_path is resolved against the directory
    holding the config file.

    Args:
        path: Path to calibar.toml

    Returns:
        AppConfig dataclass
    """
    data = rtoml.load(path)
    defaults = AppConfig()

    board_data = data.get("chessboard", {})
    chessboard = ChessboardConfig(
        columns=board_data.get("columns", defaults.chessboard.columns),
        rows=board_data.get("rows", defaults.chessboard.rows),
        square_size=float(board_data.get("square_size", defaults.chessboard.square_size)),
    )

    marker_data = data.get("marker", {})
    marker = MarkerConfig(
        dictionary=marker_data.get("dictionary", defaults.marker.dictionary),
        marker_length=float(marker_data.get("marker_length", defaults.marker.marker_length)),
    )

    window_data = data.get("window", {})

    calibration_path = Path(data.get("calibration_path", str(defaults.calibration_path)))
    if not calibration_path.is_absolute():
        calibration_path = path.parent / calibration_path

    return AppConfig(
        camera_index=data.get("camera_index", defaults.camera_index),
        calibration_path=calibration_path,
        target_samples=data.get("target_samples", defaults.target_samples),
        chessboard=chessboard,
        marker=marker,
        window_width=window_data.get("width", defaults.window_width),
        window_height=window_data.get("height", defaults.window_height),
        window_title=window_data.get("title", defaults.window_title),
    )


def save_app_config(config: AppConfig, path: Path) -> None:
    """
    Save application configuration to TOML file.

    Args:
        config: AppConfig dataclass
        path: Path to save calibar.toml
    """
    data = {
        "camera_index": config.camera_index,
        "calibration_path": str(config.calibration_path),
        "target_samples": config.target_samples,
        "chessboard": {
            "columns": config.chessboard.columns,
            "rows": config.chessboard.rows,
            "square_size": config.chessboard.square_size,
        },
        "marker": {
            "dictionary": config.marker.dictionary,
            "marker_length": config.marker.marker_length,
        },
        "window": {
            "width": config.window_width,
            "height": config.window_height,
            "title": config.window_title,
        },
    }

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)


def create_default_app_config() -> AppConfig:
    """
    Create a default application configuration.

    7x10 inner-corner chessboard with 24mm squares, camera 0,
    calibration stored in camera.xml.
    """
    return AppConfig()


def resolve_app_config(path: Path | None = None) -> AppConfig:
    """Load the config at path, or calibar.toml if present, else defaults."""
    if path is not None:
        return load_app_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_app_config(DEFAULT_CONFIG_PATH)
    return create_default_app_config()


# ============================================================================
# Calibration Store
# ============================================================================


def calibration_exists(path: Path) -> bool:
    """
    Whether a calibration file is present.

    This is the gate for the calibration phase: an existing file is always
    reused and never recalibrated.
    """
    return Path(path).is_file()


def save_calibration(path: Path, calibration: CalibrationParameters) -> None:
    """
    Write calibration to path, replacing any existing file.

    The format follows the suffix (.xml, .yml, .yaml, .json).

    Args:
        path: Destination file
        calibration: Parameters to store
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fs = cv2.FileStorage(str(path), cv2.FILE_STORAGE_WRITE)
    try:
        fs.write(INTRINSIC_KEY, calibration.intrinsic.astype(np.float64))
        fs.write(DISTORTION_KEY, calibration.distortion.astype(np.float64).reshape(1, 4))
    finally:
        fs.release()

    logger.info("Saved calibration to %s", path)


def load_calibration(path: Path) -> CalibrationParameters | None:
    """
    Read calibration from path.

    Args:
        path: Calibration file written by save_calibration

    Returns:
        CalibrationParameters if the file exists and is valid, None otherwise
    """
    path = Path(path)
    if not path.is_file():
        return None

    try:
        fs = cv2.FileStorage(str(path), cv2.FILE_STORAGE_READ)
    except cv2.error as e:
        logger.warning("Cannot parse calibration file %s: %s", path, e)
        return None

    try:
        if not fs.isOpened():
            logger.warning("Cannot open calibration file %s", path)
            return None
        intrinsic = fs.getNode(INTRINSIC_KEY).mat()
        distortion = fs.getNode(DISTORTION_KEY).mat()
    except cv2.error as e:
        logger.warning("Malformed calibration file %s: %s", path, e)
        return None
    finally:
        fs.release()

    if intrinsic is None or distortion is None:
        logger.warning(
            "Calibration file %s is missing '%s' or '%s'", path, INTRINSIC_KEY, DISTORTION_KEY
        )
        return None

    distortion = np.asarray(distortion, dtype=np.float64).ravel()
    if distortion.size < 4:
        logger.warning("Calibration file %s has %d distortion coefficients", path, distortion.size)
        return None

    try:
        return CalibrationParameters(intrinsic=intrinsic, distortion=distortion[:4])
    except ValueError as e:
        logger.warning("Invalid calibration in %s: %s", path, e)
        return None
