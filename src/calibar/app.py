"""
Application phases.

Calibration phase (collect, estimate, persist) runs only when no calibration
file exists. The render phase starts from the loaded CalibrationParameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import cv2

from .calibration import collect_samples, estimate_from_samples
from .capture import VideoSource
from .config import calibration_exists, load_calibration, save_calibration
from .errors import CalibrationFileUnreadableError, DeviceUnavailableError
from .projection import vertical_fov
from .types import AppConfig, CalibrationParameters

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the event handlers share, created once at startup."""

    config: AppConfig
    source: VideoSource
    calibration: CalibrationParameters


def open_source(config: AppConfig) -> VideoSource:
    """
    Open the capture device.

    Raises:
        DeviceUnavailableError: If the device can't be opened
    """
    source = VideoSource(config.camera_index)
    if not source.open():
        raise DeviceUnavailableError(f"Cannot open capture device {config.camera_index}")
    return source


def run_calibration_phase(config: AppConfig, source) -> bool:
    """
    Collect samples interactively, calibrate, and save.

    Returns:
        True if a calibration file was written
    """
    try:
        samples = collect_samples(source, config.chessboard, config.target_samples)
    finally:
        cv2.destroyAllWindows()

    if not samples:
        logger.warning("No samples captured, skipping calibration")
        return False

    calibration = estimate_from_samples(samples, config.chessboard)
    if calibration is None:
        return False

    save_calibration(config.calibration_path, calibration)
    return True


def prepare_calibration(
    config: AppConfig,
    source,
    force: bool = False,
) -> CalibrationParameters:
    """
    Calibrate if needed, then load the calibration file.

    Args:
        config: Application config
        source: Open frame source for the collector
        force: Recalibrate even if a file exists

    Raises:
        CalibrationFileUnreadableError: If no valid file exists afterwards
    """
    path = config.calibration_path
    if force or not calibration_exists(path):
        logger.info("Running calibration, output: %s", path)
        run_calibration_phase(config, source)
    else:
        logger.info("Using existing calibration %s", path)

    calibration = load_calibration(path)
    if calibration is None:
        raise CalibrationFileUnreadableError(f"Failed to load camera parameters from {path}")

    logger.info(
        "fx=%.2f fy=%.2f cx=%.2f cy=%.2f",
        calibration.fx,
        calibration.fy,
        calibration.cx,
        calibration.cy,
    )
    return calibration


def run(config: AppConfig, force_calibration: bool = False) -> int:
    """
    Run both phases.

    Returns:
        Exit code from the render loop

    Raises:
        DeviceUnavailableError, CalibrationFileUnreadableError
    """
    source = open_source(config)
    try:
        calibration = prepare_calibration(config, source, force=force_calibration)
        logger.debug(
            "Vertical field of view at %dpx: %.1f deg",
            config.window_height,
            vertical_fov(calibration, config.window_height),
        )

        # Imported here so calibration-only use doesn't need a GL stack
        from .gui import run_overlay

        context = AppContext(config=config, source=source, calibration=calibration)
        return run_overlay(context)
    finally:
        source.release()
