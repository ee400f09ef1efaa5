"""
Intrinsic camera calibration.

Pure functions - no threading, no state. Caller manages sample collection
and persistence.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from ..types import CalibrationParameters, ChessboardConfig, ObservationSet
from .chessboard import chessboard_object_points, find_pattern, refine_corners

logger = logging.getLogger(__name__)

# k1, k2, p1, p2 only
CALIBRATION_FLAGS = cv2.CALIB_FIX_K3


# ============================================================================
# Observations
# ============================================================================


def detect_observation(
    gray: np.ndarray,
    config: ChessboardConfig,
) -> ObservationSet | None:
    """
    Re-detect the pattern in a stored sample and refine it.

    Args:
        gray: Grayscale sample image
        config: ChessboardConfig for the board

    Returns:
        ObservationSet with sub-pixel corners, or None if the pattern is not found
    """
    corners = find_pattern(gray, config)
    if corners is None:
        return None

    return ObservationSet(
        image_points=refine_corners(gray, corners),
        object_points=chessboard_object_points(config),
    )


def collect_observations(
    samples: list[np.ndarray],
    config: ChessboardConfig,
) -> list[ObservationSet]:
    """Observations for every sample where the pattern is found again."""
    observations = []
    for i, gray in enumerate(samples):
        observation = detect_observation(gray, config)
        if observation is None:
            logger.warning("Pattern not found again in sample %d, skipping", i)
            continue
        observations.append(observation)
    return observations


# ============================================================================
# Calibration
# ============================================================================


def calibrate_intrinsics(
    observations: list[ObservationSet],
    image_size: tuple[int, int],
) -> tuple[CalibrationParameters, float]:
    """
    Jointly solve intrinsics and distortion over all observations.

    Per-image poses are solved alongside and discarded.

    Args:
        observations: ObservationSets from different views of the pattern
        image_size: (width, height) of the sample images

    Returns:
        (CalibrationParameters, RMS reprojection error in pixels)

    Raises:
        ValueError: If observations is empty
    """
    if not observations:
        raise ValueError("Calibration needs at least one observation")

    object_points = [o.object_points.astype(np.float32) for o in observations]
    image_points = [
        o.image_points.astype(np.float32).reshape(-1, 1, 2) for o in observations
    ]

    error, matrix, dist, _rvecs, _tvecs = cv2.calibrateCamera(
        object_points,
        image_points,
        image_size,
        None,
        None,
        flags=CALIBRATION_FLAGS,
    )

    calibration = CalibrationParameters(
        intrinsic=matrix,
        distortion=np.asarray(dist).ravel()[:4],
    )
    return calibration, float(error)


def estimate_from_samples(
    samples: list[np.ndarray],
    config: ChessboardConfig,
) -> CalibrationParameters | None:
    """
    Calibrate from the collector's sample pool.

    Args:
        samples: Grayscale sample images (all the same size)
        config: ChessboardConfig for the board

    Returns:
        CalibrationParameters, or None if there is nothing to calibrate from
    """
    if not samples:
        return None

    observations = collect_observations(samples, config)
    if not observations:
        logger.warning("No usable samples out of %d", len(samples))
        return None

    height, width = samples[0].shape[:2]
    calibration, error = calibrate_intrinsics(observations, (width, height))

    logger.info("Calibrated from %d of %d samples", len(observations), len(samples))
    logger.info("Intrinsic matrix:\n%s", calibration.intrinsic)
    logger.info("Distortion (k1, k2, p1, p2): %s", calibration.distortion)
    logger.info("RMS reprojection error: %.4f px", error)

    # Reported only - samples are not rejected
    for i, sample_error in enumerate(compute_reprojection_errors(observations, calibration)):
        if sample_error is not None:
            logger.debug("Observation %d reprojection error: %.4f px", i, sample_error)

    return calibration


def compute_reprojection_errors(
    observations: list[ObservationSet],
    calibration: CalibrationParameters,
) -> list[float | None]:
    """
    Per-observation RMS reprojection error.

    Args:
        observations: Observations used for (or held out from) calibration
        calibration: Solved parameters

    Returns:
        RMS error in pixels per observation, None where the pose can't be solved
    """
    errors = []
    for observation in observations:
        object_points = observation.object_points.astype(np.float32)
        image_points = observation.image_points.astype(np.float32).reshape(-1, 2)

        success, rvec, tvec = cv2.solvePnP(
            object_points,
            image_points,
            calibration.intrinsic,
            calibration.distortion,
        )
        if not success:
            errors.append(None)
            continue

        projected, _ = cv2.projectPoints(
            object_points,
            rvec,
            tvec,
            calibration.intrinsic,
            calibration.distortion,
        )
        projected = projected.reshape(-1, 2)
        errors.append(float(np.sqrt(np.mean((image_points - projected) ** 2))))

    return errors
