"""
Calibration module for calibar.

Detection and solving are pure functions that take dataclasses and return
dataclasses. The collector is the only interactive piece.
"""

from .chessboard import (
    chessboard_object_points,
    find_pattern,
    refine_corners,
    render_chessboard,
)

from .intrinsic import (
    detect_observation,
    collect_observations,
    calibrate_intrinsics,
    estimate_from_samples,
    compute_reprojection_errors,
)

from .collector import collect_samples

__all__ = [
    # Chessboard
    "chessboard_object_points",
    "find_pattern",
    "refine_corners",
    "render_chessboard",
    # Intrinsic
    "detect_observation",
    "collect_observations",
    "calibrate_intrinsics",
    "estimate_from_samples",
    "compute_reprojection_errors",
    # Collection
    "collect_samples",
]
