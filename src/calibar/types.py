"""
Core data structures for calibar.

All types are frozen dataclasses with slots for immutability and performance.
Logic is in separate pure functions - these are data containers only,
apart from the invariant checks done at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import numpy as np


# ============================================================================
# Calibration Data
# ============================================================================


@dataclass(frozen=True, slots=True)
class CalibrationParameters:
    """
    Intrinsic matrix and lens distortion of a pinhole camera.

    Produced once (by the estimator or loaded from disk) and read-only
    afterwards.
    """

    intrinsic: np.ndarray  # 3x3 camera matrix
    distortion: np.ndarray  # (4,) k1, k2, p1, p2

    def __post_init__(self):
        intrinsic = np.asarray(self.intrinsic, dtype=np.float64)
        distortion = np.asarray(self.distortion, dtype=np.float64).ravel()

        if intrinsic.shape != (3, 3):
            raise ValueError(f"Intrinsic matrix must be 3x3, got {intrinsic.shape}")
        if distortion.shape != (4,):
            raise ValueError(
                f"Distortion must have 4 coefficients (k1, k2, p1, p2), got {distortion.size}"
            )
        if not (intrinsic[0, 0] > 0 and intrinsic[1, 1] > 0):
            raise ValueError("Focal lengths fx and fy must be positive")

        # Frozen: bypass __setattr__ to store normalized copies
        object.__setattr__(self, "intrinsic", intrinsic)
        object.__setattr__(self, "distortion", distortion)

    @property
    def fx(self) -> float:
        return float(self.intrinsic[0, 0])

    @property
    def fy(self) -> float:
        return float(self.intrinsic[1, 1])

    @property
    def cx(self) -> float:
        return float(self.intrinsic[0, 2])

    @property
    def cy(self) -> float:
        return float(self.intrinsic[1, 2])


# ============================================================================
# Calibration Pattern
# ============================================================================


@dataclass(frozen=True)  # No slots - need properties
class ChessboardConfig:
    """
    Planar chessboard calibration pattern.

    columns and rows count the inner corners, not the squares.
    square_size is the physical pitch between corners (millimetres by default;
    the unit only scales the discarded per-image poses).
    """

    columns: int = 10
    rows: int = 7
    square_size: float = 24.0

    @property
    def pattern_size(self) -> tuple[int, int]:
        """(columns, rows) in the order OpenCV expects."""
        return (self.columns, self.rows)

    @property
    def point_count(self) -> int:
        return self.rows * self.columns


@dataclass(frozen=True, slots=True)
class ObservationSet:
    """
    Matched 2D/3D corners from one calibration image.

    Both arrays are in row-major pattern order and have the same length.
    """

    image_points: np.ndarray  # (n, 2) pixel coordinates
    object_points: np.ndarray  # (n, 3) pattern coordinates, z = 0

    def __post_init__(self):
        if len(self.image_points) != len(self.object_points):
            raise ValueError(
                f"Point count mismatch: {len(self.image_points)} image points, "
                f"{len(self.object_points)} object points"
            )


# ============================================================================
# Frames
# ============================================================================

FrameLayout = Literal["BGR", "RGB", "BGRA", "GRAY"]


@dataclass(frozen=True, slots=True)
class Frame:
    """
    A captured pixel buffer.

    Never mutated after capture - format conversions produce new frames.
    """

    pixels: np.ndarray  # (h, w) or (h, w, c) uint8
    layout: FrameLayout = "BGR"

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 2 else 0

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def stride(self) -> int:
        """Bytes per row."""
        return int(self.pixels.strides[0]) if self.pixels.ndim >= 2 else 0

    @property
    def empty(self) -> bool:
        return self.pixels.size == 0


# ============================================================================
# Application Configuration
# ============================================================================


@dataclass(frozen=True, slots=True)
class MarkerConfig:
    """
    Configuration for the ArUco marker detector.

    marker_length is expressed in overlay units: 1.0 makes the reference quad
    (corners at +-0.5) cover the marker exactly.
    """

    dictionary: str = "DICT_4X4_50"
    marker_length: float = 1.0


@dataclass(frozen=True, slots=True)
class AppConfig:
    """
    Complete application configuration.
    Loaded from TOML file (see config.load_app_config).
    """

    camera_index: int = 0
    calibration_path: Path = Path("camera.xml")
    target_samples: int = 0  # 0 = collect until the operator finishes
    chessboard: ChessboardConfig = field(default_factory=ChessboardConfig)
    marker: MarkerConfig = field(default_factory=MarkerConfig)
    window_width: int = 640
    window_height: int = 480
    window_title: str = "calibar - Calibrated AR Overlay"
