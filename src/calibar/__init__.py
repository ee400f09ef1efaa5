# calibar - Camera calibration and marker-locked AR overlay

__version__ = "0.1.0"

# Core types
from calibar.types import (
    AppConfig,
    CalibrationParameters,
    ChessboardConfig,
    Frame,
    MarkerConfig,
    ObservationSet,
)

# Configuration and calibration store
from calibar.config import (
    load_app_config,
    save_app_config,
    create_default_app_config,
    calibration_exists,
    load_calibration,
    save_calibration,
)

# Projection
from calibar.projection import (
    NEAR_CLIP,
    FAR_CLIP,
    build_projection_matrix,
    perspective_matrix,
)

# Compositing
from calibar.compositor import Compositor, Detector, FrameSource, Renderer

# Errors
from calibar.errors import (
    CalibarError,
    CalibrationFileUnreadableError,
    DeviceUnavailableError,
)

__all__ = [
    # Core types
    "AppConfig",
    "CalibrationParameters",
    "ChessboardConfig",
    "Frame",
    "MarkerConfig",
    "ObservationSet",
    # Configuration
    "load_app_config",
    "save_app_config",
    "create_default_app_config",
    "calibration_exists",
    "load_calibration",
    "save_calibration",
    # Projection
    "NEAR_CLIP",
    "FAR_CLIP",
    "build_projection_matrix",
    "perspective_matrix",
    # Compositing
    "Compositor",
    "Detector",
    "FrameSource",
    "Renderer",
    # Errors
    "CalibarError",
    "CalibrationFileUnreadableError",
    "DeviceUnavailableError",
]
