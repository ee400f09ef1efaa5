"""
Fatal error conditions and the process exit codes they map to.
"""

EXIT_OK = 0
EXIT_DEVICE_UNAVAILABLE = 1
EXIT_CALIBRATION_UNREADABLE = 2
EXIT_USAGE = 3


class CalibarError(Exception):
    """Base class for errors that end the process."""

    exit_code = 1


class DeviceUnavailableError(CalibarError):
    """The capture device could not be opened."""

    exit_code = EXIT_DEVICE_UNAVAILABLE


class CalibrationFileUnreadableError(CalibarError):
    """No usable calibration file after the calibration phase."""

    exit_code = EXIT_CALIBRATION_UNREADABLE
