"""
Capture device wrapper and frame format conversions.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from .types import Frame

logger = logging.getLogger(__name__)


class VideoSource:
    """
    OpenCV capture device.

    A failed read returns None; callers treat it like an empty frame.
    """

    def __init__(self, device_index: int = 0):
        self.device_index = device_index
        self.cap = None

    def open(self) -> bool:
        self.cap = cv2.VideoCapture(self.device_index)
        if not self.cap.isOpened():
            logger.error("Failed to open capture device %d", self.device_index)
            return False
        logger.info("Opened capture device %d", self.device_index)
        return True

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def read(self) -> Frame | None:
        if self.cap is None:
            return None
        ok, image = self.cap.read()
        if not ok or image is None:
            return None
        return Frame(pixels=image, layout="BGR")

    def release(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None


# ============================================================================
# Format conversions
# ============================================================================


# cvtColor codes per source layout
_GRAY_CODES = {
    "BGR": cv2.COLOR_BGR2GRAY,
    "RGB": cv2.COLOR_RGB2GRAY,
    "BGRA": cv2.COLOR_BGRA2GRAY,
}
_RGB_CODES = {
    "BGR": cv2.COLOR_BGR2RGB,
    "BGRA": cv2.COLOR_BGRA2RGB,
    "GRAY": cv2.COLOR_GRAY2RGB,
}
_BGRA_CODES = {
    "BGR": cv2.COLOR_BGR2BGRA,
    "RGB": cv2.COLOR_RGB2BGRA,
    "GRAY": cv2.COLOR_GRAY2BGRA,
}


def to_gray(frame: Frame) -> np.ndarray:
    """Single-channel intensity image."""
    if frame.layout == "GRAY":
        return frame.pixels
    return cv2.cvtColor(frame.pixels, _GRAY_CODES[frame.layout])


def to_display(frame: Frame) -> np.ndarray:
    """
    RGB copy flipped vertically for bottom-up pixel upload.

    Args:
        frame: Frame in any supported layout

    Returns:
        (h, w, 3) uint8 contiguous array
    """
    if frame.layout == "RGB":
        rgb = frame.pixels
    else:
        rgb = cv2.cvtColor(frame.pixels, _RGB_CODES[frame.layout])
    return np.ascontiguousarray(cv2.flip(rgb, 0))


def to_detector(frame: Frame) -> Frame:
    """BGRA copy of a frame, the layout the marker detector consumes."""
    if frame.layout == "BGRA":
        return Frame(pixels=frame.pixels.copy(), layout="BGRA")
    bgra = cv2.cvtColor(frame.pixels, _BGRA_CODES[frame.layout])
    return Frame(pixels=bgra, layout="BGRA")
