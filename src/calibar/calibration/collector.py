"""
Interactive chessboard sample collection.

Shows the live camera with detected corners and keeps the grayscale frames
the operator confirms. Refinement happens later, in the estimator.
"""

from __future__ import annotations

import logging
from typing import Callable

import cv2
import numpy as np

from ..capture import to_gray
from ..types import ChessboardConfig
from .chessboard import draw_pattern, find_pattern

logger = logging.getLogger(__name__)

WINDOW_NAME = "Camera Calibration"
KEY_CAPTURE = ord(" ")
KEY_FINISH = 0x1B  # Esc


def collect_samples(
    source,
    config: ChessboardConfig,
    target_samples: int = 0,
    show: Callable[[str, np.ndarray], None] = cv2.imshow,
    wait_key: Callable[[int], int] = cv2.waitKey,
) -> list[np.ndarray]:
    """
    Run the capture loop until the operator finishes.

    Space stores the current frame if the pattern is visible in it;
    Esc ends collection.

    Args:
        source: Open FrameSource (see compositor.FrameSource)
        config: ChessboardConfig for the board
        target_samples: Stop automatically at this many samples (0 = never)
        show: Window display function
        wait_key: Key polling function, returns -1 when no key is pressed

    Returns:
        Grayscale sample images, in capture order
    """
    samples: list[np.ndarray] = []
    logger.info("Press Space to capture a sample, Esc to finish")

    while True:
        key = wait_key(1)
        if key == KEY_FINISH:
            break

        frame = source.read()
        if frame is None or frame.empty:
            continue

        display = frame.pixels.copy()
        gray = to_gray(frame)

        corners = find_pattern(gray, config, fast=True)
        if corners is not None:
            draw_pattern(display, config, corners)
            if key == KEY_CAPTURE:
                samples.append(gray)
                logger.info("Captured sample %d", len(samples))

        cv2.putText(
            display,
            f"Captured {len(samples)} image(s).",
            (10, 20),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            (0, 255, 0),
            1,
            cv2.LINE_AA,
        )
        show(WINDOW_NAME, display)

        if target_samples > 0 and len(samples) >= target_samples:
            break

    return samples
