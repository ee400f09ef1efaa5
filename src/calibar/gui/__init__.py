"""
calibar render-phase GUI.

- OverlayWindow: Qt OpenGL window driving the compositor
- GLRenderer: fixed-function OpenGL backend
"""

from .renderer import GLRenderer
from .window import OverlayWindow, run_overlay

__all__ = ["GLRenderer", "OverlayWindow", "run_overlay"]
