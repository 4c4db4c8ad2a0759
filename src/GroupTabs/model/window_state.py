from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from PySide6.QtCore import QRect

from ..constants import TILED_TOLERANCE

if TYPE_CHECKING:
    from ..core.host import WindowHandle


class MaximizeState(Enum):
    """Maximization flags of a window, as one closed set of combinations."""
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"

    @classmethod
    def from_flags(cls, horizontal: bool, vertical: bool) -> MaximizeState:
        if horizontal and vertical:
            return cls.BOTH
        if horizontal:
            return cls.HORIZONTAL
        if vertical:
            return cls.VERTICAL
        return cls.NONE

    @property
    def horizontal(self) -> bool:
        return self in (MaximizeState.HORIZONTAL, MaximizeState.BOTH)

    @property
    def vertical(self) -> bool:
        return self in (MaximizeState.VERTICAL, MaximizeState.BOTH)


class WindowState(Enum):
    """Presentation state derived from a window's flags and geometry."""
    MINIMIZED = "minimized"
    MAXIMIZED = "maximized"
    TILED = "tiled"
    NORMAL = "normal"


def _near(a: int, b: int, tolerance: int) -> bool:
    return abs(a - b) <= tolerance


def is_rect_tiled(frame: QRect, work_area: QRect, tolerance: int = TILED_TOLERANCE) -> bool:
    """
    Checks whether a frame occupies the left or right half of the work area.

    The height must match the work area's height, the width half its width,
    the top edge the work area's top, and the left edge either the work area's
    left edge or its horizontal midpoint, each within the tolerance.
    """
    if work_area.width() <= 0 or work_area.height() <= 0:
        return False

    half_width = work_area.width() / 2
    midpoint_x = work_area.x() + half_width

    if not _near(frame.height(), work_area.height(), tolerance):
        return False
    if not _near(frame.width(), half_width, tolerance):
        return False
    if not _near(frame.y(), work_area.y(), tolerance):
        return False
    return _near(frame.x(), work_area.x(), tolerance) or _near(frame.x(), midpoint_x, tolerance)


def is_window_tiled(window: WindowHandle, tolerance: int = TILED_TOLERANCE) -> bool:
    # Vertically maximized half-screen windows count as tiled, fully maximized ones do not.
    if window.is_minimized() or window.maximize_state() is MaximizeState.BOTH:
        return False
    return is_rect_tiled(window.frame_rect(), window.work_area(), tolerance)


def is_window_maximized(window: WindowHandle) -> bool:
    return window.maximize_state() is MaximizeState.BOTH


def derive_window_state(window: WindowHandle) -> WindowState:
    """Derives the single presentation state used by the tab bar policies."""
    if window.is_minimized():
        return WindowState.MINIMIZED
    if is_window_maximized(window):
        return WindowState.MAXIMIZED
    if is_window_tiled(window):
        return WindowState.TILED
    return WindowState.NORMAL
