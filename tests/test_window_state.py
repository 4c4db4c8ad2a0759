"""
Tests for window state derivation and tiled detection.
"""
import pytest
from PySide6.QtCore import QRect

from GroupTabs.model.window_state import (MaximizeState, WindowState, derive_window_state,
                                          is_rect_tiled, is_window_maximized, is_window_tiled)

WORK_AREA = QRect(0, 0, 1920, 1080)


@pytest.mark.parametrize("frame", [
    QRect(0, 0, 960, 1080),       # left half
    QRect(960, 0, 960, 1080),     # right half
    QRect(10, 10, 950, 1070),     # every edge at the tolerance limit
    QRect(950, 0, 970, 1080),     # right half, slightly wide
])
def test_half_screen_frames_are_tiled(frame):
    """Test that left and right halves within tolerance count as tiled."""
    assert is_rect_tiled(frame, WORK_AREA)


@pytest.mark.parametrize("frame", [
    QRect(11, 0, 960, 1080),      # left edge off by 11
    QRect(0, 0, 971, 1080),       # too wide
    QRect(0, 0, 960, 1069),       # too short
    QRect(0, 11, 960, 1080),      # top edge off by 11
    QRect(480, 0, 960, 1080),     # centered, not snapped
    QRect(0, 0, 1920, 1080),      # full screen
])
def test_other_frames_are_not_tiled(frame):
    """Test that frames outside the tolerance are not tiled."""
    assert not is_rect_tiled(frame, WORK_AREA)


def test_tiled_detection_respects_work_area_offset():
    """Test tiled detection against a work area below a top panel."""
    work_area = QRect(0, 32, 1920, 1048)
    assert is_rect_tiled(QRect(960, 32, 960, 1048), work_area)
    assert not is_rect_tiled(QRect(960, 0, 960, 1080), work_area)


def test_empty_work_area_is_never_tiled():
    assert not is_rect_tiled(QRect(0, 0, 0, 0), QRect())


def test_maximize_state_flags():
    """Test conversion between flag pairs and MaximizeState."""
    assert MaximizeState.from_flags(False, False) is MaximizeState.NONE
    assert MaximizeState.from_flags(True, False) is MaximizeState.HORIZONTAL
    assert MaximizeState.from_flags(False, True) is MaximizeState.VERTICAL
    assert MaximizeState.from_flags(True, True) is MaximizeState.BOTH
    assert MaximizeState.BOTH.horizontal and MaximizeState.BOTH.vertical
    assert MaximizeState.VERTICAL.vertical and not MaximizeState.VERTICAL.horizontal


def test_window_state_derivation(display):
    """Test that minimized beats maximized beats tiled beats normal."""
    window = display.add_window("W", QRect(100, 100, 800, 600), announce=False)
    assert derive_window_state(window) is WindowState.NORMAL

    window.tile("left")
    assert is_window_tiled(window)
    assert derive_window_state(window) is WindowState.TILED

    window.set_maximize_state(MaximizeState.BOTH)
    assert is_window_maximized(window)
    assert not is_window_tiled(window)
    assert derive_window_state(window) is WindowState.MAXIMIZED

    window.set_minimized(True)
    assert derive_window_state(window) is WindowState.MINIMIZED
    assert not is_window_tiled(window)


def test_vertically_maximized_half_window_is_tiled(display):
    """Test that a half-width vertically maximized window still counts as tiled."""
    window = display.add_window("W", QRect(960, 200, 960, 600), announce=False)
    window.set_maximize_state(MaximizeState.VERTICAL)

    assert window.frame_rect() == QRect(960, 0, 960, 1080)
    assert not is_window_maximized(window)
    assert is_window_tiled(window)
