"""
Tests for ModifierKeyTracker key events and mask polling.
"""
import pytest
from PySide6.QtCore import Qt

from GroupTabs.modifier_tracker import ModifierKeyTracker


@pytest.fixture
def tracker(pointer):
    modifier_tracker = ModifierKeyTracker(pointer)
    modifier_tracker.start()
    yield modifier_tracker
    modifier_tracker.stop()


def test_key_events(tracker, pointer):
    """Test that modifier key presses and releases toggle the held state."""
    changes = []
    tracker.modifier_changed.connect(lambda held: changes.append(held))

    pointer.press_key(Qt.Key.Key_Control)
    assert tracker.is_held()

    pointer.press_key(Qt.Key.Key_Super_L)
    pointer.release_key(Qt.Key.Key_Control)
    assert tracker.is_held()

    pointer.release_key(Qt.Key.Key_Super_L)
    assert not tracker.is_held()
    assert changes == [True, False]


def test_other_keys_are_ignored(tracker, pointer):
    pointer.press_key(Qt.Key.Key_Shift)
    pointer.press_key(Qt.Key.Key_A)

    assert not tracker.is_held()


def test_poll_clears_missed_release(tracker, pointer):
    """Test that the mask poll wins over a key release that never arrived."""
    pointer.press_key(Qt.Key.Key_Meta)
    assert tracker.is_held()

    tracker.poll()

    assert not tracker.is_held()


def test_poll_detects_consumed_press(tracker, pointer):
    pointer.set_modifiers(Qt.KeyboardModifier.ControlModifier)
    tracker.poll()
    assert tracker.is_held()

    pointer.set_modifiers(Qt.KeyboardModifier.ShiftModifier)
    tracker.poll()
    assert not tracker.is_held()


def test_periodic_poll(tracker, pointer, qtbot):
    with qtbot.waitSignal(tracker.modifier_changed, timeout=1000) as blocker:
        pointer.set_modifiers(Qt.KeyboardModifier.MetaModifier)
    assert blocker.args == [True]


def test_stop_disconnects(tracker, pointer):
    tracker.stop()

    pointer.press_key(Qt.Key.Key_Control)

    assert not tracker.is_held()
    assert not tracker.is_running()
