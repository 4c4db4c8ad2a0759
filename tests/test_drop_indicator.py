"""
Tests for DropIndicator and SubscriptionSet cleanup.
"""
from PySide6.QtCore import QObject, QRect, Signal

from GroupTabs.core.subscriptions import SubscriptionSet
from GroupTabs.drop_indicator import DropIndicator
from GroupTabs.host.simulated import RecordingDropIndicatorRenderer
from conftest import make_window


class Emitter(QObject):
    fired = Signal()


def test_indicator_inflates_target_frame(display):
    renderer = RecordingDropIndicatorRenderer()
    indicator = DropIndicator(renderer)
    window = make_window(display, "T", 200, 100, 400, 300)

    indicator.show_for(window)

    assert renderer.visible
    assert renderer.geometry == QRect(195, 95, 410, 310)
    assert indicator.target is window

    indicator.hide()
    assert not renderer.visible
    assert indicator.target is None


def test_destroy_is_idempotent(display):
    renderer = RecordingDropIndicatorRenderer()
    indicator = DropIndicator(renderer)
    indicator.show_for(make_window(display, "T"))

    indicator.destroy_indicator()
    indicator.destroy_indicator()

    assert renderer.destroyed
    assert not renderer.visible


def test_destroy_failure_is_logged(display, caplog):
    """Test that a renderer that is already gone does not raise."""

    class GoneRenderer(RecordingDropIndicatorRenderer):
        def destroy(self):
            raise RuntimeError("Internal C++ object already deleted.")

    indicator = DropIndicator(GoneRenderer())

    indicator.destroy_indicator()

    assert "Could not destroy drop indicator" in caplog.text


def test_subscriptions_release_per_key():
    emitter = Emitter()
    calls = []
    subscriptions = SubscriptionSet()
    subscriptions.connect("a", emitter.fired, lambda: calls.append("a"))
    subscriptions.connect("b", emitter.fired, lambda: calls.append("b"))
    assert len(subscriptions) == 2

    emitter.fired.emit()
    assert sorted(calls) == ["a", "b"]

    assert subscriptions.release("a") == 1
    calls.clear()
    emitter.fired.emit()
    assert calls == ["b"]

    subscriptions.release_all()
    calls.clear()
    emitter.fired.emit()
    assert calls == []
    assert len(subscriptions) == 0
