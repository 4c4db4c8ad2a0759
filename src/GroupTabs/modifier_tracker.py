from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Qt, QTimer, Signal

from .constants import MODIFIER_POLL_INTERVAL_MS
from .core.subscriptions import SubscriptionSet
from .utils.logger import get_logger

if TYPE_CHECKING:
    from .core.host import PointerInput

logger = get_logger(__name__)

MODIFIER_KEYS = frozenset(int(key) for key in (
    Qt.Key.Key_Control,
    Qt.Key.Key_Meta,
    Qt.Key.Key_Super_L,
    Qt.Key.Key_Super_R,
))

MODIFIER_MASK = Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier


class ModifierKeyTracker(QObject):
    """
    Tracks whether a grouping modifier (Ctrl, Meta or Super) is held.

    Key events give immediate transitions; the periodic poll of the
    compositor's modifier mask corrects missed releases and presses that were
    consumed elsewhere. The poll wins whenever the two disagree.
    """
    modifier_changed = Signal(bool)

    def __init__(self, pointer: PointerInput, parent=None, interval_ms: int = MODIFIER_POLL_INTERVAL_MS):
        super().__init__(parent)
        self.pointer = pointer
        self._held = False
        self._pressed_keys: set[int] = set()
        self._subscriptions = SubscriptionSet()

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(interval_ms)
        self._poll_timer.timeout.connect(self.poll)

    def is_held(self) -> bool:
        return self._held

    def is_running(self) -> bool:
        return self._poll_timer.isActive()

    def start(self):
        if self._poll_timer.isActive():
            return
        self._subscriptions.connect(self.pointer, self.pointer.key_pressed, self.on_key_pressed)
        self._subscriptions.connect(self.pointer, self.pointer.key_released, self.on_key_released)
        self._poll_timer.start()
        self.poll()

    def stop(self):
        self._poll_timer.stop()
        self._subscriptions.release_all()
        self._pressed_keys.clear()
        self._set_held(False)

    def on_key_pressed(self, key: int):
        key = int(key)
        if key not in MODIFIER_KEYS:
            return
        self._pressed_keys.add(key)
        self._set_held(True)

    def on_key_released(self, key: int):
        key = int(key)
        if key not in MODIFIER_KEYS:
            return
        self._pressed_keys.discard(key)
        self._set_held(bool(self._pressed_keys))

    def poll(self):
        held = bool(self.pointer.modifier_mask() & MODIFIER_MASK)
        if not held:
            self._pressed_keys.clear()
        self._set_held(held)

    def _set_held(self, held: bool):
        if held == self._held:
            return
        self._held = held
        logger.debug("Grouping modifier %s", "held" if held else "released")
        self.modifier_changed.emit(held)
