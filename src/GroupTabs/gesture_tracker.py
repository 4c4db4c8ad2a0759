from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QPoint, Qt, QTimer, Signal

from .constants import DRAG_THRESHOLD, GESTURE_RESET_DELAY_MS, POINTER_POLL_INTERVAL_MS
from .model.sync_state import GestureState
from .utils.logger import get_logger

if TYPE_CHECKING:
    from .core.host import PointerInput

logger = get_logger(__name__)


class GlobalGestureTracker(QObject):
    """
    Follows the pointer across surfaces by polling the host's pointer state.

    A tab bar only receives input while the pointer is over it, so drags that
    leave the bar and clicks outside an open context menu are seen here
    instead. Polling runs only while at least one client holds the tracker.
    """
    pressed = Signal(QPoint)
    moved = Signal(QPoint)
    drag_started = Signal(QPoint)
    released = Signal(QPoint)
    clicked = Signal(QPoint)
    state_changed = Signal(object)

    def __init__(self, pointer: PointerInput, parent=None,
                 interval_ms: int = POINTER_POLL_INTERVAL_MS, threshold: int = DRAG_THRESHOLD):
        super().__init__(parent)
        self.pointer = pointer
        self.threshold = threshold
        self.state = GestureState.NONE
        self._holders = 0
        self._origin = QPoint()
        self._last_pos = QPoint()

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(interval_ms)
        self._poll_timer.timeout.connect(self.sample)

        self._reset_timer = QTimer(self)
        self._reset_timer.setSingleShot(True)
        self._reset_timer.setInterval(GESTURE_RESET_DELAY_MS)
        self._reset_timer.timeout.connect(self._reset)

    @property
    def holders(self) -> int:
        return self._holders

    def is_tracking(self) -> bool:
        return self._poll_timer.isActive()

    def acquire(self):
        self._holders += 1
        if not self._poll_timer.isActive():
            self._poll_timer.start()

    def release(self):
        self._holders = max(0, self._holders - 1)
        if self._holders == 0:
            # The next holder starts from a clean machine.
            self._poll_timer.stop()
            self._reset_timer.stop()
            self._reset()

    def begin(self, point: QPoint):
        """Primes the machine in DOWN for a press a renderer has already reported."""
        self._reset_timer.stop()
        self._origin = QPoint(point)
        self._last_pos = QPoint(point)
        self._set_state(GestureState.DOWN)

    def sample(self):
        """Reads the pointer once and advances the state machine."""
        pos = self.pointer.pointer_position()
        button_down = bool(self.pointer.button_mask() & Qt.MouseButton.LeftButton)

        if self.state in (GestureState.NONE, GestureState.UP, GestureState.CLICK):
            if button_down:
                self._reset_timer.stop()
                self._origin = QPoint(pos)
                self._last_pos = QPoint(pos)
                self._set_state(GestureState.DOWN)
                self.pressed.emit(QPoint(pos))
            return

        if not button_down:
            if self.state is GestureState.DOWN:
                self._set_state(GestureState.CLICK)
                self.released.emit(QPoint(pos))
                self.clicked.emit(QPoint(pos))
            else:
                self._set_state(GestureState.UP)
                self.released.emit(QPoint(pos))
            self._reset_timer.start()
            return

        if self.state is GestureState.DOWN and (pos - self._origin).manhattanLength() > self.threshold:
            self._set_state(GestureState.DRAG)
            self.drag_started.emit(QPoint(self._origin))

        if pos != self._last_pos:
            self._last_pos = QPoint(pos)
            self.moved.emit(QPoint(pos))

    def stop(self):
        self._poll_timer.stop()
        self._reset_timer.stop()
        self._holders = 0
        self._reset()

    def _set_state(self, state: GestureState):
        if state is self.state:
            return
        logger.debug("Pointer gesture %s -> %s", self.state.name, state.name)
        self.state = state
        self.state_changed.emit(state)

    def _reset(self):
        self._set_state(GestureState.NONE)
