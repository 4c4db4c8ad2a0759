from enum import Enum, auto

from PySide6.QtCore import QObject, QTimer, Signal


class SyncState(Enum):
    IDLE = auto()
    SYNCING = auto()


class GestureState(Enum):
    """
    Pointer interaction states shared by tab gestures and the global tracker.
    NONE -> DOWN -> (DRAG -> UP) | CLICK, terminal states fall back to NONE.
    """
    NONE = auto()
    DOWN = auto()
    DRAG = auto()
    UP = auto()
    CLICK = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (GestureState.UP, GestureState.CLICK)


class SyncGuard(QObject):
    """
    Re-entrancy guard for one kind of programmatic window change.

    Entering puts the guard in SYNCING; it returns to IDLE once the settle delay
    elapses. This is a fixed-delay heuristic, not a quiescence detector: the
    host gives no acknowledgment that a requested change has been applied.
    """

    # Emitted when the guard returns to IDLE on its own.
    settled = Signal()

    def __init__(self, settle_ms: int, name: str = "", parent=None):
        super().__init__(parent)
        self.name = name
        self.state = SyncState.IDLE
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(settle_ms)
        self._timer.timeout.connect(self._settle)

    @property
    def settle_ms(self) -> int:
        return self._timer.interval()

    def is_syncing(self) -> bool:
        return self.state is SyncState.SYNCING

    def enter(self):
        """Marks a sync as in flight and (re)starts the settle delay."""
        self.state = SyncState.SYNCING
        self._timer.start()

    def cancel(self):
        """Stops the settle timer and returns to IDLE immediately."""
        self._timer.stop()
        self.state = SyncState.IDLE

    def _settle(self):
        self.state = SyncState.IDLE
        self.settled.emit()
