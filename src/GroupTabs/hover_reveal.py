from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QPoint, QTimer, Signal

from .constants import (HOVER_POLL_INTERVAL_MS, HOVER_REVEAL_DEBOUNCE_MS,
                        HOVER_TOP_BAND, TILED_MODE_GRACE_MS)
from .model.window_state import is_window_maximized, is_window_tiled
from .utils.logger import get_logger

if TYPE_CHECKING:
    from .core.host import PointerInput, WindowHandle
    from .window_group import WindowGroup

logger = get_logger(__name__)


class TiledModeCoordinator(QObject):
    """
    Shared flag telling every group that some tiled group has its bar revealed.

    While the flag is up, moving the pointer to another tiled group's top edge
    reveals that bar at once instead of after the usual debounce. The flag is
    dropped a short grace period after the last revealed tiled bar hides.
    """
    active_changed = Signal(bool)

    def __init__(self, parent=None, grace_ms: int = TILED_MODE_GRACE_MS):
        super().__init__(parent)
        self._active = False
        self._members: set[WindowGroup] = set()
        self._grace_timer = QTimer(self)
        self._grace_timer.setSingleShot(True)
        self._grace_timer.setInterval(grace_ms)
        self._grace_timer.timeout.connect(self._on_grace_elapsed)

    def is_active(self) -> bool:
        return self._active

    def is_member(self, group: WindowGroup) -> bool:
        return group in self._members

    def enter(self, group: WindowGroup):
        self._grace_timer.stop()
        self._members.add(group)
        if not self._active:
            self._active = True
            self.active_changed.emit(True)

    def leave(self, group: WindowGroup):
        if group not in self._members:
            return
        self._members.discard(group)
        if not self._members and self._active:
            self._grace_timer.start()

    def stop(self):
        self._grace_timer.stop()
        self._members.clear()
        if self._active:
            self._active = False
            self.active_changed.emit(False)

    def _on_grace_elapsed(self):
        if self._members or not self._active:
            return
        self._active = False
        self.active_changed.emit(False)


class HoverRevealTracker(QObject):
    """
    Watches the pointer for one group whose bar is suppressed because the
    group is maximized or tiled, and reveals the bar when the pointer rests at
    the top edge of the screen (maximized) or of the window (tiled).
    """

    def __init__(self, group: WindowGroup, pointer: PointerInput, coordinator: TiledModeCoordinator,
                 poll_ms: int = HOVER_POLL_INTERVAL_MS, debounce_ms: int = HOVER_REVEAL_DEBOUNCE_MS):
        super().__init__(group)
        self.group = group
        self.pointer = pointer
        self.coordinator = coordinator
        self.armed = False

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(poll_ms)
        self._poll_timer.timeout.connect(self.check_pointer)

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.setInterval(debounce_ms)
        self._debounce_timer.timeout.connect(self._on_debounce_elapsed)

    @property
    def reveal_pending(self) -> bool:
        return self._debounce_timer.isActive()

    def arm(self):
        if self.armed:
            return
        self.armed = True
        self._poll_timer.start()

    def disarm(self):
        """Stops watching and drops a forced reveal without touching the bar."""
        self._poll_timer.stop()
        self._debounce_timer.stop()
        self.armed = False
        if self.group.forced_visible:
            self.group.forced_visible = False
        self.coordinator.leave(self.group)

    def stop(self):
        self.disarm()

    def check_pointer(self):
        if not self.armed:
            return
        window = self.group.reference_window()
        if window is None:
            return

        if self.is_in_target_area(self.pointer.pointer_position(), window):
            if self.group.forced_visible:
                return
            if self.coordinator.is_active() and is_window_tiled(window):
                self._debounce_timer.stop()
                self._reveal()
            elif not self._debounce_timer.isActive():
                self._debounce_timer.start()
        else:
            self._debounce_timer.stop()
            if self.group.forced_visible:
                self._conceal()

    def is_in_target_area(self, point: QPoint, window: WindowHandle) -> bool:
        # A revealed bar stays up while the pointer is over it.
        if self.group.forced_visible and self.group.tab_bar.geometry.contains(point):
            return True

        work_area = window.work_area()
        if abs(point.y() - work_area.y()) > HOVER_TOP_BAND:
            return False

        if is_window_maximized(window):
            span = work_area
        elif is_window_tiled(window):
            span = window.frame_rect()
        else:
            return False
        return span.x() <= point.x() < span.x() + span.width()

    def _on_debounce_elapsed(self):
        if not self.armed:
            return
        window = self.group.reference_window()
        if window is not None and self.is_in_target_area(self.pointer.pointer_position(), window):
            self._reveal()

    def _reveal(self):
        window = self.group.reference_window()
        logger.debug("Revealing tab bar of group %s", self.group.short_id)
        if window is not None and is_window_tiled(window):
            self.coordinator.enter(self.group)
        self.group.set_forced_visible(True)

    def _conceal(self):
        logger.debug("Hiding revealed tab bar of group %s", self.group.short_id)
        self.coordinator.leave(self.group)
        self.group.set_forced_visible(False)
