from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from PySide6.QtCore import QPoint

from .utils.logger import get_logger

if TYPE_CHECKING:
    from .core.host import WindowHandle
    from .core.tab_manager import TabManager

logger = get_logger(__name__)


class DragDropController:
    """
    Handles compositor window drags and drop-target detection for the TabManager.

    Tracks the single window being grab-moved, keeps the drop indicator on the
    window that would receive it, and groups the two windows on release.
    """

    def __init__(self, manager: TabManager):
        """
        Args:
            manager: The owning TabManager
        """
        self.manager = manager
        self.dragged_window: Optional[WindowHandle] = None
        self.preview_window: Optional[WindowHandle] = None

    @property
    def is_dragging(self) -> bool:
        return self.dragged_window is not None

    # --- Hit testing ---

    def is_candidate(self, window: WindowHandle) -> bool:
        return window.is_normal() and window.is_showing() and not window.is_minimized()

    def get_window_at(self, point: QPoint, exclude: Iterable[WindowHandle] = ()) -> Optional[WindowHandle]:
        """
        Topmost eligible window whose frame contains the point.

        Windows are visited in stacking order, topmost first, so the first hit
        is also the only one not covered by a higher candidate at that point.
        """
        excluded = list(exclude)
        for window in self.manager.display.windows_in_stacking_order():
            if any(window is other for other in excluded):
                continue
            if not self.is_candidate(window):
                continue
            if window.frame_rect().contains(point):
                return window
        return None

    def get_window_under(self, dragged: WindowHandle) -> Optional[WindowHandle]:
        """
        The window under the pointer while dragging, ignoring the dragged window
        and the rest of its group, which travel with it.
        """
        exclude = [dragged]
        group = self.manager.group_for(dragged)
        if group is not None:
            exclude.extend(group.windows)
        return self.get_window_at(self.manager.pointer.pointer_position(), exclude)

    def grouping_allowed(self) -> bool:
        if not self.manager.settings.require_modifier_key:
            return True
        return self.manager.modifier_tracker.is_held()

    def find_drop_target(self, dragged: WindowHandle) -> Optional[WindowHandle]:
        """The window the dragged window would be grouped with if released now."""
        if not self.grouping_allowed():
            return None
        target = self.get_window_under(dragged)
        if target is None or self.manager.are_in_same_group(dragged, target):
            return None
        return target

    # --- Compositor drags ---

    def begin(self, window: WindowHandle) -> bool:
        if self.dragged_window is not None:
            logger.debug("Ignoring drag of %r, %r is already being dragged", window, self.dragged_window)
            return False
        self.dragged_window = window
        logger.debug("Drag began for %r", window)
        self.update_drop_indicator()
        return True

    def end(self, window: WindowHandle) -> bool:
        """
        Finishes a drag. Returns True when the release grouped two windows.
        """
        if window is not self.dragged_window:
            logger.debug("Ignoring drag end for %r, it is not being dragged", window)
            return False
        try:
            target = self.find_drop_target(window)
        finally:
            self.dragged_window = None
            self._hide_indicator()

        if target is None:
            return False
        logger.info("Dropped %r onto %r", window, target)
        return self.manager.group_windows(window, target)

    def handle_window_moved(self, window: WindowHandle):
        if window is self.dragged_window:
            self.update_drop_indicator()

    def update_drop_indicator(self, *args):
        """Shows the indicator over the current drop target, or hides it."""
        if self.dragged_window is None:
            if self.preview_window is None:
                self._hide_indicator()
            return
        target = self.find_drop_target(self.dragged_window)
        if target is None:
            self._hide_indicator()
        else:
            self._show_indicator(target)

    def forget(self, window: WindowHandle):
        """Drops every reference to a window that is going away."""
        if window is self.dragged_window:
            self.dragged_window = None
            self._hide_indicator()
        if window is self.preview_window:
            self.clear_preview()

    def reset(self):
        self.dragged_window = None
        self.preview_window = None
        self._hide_indicator()

    # --- Tab drags ---

    def tab_drag_target(self, window: WindowHandle, point: QPoint) -> Optional[WindowHandle]:
        """Window under a tab being dragged out of its bar, if it belongs to another group."""
        target = self.get_window_at(point, exclude=[window])
        if target is None or self.manager.are_in_same_group(window, target):
            return None
        return target

    def preview_tab_drag_out(self, window: WindowHandle, point: QPoint):
        self.preview_window = window
        target = self.tab_drag_target(window, point)
        if target is None:
            self._hide_indicator()
        else:
            self._show_indicator(target)

    def clear_preview(self):
        if self.preview_window is None:
            return
        self.preview_window = None
        if self.dragged_window is None:
            self._hide_indicator()

    # --- Internals ---

    def _show_indicator(self, target: WindowHandle):
        indicator = self.manager.drop_indicator
        if indicator is not None:
            indicator.show_for(target)

    def _hide_indicator(self):
        indicator = self.manager.drop_indicator
        if indicator is not None:
            indicator.hide()
