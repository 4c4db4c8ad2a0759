from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import QObject, QRect

from .constants import MAXIMIZE_SYNC_SETTLE_MS, POSITION_SYNC_SETTLE_MS
from .core.subscriptions import SubscriptionSet
from .hover_reveal import HoverRevealTracker
from .model.sync_state import SyncGuard
from .model.window_state import is_window_maximized, is_window_tiled
from .tab_bar import TabBarView
from .utils.logger import get_logger

if TYPE_CHECKING:
    from .core.host import WindowHandle
    from .core.tab_manager import TabManager

logger = get_logger(__name__)


class WindowGroup(QObject):
    """
    An ordered set of windows that share one frame and one tab bar.

    Exactly one member (the active window) is shown at full opacity; the
    others sit underneath at the same geometry, fully transparent. Moving,
    resizing or maximizing the active window drags the rest of the group along.
    """

    def __init__(self, manager: TabManager):
        super().__init__(manager)
        self.id: uuid.UUID = uuid.uuid4()
        self.manager = manager
        self.registry = manager.registry
        self.settings = manager.settings

        self._windows: list[WindowHandle] = []
        self.active_window: Optional[WindowHandle] = None
        self.forced_visible = False
        self._dissolved = False
        self._subscriptions = SubscriptionSet()

        self._position_guard = SyncGuard(POSITION_SYNC_SETTLE_MS, "position", self)
        self._maximize_guard = SyncGuard(MAXIMIZE_SYNC_SETTLE_MS, "maximize", self)
        # A move that lands while the guard is up is picked up once it settles.
        self._position_guard.settled.connect(self._on_position_settled)
        self._maximize_guard.settled.connect(self._on_maximize_settled)

        self.tab_bar = TabBarView(self, manager.display, manager.gesture_tracker)
        self.hover = HoverRevealTracker(self, manager.pointer, manager.tiled_mode)
        self.registry.add_group(self)

    def __repr__(self):
        return f"<WindowGroup {self.short_id} windows={len(self._windows)}>"

    # --- Queries ---

    @property
    def windows(self) -> list[WindowHandle]:
        return list(self._windows)

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, window) -> bool:
        return window in self._windows

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]

    @property
    def is_dissolved(self) -> bool:
        return self._dissolved

    @property
    def tiled_mode_active(self) -> bool:
        """True while this group holds the shared tiled mode with a revealed bar."""
        return self.manager.tiled_mode.is_member(self)

    @property
    def position_sync_in_progress(self) -> bool:
        return self._position_guard.is_syncing()

    @property
    def maximize_sync_in_progress(self) -> bool:
        return self._maximize_guard.is_syncing()

    def index_of(self, window: WindowHandle) -> int:
        try:
            return self._windows.index(window)
        except ValueError:
            return -1

    def reference_window(self) -> Optional[WindowHandle]:
        """
        The member the tab bar is positioned against: the active window when
        it is visible, otherwise the first non-minimized member.
        """
        if self.active_window is not None and not self.active_window.is_minimized():
            return self.active_window
        for window in self._windows:
            if not window.is_minimized():
                return window
        return None

    def has_focus(self) -> bool:
        return any(window.has_focus() for window in self._windows)

    # --- Membership ---

    def add_window(self, window: WindowHandle, index: int | None = None) -> bool:
        """
        Adds a window to the group.

        The first member becomes the active window. Later members take on the
        active window's maximization and frame and are made transparent.

        :param window: The window to add.
        :param index: Tab position; appended when omitted.
        :return: False if the group is dissolved or already contains the window.
        """
        if self._dissolved or window in self._windows:
            return False

        self.registry.attach(window, self, index)
        self._connect_window(window)
        self.tab_bar.add_tab(window)

        active = self.active_window
        if active is not None and active.is_minimized():
            active = self.reference_window()

        if active is None or active is window:
            # 1. First member, or no visible member to follow: it takes over.
            self.active_window = window
            self.update_windows_visibility(window)
        else:
            # 2. Follow the active window and hide underneath it.
            self.active_window = active
            if not window.is_minimized():
                self._match_window_to(window, active)
            self.update_windows_visibility(active)

        self.tab_bar.set_active_window(self.active_window)
        self.update_tab_bar_visibility()
        self.tab_bar.update_position()

        logger.info("Window %r joined group %s (%d members)", window, self.short_id, len(self._windows))
        self.manager.signals.window_grouped.emit(window, self)
        return True

    def remove_window(self, window: WindowHandle) -> bool:
        """
        Removes a window from the group and restores its opacity.

        An emptied group dissolves; so does a group left with one member when
        single-window groups are not allowed.
        """
        if window not in self._windows:
            return False

        was_active = window is self.active_window
        self._restore_window(window)
        self.tab_bar.remove_tab(window)
        self.registry.detach(window, self)
        if was_active:
            self.active_window = None

        logger.info("Window %r left group %s (%d members)", window, self.short_id, len(self._windows))
        self.manager.signals.window_ungrouped.emit(window)

        if not self._windows:
            self.dissolve()
            return True
        if len(self._windows) == 1 and not self.settings.allow_single_window_groups:
            self.dissolve()
            return True

        if was_active:
            replacement = self.reference_window() or self._windows[0]
            self.set_active_window(replacement)
        else:
            self.update_tab_bar_visibility()
            self.tab_bar.update_position()
        return True

    def move_window(self, window: WindowHandle, index: int) -> bool:
        """Moves a member to a new tab position. Membership is unchanged."""
        current = self.index_of(window)
        if current < 0:
            return False
        index = max(0, min(index, len(self._windows) - 1))
        if index == current:
            return False
        self._windows.pop(current)
        self._windows.insert(index, window)
        self.tab_bar.sync_order()
        self.manager.signals.layout_changed.emit()
        return True

    def set_active_window(self, window: WindowHandle, activate: bool = False) -> bool:
        """
        Makes a member the visible window of the group.

        :param activate: Also raise and focus the window in the host.
        """
        if window not in self._windows:
            return False

        self.active_window = window
        self.tab_bar.set_active_window(window)
        if activate:
            window.activate()

        self.sync_window_positions(window)
        self.update_windows_visibility(window)
        self.update_tab_bar_visibility()
        self.tab_bar.update_position()
        return True

    def dissolve(self):
        """
        Releases every member and tears the group down. Safe to call twice.
        """
        if self._dissolved:
            return
        self._dissolved = True

        self.hover.stop()
        self._position_guard.cancel()
        self._maximize_guard.cancel()

        for window in list(self._windows):
            self._restore_window(window)
            self.registry.detach(window, self)
            self.manager.signals.window_ungrouped.emit(window)
        self.active_window = None
        self._subscriptions.release_all()

        self.tab_bar.destroy()
        self.registry.remove_group(self)
        logger.info("Group %s dissolved", self.short_id)
        self.manager.signals.group_dissolved.emit(self)
        # Hand ownership back to Python so a dropped group is collected.
        self.setParent(None)

    # --- Synchronization ---

    def sync_window_positions(self, active: WindowHandle) -> bool:
        """
        Moves every other non-minimized member onto the active window's frame.
        Returns True when at least one window was moved.
        """
        if active not in self._windows or active.is_minimized():
            return False
        if self._position_guard.is_syncing():
            return False

        frame = active.frame_rect()
        targets = [w for w in self._windows
                   if w is not active and not w.is_minimized() and w.frame_rect() != frame]
        if not targets:
            return False

        self._position_guard.enter()
        for window in targets:
            window.move_resize(QRect(frame))
        return True

    def sync_window_maximization(self, changed: WindowHandle) -> bool:
        """Applies one member's maximize flags to every other non-minimized member."""
        if changed not in self._windows or changed.is_minimized():
            return False
        if self._maximize_guard.is_syncing():
            return False

        state = changed.maximize_state()
        targets = [w for w in self._windows
                   if w is not changed and not w.is_minimized() and w.maximize_state() is not state]
        if not targets:
            return False

        self._maximize_guard.enter()
        for window in targets:
            window.set_maximize_state(state)
        return True

    def update_windows_visibility(self, active: WindowHandle | None = None):
        """Shows the active window and makes every other visible member transparent."""
        if active is None:
            active = self.reference_window()
        for window in self._windows:
            if window.is_minimized():
                continue
            window.set_opacity(1.0 if window is active else 0.0)

    def update_tab_bar_visibility(self):
        """
        Applies the tab bar visibility policy:
        - every member minimized: hidden
        - focused, some member maximized or tiled: hidden unless hover-revealed
        - focused otherwise: shown
        - unfocused with a tiled member: hidden unless hover-revealed
        - otherwise hidden
        """
        if self._dissolved:
            return

        visible = [w for w in self._windows if not w.is_minimized()]
        if not visible:
            self.hover.disarm()
            self.tab_bar.set_visible(False)
            return

        any_tiled = any(is_window_tiled(w) for w in visible)
        any_special = any_tiled or any(is_window_maximized(w) for w in visible)

        if self.has_focus():
            if any_special:
                self.hover.arm()
                self.tab_bar.set_visible(self.forced_visible)
            else:
                self.hover.disarm()
                self.tab_bar.set_visible(True)
        elif any_tiled:
            self.hover.arm()
            self.tab_bar.set_visible(self.forced_visible)
        else:
            self.hover.disarm()
            self.tab_bar.set_visible(False)

    def set_forced_visible(self, forced: bool):
        """Called by the hover tracker when the pointer reveals or leaves the bar."""
        if self.forced_visible == forced:
            return
        self.forced_visible = forced
        self.tab_bar.update_position()
        self.update_tab_bar_visibility()

    # --- Window signal handlers ---

    def _connect_window(self, window: WindowHandle):
        connect = self._subscriptions.connect
        connect(window, window.position_changed, lambda: self._on_window_geometry_changed(window))
        connect(window, window.size_changed, lambda: self._on_window_geometry_changed(window))
        connect(window, window.focus_changed, lambda: self._on_window_focus_changed(window))
        connect(window, window.minimized_changed, lambda: self._on_window_minimized_changed(window))
        connect(window, window.maximized_changed, lambda: self._on_window_maximized_changed(window))
        connect(window, window.unmanaging, lambda: self._on_window_unmanaging(window))

    def _restore_window(self, window: WindowHandle):
        self._subscriptions.release(window)
        try:
            window.set_opacity(1.0)
        except RuntimeError as e:
            logger.warning("Could not restore opacity of %r: %s", window, e)

    def _match_window_to(self, window: WindowHandle, reference: WindowHandle):
        """Gives a window the reference window's maximization, then its frame."""
        state = reference.maximize_state()
        if window.maximize_state() is not state:
            window.set_maximize_state(state)
        frame = reference.frame_rect()
        if window.frame_rect() != frame:
            window.move_resize(QRect(frame))

    def _on_window_geometry_changed(self, window: WindowHandle):
        if self._dissolved or window is not self.active_window or window.is_minimized():
            return
        self.sync_window_positions(window)
        self.tab_bar.update_position()
        self.update_tab_bar_visibility()

    def _on_window_focus_changed(self, window: WindowHandle):
        if self._dissolved:
            return
        if window.has_focus() and window is not self.active_window and not window.is_minimized():
            self.set_active_window(window)
            return
        self.update_tab_bar_visibility()

    def _on_window_minimized_changed(self, window: WindowHandle):
        if self._dissolved:
            return
        if window.is_minimized():
            if window is self.active_window:
                replacement = next((w for w in self._windows if not w.is_minimized()), None)
                if replacement is not None:
                    self.set_active_window(replacement)
        else:
            active = self.active_window
            if active is None or active is window or active.is_minimized():
                self.set_active_window(window)
            else:
                self._match_window_to(window, active)
                window.set_opacity(0.0)
        self.tab_bar.update_position()
        self.update_tab_bar_visibility()

    def _on_window_maximized_changed(self, window: WindowHandle):
        if self._dissolved:
            return
        self.sync_window_maximization(window)
        self.tab_bar.update_position()
        self.update_tab_bar_visibility()

    def _on_window_unmanaging(self, window: WindowHandle):
        logger.debug("Window %r is going away, removing it from group %s", window, self.short_id)
        self.remove_window(window)

    def _on_position_settled(self):
        if not self._dissolved and self.active_window is not None:
            self.sync_window_positions(self.active_window)

    def _on_maximize_settled(self):
        if not self._dissolved and self.active_window is not None:
            self.sync_window_maximization(self.active_window)
