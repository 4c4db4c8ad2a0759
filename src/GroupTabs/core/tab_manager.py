from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import QObject, QPoint, Signal

from ..drag_drop_controller import DragDropController
from ..drop_indicator import DropIndicator
from ..gesture_tracker import GlobalGestureTracker
from ..hover_reveal import TiledModeCoordinator
from ..modifier_tracker import ModifierKeyTracker
from ..utils.logger import get_logger
from ..window_group import WindowGroup
from .group_registry import GroupRegistry
from .settings import REQUIRE_MODIFIER_KEY, GroupSettings
from .subscriptions import SubscriptionSet

if TYPE_CHECKING:
    from .host import HostDisplay, PointerInput, WindowHandle

logger = get_logger(__name__)

SOLE_TAB_NOTICE = "This is the only tab in its group"
_MANAGER_KEY = "manager"


class TabManagerSignals(QObject):
    """
    A collection of signals to allow applications to react to grouping changes.
    """
    # Emitted after a new group is registered.
    # Args: group (WindowGroup)
    group_created = Signal(object)

    # Emitted once a group has been torn down.
    # Args: group (WindowGroup)
    group_dissolved = Signal(object)

    # Emitted whenever a window joins a group.
    # Args: window (WindowHandle), group (WindowGroup)
    window_grouped = Signal(object, object)

    # Emitted whenever a window leaves a group, including when the group dissolves.
    # Args: window (WindowHandle)
    window_ungrouped = Signal(object)

    # A general signal emitted after membership or tab order changed.
    layout_changed = Signal()


class TabManager(QObject):
    """
    Entry point of the grouping engine.

    Listens to the host for new windows and compositor drags, owns the group
    registry and creates, merges, splits and dissolves groups.
    """

    def __init__(self, display: HostDisplay, pointer: PointerInput,
                 settings: GroupSettings | None = None, parent=None):
        super().__init__(parent)
        self.display = display
        self.pointer = pointer
        self.settings = settings if settings is not None else GroupSettings(parent=self)
        self.signals = TabManagerSignals()
        self.registry = GroupRegistry()

        self.gesture_tracker = GlobalGestureTracker(pointer, self)
        self.modifier_tracker = ModifierKeyTracker(pointer, self)
        self.tiled_mode = TiledModeCoordinator(self)
        self.drag_drop = DragDropController(self)
        self.drop_indicator: Optional[DropIndicator] = None

        self._subscriptions = SubscriptionSet()
        self._enabled = False

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    # --- Lifecycle ---

    def enable(self):
        """
        Starts listening to the host and processes the windows that already exist.
        """
        if self._enabled:
            return
        self._enabled = True

        connect = self._subscriptions.connect
        connect(_MANAGER_KEY, self.display.window_created, self.on_window_created)
        connect(_MANAGER_KEY, self.pointer.drag_began, self.on_drag_begin)
        connect(_MANAGER_KEY, self.pointer.drag_ended, self.on_drag_end)
        connect(_MANAGER_KEY, self.settings.settings_changed, self._on_settings_changed)
        connect(_MANAGER_KEY, self.modifier_tracker.modifier_changed, self.drag_drop.update_drop_indicator)

        self.drop_indicator = DropIndicator(self.display.create_drop_indicator_renderer())
        if self.settings.require_modifier_key:
            self.modifier_tracker.start()

        existing = self.display.windows_in_stacking_order()
        logger.info("Grouping enabled, %d existing windows", len(existing))
        for window in reversed(existing):
            self.on_window_created(window)

    def disable(self):
        """Dissolves every group and releases every host connection."""
        if not self._enabled:
            return
        self._enabled = False

        self.dissolve_all_groups()
        self._subscriptions.release_all()
        self.drag_drop.reset()
        self.modifier_tracker.stop()
        self.gesture_tracker.stop()
        self.tiled_mode.stop()
        if self.drop_indicator is not None:
            self.drop_indicator.destroy_indicator()
            self.drop_indicator = None
        self.registry.clear()
        logger.info("Grouping disabled")

    # --- Host events ---

    def on_window_created(self, window: WindowHandle):
        if not window.is_normal():
            return
        if not self._subscriptions.has(window):
            self._subscriptions.connect(window, window.position_changed,
                                        lambda: self.drag_drop.handle_window_moved(window))
            self._subscriptions.connect(window, window.unmanaging,
                                        lambda: self._on_window_unmanaging(window))
        if self.settings.start_with_groups:
            self.create_individual_group(window)

    def on_drag_begin(self, window: WindowHandle):
        self.drag_drop.begin(window)

    def on_drag_end(self, window: WindowHandle):
        self.drag_drop.end(window)

    def _on_window_unmanaging(self, window: WindowHandle):
        # The window's group removes it through its own subscription.
        self._subscriptions.release(window)
        self.drag_drop.forget(window)

    def _on_settings_changed(self, key: str, value):
        if key == REQUIRE_MODIFIER_KEY:
            if value:
                self.modifier_tracker.start()
            else:
                self.modifier_tracker.stop()
            self.drag_drop.update_drop_indicator()

    # --- Queries ---

    def groups(self) -> list[WindowGroup]:
        return self.registry.groups()

    def group_for(self, window: WindowHandle) -> Optional[WindowGroup]:
        return self.registry.group_for(window)

    def are_in_same_group(self, window1: WindowHandle, window2: WindowHandle) -> bool:
        group = self.registry.group_for(window1)
        return group is not None and group is self.registry.group_for(window2)

    def get_window_under(self, dragged: WindowHandle) -> Optional[WindowHandle]:
        return self.drag_drop.get_window_under(dragged)

    # --- Grouping ---

    def create_group(self) -> WindowGroup:
        group = WindowGroup(self)
        logger.info("Created group %s", group.short_id)
        self.signals.group_created.emit(group)
        return group

    def create_individual_group(self, window: WindowHandle) -> WindowGroup:
        """Puts an ungrouped window into a group of its own."""
        group = self.registry.group_for(window)
        if group is not None:
            return group
        group = self.create_group()
        group.add_window(window)
        return group

    def group_windows(self, window1: WindowHandle, window2: WindowHandle) -> bool:
        """
        Groups window1 (the dropped window) with window2 (the drop target).

        - both grouped: window2's group is merged into window1's, keeping
          window1's tab order and appending window2's group in its order
        - only one grouped: the other window joins that group
        - neither grouped: a new group [window2, window1] is created

        Returns False for a window and itself or two windows already together.
        """
        if window1 is window2 or self.are_in_same_group(window1, window2):
            return False

        group1 = self.registry.group_for(window1)
        group2 = self.registry.group_for(window2)
        if group1 is not None and group2 is not None:
            self.merge_groups(group1, group2)
        elif group1 is not None:
            group1.add_window(window2)
        elif group2 is not None:
            group2.add_window(window1)
        else:
            group = self.create_group()
            group.add_window(window2)
            group.add_window(window1)

        self.registry.assert_consistent()
        self.signals.layout_changed.emit()
        return True

    def merge_groups(self, group1: WindowGroup, group2: WindowGroup):
        """Moves every member of group2 into group1, in order, then drops group2."""
        if group1 is group2:
            return
        windows = group2.windows
        group2.dissolve()
        for window in windows:
            group1.add_window(window)
        logger.info("Merged %d windows into group %s", len(windows), group1.short_id)

    def separate_window(self, window: WindowHandle) -> bool:
        """
        Takes a window out of its group ("leave group"). The sole member of a
        group cannot leave it.
        """
        group = self.registry.group_for(window)
        if group is None:
            return False
        if len(group) <= 1:
            self.display.notify(SOLE_TAB_NOTICE)
            return False

        group.remove_window(window)
        if self.settings.start_with_groups and self.settings.allow_single_window_groups:
            self.create_individual_group(window)
        self.signals.layout_changed.emit()
        return True

    def close_tab(self, window: WindowHandle) -> bool:
        """Close button of a tab: the window leaves its group."""
        return self.separate_window(window)

    def dissolve_group(self, group: WindowGroup):
        if group.is_dissolved:
            return
        group.dissolve()
        self.signals.layout_changed.emit()

    def dissolve_all_groups(self):
        for group in self.registry.groups():
            group.dissolve()
        self.signals.layout_changed.emit()

    # --- Tab drags ---

    def handle_tab_drag_out(self, window: WindowHandle, point: QPoint) -> bool:
        """
        A tab was dropped outside its bar: regroup the window with the window
        under the pointer, or pull it out of its group when there is none.
        """
        self.drag_drop.clear_preview()
        target = self.drag_drop.tab_drag_target(window, point)
        group = self.registry.group_for(window)

        if target is not None:
            if group is not None:
                group.remove_window(window)
            return self.group_windows(window, target)

        if group is not None and len(group) > 1:
            return self.separate_window(window)
        return False

    def preview_tab_drag_out(self, window: WindowHandle, point: QPoint):
        self.drag_drop.preview_tab_drag_out(window, point)

    def clear_drag_preview(self):
        self.drag_drop.clear_preview()
