# tab_bar.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from PySide6.QtCore import QObject, QPoint, QRect, Qt, QTimer, Signal

from .constants import (CLOSE_GROUP_BUTTON_WIDTH, DEFAULT_TAB_LABEL, DRAG_THRESHOLD,
                        GESTURE_RESET_DELAY_MS, REORDER_COOLDOWN_MS, TAB_BAR_HEIGHT)
from .core.host import TabSpec
from .core.subscriptions import SubscriptionSet
from .model.sync_state import GestureState
from .model.window_state import is_window_maximized, is_window_tiled
from .utils.logger import get_logger

if TYPE_CHECKING:
    from .core.host import HostDisplay, WindowHandle
    from .gesture_tracker import GlobalGestureTracker
    from .window_group import WindowGroup

logger = get_logger(__name__)

LEAVE_GROUP_ACTION = "leave_group"

_TRACKING_KEY = "tracking"
_MENU_KEY = "menu"


@dataclass
class TabEntry:
    window: Any
    label: str
    active: bool = False


class TabGesture(QObject):
    """
    Press/drag/release state machine for one tab bar.

    NONE -> DOWN on press; DOWN -> DRAG once the pointer travels past the
    threshold; DOWN -> CLICK or DRAG -> UP on release. Terminal states fall
    back to NONE after a short delay.
    """

    def __init__(self, view: TabBarView, threshold: int = DRAG_THRESHOLD):
        super().__init__(view)
        self.view = view
        self.threshold = threshold
        self.state = GestureState.NONE
        self.window = None
        self.origin = QPoint()
        self.clone = None

        self._last_reorder_target = None
        self._last_reorder_time = 0.0

        self._reset_timer = QTimer(self)
        self._reset_timer.setSingleShot(True)
        self._reset_timer.setInterval(GESTURE_RESET_DELAY_MS)
        self._reset_timer.timeout.connect(self._reset)

    @property
    def is_active(self) -> bool:
        return self.state in (GestureState.DOWN, GestureState.DRAG)

    def press(self, window: WindowHandle, point: QPoint):
        if self.is_active:
            return
        self._reset_timer.stop()
        self.state = GestureState.DOWN
        self.window = window
        self.origin = QPoint(point)
        logger.debug("Tab press on %r at (%d, %d)", window, point.x(), point.y())

    def motion(self, point: QPoint):
        if self.state is GestureState.DOWN:
            if (point - self.origin).manhattanLength() <= self.threshold:
                return
            self._enter_drag(point)
        if self.state is GestureState.DRAG:
            self.view._drag_to(self.window, point)

    def release(self, point: QPoint):
        window = self.window
        if self.state is GestureState.DOWN:
            self.state = GestureState.CLICK
            self._reset_timer.start()
            self.view._on_tab_clicked(window)
        elif self.state is GestureState.DRAG:
            self._leave_drag()
            self.state = GestureState.UP
            self._reset_timer.start()
            self.view._on_tab_dropped(window, point)

    def cancel(self):
        if self.state is GestureState.DRAG:
            self._leave_drag()
        self._reset_timer.stop()
        self._reset()

    def accept_reorder(self, target: WindowHandle) -> bool:
        """
        Cooldown check for reordering onto a target tab. The same target is
        refused within the cooldown window; a different target always passes.
        """
        now = time.monotonic()
        if target is self._last_reorder_target and (now - self._last_reorder_time) * 1000 < REORDER_COOLDOWN_MS:
            return False
        self._last_reorder_target = target
        self._last_reorder_time = now
        return True

    def _enter_drag(self, point: QPoint):
        self.state = GestureState.DRAG
        logger.debug("Tab drag started for %r", self.window)
        try:
            self.clone = self.view.renderer.create_drag_clone(self.window, point)
        except RuntimeError as e:
            logger.warning("Could not create drag clone: %s", e)
            self.clone = None

    def _leave_drag(self):
        clone, self.clone = self.clone, None
        if clone is None:
            return
        try:
            self.view.renderer.destroy_drag_clone(clone)
        except (RuntimeError, TypeError) as e:
            logger.warning("Could not destroy drag clone: %s", e)

    def _reset(self):
        self.state = GestureState.NONE
        self.window = None
        self._last_reorder_target = None


class TabBarView(QObject):
    """
    Per-group model of the tab strip.

    Keeps one TabEntry per member in group order, tracks which tab is active,
    computes its own placement from the group's reference window and turns
    renderer input into group and manager operations.
    """
    tab_activated = Signal(object)
    tabs_changed = Signal()

    def __init__(self, group: WindowGroup, display: HostDisplay, gesture_tracker: GlobalGestureTracker):
        super().__init__(group)
        self.group = group
        self.tracker = gesture_tracker
        self._tabs: list[TabEntry] = []
        self._active_window = None
        self._subscriptions = SubscriptionSet()
        self._menu_window = None
        self._menu_rect = QRect()
        self._destroyed = False

        self.visible = False
        self.geometry = QRect()
        self.gesture = TabGesture(self)
        self.renderer = display.create_tab_bar_renderer(self)

    # --- Tab set ---

    @property
    def windows(self) -> list[WindowHandle]:
        return [entry.window for entry in self._tabs]

    @property
    def tabs(self) -> list[TabEntry]:
        return list(self._tabs)

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self._tabs]

    @property
    def active_window(self) -> Optional[WindowHandle]:
        return self._active_window

    @property
    def forced_visible(self) -> bool:
        return self.group.forced_visible

    def index_of(self, window: WindowHandle) -> int:
        for i, entry in enumerate(self._tabs):
            if entry.window is window:
                return i
        return -1

    def add_tab(self, window: WindowHandle):
        if self.index_of(window) >= 0:
            return
        self._tabs.append(TabEntry(window, self._label_for(window)))
        self._subscriptions.connect(window, window.title_changed, lambda: self._on_title_changed(window))
        self.sync_order()

    def remove_tab(self, window: WindowHandle):
        index = self.index_of(window)
        if index < 0:
            return
        self._tabs.pop(index)
        self._subscriptions.release(window)
        if self._active_window is window:
            self._active_window = None
        if self.gesture.window is window and self.gesture.is_active:
            self.gesture.cancel()
            self._stop_tracking()
        if self._menu_window is window:
            self.hide_context_menu()
        self._publish_tabs()

    def move_tab(self, window: WindowHandle, index: int) -> bool:
        return self.group.move_window(window, index)

    def sync_order(self):
        """Re-sorts the tabs into the group's member order."""
        order = {id(w): i for i, w in enumerate(self.group.windows)}
        self._tabs.sort(key=lambda entry: order.get(id(entry.window), len(order)))
        self._publish_tabs()

    def set_active_window(self, window: Optional[WindowHandle]):
        self._active_window = window
        for entry in self._tabs:
            entry.active = entry.window is window
        self._publish_tabs()

    def activate_tab(self, window: WindowHandle):
        """Makes the window the group's visible member and raises it."""
        if self.index_of(window) < 0:
            return
        self.group.set_active_window(window, activate=True)
        self.tab_activated.emit(window)

    # --- Placement ---

    def compute_geometry(self) -> QRect:
        """
        Bar rectangle for the group's reference window:
        maximized -> full work-area width at the work-area top,
        tiled -> the window's width at the work-area top,
        otherwise directly above the window's frame.
        """
        window = self.group.reference_window()
        if window is None:
            return QRect()
        frame = window.frame_rect()
        if is_window_maximized(window):
            work_area = window.work_area()
            return QRect(work_area.x(), work_area.y(), work_area.width(), TAB_BAR_HEIGHT)
        if is_window_tiled(window):
            work_area = window.work_area()
            return QRect(frame.x(), work_area.y(), frame.width(), TAB_BAR_HEIGHT)
        return QRect(frame.x(), frame.y() - TAB_BAR_HEIGHT, frame.width(), TAB_BAR_HEIGHT)

    def update_position(self):
        if self._destroyed:
            return
        rect = self.compute_geometry()
        if rect.isNull() or rect == self.geometry:
            return
        self.geometry = rect
        self.renderer.set_geometry(QRect(rect))

    def set_visible(self, visible: bool):
        if self._destroyed or visible == self.visible:
            return
        self.visible = visible
        self.renderer.set_visible(visible)
        if not visible:
            self.hide_context_menu()

    def close_button_rect(self) -> QRect:
        width = min(CLOSE_GROUP_BUTTON_WIDTH, self.geometry.width())
        return QRect(self.geometry.x() + self.geometry.width() - width, self.geometry.y(),
                     width, self.geometry.height())

    def tab_rect(self, index: int) -> QRect:
        """Screen rectangle of a tab. Tabs share the bar width left of the close button."""
        count = len(self._tabs)
        if index < 0 or index >= count:
            return QRect()
        available = max(0, self.geometry.width() - CLOSE_GROUP_BUTTON_WIDTH)
        tab_width = available // count
        x = self.geometry.x() + index * tab_width
        if index == count - 1:
            # Last tab takes the rounding remainder.
            tab_width = available - index * tab_width
        return QRect(x, self.geometry.y(), tab_width, self.geometry.height())

    def tab_at(self, point: QPoint) -> int:
        for i in range(len(self._tabs)):
            if self.tab_rect(i).contains(point):
                return i
        return -1

    # --- Renderer input ---

    def handle_press(self, point: QPoint, button=Qt.MouseButton.LeftButton):
        if self._destroyed:
            return
        if self._menu_window is not None and not self._menu_rect.contains(point):
            self.hide_context_menu()

        index = self.tab_at(point)
        if index < 0:
            return
        window = self._tabs[index].window

        if button == Qt.MouseButton.RightButton:
            self.show_context_menu(window, point)
            return
        if button != Qt.MouseButton.LeftButton:
            return

        self.gesture.press(window, point)
        self._start_tracking(point)

    def handle_motion(self, point: QPoint):
        if self._destroyed:
            return
        self.gesture.motion(point)

    def handle_release(self, point: QPoint, button=Qt.MouseButton.LeftButton):
        if self._destroyed or button != Qt.MouseButton.LeftButton:
            return
        self._stop_tracking()
        self.gesture.release(point)

    def handle_close_clicked(self, window: WindowHandle):
        """Close button of one tab."""
        self.group.manager.close_tab(window)

    def handle_close_group_clicked(self):
        self.group.manager.dissolve_group(self.group)

    def handle_context_action(self, window: WindowHandle, action: str):
        self.hide_context_menu()
        if action == LEAVE_GROUP_ACTION:
            self.group.manager.separate_window(window)
        else:
            logger.debug("Ignoring unknown tab action '%s'", action)

    # --- Context menu ---

    def context_actions(self, window: WindowHandle) -> list[str]:
        if len(self.group) > 1:
            return [LEAVE_GROUP_ACTION]
        return []

    def show_context_menu(self, window: WindowHandle, point: QPoint) -> bool:
        actions = self.context_actions(window)
        if not actions:
            return False
        self.hide_context_menu()
        rect = self.renderer.show_context_menu(window, actions, QPoint(point))
        self._menu_window = window
        self._menu_rect = QRect(rect) if rect is not None else QRect()
        # A press anywhere outside the menu dismisses it.
        self.tracker.acquire()
        self._subscriptions.connect(_MENU_KEY, self.tracker.pressed, self._on_global_press)
        return True

    def hide_context_menu(self):
        if self._menu_window is None:
            return
        self._menu_window = None
        self._menu_rect = QRect()
        self._subscriptions.release(_MENU_KEY)
        self.tracker.release()
        try:
            self.renderer.hide_context_menu()
        except RuntimeError as e:
            logger.warning("Could not hide tab context menu: %s", e)

    @property
    def context_menu_window(self) -> Optional[WindowHandle]:
        return self._menu_window

    # --- Teardown ---

    def destroy(self):
        if self._destroyed:
            return
        self.gesture.cancel()
        self._stop_tracking()
        self.hide_context_menu()
        self._subscriptions.release_all()
        self._tabs.clear()
        self._active_window = None
        self._destroyed = True
        try:
            self.renderer.destroy()
        except RuntimeError as e:
            logger.warning("Could not destroy tab bar renderer: %s", e)

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    # --- Internals ---

    def _label_for(self, window: WindowHandle) -> str:
        return window.title() or DEFAULT_TAB_LABEL

    def _publish_tabs(self):
        if self._destroyed:
            return
        self.renderer.set_tabs([TabSpec(entry.label, entry.active) for entry in self._tabs])
        self.tabs_changed.emit()

    def _on_title_changed(self, window: WindowHandle):
        index = self.index_of(window)
        if index < 0:
            return
        self._tabs[index].label = self._label_for(window)
        self._publish_tabs()

    def _start_tracking(self, point: QPoint):
        """Follows the pointer outside the bar for the duration of one press."""
        if self._subscriptions.has(_TRACKING_KEY):
            return
        self.tracker.acquire()
        self.tracker.begin(point)
        self._subscriptions.connect(_TRACKING_KEY, self.tracker.moved, self.handle_motion)
        self._subscriptions.connect(_TRACKING_KEY, self.tracker.released, self._on_global_release)

    def _stop_tracking(self):
        if self._subscriptions.release(_TRACKING_KEY):
            self.tracker.release()

    def _on_global_release(self, point: QPoint):
        self._stop_tracking()
        self.gesture.release(point)

    def _on_global_press(self, point: QPoint):
        if not self._menu_rect.contains(point):
            self.hide_context_menu()

    def _on_tab_clicked(self, window: WindowHandle):
        self.activate_tab(window)

    def _drag_to(self, window: WindowHandle, point: QPoint):
        """Moves the drag clone and reorders or previews a drag-out."""
        if self.gesture.clone is not None:
            try:
                self.renderer.move_drag_clone(self.gesture.clone, QPoint(point))
            except RuntimeError as e:
                logger.warning("Could not move drag clone: %s", e)

        manager = self.group.manager
        if not self.geometry.contains(point):
            manager.preview_tab_drag_out(window, point)
            return
        manager.clear_drag_preview()

        dragged_index = self.index_of(window)
        target_index = self.tab_at(point)
        if target_index < 0 or dragged_index < 0 or target_index == dragged_index:
            return

        # Only reorder once the pointer crosses the target tab's midpoint.
        midpoint = self.tab_rect(target_index).center().x()
        if target_index > dragged_index and point.x() < midpoint:
            return
        if target_index < dragged_index and point.x() > midpoint:
            return

        target = self._tabs[target_index].window
        if not self.gesture.accept_reorder(target):
            return
        logger.debug("Reordering tab %r to index %d", window, target_index)
        self.group.move_window(window, target_index)

    def _on_tab_dropped(self, window: WindowHandle, point: QPoint):
        manager = self.group.manager
        manager.clear_drag_preview()
        if not self.geometry.contains(point):
            manager.handle_tab_drag_out(window, point)
