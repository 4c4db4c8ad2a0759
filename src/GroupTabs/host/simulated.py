"""
In-memory host for GroupTabs.

Windows live in a stacking list, maximizing fills the work area, activating a
window raises and focuses it, and the renderers record what they were told to
draw. Used by the test suite and the demo script; also a reference for
writing a real host integration.
"""
from __future__ import annotations

import itertools
from typing import Any, Optional

from PySide6.QtCore import QPoint, QRect, Qt

from ..core.host import (DropIndicatorRenderer, HostDisplay, PointerInput,
                         TabBarRenderer, TabSpec, WindowHandle)
from ..model.window_state import MaximizeState
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_WORK_AREA = QRect(0, 0, 1920, 1080)
CONTEXT_MENU_SIZE = (160, 40)

_window_ids = itertools.count(1)


class SimulatedWindow(WindowHandle):

    def __init__(self, display: SimulatedDisplay, title: str = "", rect: QRect | None = None,
                 normal: bool = True):
        super().__init__()
        self.display = display
        self.window_id = next(_window_ids)
        self._title = title
        self._frame = QRect(rect) if rect is not None else QRect(100, 100, 800, 600)
        self._normal = normal
        self._minimized = False
        self._maximize_state = MaximizeState.NONE
        self._restore_frame: Optional[QRect] = None
        self._focus = False
        self._showing = True
        self.opacity = 1.0
        self.move_resize_calls = 0

    def __repr__(self):
        return f"<SimulatedWindow {self.window_id} '{self._title}'>"

    # --- WindowHandle ---

    def title(self) -> str:
        return self._title

    def frame_rect(self) -> QRect:
        return QRect(self._frame)

    def is_minimized(self) -> bool:
        return self._minimized

    def maximize_state(self) -> MaximizeState:
        return self._maximize_state

    def has_focus(self) -> bool:
        return self._focus

    def is_normal(self) -> bool:
        return self._normal

    def is_showing(self) -> bool:
        return self._showing and not self._minimized

    def work_area(self) -> QRect:
        return QRect(self.display.work_area)

    def move_resize(self, rect: QRect):
        self.move_resize_calls += 1
        self._set_frame(rect)

    def set_maximize_state(self, state: MaximizeState):
        if state is self._maximize_state:
            return
        if self._maximize_state is MaximizeState.NONE:
            self._restore_frame = QRect(self._frame)
        self._maximize_state = state
        # State first, geometry second, the way compositors report a maximize.
        self.maximized_changed.emit()

        work_area = self.display.work_area
        restore = self._restore_frame if self._restore_frame is not None else QRect(self._frame)
        if state is MaximizeState.NONE:
            self._restore_frame = None
            self._set_frame(restore)
            return
        frame = QRect(restore)
        if state.horizontal:
            frame.setLeft(work_area.left())
            frame.setWidth(work_area.width())
        if state.vertical:
            frame.setTop(work_area.top())
            frame.setHeight(work_area.height())
        self._set_frame(frame)

    def set_opacity(self, opacity: float):
        self.opacity = opacity

    def activate(self):
        self.display.raise_window(self)
        self.display.focus_window(self)

    # --- Simulation controls ---

    def set_title(self, title: str):
        if title == self._title:
            return
        self._title = title
        self.title_changed.emit()

    def set_minimized(self, minimized: bool):
        if minimized == self._minimized:
            return
        self._minimized = minimized
        if minimized and self._focus:
            self.set_focus(False)
        self.minimized_changed.emit()

    def set_focus(self, focus: bool):
        if focus == self._focus:
            return
        self._focus = focus
        self.focus_changed.emit()

    def set_showing(self, showing: bool):
        self._showing = showing

    def tile(self, side: str = "left"):
        """Snaps the window to the left or right half of the work area."""
        work_area = self.display.work_area
        half = work_area.width() // 2
        x = work_area.x() if side == "left" else work_area.x() + half
        self._set_frame(QRect(x, work_area.y(), half, work_area.height()))

    def _set_frame(self, rect: QRect):
        old = self._frame
        self._frame = QRect(rect)
        if old.topLeft() != self._frame.topLeft():
            self.position_changed.emit()
        if old.size() != self._frame.size():
            self.size_changed.emit()


class SimulatedPointer(PointerInput):

    def __init__(self):
        super().__init__()
        self._position = QPoint(0, 0)
        self._modifiers = Qt.KeyboardModifier.NoModifier
        self._buttons = Qt.MouseButton.NoButton

    def pointer_position(self) -> QPoint:
        return QPoint(self._position)

    def modifier_mask(self) -> Qt.KeyboardModifier:
        return self._modifiers

    def button_mask(self) -> Qt.MouseButton:
        return self._buttons

    def move_to(self, point: QPoint):
        self._position = QPoint(point)

    def press(self, button=Qt.MouseButton.LeftButton):
        self._buttons = self._buttons | button

    def release(self, button=Qt.MouseButton.LeftButton):
        self._buttons = self._buttons & ~button

    def set_modifiers(self, modifiers):
        self._modifiers = modifiers

    def press_key(self, key: Qt.Key):
        self.key_pressed.emit(int(key))

    def release_key(self, key: Qt.Key):
        self.key_released.emit(int(key))

    def begin_drag(self, window: SimulatedWindow):
        self.drag_began.emit(window)

    def drag_to(self, window: SimulatedWindow, point: QPoint):
        """Moves the pointer and carries the window along by the same offset."""
        delta = point - self._position
        self._position = QPoint(point)
        window.move_resize(window.frame_rect().translated(delta))

    def end_drag(self, window: SimulatedWindow):
        self.drag_ended.emit(window)


class RecordingTabBarRenderer(TabBarRenderer):
    """Keeps the last state it was given so tests can inspect it."""

    def __init__(self, view):
        self.view = view
        self.visible = False
        self.geometry = QRect()
        self.tabs: list[TabSpec] = []
        self.menu: Optional[tuple[Any, list[str], QPoint]] = None
        self.clones: list[int] = []
        self.destroyed = False
        self._clone_ids = itertools.count(1)

    @property
    def labels(self) -> list[str]:
        return [tab.label for tab in self.tabs]

    @property
    def active_labels(self) -> list[str]:
        return [tab.label for tab in self.tabs if tab.active]

    def set_visible(self, visible: bool):
        self.visible = visible

    def set_geometry(self, rect: QRect):
        self.geometry = QRect(rect)

    def set_tabs(self, tabs: list[TabSpec]):
        self.tabs = list(tabs)

    def show_context_menu(self, window, actions: list[str], pos: QPoint) -> QRect:
        self.menu = (window, list(actions), QPoint(pos))
        return QRect(pos.x(), pos.y(), *CONTEXT_MENU_SIZE)

    def hide_context_menu(self):
        self.menu = None

    def create_drag_clone(self, window, pos: QPoint) -> int:
        clone = next(self._clone_ids)
        self.clones.append(clone)
        return clone

    def move_drag_clone(self, clone, pos: QPoint):
        pass

    def destroy_drag_clone(self, clone):
        self.clones.remove(clone)

    def destroy(self):
        self.destroyed = True
        self.visible = False

    # --- Input helpers ---

    def click_tab(self, index: int, button=Qt.MouseButton.LeftButton):
        point = self.view.tab_rect(index).center()
        self.view.handle_press(point, button)
        self.view.handle_release(point, button)


class RecordingDropIndicatorRenderer(DropIndicatorRenderer):

    def __init__(self):
        self.visible = False
        self.geometry = QRect()
        self.destroyed = False

    def set_visible(self, visible: bool):
        self.visible = visible

    def set_geometry(self, rect: QRect):
        self.geometry = QRect(rect)

    def destroy(self):
        self.destroyed = True
        self.visible = False


class SimulatedDisplay(HostDisplay):

    def __init__(self, work_area: QRect | None = None):
        super().__init__()
        self.work_area = QRect(work_area) if work_area is not None else QRect(DEFAULT_WORK_AREA)
        self._stack: list[SimulatedWindow] = []
        self.notices: list[str] = []
        self.tab_bar_renderers: list[RecordingTabBarRenderer] = []
        self.drop_indicator_renderers: list[RecordingDropIndicatorRenderer] = []

    # --- HostDisplay ---

    def windows_in_stacking_order(self) -> list[SimulatedWindow]:
        return list(self._stack)

    def notify(self, message: str):
        logger.info("Notice: %s", message)
        self.notices.append(message)

    def create_tab_bar_renderer(self, view) -> RecordingTabBarRenderer:
        renderer = RecordingTabBarRenderer(view)
        self.tab_bar_renderers.append(renderer)
        return renderer

    def create_drop_indicator_renderer(self) -> RecordingDropIndicatorRenderer:
        renderer = RecordingDropIndicatorRenderer()
        self.drop_indicator_renderers.append(renderer)
        return renderer

    # --- Simulation controls ---

    def add_window(self, title: str = "", rect: QRect | None = None, normal: bool = True,
                   announce: bool = True) -> SimulatedWindow:
        """Creates a window on top of the stack and, by default, reports it."""
        window = SimulatedWindow(self, title, rect, normal)
        self._stack.insert(0, window)
        if announce:
            self.window_created.emit(window)
        return window

    def close_window(self, window: SimulatedWindow):
        if window not in self._stack:
            return
        window.unmanaging.emit()
        self._stack.remove(window)

    def raise_window(self, window: SimulatedWindow):
        if window in self._stack:
            self._stack.remove(window)
            self._stack.insert(0, window)

    def focus_window(self, window: Optional[SimulatedWindow]):
        for other in self._stack:
            if other is not window:
                other.set_focus(False)
        if window is not None:
            window.set_focus(True)

    @property
    def drop_indicator_renderer(self) -> Optional[RecordingDropIndicatorRenderer]:
        if not self.drop_indicator_renderers:
            return None
        return self.drop_indicator_renderers[-1]
