"""
Capabilities the grouping engine consumes from its host.

The engine never talks to a compositor or a toolkit directly. A host
integration subclasses WindowHandle, PointerInput and HostDisplay, and supplies
renderers for tab bars and the drop indicator. Methods a host does not provide
raise NotImplementedError.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from PySide6.QtCore import QObject, QPoint, QRect, Qt, Signal

from ..model.window_state import MaximizeState

if TYPE_CHECKING:
    from ..tab_bar import TabBarView


class WindowHandle(QObject):
    """
    A top-level window managed by the host compositor.

    Identity is object identity: the engine keys its registry by the handle
    itself, so a host must hand out the same handle for the same window.
    """

    # Geometry notifications
    position_changed = Signal()
    size_changed = Signal()

    # State notifications
    focus_changed = Signal()
    minimized_changed = Signal()
    maximized_changed = Signal()
    title_changed = Signal()

    # Emitted once when the window is destroyed or stops being managed.
    unmanaging = Signal()

    # --- Reading state ---

    def title(self) -> str:
        raise NotImplementedError

    def frame_rect(self) -> QRect:
        raise NotImplementedError

    def is_minimized(self) -> bool:
        raise NotImplementedError

    def maximize_state(self) -> MaximizeState:
        raise NotImplementedError

    def has_focus(self) -> bool:
        raise NotImplementedError

    def is_normal(self) -> bool:
        """True for regular top-level application windows (no dialogs, docks, menus)."""
        raise NotImplementedError

    def is_showing(self) -> bool:
        """True when the window is visible on the current workspace."""
        raise NotImplementedError

    def work_area(self) -> QRect:
        """The usable area of the monitor the window is on."""
        raise NotImplementedError

    # --- Changing state ---

    def move_resize(self, rect: QRect):
        """Moves and resizes the frame, allowing placement outside the screen."""
        raise NotImplementedError

    def set_maximize_state(self, state: MaximizeState):
        raise NotImplementedError

    def set_opacity(self, opacity: float):
        raise NotImplementedError

    def activate(self):
        """Raises the window and gives it focus."""
        raise NotImplementedError


class PointerInput(QObject):
    """
    Pointer and keyboard state as seen by the compositor.
    drag_began/drag_ended carry the window of a compositor grab-move.
    """
    drag_began = Signal(object)
    drag_ended = Signal(object)
    key_pressed = Signal(int)
    key_released = Signal(int)

    def pointer_position(self) -> QPoint:
        raise NotImplementedError

    def modifier_mask(self) -> Qt.KeyboardModifier:
        raise NotImplementedError

    def button_mask(self) -> Qt.MouseButton:
        raise NotImplementedError


@dataclass
class TabSpec:
    """What a renderer needs to draw one tab."""
    label: str
    active: bool


class TabBarRenderer:
    """
    Draws one tab bar. The renderer reports user input back to the TabBarView
    it was created for through the view's handle_* methods.
    """

    def set_visible(self, visible: bool):
        raise NotImplementedError

    def set_geometry(self, rect: QRect):
        raise NotImplementedError

    def set_tabs(self, tabs: list[TabSpec]):
        raise NotImplementedError

    def show_context_menu(self, window: WindowHandle, actions: list[str], pos: QPoint) -> QRect:
        """Shows the tab context menu and returns its screen rectangle."""
        raise NotImplementedError

    def hide_context_menu(self):
        raise NotImplementedError

    def create_drag_clone(self, window: WindowHandle, pos: QPoint) -> Any:
        raise NotImplementedError

    def move_drag_clone(self, clone: Any, pos: QPoint):
        raise NotImplementedError

    def destroy_drag_clone(self, clone: Any):
        raise NotImplementedError

    def destroy(self):
        raise NotImplementedError


class DropIndicatorRenderer:
    """Draws the highlight over a window that would receive a drop."""

    def set_visible(self, visible: bool):
        raise NotImplementedError

    def set_geometry(self, rect: QRect):
        raise NotImplementedError

    def destroy(self):
        raise NotImplementedError


class NullTabBarRenderer(TabBarRenderer):
    """Renderer used when the host draws nothing (headless hosts, scripting)."""

    def set_visible(self, visible: bool):
        pass

    def set_geometry(self, rect: QRect):
        pass

    def set_tabs(self, tabs: list[TabSpec]):
        pass

    def show_context_menu(self, window: WindowHandle, actions: list[str], pos: QPoint) -> QRect:
        return QRect()

    def hide_context_menu(self):
        pass

    def create_drag_clone(self, window: WindowHandle, pos: QPoint) -> Any:
        return None

    def move_drag_clone(self, clone: Any, pos: QPoint):
        pass

    def destroy_drag_clone(self, clone: Any):
        pass

    def destroy(self):
        pass


class NullDropIndicatorRenderer(DropIndicatorRenderer):

    def set_visible(self, visible: bool):
        pass

    def set_geometry(self, rect: QRect):
        pass

    def destroy(self):
        pass


class HostDisplay(QObject):
    """
    The compositor's view of all windows plus the factories for the
    engine's visual proxies.
    """
    window_created = Signal(object)

    def windows_in_stacking_order(self) -> list[WindowHandle]:
        """All managed windows, topmost first."""
        raise NotImplementedError

    def notify(self, message: str):
        """Shows a transient notification to the user."""
        raise NotImplementedError

    def create_tab_bar_renderer(self, view: TabBarView) -> TabBarRenderer:
        return NullTabBarRenderer()

    def create_drop_indicator_renderer(self) -> DropIndicatorRenderer:
        return NullDropIndicatorRenderer()
