"""
GroupTabs: groups desktop windows under a shared tab bar.

Dragging one window onto another merges them into a group that moves,
resizes, maximizes and raises together, with one window visible at a time.
"""
from .core.host import (DropIndicatorRenderer, HostDisplay, PointerInput,
                        TabBarRenderer, TabSpec, WindowHandle)
from .core.settings import GroupSettings
from .core.tab_manager import TabManager, TabManagerSignals
from .model.window_state import MaximizeState, WindowState
from .tab_bar import TabBarView
from .window_group import WindowGroup

__version__ = "0.1.0"

__all__ = [
    "DropIndicatorRenderer",
    "GroupSettings",
    "HostDisplay",
    "MaximizeState",
    "PointerInput",
    "TabBarRenderer",
    "TabBarView",
    "TabManager",
    "TabManagerSignals",
    "TabSpec",
    "WindowGroup",
    "WindowHandle",
    "WindowState",
]
