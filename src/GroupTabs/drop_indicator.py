from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import QRect

from .constants import DROP_INDICATOR_MARGIN
from .utils.logger import get_logger

if TYPE_CHECKING:
    from .core.host import DropIndicatorRenderer, WindowHandle

logger = get_logger(__name__)


class DropIndicator:
    """
    Highlight drawn over the window that would receive the current drop.
    The highlight covers the target's frame grown by a small margin on every side.
    """

    def __init__(self, renderer: DropIndicatorRenderer, margin: int = DROP_INDICATOR_MARGIN):
        self.renderer = renderer
        self.margin = margin
        self.visible = False
        self.geometry = QRect()
        self.target: Optional[WindowHandle] = None
        self._destroyed = False

    def geometry_for(self, window: WindowHandle) -> QRect:
        m = self.margin
        return window.frame_rect().adjusted(-m, -m, m, m)

    def show_for(self, window: WindowHandle):
        if self._destroyed:
            return
        rect = self.geometry_for(window)
        self.target = window
        if rect != self.geometry:
            self.geometry = rect
            self.renderer.set_geometry(QRect(rect))
        if not self.visible:
            self.visible = True
            self.renderer.set_visible(True)

    def hide(self):
        self.target = None
        if self._destroyed or not self.visible:
            return
        self.visible = False
        self.renderer.set_visible(False)

    def destroy_indicator(self):
        """Hides and releases the renderer. Safe to call more than once."""
        if self._destroyed:
            return
        self.hide()
        self._destroyed = True
        try:
            self.renderer.destroy()
        except RuntimeError as e:
            logger.warning("Could not destroy drop indicator: %s", e)
