#!/usr/bin/env python3
"""Simple demo script grouping a few simulated windows with GroupTabs."""

import sys
import tempfile
from pathlib import Path

from PySide6.QtCore import QCoreApplication, QPoint, QRect, QSettings, QTimer

# Add the src directory to the path so we can import GroupTabs without installing it
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from GroupTabs import GroupSettings, MaximizeState, TabManager
from GroupTabs.host.simulated import SimulatedDisplay, SimulatedPointer
from GroupTabs.utils.logger import get_logger, setup_logging

logger = get_logger("simple_demo")


def describe(manager):
    """Log every group with its tabs, marking the active one."""
    for group in manager.groups():
        tabs = [("*" if w is group.active_window else "") + w.title() for w in group.windows]
        logger.info("  group %s: %s", group.short_id, ", ".join(tabs))


def drag(pointer, window, target_point):
    """Grab-moves a window by its title bar and drops it with the pointer at target_point."""
    frame = window.frame_rect()
    pointer.move_to(QPoint(frame.x() + 50, frame.y() + 10))
    pointer.begin_drag(window)
    pointer.drag_to(window, target_point)
    pointer.end_drag(window)


def run_demo(app, manager, display, pointer):
    editor = display.add_window("Editor", QRect(100, 100, 900, 700))
    terminal = display.add_window("Terminal", QRect(1050, 150, 800, 600))
    browser = display.add_window("Browser", QRect(300, 500, 700, 500))
    logger.info("Three windows, each in its own group:")
    describe(manager)

    # 1. Drop the terminal onto the editor
    drag(pointer, terminal, QPoint(400, 300))
    logger.info("After dropping Terminal onto Editor:")
    describe(manager)

    # 2. Drop the browser onto the same group
    drag(pointer, browser, QPoint(500, 400))
    logger.info("After dropping Browser onto the group:")
    describe(manager)

    group = manager.group_for(editor)

    # 3. Switch tabs and maximize the visible window
    group.tab_bar.renderer.click_tab(1)
    group.active_window.set_maximize_state(MaximizeState.BOTH)
    logger.info("Maximized %s, every member now at %s", group.active_window.title(),
                [w.frame_rect().getRect() for w in group.windows])

    # 4. Tear the last tab out into empty space
    view = group.tab_bar
    group.active_window.set_maximize_state(MaximizeState.NONE)
    start = view.tab_rect(len(group) - 1).center()
    view.handle_press(start)
    view.handle_motion(QPoint(1700, 1000))
    view.handle_release(QPoint(1700, 1000))
    logger.info("After dragging the last tab out:")
    describe(manager)

    if display.notices:
        logger.info("Notices: %s", display.notices)

    QTimer.singleShot(200, app.quit)


def main():
    setup_logging(debug=True)
    app = QCoreApplication(sys.argv)

    settings_dir = tempfile.mkdtemp(prefix="grouptabs-demo-")
    settings = GroupSettings(settings=QSettings(str(Path(settings_dir) / "demo.ini"), QSettings.Format.IniFormat))

    display = SimulatedDisplay()
    pointer = SimulatedPointer()
    manager = TabManager(display, pointer, settings)
    manager.enable()

    QTimer.singleShot(0, lambda: run_demo(app, manager, display, pointer))
    exit_code = app.exec()

    manager.disable()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
