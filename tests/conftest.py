"""
Shared pytest fixtures for GroupTabs tests.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QRect, QSettings

from GroupTabs.core.settings import GroupSettings
from GroupTabs.core.tab_manager import TabManager
from GroupTabs.host.simulated import SimulatedDisplay, SimulatedPointer


@pytest.fixture(autouse=True)
def qt_app(qapp):
    """Every test needs a Qt application for signals and timers."""
    return qapp


@pytest.fixture
def display():
    return SimulatedDisplay(QRect(0, 0, 1920, 1080))


@pytest.fixture
def pointer():
    return SimulatedPointer()


@pytest.fixture
def settings(tmp_path):
    """GroupSettings backed by a throwaway INI file."""
    qsettings = QSettings(str(tmp_path / "grouptabs.ini"), QSettings.Format.IniFormat)
    group_settings = GroupSettings(settings=qsettings)
    yield group_settings
    group_settings.clear()


@pytest.fixture
def manager(display, pointer, settings):
    """Enabled TabManager with new windows starting out ungrouped."""
    settings.start_with_groups = False
    tab_manager = TabManager(display, pointer, settings)
    tab_manager.enable()
    yield tab_manager
    tab_manager.registry.assert_consistent()
    tab_manager.disable()


@pytest.fixture
def auto_manager(display, pointer, settings):
    """Enabled TabManager with every new window in a group of its own."""
    settings.start_with_groups = True
    tab_manager = TabManager(display, pointer, settings)
    tab_manager.enable()
    yield tab_manager
    tab_manager.registry.assert_consistent()
    tab_manager.disable()


def make_window(display, title, x=100, y=100, width=800, height=600):
    return display.add_window(title, QRect(x, y, width, height))


def make_group(manager, display, *titles):
    """Creates windows with the given titles and groups them in that tab order."""
    windows = [make_window(display, title, 100 + 40 * i, 100 + 40 * i) for i, title in enumerate(titles)]
    group = manager.create_group()
    for window in windows:
        group.add_window(window)
    return group, windows
