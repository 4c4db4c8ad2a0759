"""
Settings for the grouping policies.

Uses QSettings for persistent storage. Every flag is a boolean stored under the
'grouping/' section; writes emit settings_changed so running components can
react without polling.
"""
from typing import Any

from PySide6.QtCore import QObject, QSettings, Signal

from ..utils.logger import get_logger

logger = get_logger(__name__)

REQUIRE_MODIFIER_KEY = "grouping/require_modifier_key"
START_WITH_GROUPS = "grouping/start_with_groups"
ALLOW_SINGLE_WINDOW_GROUPS = "grouping/allow_single_window_groups"

DEFAULTS: dict[str, bool] = {
    REQUIRE_MODIFIER_KEY: False,
    START_WITH_GROUPS: True,
    ALLOW_SINGLE_WINDOW_GROUPS: True,
}


class GroupSettings(QObject):
    """
    Policy flags consumed by the TabManager and its groups.

    Args:
        organization: Organization name for QSettings
        application: Application name for QSettings
        settings: An already configured QSettings (e.g. an INI file). When
            given, organization and application are ignored.
    """

    # Signal emitted when settings change
    settings_changed = Signal(str, object)  # key, new_value

    def __init__(self, organization: str = "GroupTabs", application: str = "GroupTabs",
                 settings: QSettings | None = None, parent=None):
        super().__init__(parent)
        self._settings = settings if settings is not None else QSettings(organization, application)

    def get(self, key: str) -> bool:
        if key not in DEFAULTS:
            raise KeyError(f"Unknown setting '{key}'")
        return bool(self._settings.value(key, DEFAULTS[key], type=bool))

    def set(self, key: str, value: Any):
        if key not in DEFAULTS:
            raise KeyError(f"Unknown setting '{key}'")
        value = bool(value)
        if self.get(key) == value and self._settings.contains(key):
            return
        self._settings.setValue(key, value)
        self._settings.sync()
        logger.debug("Setting changed: %s = %s", key, value)
        self.settings_changed.emit(key, value)

    def reset_to_defaults(self):
        for key, value in DEFAULTS.items():
            self.set(key, value)

    def clear(self):
        """Drops every stored value so the defaults apply again."""
        self._settings.clear()
        self._settings.sync()

    # --- Typed accessors ---

    @property
    def require_modifier_key(self) -> bool:
        """Grouping by drag-and-drop only happens while Ctrl/Meta/Super is held."""
        return self.get(REQUIRE_MODIFIER_KEY)

    @require_modifier_key.setter
    def require_modifier_key(self, value: bool):
        self.set(REQUIRE_MODIFIER_KEY, value)

    @property
    def start_with_groups(self) -> bool:
        """Every normal window starts out in its own single-window group."""
        return self.get(START_WITH_GROUPS)

    @start_with_groups.setter
    def start_with_groups(self, value: bool):
        self.set(START_WITH_GROUPS, value)

    @property
    def allow_single_window_groups(self) -> bool:
        """A group that shrinks to one window keeps existing instead of dissolving."""
        return self.get(ALLOW_SINGLE_WINDOW_GROUPS)

    @allow_single_window_groups.setter
    def allow_single_window_groups(self, value: bool):
        self.set(ALLOW_SINGLE_WINDOW_GROUPS, value)
