"""
Central registry of window groups.

This module holds the definitive record of which windows belong to which
group. Group membership and the window->group map are only ever changed
together, through attach() and detach().
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Optional

from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..window_group import WindowGroup
    from .host import WindowHandle

logger = get_logger(__name__)


class GroupRegistry:
    """Set of live groups plus the inverse window->group mapping."""

    def __init__(self):
        self._groups: list[WindowGroup] = []
        self._window_groups: dict[WindowHandle, WindowGroup] = {}

    # --- Groups ---

    def add_group(self, group: WindowGroup) -> None:
        if group in self._groups:
            return
        self._groups.append(group)

    def remove_group(self, group: WindowGroup) -> None:
        """Forgets a group. Any windows still mapped to it are unmapped as well."""
        if group in self._groups:
            self._groups.remove(group)
        stale = [w for w, g in self._window_groups.items() if g is group]
        for window in stale:
            del self._window_groups[window]

    def has_group(self, group: WindowGroup) -> bool:
        return group in self._groups

    def groups(self) -> list[WindowGroup]:
        return list(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[WindowGroup]:
        return iter(list(self._groups))

    # --- Membership ---

    def group_for(self, window: WindowHandle) -> Optional[WindowGroup]:
        return self._window_groups.get(window)

    def is_grouped(self, window: WindowHandle) -> bool:
        return window in self._window_groups

    def attach(self, window: WindowHandle, group: WindowGroup, index: int | None = None) -> None:
        """
        Makes a window a member of a group, updating the group's ordered
        member list and the window->group map in one step.

        Raises:
            RuntimeError: If the window already belongs to a different group.
        """
        current = self._window_groups.get(window)
        if current is group:
            return
        if current is not None:
            raise RuntimeError(
                f"Window {window!r} already belongs to group {current.id}; "
                f"detach it before attaching it to group {group.id}."
            )
        if not self.has_group(group):
            raise RuntimeError(f"Group {group.id} is not registered.")

        members = group._windows
        if index is None or index >= len(members):
            members.append(window)
        else:
            members.insert(max(0, index), window)
        self._window_groups[window] = group

    def detach(self, window: WindowHandle, group: WindowGroup) -> bool:
        """Removes a window from a group. Returns False when it was not a member."""
        if self._window_groups.get(window) is not group:
            return False
        del self._window_groups[window]
        if window in group._windows:
            group._windows.remove(window)
        return True

    # --- Consistency ---

    def validate(self) -> list[str]:
        """
        Checks that the window->group map is exactly the inverse of group
        membership. Returns a description of every problem found.
        """
        problems = []
        seen: dict[WindowHandle, WindowGroup] = {}
        for group in self._groups:
            for window in group._windows:
                if window in seen:
                    problems.append(f"{window!r} is a member of groups {seen[window].id} and {group.id}")
                seen[window] = group
                mapped = self._window_groups.get(window)
                if mapped is not group:
                    problems.append(f"{window!r} is a member of group {group.id} but maps to {mapped!r}")
            if not group._windows:
                problems.append(f"Group {group.id} is registered but empty")
        for window, group in self._window_groups.items():
            if group not in self._groups:
                problems.append(f"{window!r} maps to unregistered group {group.id}")
            elif window not in group._windows:
                problems.append(f"{window!r} maps to group {group.id} but is not a member")
        return problems

    def assert_consistent(self) -> None:
        problems = self.validate()
        if problems:
            raise RuntimeError("Group registry is inconsistent: " + "; ".join(problems))

    def clear(self) -> None:
        self._groups.clear()
        self._window_groups.clear()
