from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Hashable

from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Subscription:
    """One signal connection, kept so it can be released later."""
    signal: Any
    slot: Callable

    def release(self) -> bool:
        try:
            self.signal.disconnect(self.slot)
            return True
        except (TypeError, RuntimeError) as e:
            # The emitter is already gone or the connection was dropped by Qt.
            logger.warning("Could not disconnect %r: %s", self.slot, e)
            return False


class SubscriptionSet:
    """
    Signal connections grouped by owner key (usually a window), released
    per key or all at once during teardown.
    """

    def __init__(self):
        self._subscriptions: dict[Hashable, list[Subscription]] = {}

    def connect(self, key: Hashable, signal, slot: Callable) -> Subscription:
        signal.connect(slot)
        subscription = Subscription(signal, slot)
        self._subscriptions.setdefault(key, []).append(subscription)
        return subscription

    def has(self, key: Hashable) -> bool:
        return bool(self._subscriptions.get(key))

    def count(self, key: Hashable) -> int:
        return len(self._subscriptions.get(key, []))

    def keys(self) -> list[Hashable]:
        return list(self._subscriptions.keys())

    def release(self, key: Hashable) -> int:
        """Disconnects everything registered under key. Returns how many were released."""
        subscriptions = self._subscriptions.pop(key, [])
        for subscription in subscriptions:
            subscription.release()
        return len(subscriptions)

    def release_all(self) -> None:
        for key in list(self._subscriptions.keys()):
            self.release(key)

    def __len__(self) -> int:
        return sum(len(subs) for subs in self._subscriptions.values())
