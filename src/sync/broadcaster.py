"""
Shared notification channel for draft changes.

Messages carry only a type tag and a freshness timestamp, never the
state itself. Subscribers react by re-reading the authoritative store,
so lost, duplicated or reordered messages cost at most a redundant read.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from src.draft_manager.config import CHANNEL_NAME, STATE_UPDATED_MESSAGE

logger = logging.getLogger(__name__)

Subscriber = Callable[[Dict], None]


class PublishError(Exception):
    """Raised when a notification could not be delivered."""


@dataclass
class ChangeNotification:
    """Payload-free 'state changed' signal."""

    updated_at: str
    type: str = STATE_UPDATED_MESSAGE

    def to_dict(self) -> Dict:
        return {"type": self.type, "payload": {"updatedAt": self.updated_at}}

    @classmethod
    def from_dict(cls, data: Dict) -> Optional["ChangeNotification"]:
        """Parse a wire message; returns None for anything unrecognized."""
        if not isinstance(data, dict) or data.get("type") != STATE_UPDATED_MESSAGE:
            return None
        payload = data.get("payload") or {}
        updated_at = payload.get("updatedAt") if isinstance(payload, dict) else None
        return cls(updated_at=updated_at or "")


class NotificationChannel:
    """Named broadcast topic with in-process subscribers."""

    def __init__(self, name: str = CHANNEL_NAME):
        self.name = name
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, notification: ChangeNotification) -> int:
        """
        Deliver a notification to every subscriber.

        Every subscriber is attempted even if an earlier one fails.

        Returns:
            Number of subscribers that received the message

        Raises:
            PublishError: If any delivery failed
        """
        with self._lock:
            subscribers = list(self._subscribers)

        message = notification.to_dict()
        failures = []
        for callback in subscribers:
            try:
                callback(message)
            except Exception as e:
                logger.warning("Subscriber on %s failed: %s", self.name, e)
                failures.append(e)

        delivered = len(subscribers) - len(failures)
        logger.debug(
            "Published %s on %s to %d subscriber(s)",
            notification.type,
            self.name,
            delivered,
        )
        if failures:
            raise PublishError(
                f"{len(failures)} of {len(subscribers)} deliveries failed on {self.name}"
            )
        return delivered
