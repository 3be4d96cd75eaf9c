"""
Live connection registry used to push notifications to connected users.

The persisted Notification row is the source of truth; a push is only a
latency optimisation, so every method here reports failure instead of raising.
"""

import json
import logging
import queue
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Iterable

from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class LiveConnectionRegistry(ABC):
    """Tracks which users currently hold a live channel"""

    @abstractmethod
    def connect(self, user_id) -> "queue.Queue":
        ...

    @abstractmethod
    def disconnect(self, user_id, channel=None) -> None:
        """Drop the user's channel; when `channel` is given, only if it is still the current one"""

    @abstractmethod
    def is_connected(self, user_id) -> bool:
        ...

    @abstractmethod
    def connected_count(self) -> int:
        ...

    @abstractmethod
    def send(self, user_id, payload: dict) -> bool:
        """Deliver payload to user_id if connected; True only when delivered"""

    def broadcast(self, user_ids: Iterable, payload: dict) -> int:
        """Send to each user, returning how many deliveries succeeded"""
        return sum(1 for user_id in user_ids if self.send(user_id, payload))


def format_event(event_type: str, data=None) -> str:
    """Server-Sent Events frame"""
    body = {"type": event_type, "timestamp": timezone.now().isoformat()}
    if data is not None:
        body["data"] = data
    return f"data: {json.dumps(body, default=str)}\n\n"


class InProcessConnectionRegistry(LiveConnectionRegistry):
    """
    One bounded queue per connected user, held in this process only

    A user reconnecting replaces their previous channel. A full queue means
    the consumer stopped reading, so the connection is dropped.
    """

    def __init__(self, max_pending: int = 100):
        self._channels: dict[str, queue.Queue] = {}
        self._lock = threading.Lock()
        self.max_pending = max_pending

    def connect(self, user_id) -> queue.Queue:
        channel = queue.Queue(maxsize=self.max_pending)
        with self._lock:
            self._channels[str(user_id)] = channel
        logger.info(f"Live channel opened for user {user_id}")
        return channel

    def disconnect(self, user_id, channel=None) -> None:
        with self._lock:
            current = self._channels.get(str(user_id))
            if current is None or (channel is not None and current is not channel):
                return
            del self._channels[str(user_id)]
        logger.info(f"Live channel closed for user {user_id}")

    def is_connected(self, user_id) -> bool:
        with self._lock:
            return str(user_id) in self._channels

    def connected_count(self) -> int:
        with self._lock:
            return len(self._channels)

    def send(self, user_id, payload: dict) -> bool:
        with self._lock:
            channel = self._channels.get(str(user_id))
        if channel is None:
            return False

        try:
            channel.put_nowait(format_event("notification", payload))
            return True
        except queue.Full:
            logger.warning(f"Live channel for user {user_id} is not draining; dropping connection")
            self.disconnect(user_id, channel)
            return False


@lru_cache(maxsize=None)
def get_live_registry() -> LiveConnectionRegistry:
    """Process-wide registry, class chosen by settings.NOTIFICATIONS["LIVE_REGISTRY"]"""
    registry_class = import_string(settings.NOTIFICATIONS["LIVE_REGISTRY"])
    return registry_class()
