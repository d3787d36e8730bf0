"""
Short-lived user notifications.

Every successful mutation and every rejected operation posts one message.
Messages expire after NOTIFICATION_TIMEOUT_SECONDS and can be dismissed
individually before that.
"""
import itertools
import logging
import time
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional

from pharmadist.core.config import settings

logger = logging.getLogger(__name__)


class NotificationType:
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"

    ALL = (SUCCESS, ERROR, INFO, WARNING)


@dataclass
class Notification:
    id: int
    message: str
    type: str
    created_at: float

    def to_dict(self) -> dict:
        return asdict(self)


class NotificationCenter:
    """Per-account queue of notifications."""

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout_seconds = (
            settings.NOTIFICATION_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self._clock = clock
        self._ids = itertools.count(1)
        self._items: Dict[int, Notification] = {}

    def add(self, message: str, type: str = NotificationType.INFO) -> Notification:
        if type not in NotificationType.ALL:
            raise ValueError(f"Unknown notification type: {type}")
        note = Notification(id=next(self._ids), message=message, type=type, created_at=self._clock())
        self._items[note.id] = note
        logger.debug(f"[Notify] {type}: {message}")
        return note

    def success(self, message: str) -> Notification:
        return self.add(message, NotificationType.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.add(message, NotificationType.ERROR)

    def info(self, message: str) -> Notification:
        return self.add(message, NotificationType.INFO)

    def warning(self, message: str) -> Notification:
        return self.add(message, NotificationType.WARNING)

    def dismiss(self, notification_id: int) -> bool:
        return self._items.pop(notification_id, None) is not None

    def active(self) -> List[Notification]:
        """Return unexpired notifications, oldest first."""
        now = self._clock()
        expired = [nid for nid, n in self._items.items() if now - n.created_at >= self.timeout_seconds]
        for nid in expired:
            del self._items[nid]
        return sorted(self._items.values(), key=lambda n: n.id)

    def messages(self) -> List[str]:
        return [n.message for n in self.active()]
