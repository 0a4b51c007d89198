"""Transient, dismissable notifications shown by both apps."""

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Notification:
    title: str
    description: str = ""
    variant: NotificationVariant = NotificationVariant.DEFAULT
    id: int = field(default_factory=lambda: next(_ids))

    @property
    def is_error(self) -> bool:
        return self.variant == NotificationVariant.DESTRUCTIVE


class NotificationCenter:
    """Queue of notifications still on screen."""

    def __init__(self, limit: Optional[int] = None) -> None:
        self._limit = limit
        self._active: list[Notification] = []

    def notify(
        self,
        title: str,
        description: str = "",
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self._active.append(notification)
        if self._limit is not None and len(self._active) > self._limit:
            self._active = self._active[-self._limit:]
        logger.debug("Notification [%s] %s: %s", variant.value, title, description)
        return notification

    def error(self, description: str, title: str = "Error") -> Notification:
        return self.notify(title, description, NotificationVariant.DESTRUCTIVE)

    def dismiss(self, notification_id: int) -> bool:
        before = len(self._active)
        self._active = [n for n in self._active if n.id != notification_id]
        return len(self._active) < before

    def clear(self) -> None:
        self._active.clear()

    @property
    def active(self) -> list[Notification]:
        return list(self._active)

    @property
    def latest(self) -> Optional[Notification]:
        return self._active[-1] if self._active else None
