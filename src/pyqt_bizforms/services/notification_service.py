"""
Notification center: the desktop equivalent of the dashboard's toasts.

Services post exactly one notification per mutating action. Views connect
to ``notification_posted``; tests read ``history``.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: str = DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE


class NotificationCenter(QObject):
    """Thread-safe notification sink with a bounded history."""

    notification_posted = pyqtSignal(object)

    def __init__(self, max_history: int = 200, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.max_history = max_history
        self._history: List[Notification] = []
        self._lock = threading.Lock()

    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> Notification:
        notification = Notification(title, description, variant)
        with self._lock:
            self._history.append(notification)
            del self._history[:-self.max_history]
        log = logger.warning if notification.is_error else logger.info
        log(f"{title}: {description}" if description else title)
        self.notification_posted.emit(notification)
        return notification

    def error(self, title: str, description: str = "") -> Notification:
        return self.notify(title, description, DESTRUCTIVE)

    @property
    def history(self) -> List[Notification]:
        with self._lock:
            return list(self._history)

    @property
    def last(self) -> Optional[Notification]:
        with self._lock:
            return self._history[-1] if self._history else None

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
