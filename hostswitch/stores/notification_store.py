"""
Notification Store

Transient user-facing messages (toast state) raised by actions and push
events.
"""

import logging

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)

KIND_COLORS = {
    "info": "#2196f3",
    "success": "#4caf50",
    "warning": "#ff9800",
    "error": "#f44336",
}

DEFAULT_DURATION_MS = 3000


class NotificationStore(QObject):
    """Holds the currently shown notification; the view binds to its signals."""

    notification_requested = pyqtSignal(str, str, int)
    hidden = pyqtSignal()

    def __init__(self, default_duration: int = DEFAULT_DURATION_MS, parent: QObject | None = None):
        super().__init__(parent)
        self.default_duration = default_duration
        self.show = False
        self.text = ""
        self.kind = "info"
        self.color = KIND_COLORS["info"]
        self.timeout = default_duration

    def show_notification(self, message: str, kind: str = "info", duration: int | None = None) -> None:
        if kind not in KIND_COLORS:
            logger.debug(f"Unknown notification kind '{kind}', using 'info'")
            kind = "info"
        self.show = True
        self.text = str(message)
        self.kind = kind
        self.color = KIND_COLORS[kind]
        self.timeout = self.default_duration if duration is None else int(duration)
        self.notification_requested.emit(self.text, self.kind, self.timeout)

    def hide(self) -> None:
        if not self.show:
            return
        self.show = False
        self.hidden.emit()
