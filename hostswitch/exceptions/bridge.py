"""
Backend Bridge Exceptions
Errors raised when a call across the backend bridge fails.
"""

from typing import Any

from .base import HostSwitchError


class BridgeError(HostSwitchError):
    """Raised when the backend rejects a bridge call."""

    def __init__(self, message: str, operation: str | None = None, **kwargs: Any):
        """
        Initialize bridge error.

        Args:
            message: Message reported by the backend
            operation: Bridge operation that was attempted
            **kwargs: Additional arguments for base class
        """
        context = kwargs.pop("context", {})
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)
        self.operation = operation

    def _get_default_user_message(self) -> str:
        # The backend's own message is the most descriptive thing we have
        return str(self) or "The backend could not complete the request."


class BridgeUnavailableError(BridgeError):
    """Raised when the backend does not provide a requested operation."""

    def _get_default_user_message(self) -> str:
        return "The backend service is not available."
