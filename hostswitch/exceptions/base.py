"""
Base Exception Classes
Root of the HostSwitch error tree. Every error carries a machine-readable
code, a context dict for the log, and a message fit for a notification.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class HostSwitchError(Exception):
    """
    Root HostSwitch error; logs itself once when constructed.

    Attributes:
        error_code: Stable identifier, defaults to the class name
        context: Extra key/value pairs shown in the log line
        user_message: Text the notification store displays
    """

    default_user_message = "An error occurred while processing your request."

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        user_message: str | None = None,
        log_level: int = logging.ERROR,
    ):
        super().__init__(message)
        self.error_code = error_code or type(self).__name__
        self.context = dict(context or {})
        self.log_level = log_level
        self.user_message = user_message or self._get_default_user_message()
        self._log_error()

    def _get_default_user_message(self) -> str:
        return self.default_user_message

    def _log_error(self) -> None:
        suffix = f" | Context: {self.context}" if self.context else ""
        logger.log(self.log_level, f"[{self.error_code}] {self}{suffix}")

    def to_dict(self) -> dict[str, Any]:
        """Payload form used by notifications and debug dumps."""
        return {
            "error": self.error_code,
            "message": str(self),
            "user_message": self.user_message,
            "context": self.context,
        }

    def with_context(self, **kwargs: Any) -> "HostSwitchError":
        """Attach more context and return self, for `raise err.with_context(...)`."""
        self.context.update(kwargs)
        return self


class ValidationError(HostSwitchError):
    """Input rejected locally, before the backend is contacted. Logged as a warning."""

    def __init__(self, message: str, field: str | None = None, value: Any = None, **kwargs: Any):
        context = kwargs.pop("context", None) or {}
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)
        kwargs.setdefault("log_level", logging.WARNING)
        self.field = field
        self.value = value
        super().__init__(message, context=context, **kwargs)

    def _get_default_user_message(self) -> str:
        if self.field:
            return f"The value for '{self.field}' is not valid."
        return "The input is not valid."


class ConfigurationError(HostSwitchError):
    """A configuration value is missing or unusable."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any):
        context = kwargs.pop("context", None) or {}
        if config_key:
            context["config_key"] = config_key
        self.config_key = config_key
        super().__init__(message, context=context, **kwargs)

    def _get_default_user_message(self) -> str:
        return "HostSwitch settings are invalid. Check the configuration and restart."
