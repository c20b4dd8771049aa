"""
Store Exceptions
Local validation failures raised by the entity stores before any backend call.
"""

from typing import Any

from .base import ValidationError


class InvalidIdentifierError(ValidationError):
    """Raised when an entity identifier is missing or blank."""

    def __init__(self, message: str = "Identifier is missing or blank", **kwargs: Any):
        kwargs.setdefault("field", "id")
        super().__init__(message, **kwargs)

    def _get_default_user_message(self) -> str:
        return "The selected item has an invalid identifier."


class SourceNotFoundError(ValidationError):
    """Raised when a remote source id is not present in the local cache."""

    def __init__(self, source_id: str, **kwargs: Any):
        super().__init__(
            f"Remote source '{source_id}' not found locally",
            field="id",
            value=source_id,
            **kwargs,
        )
        self.source_id = source_id

    def _get_default_user_message(self) -> str:
        return "The remote source was not found in the local list. Reload and try again."


class AdminRequiredError(ValidationError):
    """Raised when an operation needs admin mode and it is not active."""

    def __init__(self, operation: str, **kwargs: Any):
        context = kwargs.pop("context", {})
        context["operation"] = operation
        super().__init__(
            f"Administrator privileges are required for {operation}",
            context=context,
            **kwargs,
        )
        self.operation = operation

    def _get_default_user_message(self) -> str:
        return "Administrator privileges are required. Restart HostSwitch as administrator."
