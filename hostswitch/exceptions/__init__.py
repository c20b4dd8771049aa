"""
Exception Hierarchy for HostSwitch
Provides standardized error handling with consistent exception types.
"""

from .base import (
    ConfigurationError,
    HostSwitchError,
    ValidationError,
)
from .bridge import (
    BridgeError,
    BridgeUnavailableError,
)
from .store import (
    AdminRequiredError,
    InvalidIdentifierError,
    SourceNotFoundError,
)

__all__ = [
    # Base exceptions
    "HostSwitchError",
    "ValidationError",
    "ConfigurationError",
    # Bridge exceptions
    "BridgeError",
    "BridgeUnavailableError",
    # Store exceptions
    "InvalidIdentifierError",
    "SourceNotFoundError",
    "AdminRequiredError",
]
