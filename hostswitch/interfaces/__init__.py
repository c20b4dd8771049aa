"""
Interfaces Module
Abstract contracts between the UI-side state layer and the native backend.
"""

from .bridge_interfaces import (
    IBackupBridge,
    IConfigBridge,
    IHostsBridge,
    IPushChannel,
    IRemoteBridge,
)

__all__ = [
    "IBackupBridge",
    "IConfigBridge",
    "IHostsBridge",
    "IPushChannel",
    "IRemoteBridge",
]
