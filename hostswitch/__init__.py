"""
HostSwitch

Client-side state layer for a hosts-file manager: reactive stores for hosts
configurations, backups and remote sources kept in sync with a native
backend through an async bridge.
"""

from .application import HostSwitchApplication, configure_logging

__version__ = "0.1.0"

__all__ = ["HostSwitchApplication", "configure_logging", "__version__"]
