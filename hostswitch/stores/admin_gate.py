"""
Admin Gate

Determines once, at startup, whether the process may write the system hosts
file, and exposes the result as a read-only flag.
"""

import logging
from typing import TYPE_CHECKING, Any

from PyQt6.QtCore import QObject, pyqtSignal

from hostswitch.exceptions import AdminRequiredError

if TYPE_CHECKING:
    from .config_store import ConfigurationStore

logger = logging.getLogger(__name__)


class AdminGate(QObject):
    """
    {
        "name": "AdminGate",
        "version": "1.0.0",
        "description": "Startup capability check for writing the system hosts file.",
        "dependencies": ["IConfigBridge", "ConfigurationStore"],
        "interface": {
            "inputs": ["initialize()", "ensure_admin(operation)"],
            "outputs": "admin_mode flag and admin_mode_changed signal"
        }
    }
    admin_mode is only refreshed by initialize(); a privilege change while
    the app runs is not observed.
    """

    admin_mode_changed = pyqtSignal(bool)

    def __init__(self, bridge: Any, config_store: "ConfigurationStore", parent: QObject | None = None):
        super().__init__(parent)
        self._bridge = bridge
        self._config_store = config_store
        self._admin_mode = False
        self._initialized = False

    @property
    def admin_mode(self) -> bool:
        return self._admin_mode

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def is_admin_required(self) -> bool:
        """Ask the backend; any failure counts as 'admin required'."""
        try:
            return bool(await self._bridge.is_admin_required())
        except Exception as e:
            logger.warning(f"Admin check failed, assuming admin is required: {e}")
            return True

    async def initialize(self) -> None:
        """Resolve the hosts path and admin mode, then load configurations."""
        await self._config_store.get_system_hosts_path()
        required = await self.is_admin_required()
        self._admin_mode = not required
        self._initialized = True
        self.admin_mode_changed.emit(self._admin_mode)
        logger.info(
            f"Admin mode {'active' if self._admin_mode else 'inactive'}"
            f" (hosts file: '{self._config_store.system_hosts_path}')"
        )
        await self._config_store.load_all()

    def ensure_admin(self, operation: str) -> None:
        if not self._admin_mode:
            raise AdminRequiredError(operation)
