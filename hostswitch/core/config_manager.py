"""
Configuration Manager

Single access point for HostSwitch settings. A key is looked up in three
layers, first match wins:

1. runtime overrides (process lifetime only)
2. persisted user settings (QSettings)
3. defaults declared in config.py

Keys are dot-separated section paths such as 'sync.discard_stale_reloads'.
"""

import logging
from collections.abc import Callable, Iterator
from typing import Any

from PyQt6.QtCore import QSettings

import config

logger = logging.getLogger(__name__)

ConfigObserver = Callable[[str, Any], None]

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_DEFAULT_SECTIONS = ("LOGGING", "SYNC", "NOTIFICATIONS", "BACKUPS")
RESET_KEY = "__reset__"


def _flatten(tree: dict[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    for name, value in tree.items():
        path = f"{prefix}.{name}" if prefix else name
        if isinstance(value, dict):
            yield from _flatten(value, path)
        else:
            yield path, value


class ConfigManager:
    """
    {
        "name": "ConfigManager",
        "version": "1.0.0",
        "description": "Layered settings lookup (runtime, QSettings, config.py) with change observers.",
        "dependencies": ["PyQt6.QtCore", "config"],
        "interface": {
            "inputs": ["key: str", "value: Any", "persist: bool"],
            "outputs": "Effective setting values and change callbacks"
        }
    }
    One instance is built by the application; tests hand in a QSettings
    backed by a temporary INI file.
    """

    def __init__(self, settings: QSettings | None = None):
        self._settings = settings if settings is not None else QSettings(config.APP_NAME, "Settings")
        self._runtime: dict[str, Any] = {}
        self._defaults = self._read_defaults()
        self._observers: list[ConfigObserver] = []
        logger.info(f"ConfigManager using settings store '{self._settings.fileName()}'")

    @staticmethod
    def _read_defaults() -> dict[str, Any]:
        defaults: dict[str, Any] = {
            "app": {"name": config.APP_NAME, "version": config.APP_VERSION},
        }
        for section in _DEFAULT_SECTIONS:
            defaults[section.lower()] = dict(getattr(config, section, {}))
        return defaults

    def _default_for(self, key: str) -> Any:
        node: Any = self._defaults
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    # -------- Lookup --------

    def get(self, key: str, default: Any = None) -> Any:
        """Effective value of key, or default when no layer defines it."""
        if key in self._runtime:
            return self._runtime[key]
        if self._settings.contains(key):
            return self._settings.value(key)
        value = self._default_for(key)
        return default if value is None else value

    def get_bool(self, key: str, default: bool = False) -> bool:
        # INI-backed QSettings returns booleans as strings
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return bool(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Setting '{key}' is not an integer ({value!r}); using {default}")
            return default

    # -------- Updates --------

    def set(self, key: str, value: Any, persist: bool = False) -> None:
        """Override key for this run, or store it in QSettings when persist is True."""
        if persist:
            self._settings.setValue(key, value)
        else:
            self._runtime[key] = value
        logger.debug(f"{'Persisted' if persist else 'Runtime'} setting {key} = {value!r}")
        self._notify_observers(key, value)

    def reset_to_defaults(self) -> None:
        """Drop runtime overrides and persisted settings."""
        self._runtime.clear()
        self._settings.clear()
        logger.info("Settings reset to defaults")
        self._notify_observers(RESET_KEY, None)

    # -------- Observers --------

    def subscribe(self, callback: ConfigObserver) -> None:
        if callback in self._observers:
            return
        self._observers.append(callback)
        logger.debug(f"Config observer added: {getattr(callback, '__qualname__', callback)}")

    def unsubscribe(self, callback: ConfigObserver) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self, key: str, value: Any) -> None:
        for observer in list(self._observers):
            try:
                observer(key, value)
            except Exception as e:
                logger.error(f"Config observer {getattr(observer, '__qualname__', observer)} failed: {e}")

    # -------- Introspection --------

    def get_all_keys(self) -> list[str]:
        keys = set(self._runtime)
        keys.update(self._settings.allKeys())
        keys.update(path for path, _ in _flatten(self._defaults))
        return sorted(keys)

    def export_config(self) -> dict[str, Any]:
        """Effective value of every known key, for debugging."""
        return {key: self.get(key) for key in self.get_all_keys()}
