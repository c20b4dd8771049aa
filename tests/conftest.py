"""Shared fixtures for the HostSwitch test suite."""

import os

# Qt must not try to open a display when tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QSettings

from hostswitch.core import ConfigManager
from hostswitch.stores import BackupStore, ConfigurationStore, RemoteSourceStore
from tests.fakes import FakeBridge


@pytest.fixture
def bridge():
    """Fresh in-memory backend."""
    return FakeBridge()


@pytest.fixture
def settings(tmp_path):
    """QSettings backed by a throwaway INI file."""
    return QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)


@pytest.fixture
def config_manager(settings):
    return ConfigManager(settings)


@pytest.fixture
def backup_store(qapp, bridge):
    return BackupStore(bridge)


@pytest.fixture
def config_store(qapp, bridge, backup_store):
    return ConfigurationStore(bridge, backup_store=backup_store)


@pytest.fixture
def remote_store(qapp, bridge, config_store, backup_store):
    return RemoteSourceStore(bridge, config_store=config_store, backup_store=backup_store)
