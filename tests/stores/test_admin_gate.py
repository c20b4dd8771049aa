"""
Tests for AdminGate.
"""

import pytest

from hostswitch.exceptions import AdminRequiredError, BridgeError
from hostswitch.stores import AdminGate


@pytest.fixture
def gate(bridge, config_store):
    return AdminGate(bridge, config_store)


class TestAdminGate:
    """Test admin mode detection."""

    @pytest.mark.asyncio
    async def test_initialize_sets_admin_mode_and_loads_configs(self, gate, bridge, config_store, qtbot):
        bridge.seed_config("work")

        with qtbot.waitSignal(gate.admin_mode_changed, timeout=1000) as blocker:
            await gate.initialize()

        assert blocker.args == [True]
        assert gate.admin_mode is True
        assert gate.initialized is True
        assert config_store.system_hosts_path == "/etc/hosts"
        assert [c.name for c in config_store.items] == ["work"]
        assert bridge.call_names() == ["get_system_hosts_path", "is_admin_required", "get_all_configs"]

    @pytest.mark.asyncio
    async def test_admin_required(self, gate, bridge):
        bridge.admin_required = True
        await gate.initialize()
        assert gate.admin_mode is False

    @pytest.mark.asyncio
    async def test_check_failure_means_required(self, gate, bridge):
        bridge.admin_required = OSError("token query failed")
        assert await gate.is_admin_required() is True

    @pytest.mark.asyncio
    async def test_config_load_failure_propagates(self, gate, bridge, config_store):
        bridge.fail_next("get_all_configs")
        with pytest.raises(BridgeError):
            await gate.initialize()
        assert gate.admin_mode is True
        assert config_store.items == []

    @pytest.mark.asyncio
    async def test_admin_mode_not_refreshed_until_initialize(self, gate, bridge):
        await gate.initialize()
        bridge.admin_required = True

        assert await gate.is_admin_required() is True
        assert gate.admin_mode is True

    @pytest.mark.asyncio
    async def test_ensure_admin(self, gate, bridge):
        bridge.admin_required = True
        await gate.initialize()

        with pytest.raises(AdminRequiredError) as exc_info:
            gate.ensure_admin("apply configuration")
        assert exc_info.value.operation == "apply configuration"

    def test_admin_mode_is_read_only(self, gate):
        with pytest.raises(AttributeError):
            gate.admin_mode = True
