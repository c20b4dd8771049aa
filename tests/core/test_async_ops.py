"""
Tests for the async operation wrappers and the loading flag.
"""

import pytest

from hostswitch.core.async_ops import LoadingFlag, safe_async, with_loading, with_loading_and_reload


@pytest.fixture
def loading(qapp):
    return LoadingFlag()


class TestLoadingFlag:
    """Test LoadingFlag transitions."""

    def test_initially_false(self, loading):
        assert loading.value is False
        assert not loading

    def test_emits_only_on_change(self, loading, qtbot):
        """Test nested holds emit once on the way in and once on the way out."""
        seen = []
        loading.changed.connect(seen.append)

        loading.acquire()
        loading.acquire()
        loading.release()
        assert loading.value is True
        loading.release()

        assert seen == [True, False]
        assert loading.holds == 0

    def test_unmatched_release_is_ignored(self, loading, caplog):
        loading.release()

        assert loading.value is False
        assert loading.holds == 0
        assert "without a matching acquire" in caplog.text


class TestWithLoading:
    """Test with_loading lifecycle."""

    @pytest.mark.asyncio
    async def test_flag_raised_during_operation(self, loading):
        observed = []

        async def operation():
            observed.append(loading.value)
            return "done"

        result = await with_loading(operation, loading)

        assert result == "done"
        assert observed == [True]
        assert loading.value is False

    @pytest.mark.asyncio
    async def test_on_success_receives_result(self, loading):
        received = []

        async def operation():
            return 7

        async def on_success(value):
            received.append(value)

        await with_loading(operation, loading, on_success)
        assert received == [7]

    @pytest.mark.asyncio
    async def test_sync_on_success_accepted(self, loading):
        received = []

        async def operation():
            return 3

        await with_loading(operation, loading, received.append)
        assert received == [3]

    @pytest.mark.asyncio
    async def test_failure_reported_and_reraised(self, loading):
        errors = []

        async def operation():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError, match="backend down"):
            await with_loading(operation, loading, on_error=errors.append)

        assert [str(e) for e in errors] == ["backend down"]
        assert loading.value is False

    @pytest.mark.asyncio
    async def test_failing_on_success_resets_flag(self, loading):
        async def operation():
            return 1

        def on_success(_value):
            raise ValueError("reload failed")

        with pytest.raises(ValueError):
            await with_loading(operation, loading, on_success)
        assert loading.value is False

    @pytest.mark.asyncio
    async def test_default_error_handler_logs(self, loading, caplog):
        async def operation():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await with_loading(operation, loading)
        assert "Operation failed: boom" in caplog.text


class TestWithLoadingAndReload:
    """Test the mutate-then-reload shape."""

    @pytest.mark.asyncio
    async def test_reload_runs_after_success(self, loading):
        order = []

        async def operation():
            order.append("mutate")
            return "created"

        async def reload():
            order.append(("reload", loading.value))

        result = await with_loading_and_reload(operation, loading, reload)

        assert result == "created"
        assert order == ["mutate", ("reload", True)]

    @pytest.mark.asyncio
    async def test_nested_reload_keeps_flag_raised(self, loading):
        """Test a reload that runs its own with_loading does not clear the outer hold."""
        order = []

        async def operation():
            return "applied"

        async def inner_fetch():
            return []

        async def reload():
            await with_loading(inner_fetch, loading)
            order.append(("after inner reload", loading.value))

        await with_loading_and_reload(operation, loading, reload)

        assert order == [("after inner reload", True)]
        assert loading.value is False

    @pytest.mark.asyncio
    async def test_no_reload_after_failure(self, loading):
        reloads = []

        async def operation():
            raise RuntimeError("rejected")

        async def reload():
            reloads.append(True)

        with pytest.raises(RuntimeError):
            await with_loading_and_reload(operation, loading, reload)
        assert reloads == []

    @pytest.mark.asyncio
    async def test_reload_may_be_none(self, loading):
        async def operation():
            return "ok"

        assert await with_loading_and_reload(operation, loading, None) == "ok"


class TestSafeAsync:
    """Test safe_async."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def operation():
            return "hosts"

        assert await safe_async(operation) == "hosts"

    @pytest.mark.asyncio
    async def test_reports_and_reraises(self):
        errors = []

        async def operation():
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await safe_async(operation, errors.append)
        assert len(errors) == 1
