import pytest
import asyncio
from unittest.mock import Mock

from devserve.preview.debounce import Debouncer, debounce

class TestDebouncer:
    @pytest.mark.asyncio
    async def test_burst_fires_once(self):
        callback = Mock()
        trigger = debounce(0.1, callback)

        for _ in range(20):
            trigger()
        await asyncio.sleep(0.2)

        callback.assert_called_once_with()
        assert not trigger.pending

    @pytest.mark.asyncio
    async def test_trigger_returns_before_callback(self):
        callback = Mock()
        trigger = debounce(0.05, callback)

        trigger()

        assert trigger.pending
        callback.assert_not_called()
        await trigger.drain()
        callback.assert_called_once()

    @pytest.mark.asyncio
    async def test_spaced_triggers_fire_separately(self):
        callback = Mock()
        trigger = debounce(0.05, callback)

        for _ in range(3):
            trigger()
            await asyncio.sleep(0.1)

        assert callback.call_count == 3

    @pytest.mark.asyncio
    async def test_late_triggers_do_not_extend_window(self):
        callback = Mock()
        trigger = debounce(0.2, callback)

        trigger()
        await asyncio.sleep(0.15)
        trigger()
        # Fires 0.2s after the first trigger, not after the second
        await asyncio.sleep(0.1)

        callback.assert_called_once()
        await asyncio.sleep(0.2)
        callback.assert_called_once()

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self):
        calls = []

        async def callback():
            await asyncio.sleep(0)
            calls.append("refresh")

        trigger = Debouncer(0.01, callback)
        trigger()
        trigger()
        await trigger.drain()

        assert calls == ["refresh"]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_stick(self):
        callback = Mock(side_effect=[RuntimeError("boom"), None])
        trigger = debounce(0.01, callback)

        trigger()
        await trigger.drain()
        trigger()
        await trigger.drain()

        assert callback.call_count == 2
        assert not trigger.pending
