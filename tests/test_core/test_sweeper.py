"""Unit tests for the background code sweeper (mc_relay/core/sweeper.py)."""

import asyncio

import pytest

from mc_relay.core.sweeper import CodeSweeper


@pytest.mark.unit
def test_rejects_non_positive_interval(code_store):
    with pytest.raises(ValueError):
        CodeSweeper(code_store, 0)


@pytest.mark.unit
@pytest.mark.asyncio
class TestCodeSweeper:
    async def test_sweeps_expired_codes(self, code_store, clock):
        code_store.issue("uuid-1")
        clock.advance(301)
        sweeper = CodeSweeper(code_store, 0.01)

        sweeper.start()
        try:
            for _ in range(100):
                if len(code_store) == 0:
                    break
                await asyncio.sleep(0.01)
        finally:
            await sweeper.stop()

        assert len(code_store) == 0

    async def test_live_codes_survive(self, code_store):
        code = code_store.issue("uuid-1")
        sweeper = CodeSweeper(code_store, 0.01)
        sweeper.start()
        await asyncio.sleep(0.05)
        await sweeper.stop()
        assert code_store.redeem(code) == "uuid-1"

    async def test_start_stop(self, code_store):
        sweeper = CodeSweeper(code_store, 60)
        assert not sweeper.running
        sweeper.start()
        assert sweeper.running
        await sweeper.stop()
        assert not sweeper.running

    async def test_start_is_idempotent(self, code_store):
        sweeper = CodeSweeper(code_store, 60)
        sweeper.start()
        task = sweeper._task
        sweeper.start()
        assert sweeper._task is task
        await sweeper.stop()

    async def test_stop_without_start(self, code_store):
        await CodeSweeper(code_store, 60).stop()
