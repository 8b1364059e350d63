"""Tests for concurrent collaborator calls."""

import asyncio

import pytest

from idseal.concurrency import gather_or_cancel


class TestGatherOrCancel:
    """Tests for gather_or_cancel."""

    @pytest.mark.asyncio
    async def test_results_in_argument_order(self) -> None:
        """Results come back in the order the calls were given."""
        async def value(result, delay):
            await asyncio.sleep(delay)
            return result

        assert await gather_or_cancel(value("a", 0.02), value("b", 0.0)) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_cancels_pending_calls(self) -> None:
        """A failing call cancels the others before the error is raised."""
        events = []

        async def fail():
            raise RuntimeError("unavailable")

        async def slow():
            try:
                await asyncio.sleep(0.2)
            except asyncio.CancelledError:
                events.append("cancelled")
                raise
            events.append("completed")

        with pytest.raises(RuntimeError, match="unavailable"):
            await gather_or_cancel(fail(), slow())

        assert events == ["cancelled"]
        await asyncio.sleep(0.3)
        assert events == ["cancelled"]
