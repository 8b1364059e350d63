"""Helpers for running collaborator calls concurrently."""

import asyncio
from typing import Any, Awaitable, List


async def gather_or_cancel(*aws: Awaitable[Any]) -> List[Any]:
    """
    Await several calls concurrently, like ``asyncio.gather``.

    If any call fails, the calls still pending are cancelled and awaited
    before the first error is re-raised, so nothing keeps running (or fails
    unobserved) after the caller has seen the error.

    Returns:
        Results in argument order
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
