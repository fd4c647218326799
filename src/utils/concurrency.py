"""Bounded-concurrency helpers for provider fan-out.

Ingestion embeds every page of a document through the same provider.  The
calls are independent, so they run in parallel, but the number in flight is
capped by a semaphore to stay under provider rate limits.

Unlike ``asyncio.gather(..., return_exceptions=True)``, :func:`bounded_gather`
is all-or-nothing: the first failure cancels the sibling tasks that are
still pending and is re-raised to the caller.  No partial result list is
ever returned.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


async def bounded_gather(
    coros: list[Awaitable[_T]],
    limit: int = 4,
) -> list[_T]:
    """Run awaitables concurrently, at most *limit* at a time.

    Parameters
    ----------
    coros:
        Awaitable objects to execute.  Results come back in input order.
    limit:
        Maximum number of awaitables executing simultaneously.  Values
        below 1 are treated as 1 (sequential execution).

    Returns
    -------
    list
        Results positionally matching *coros*.

    Raises
    ------
    BaseException
        The first exception raised by any awaitable.  Every other task
        that has not finished yet is cancelled before the exception
        propagates.
    """
    if not coros:
        return []

    semaphore = asyncio.Semaphore(max(1, limit))

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [asyncio.ensure_future(_wrapped(c)) for c in coros]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        # Let cancelled tasks unwind so no coroutine outlives the caller.
        await asyncio.gather(*pending, return_exceptions=True)
        if pending:
            _logger.warning("bounded_gather_cancelled", cancelled=len(pending), total=len(tasks))
        raise
