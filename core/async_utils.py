"""
VerseKit - Async Utilities

Helpers for running storage round-trips together and bounding them in time.

Usage:
    async with timeout_with_cleanup(2.0, operation="search"):
        phrase, words = await gather_or_cancel(phrase_query, word_query)
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Coroutine, List, Optional, TypeVar

from core.errors import VerseKitTimeoutError
from observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def gather_or_cancel(*coros: Coroutine[Any, Any, T]) -> List[T]:
    """
    Like asyncio.gather, but the first failure cancels the others.

    The failure is re-raised as itself rather than inside an ExceptionGroup.
    When several coroutines fail before cancellation lands, the earliest
    failure is raised.

    Usage:
        phrase, words = await gather_or_cancel(
            repository.phrase_search(query, scope, 10, 0),
            repository.word_search(query, scope, 10, 0),
        )
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coros]
    except ExceptionGroup as failures:
        raise failures.exceptions[0]
    return [task.result() for task in tasks]


@asynccontextmanager
async def timeout_with_cleanup(
    seconds: Optional[float],
    cleanup_fn: Optional[Callable[[], Awaitable[None]]] = None,
    operation: Optional[str] = None,
) -> AsyncIterator[None]:
    """
    Timeout context manager with cleanup on timeout.

    ``seconds=None`` disables the limit. On expiry the body is cancelled,
    ``cleanup_fn`` runs and ``VerseKitTimeoutError`` is raised.
    """
    try:
        async with asyncio.timeout(seconds):
            yield
    except VerseKitTimeoutError:
        raise
    except TimeoutError as e:
        logger.warning("Operation timed out", operation=operation, timeout_seconds=seconds)
        if cleanup_fn:
            await cleanup_fn()
        raise VerseKitTimeoutError(
            message=f"{operation or 'Operation'} timed out after {seconds} seconds",
            timeout_seconds=seconds,
            operation=operation,
            cause=e,
        ) from e
