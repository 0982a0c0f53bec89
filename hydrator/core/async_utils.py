"""Async helper utilities."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


def raise_if_cancelled(exc: BaseException) -> None:
    """Re-raise ``asyncio.CancelledError`` instances to preserve cancellation semantics."""

    if isinstance(exc, asyncio.CancelledError):  # pragma: no cover - simple guard
        raise exc


async def wait_or_shutdown(shutdown_event: asyncio.Event | None, delay: float) -> bool:
    """Sleep for ``delay`` seconds, waking early if ``shutdown_event`` is set.

    Returns:
        True if the shutdown event fired before the delay elapsed.
    """
    if shutdown_event is None:
        await asyncio.sleep(delay)
        return False
    if shutdown_event.is_set():
        return True
    try:
        await asyncio.wait_for(shutdown_event.wait(), timeout=delay)
    except TimeoutError:
        return False
    return True


class ShutdownInterruptedError(Exception):
    """The shutdown event fired before an awaited call finished."""


async def run_until_shutdown(
    awaitable: Awaitable[T], shutdown_event: asyncio.Event | None
) -> T:
    """Await ``awaitable`` unless ``shutdown_event`` fires first.

    When the event wins, the pending call is cancelled and awaited before
    ``ShutdownInterruptedError`` is raised. A result that is already
    available takes precedence over the event.
    """
    if shutdown_event is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(shutdown_event.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task.done():
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    msg = "shutdown requested"
    raise ShutdownInterruptedError(msg)
