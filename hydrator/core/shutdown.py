"""Signal-driven shutdown for the batch runner."""

from __future__ import annotations

import signal
from typing import TYPE_CHECKING

from hydrator.core.logging_utils import get_logger

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Iterable

logger = get_logger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    shutdown_event: asyncio.Event,
    *,
    signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
) -> list[signal.Signals]:
    """Set ``shutdown_event`` when one of ``signals`` arrives.

    Returns the signals a handler was installed for.
    """

    def _request_shutdown(sig: signal.Signals) -> None:
        if not shutdown_event.is_set():
            logger.warning("shutdown_signal_received", extra={"signal": sig.name})
        shutdown_event.set()

    installed: list[signal.Signals] = []
    for sig in signals:
        try:
            loop.add_signal_handler(sig, _request_shutdown, sig)
        except NotImplementedError:  # pragma: no cover
            # Windows / limited event loops may not support signal handlers.
            logger.warning("signal_handlers_unsupported", extra={"signal": str(sig)})
            continue
        installed.append(sig)
    return installed


def remove_signal_handlers(loop: asyncio.AbstractEventLoop, signals: Iterable[signal.Signals]) -> None:
    for sig in signals:
        loop.remove_signal_handler(sig)
