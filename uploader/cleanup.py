"""Interrupt handling for temporary files created during a run."""

import asyncio
import signal
import sys
from typing import Callable, List

from common.logging_config import get_logger

logger = get_logger(__name__)

_callbacks: List[Callable[[], None]] = []


def register_cleanup(callback: Callable[[], None]) -> None:
    _callbacks.append(callback)


def unregister_cleanup(callback: Callable[[], None]) -> None:
    if callback in _callbacks:
        _callbacks.remove(callback)


def run_cleanup() -> None:
    """Run and forget every registered callback, newest first."""
    while _callbacks:
        callback = _callbacks.pop()
        try:
            callback()
        except OSError as e:
            logger.warning(f"Cleanup failed: {e}")


def install_signal_handlers(task: asyncio.Task) -> None:
    """
    Clean up and cancel task on SIGINT/SIGTERM.

    In-flight requests are abandoned with the task rather than drained.
    """
    if sys.platform == 'win32':
        return

    def _on_signal(sig: signal.Signals) -> None:
        logger.info(f"Received signal {sig.name}, cleaning up...")
        run_cleanup()
        task.cancel()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _on_signal, sig)
