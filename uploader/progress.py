"""Live status line for the upload phase."""

import asyncio
import sys
from typing import Optional, TextIO

GREEN = "\033[32m"
RESET = "\033[0m"


class ProgressReporter:
    """
    Renders "Uploading... (done/total)" on a single terminal line.

    update() only records the counts and queues a render on the event loop,
    so workers never wait on the terminal. Several updates before the render
    runs collapse into one line.
    """

    def __init__(self, total: int, done: int = 0, stream: Optional[TextIO] = None):
        self.total = total
        self.done = done
        self.stream = stream or sys.stdout
        self.renders = 0
        self._pending = False
        self._handle = None

    def update(self, done: int, total: Optional[int] = None) -> None:
        self.done = done
        if total is not None:
            self.total = total

        if self._pending:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._render()
            return

        self._pending = True
        self._handle = loop.call_soon(self._render)

    def _render(self) -> None:
        self._pending = False
        self._handle = None
        progress = (self.done / self.total) * 100 if self.total else 100.0
        self.stream.write(
            f"\rUploading... ({self.done}/{self.total}) ({GREEN}{progress:.1f}%{RESET})"
        )
        self.stream.flush()
        self.renders += 1

    def start(self) -> None:
        """Render the initial state (already-uploaded files count as done)."""
        self._render()

    def close(self) -> None:
        """Render the final state and end the line."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._render()
        self.stream.write('\n')
        self.stream.flush()
