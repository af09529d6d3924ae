"""
Console line input.

Lines typed on the terminal are read on a daemon thread and queued for the
event loop, so the loop never blocks on the terminal and a pending read never
keeps the process alive after the program stops.
"""

import asyncio
import sys
import threading
from typing import Optional, TextIO, Union


class ConsoleInput:
    """Feeds lines from a text stream into the running event loop."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self._queue: Optional[asyncio.Queue] = None
        self._thread: Optional[threading.Thread] = None

    def start(self, loop: asyncio.AbstractEventLoop):
        """Start the reader thread for the given loop."""
        self._queue = asyncio.Queue()
        self._thread = threading.Thread(
            target=self._read_lines, args=(loop,), name='console-input', daemon=True
        )
        self._thread.start()

    def _read_lines(self, loop: asyncio.AbstractEventLoop):
        while True:
            try:
                item: Union[str, Exception] = self.stream.readline()
            except InterruptedError:
                continue  # Transient, wait again
            except (OSError, ValueError) as e:
                item = e

            try:
                loop.call_soon_threadsafe(self._queue.put_nowait, item)
            except RuntimeError:
                return  # Loop already closed

            if not isinstance(item, str) or not item:
                return

    async def readline(self) -> str:
        """Next line including its newline. Empty string means end of input."""
        item = await self._queue.get()
        if isinstance(item, Exception):
            raise item
        return item
