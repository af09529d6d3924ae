"""
Test doubles shared by the relay tests.
"""

import asyncio

from relay_server.chat.connection import ClientConnection


class FakeWriter:
    """Records everything written; optionally fails every write."""

    def __init__(self, peername=('127.0.0.1', 50000), fail: bool = False):
        self.peername = peername
        self.fail = fail
        self.data = bytearray()
        self.close_calls = 0
        self.wait_closed_calls = 0

    def get_extra_info(self, name, default=None):
        if name == 'peername':
            return self.peername
        return default

    def write(self, data: bytes):
        if self.fail:
            raise ConnectionResetError("peer reset")
        self.data.extend(data)

    async def drain(self):
        pass

    def close(self):
        self.close_calls += 1

    def is_closing(self):
        return self.close_calls > 0

    async def wait_closed(self):
        self.wait_closed_calls += 1

    @property
    def text(self) -> str:
        return self.data.decode('utf-8')


def make_connection(uid: int, fail: bool = False) -> ClientConnection:
    """Connection with a recording writer and no reader."""
    return ClientConnection(uid, None, FakeWriter(peername=('127.0.0.1', 50000 + uid), fail=fail))


class QueueInput:
    """Console stand-in fed from the test through an asyncio queue."""

    def __init__(self):
        self.queue = asyncio.Queue()
        self.started = False

    def start(self, loop):
        self.started = True

    async def readline(self) -> str:
        item = await self.queue.get()
        if isinstance(item, Exception):
            raise item
        return item


async def wait_until(predicate, timeout: float = 2.0):
    """Poll predicate until it holds or the timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
