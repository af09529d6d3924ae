"""
Client connection wrapper.

Pairs the asyncio stream reader/writer of one accepted socket with the
identity the relay knows it by.
"""

import asyncio

from relay_server.utils.logger import logger


class ClientConnection:
    """One accepted client stream."""

    def __init__(self, uid: int, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.uid = uid
        self.reader = reader
        self.writer = writer
        self.addr = writer.get_extra_info('peername')
        self.pending = b''  # Bytes received after the last newline
        self.closed = False

    async def read(self, size: int) -> bytes:
        """Read whatever is available, up to size bytes. Empty means closed."""
        return await self.reader.read(size)

    async def send(self, data: bytes):
        """Write data and wait for the transport to accept it."""
        self.writer.write(data)
        await self.writer.drain()

    def close(self) -> bool:
        """Close the stream. Returns False if it was already closed."""
        if self.closed:
            return False
        self.closed = True
        self.writer.close()
        return True

    async def wait_closed(self):
        """Wait until the transport has shut down."""
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Connection uid={self.uid} closed with error: {e}")

    def __repr__(self):
        return f"ClientConnection(uid={self.uid}, addr={self.addr})"
