"""
Chat server module.

This module handles relay-side chat messaging: admission and eviction
through the registry, nickname changes, and broadcast fan-out.
"""

import asyncio
from typing import List, Optional

from relay_common.constants import Notices
from relay_common.protocol_definitions import (
    RenameRequest, parse_line, format_chat_message, format_server_message
)
from relay_server.chat.connection import ClientConnection
from relay_server.chat.registry import Registry, InvalidNameError
from relay_server.utils.logger import logger


class ChatServer:
    """Relay-side chat functionality."""

    def __init__(self, registry: Registry):
        self.registry = registry
        self.next_uid = 1
        self.lock = asyncio.Lock()  # Guards the registry and every fan-out

    async def broadcast(self, data: bytes, exclude_slot: Optional[int] = None) -> List[int]:
        """
        Send formatted bytes to every admitted client.
        Optionally exclude a specific slot.

        Returns the slots whose send failed. Those connections are left
        alone here; their own read loop notices the failure and evicts them.
        """
        failed = []
        async with self.lock:
            for entry in self.registry.snapshot():
                if exclude_slot is not None and entry.slot_id == exclude_slot:
                    continue
                try:
                    await entry.connection.send(data)
                except (ConnectionError, OSError) as e:
                    logger.error(f"Failed to broadcast to {entry.name} (uid={entry.connection.uid}): {e}")
                    failed.append(entry.slot_id)
        return failed

    async def send_notice(self, connection: ClientConnection, text: str) -> bool:
        """Send an unprefixed notice to a single connection."""
        try:
            await connection.send(text.encode('utf-8'))
            return True
        except (ConnectionError, OSError) as e:
            logger.error(f"Failed to send notice to uid={connection.uid}: {e}")
            return False

    async def admit_client(self, connection: ClientConnection) -> int:
        """Register a new connection. Raises CapacityExceededError when full."""
        async with self.lock:
            slot = self.registry.admit(connection)
            name = self.registry.get(slot).name

        logger.log_connection(connection.addr, connection.uid, slot, name)
        return slot

    async def disconnect_client(self, slot: int, connection: ClientConnection):
        """Evict a client if it still holds its slot."""
        async with self.lock:
            entry = self.registry.get(slot)
            evicted = self.registry.evict(slot, connection)

        if evicted:
            logger.log_disconnect(entry.name, connection.uid)
            await connection.wait_closed()

    async def disconnect_all(self) -> int:
        """Evict every admitted client. Returns how many were evicted."""
        evicted = []
        async with self.lock:
            for entry in self.registry.snapshot():
                if self.registry.evict(entry.slot_id):
                    logger.log_disconnect(entry.name, entry.connection.uid)
                    evicted.append(entry.connection)

        for connection in evicted:
            await connection.wait_closed()
        return len(evicted)

    async def handle_line(self, slot: int, connection: ClientConnection, line: str):
        """Interpret one framed line from a client."""
        command = parse_line(line)
        if command is None:
            return

        if isinstance(command, RenameRequest):
            await self.handle_rename(slot, connection, command.candidate)
        else:
            await self.handle_chat(slot, connection, command.text)

    async def handle_rename(self, slot: int, connection: ClientConnection, candidate: str):
        """Process a NICK directive. Only the requester hears about a rejection."""
        async with self.lock:
            entry = self.registry.get(slot)
            if entry is None or entry.connection is not connection:
                return

            try:
                name = self.registry.rename(slot, candidate)
            except InvalidNameError as e:
                logger.warning(f"Rejected name from uid={connection.uid}: {e}")
                if e.reason == InvalidNameError.EMPTY_NAME:
                    notice = Notices.EMPTY_NAME
                else:
                    notice = Notices.INVALID_NAME
            else:
                logger.log_rename(connection.uid, entry.name, name)
                return

        await self.send_notice(connection, notice)

    async def handle_chat(self, slot: int, connection: ClientConnection, text: str) -> List[int]:
        """Relay a chat line to everyone except the sender. Returns the failed slots."""
        async with self.lock:
            entry = self.registry.get(slot)
            if entry is None or entry.connection is not connection:
                return []
            data = format_chat_message(entry.name, text)

        logger.log_chat(entry.name, connection.uid, text)
        return await self.broadcast(data, exclude_slot=slot)

    async def handle_operator_message(self, text: str) -> List[int]:
        """Broadcast an operator line to every client. Returns the failed slots."""
        logger.log_operator_message(text, len(self.registry))
        return await self.broadcast(format_server_message(text))

    def get_next_uid(self) -> int:
        """Get the next connection identity."""
        uid = self.next_uid
        self.next_uid += 1
        return uid
