#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

The relay accepts client connections on one TCP port, admits them into the
registry, relays chat lines between them, and broadcasts operator lines typed
on its own terminal. Everything runs on a single asyncio event loop.
"""

import argparse
import asyncio
import logging
from enum import Enum
from typing import Optional

from relay_common.console_input import ConsoleInput
from relay_common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, SHUTDOWN_COMMAND, Notices
)
from relay_common.protocol_definitions import decode_line, split_lines, trim_crlf
from relay_server.chat.chat_server import ChatServer
from relay_server.chat.connection import ClientConnection
from relay_server.chat.registry import Registry, CapacityExceededError
from relay_server.utils.config import ServerConfig
from relay_server.utils.logger import logger


class ServerState(Enum):
    RUNNING = 'running'
    STOPPED = 'stopped'


class RelayServer:
    """Main relay class that owns the registry and every connection."""

    def __init__(self, config: Optional[ServerConfig] = None, operator_input=None):
        self.config = config or ServerConfig()
        self.registry = Registry(self.config.max_clients, self.config.max_name_length)
        self.chat_server = ChatServer(self.registry)
        self.operator_input = operator_input or ConsoleInput()

        self.state = ServerState.STOPPED
        self.stop_reason: Optional[str] = None
        self.server: Optional[asyncio.AbstractServer] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def port(self) -> int:
        """Port actually bound, useful when configured with port 0."""
        if self.server is None or not self.server.sockets:
            return self.config.port
        return self.server.sockets[0].getsockname()[1]

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Admit a new connection and serve it until it closes."""
        connection = ClientConnection(self.chat_server.get_next_uid(), reader, writer)

        if self.state is not ServerState.RUNNING:
            connection.close()
            await connection.wait_closed()
            return

        try:
            slot = await self.chat_server.admit_client(connection)
        except CapacityExceededError:
            logger.log_rejected(connection.addr, connection.uid)
            await self.chat_server.send_notice(connection, Notices.SERVER_FULL)
            connection.close()
            await connection.wait_closed()
            return

        try:
            await self.serve_connection(slot, connection)
        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for uid={connection.uid}")
            raise
        except Exception as e:
            logger.error(f"Error serving uid={connection.uid}: {e}")
        finally:
            await self.chat_server.disconnect_client(slot, connection)

    async def serve_connection(self, slot: int, connection: ClientConnection):
        """Read, frame and interpret lines until the client goes away."""
        while True:
            try:
                data = await connection.read(self.config.buffer_size)
            except (ConnectionError, OSError) as e:
                logger.warning(f"Read error for uid={connection.uid}: {e}")
                return

            if not data:
                # Deliver an unterminated last line before letting go
                if connection.pending:
                    line = decode_line(connection.pending)
                    connection.pending = b''
                    await self.chat_server.handle_line(slot, connection, line)
                return

            lines, connection.pending = split_lines(
                connection.pending + data, self.config.buffer_size
            )
            for line in lines:
                await self.chat_server.handle_line(slot, connection, line)

    async def handle_operator_line(self, raw: str) -> bool:
        """Process one operator line. Returns False once the relay should stop."""
        if not raw:
            self.stop("operator input closed")
            return False

        text = trim_crlf(raw)
        if text == SHUTDOWN_COMMAND:
            self.stop("shutdown requested")
            return False

        if text:
            await self.chat_server.handle_operator_message(text)
        return True

    async def operator_loop(self):
        """Relay operator lines until shutdown."""
        while self.state is ServerState.RUNNING:
            line = await self.operator_input.readline()
            if not await self.handle_operator_line(line):
                break

    def stop(self, reason: str):
        """Ask the relay to stop after the current step."""
        if self.state is ServerState.STOPPED:
            return
        logger.info(f"Stopping relay: {reason}")
        self.state = ServerState.STOPPED
        self.stop_reason = reason
        if self._stop_event is not None:
            self._stop_event.set()

    async def shutdown(self):
        """Evict every client, then release the listening socket."""
        self.state = ServerState.STOPPED
        count = await self.chat_server.disconnect_all()
        logger.info(f"Closed {count} client connection(s)")

        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            self.server = None

    async def start(self):
        """Start the relay and run until it is stopped."""
        def done_callback(name):
            def callback(task):
                if task.cancelled():
                    return
                if task.exception():
                    logger.error(f"{name} task failed with exception: {task.exception()}")
                    self.stop(f"{name} failed")
            return callback

        self._stop_event = asyncio.Event()
        self.server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            backlog=self.config.backlog
        )
        self.state = ServerState.RUNNING

        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.info(f"Relay listening on {addr} ... ({SHUTDOWN_COMMAND} to stop)")
        limits = self.config.get_limits()
        logger.info("Limits: " + ", ".join(f"{key}={value}" for key, value in limits.items()))

        self.operator_input.start(asyncio.get_running_loop())
        operator_task = asyncio.create_task(self.operator_loop())
        operator_task.add_done_callback(done_callback("Operator input"))

        try:
            await self._stop_event.wait()
        finally:
            operator_task.cancel()
            try:
                await operator_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Operator task ended with: {e}")
            await self.shutdown()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Chat Relay Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port to listen on (default: {DEFAULT_PORT})')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write the relay log to this file')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.debug:
        logger.set_level(logging.DEBUG)
    if args.log_file:
        logger.add_file_handler(args.log_file)

    server = RelayServer(ServerConfig(host=args.host, port=args.port))
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Relay shutting down...")
    except OSError as e:
        logger.log_error("relay startup", e)
        return 1

    logger.info("Relay exited.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
