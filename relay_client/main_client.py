#!/usr/bin/env python3
"""
Chat Relay Client - Main Entry Point

Connects to a relay, sends every typed line as-is, and prints whatever the
relay sends back. Stops on /quit, end of input, or when the relay hangs up.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, TextIO

from relay_common.console_input import ConsoleInput
from relay_common.constants import DEFAULT_HOST, DEFAULT_PORT, SHUTDOWN_COMMAND
from relay_common.protocol_definitions import trim_crlf
from relay_client.utils.config import ClientConfig
from relay_client.utils.logger import logger


class ChatClient:
    """Terminal client for the chat relay."""

    def __init__(self, config: Optional[ClientConfig] = None, console=None,
                 output: Optional[TextIO] = None):
        self.config = config or ClientConfig()
        self.console = console or ConsoleInput()
        self.output = output or sys.stdout
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.running = False

    async def connect(self) -> bool:
        """Connect to the relay."""
        try:
            self.reader, self.writer = await asyncio.open_connection(
                self.config.host, self.config.port
            )
        except OSError as e:
            logger.log_connection(self.config.host, self.config.port, False)
            logger.log_error("connect", e)
            return False

        logger.log_connection(self.config.host, self.config.port, True)
        return True

    async def send_line(self, line: str) -> bool:
        """Send one raw line to the relay."""
        if not self.writer:
            logger.error("Not connected to relay")
            return False

        try:
            self.writer.write(line.encode('utf-8'))
            await self.writer.drain()
            return True
        except (ConnectionError, OSError) as e:
            logger.log_error("send", e)
            return False

    async def listen_for_messages(self):
        """Print relay output until the connection ends."""
        while self.running:
            try:
                data = await self.reader.read(self.config.buffer_size)
            except (ConnectionError, OSError) as e:
                logger.log_error("receive", e)
                break

            if not data:
                logger.info("Relay closed connection")
                break

            self.output.write(data.decode('utf-8', errors='replace'))
            self.output.flush()

        self.running = False

    async def pump_input(self):
        """Forward typed lines until /quit or end of input."""
        while self.running:
            line = await self.console.readline()
            if not line:
                logger.info("Input closed, leaving")
                break
            if trim_crlf(line) == SHUTDOWN_COMMAND:
                logger.info("Quitting (requested)")
                break
            if not await self.send_line(line):
                break

        self.running = False

    async def interactive_mode(self) -> bool:
        """Run the client until either side finishes."""
        if not await self.connect():
            return False

        self.running = True
        self.console.start(asyncio.get_running_loop())
        logger.show_interactive_mode_info()

        listener_task = asyncio.create_task(self.listen_for_messages())
        input_task = asyncio.create_task(self.pump_input())

        try:
            await asyncio.wait({listener_task, input_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            self.running = False
            for task in (listener_task, input_task):
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError) as e:
                logger.debug(f"Close error: {e}")

            logger.info("Disconnected from relay")
        return True


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Chat Relay Client')
    parser.add_argument('--host', type=str, default=DEFAULT_HOST,
                        help=f'Relay host (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Relay TCP port (default: {DEFAULT_PORT})')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.debug:
        logger.set_level(logging.DEBUG)

    client = ChatClient(ClientConfig(host=args.host, port=args.port))
    try:
        connected = asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        logger.info("Client terminated")
        return 0
    return 0 if connected else 1


if __name__ == "__main__":
    raise SystemExit(main())
