"""
Client logging module.

Log records go to stderr so that stdout carries nothing but relayed chat text.
"""

import logging
import sys


class ClientLogger:
    """Client logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_relay_client')
        self.logger.handlers.clear()

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        self.logger.addHandler(handler)
        self.set_level(log_level)

    def set_level(self, log_level: int):
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def info(self, message: str):
        self.logger.info(message)

    def error(self, message: str):
        self.logger.error(message)

    def debug(self, message: str):
        self.logger.debug(message)

    def log_connection(self, host: str, port: int, success: bool):
        """Log a connection attempt to the relay."""
        if success:
            self.info(f"Connected to relay at {host}:{port}")
        else:
            self.error(f"Could not reach relay at {host}:{port}")

    def show_interactive_mode_info(self):
        self.info("Type messages to chat, NICK <name> to rename, /quit to leave")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ClientLogger()
