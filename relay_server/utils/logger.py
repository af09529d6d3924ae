"""
Relay logging module.

This module handles relay-side logging functionality.
"""

import logging
from pathlib import Path
from typing import Optional


class ServerLogger:
    """Relay logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_relay')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        self.formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Create console handler
        self.console_handler = logging.StreamHandler()
        self.console_handler.setLevel(log_level)
        self.console_handler.setFormatter(self.formatter)
        self.logger.addHandler(self.console_handler)

        self.file_handler: Optional[logging.FileHandler] = None

    def set_level(self, log_level: int):
        """Change the level of the logger and every attached handler."""
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def add_file_handler(self, log_path: str):
        """Mirror log output into a file."""
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if self.file_handler is not None:
            self.logger.removeHandler(self.file_handler)
            self.file_handler.close()

        self.file_handler = logging.FileHandler(path, encoding='utf-8')
        self.file_handler.setLevel(self.logger.level)
        self.file_handler.setFormatter(self.formatter)
        self.logger.addHandler(self.file_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr: tuple, uid: int, slot: int, name: str):
        """Log client admission."""
        self.info(f"New client from {addr}: uid={uid} slot={slot} name={name}")

    def log_rejected(self, addr: tuple, uid: int):
        """Log a connection turned away at capacity."""
        self.warning(f"Rejected connection from {addr} (uid={uid}): server full")

    def log_disconnect(self, name: str, uid: int):
        """Log client eviction."""
        self.info(f"Client {name} (uid={uid}) disconnected")

    def log_rename(self, uid: int, old_name: str, new_name: str):
        """Log nickname change."""
        self.info(f"Client uid={uid} set name: {old_name} -> {new_name}")

    def log_chat(self, name: str, uid: int, message: str):
        """Log chat message."""
        self.info(f"[{name}] (uid={uid}) {message}")

    def log_operator_message(self, message: str, recipients: int):
        """Log operator broadcast."""
        self.info(f"[server] {message} (to {recipients} clients)")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
