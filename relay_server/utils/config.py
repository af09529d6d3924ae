"""
Relay configuration module.

This module handles relay-side configuration settings.
"""

from relay_common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, LISTEN_BACKLOG, MAX_CLIENTS, BUFFER_SIZE, MAX_NAME_LENGTH
)


class ServerConfig:
    """Relay configuration class. Fixed once the relay starts."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 max_clients: int = MAX_CLIENTS, buffer_size: int = BUFFER_SIZE,
                 max_name_length: int = MAX_NAME_LENGTH):
        if max_clients < 1:
            raise ValueError(f"max_clients must be positive, got {max_clients}")
        if buffer_size < 2:
            raise ValueError(f"buffer_size too small: {buffer_size}")
        if max_name_length < 1:
            raise ValueError(f"max_name_length must be positive, got {max_name_length}")

        self.host = host
        self.port = port
        self.backlog = LISTEN_BACKLOG

        # Capacity and buffer limits
        self.max_clients = max_clients
        self.buffer_size = buffer_size
        self.max_name_length = max_name_length

    def get_limits(self):
        """Get capacity and buffer limits."""
        return {
            'max_clients': self.max_clients,
            'buffer_size': self.buffer_size,
            'max_name_length': self.max_name_length
        }
