"""
Client configuration module.

This module handles client-side configuration settings.
"""

from relay_common.constants import DEFAULT_HOST, DEFAULT_PORT, BUFFER_SIZE


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, buffer_size: int = BUFFER_SIZE):
        self.host = host
        self.port = port
        self.buffer_size = buffer_size
