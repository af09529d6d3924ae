"""
Shared constants for the chat relay.

This module contains all constants used across relay and client components.
None of these are reconfigurable while the relay is running.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 12345
LISTEN_BACKLOG = 16

# Capacity
MAX_CLIENTS = 64

# Buffer Sizes
BUFFER_SIZE = 2048  # Max bytes taken from a connection per read, and max line length
MAX_NAME_LENGTH = 31

# Protocol
NICK_COMMAND = 'NICK'
SHUTDOWN_COMMAND = '/quit'
SERVER_DISPLAY_NAME = 'server'
DEFAULT_NAME_PREFIX = 'anon'
RESERVED_NAME_CHARS = '[]'


# Unprefixed notices sent straight to a single client
class Notices:
    SERVER_FULL = 'Server full.\n'
    EMPTY_NAME = 'Name cannot be empty'
    INVALID_NAME = 'Invalid name'
