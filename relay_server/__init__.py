"""
Relay package for the chat relay.

This package contains all relay-side functionality including:
- Connection admission and the client registry
- Command handling and broadcast fan-out
- The event loop that owns every connection
- Configuration and utilities
"""
