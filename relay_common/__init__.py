"""
Shared package for the chat relay.

Holds what both the relay and the client agree on:
- Protocol constants and fixed notices
- Line framing and command parsing
- Chat line formatting
"""
