"""
Chat module for relay-side messaging functionality.

Handles:
- Slot-based client registry
- Nickname changes
- Chat broadcasting
"""
