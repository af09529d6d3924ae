#!/usr/bin/env python3
"""
Chat Relay Client - Main Entry Point

Usage:
    python main_client.py

Optional arguments:
    --host HOST           Relay host (default: localhost)
    --port PORT           Relay TCP port (default: 12345)
    --debug               Enable debug logging

Typed lines go to the relay as-is: NICK <name> renames, anything else is
chat. /quit leaves.
"""

if __name__ == "__main__":
    from relay_client.main_client import main

    raise SystemExit(main())
