#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           TCP port (default: 12345)
    --log-file PATH       Also write the log to PATH
    --debug               Enable debug logging

Type lines on the relay terminal to broadcast them as [server];
/quit or end of input stops the relay.
"""

if __name__ == "__main__":
    from relay_server.main_server import main

    raise SystemExit(main())
