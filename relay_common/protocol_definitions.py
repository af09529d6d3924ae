"""
Protocol definitions for the chat relay.

This module defines the line framing, the commands a client line can carry,
and the byte formats the relay writes back to clients.

Wire format (newline-delimited text, UTF-8):
    client -> relay:  NICK <name>     change display name
                      <text>          chat line, relayed to everyone else
    relay -> client:  [<name>] <text>\\n
                      [server] <text>\\n
"""

from typing import List, Optional, Tuple, Union
from dataclasses import dataclass

from relay_common.constants import BUFFER_SIZE, NICK_COMMAND, SERVER_DISPLAY_NAME


@dataclass(frozen=True)
class RenameRequest:
    """Nickname change requested by a client."""
    candidate: str


@dataclass(frozen=True)
class ChatMessage:
    """Plain chat text to relay to other clients."""
    text: str


Command = Union[RenameRequest, ChatMessage]


def trim_crlf(text: str) -> str:
    """Strip trailing CR/LF characters."""
    return text.rstrip('\r\n')


def decode_line(data: bytes) -> str:
    """Decode one raw line and strip its line ending."""
    return trim_crlf(data.decode('utf-8', errors='replace'))


def split_lines(buffer: bytes, max_length: int = BUFFER_SIZE) -> Tuple[List[str], bytes]:
    """
    Split buffered bytes into complete lines.

    Returns the decoded lines and the unterminated remainder. A remainder
    that has grown to max_length bytes is cut off and returned as a line of
    its own, so a client that never sends a newline cannot grow the buffer.
    """
    lines = []
    while True:
        end = buffer.find(b'\n')
        if end < 0:
            break
        lines.append(decode_line(buffer[:end]))
        buffer = buffer[end + 1:]

    while len(buffer) >= max_length:
        lines.append(decode_line(buffer[:max_length]))
        buffer = buffer[max_length:]

    return lines, buffer


def parse_line(line: str) -> Optional[Command]:
    """
    Classify one framed line.

    "NICK <name>" yields a RenameRequest (the name may be empty), any other
    non-empty line a ChatMessage, and an empty line nothing at all.
    """
    directive = NICK_COMMAND + ' '
    if line.startswith(directive):
        return RenameRequest(trim_crlf(line[len(directive):]))
    if not line:
        return None
    return ChatMessage(line)


def format_chat_message(name: str, text: str) -> bytes:
    """Create a sender-attributed chat line."""
    return f"[{name}] {text}\n".encode('utf-8')


def format_server_message(text: str) -> bytes:
    """Create an operator-attributed chat line."""
    return format_chat_message(SERVER_DISPLAY_NAME, text)
