"""
Client registry module.

The registry is a fixed array of slots. Each admitted connection occupies
the lowest free slot until it is evicted, after which the slot can be
handed to a new connection. Capacity never grows.
"""

from dataclasses import dataclass, replace
from typing import List, Optional

from relay_common.constants import (
    MAX_CLIENTS, MAX_NAME_LENGTH, DEFAULT_NAME_PREFIX, RESERVED_NAME_CHARS
)
from relay_server.chat.connection import ClientConnection


class CapacityExceededError(Exception):
    """Raised when every slot is taken."""


class InvalidNameError(ValueError):
    """Raised when a nickname is rejected."""

    EMPTY_NAME = 'EMPTY_NAME'
    INVALID_NAME = 'INVALID_NAME'

    def __init__(self, reason: str, candidate: str):
        super().__init__(f"{reason}: {candidate!r}")
        self.reason = reason
        self.candidate = candidate


@dataclass(frozen=True)
class RegistryEntry:
    """An admitted connection and its display name."""
    slot_id: int
    connection: ClientConnection
    name: str


def sanitize_name(candidate: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """
    Clean a requested nickname.

    Drops non-printable characters and the brackets used to frame chat lines,
    then truncates. Raises InvalidNameError if nothing usable is left.
    """
    if not candidate:
        raise InvalidNameError(InvalidNameError.EMPTY_NAME, candidate)

    cleaned = ''.join(
        ch for ch in candidate
        if ch.isprintable() and ch not in RESERVED_NAME_CHARS
    )[:max_length]

    if not cleaned:
        raise InvalidNameError(InvalidNameError.INVALID_NAME, candidate)
    return cleaned


class Registry:
    """Slot table mapping admitted connections to display names."""

    def __init__(self, capacity: int = MAX_CLIENTS, max_name_length: int = MAX_NAME_LENGTH):
        self.capacity = capacity
        self.max_name_length = max_name_length
        self._slots: List[Optional[RegistryEntry]] = [None] * capacity

    def admit(self, connection: ClientConnection) -> int:
        """Store a connection in the first free slot and return the slot id."""
        for slot_id, entry in enumerate(self._slots):
            if entry is None:
                name = f"{DEFAULT_NAME_PREFIX}{connection.uid}"[:self.max_name_length]
                self._slots[slot_id] = RegistryEntry(slot_id, connection, name)
                return slot_id
        raise CapacityExceededError(f"All {self.capacity} slots are in use")

    def evict(self, slot_id: int, connection: Optional[ClientConnection] = None) -> bool:
        """
        Close a slot's connection and free the slot.

        If connection is given, the slot is only evicted while it still holds
        that connection. Returns False when there was nothing to evict.
        """
        entry = self.get(slot_id)
        if entry is None:
            return False
        if connection is not None and entry.connection is not connection:
            return False

        self._slots[slot_id] = None
        entry.connection.close()
        return True

    def rename(self, slot_id: int, candidate: str) -> str:
        """Sanitize and store a new name for an admitted slot."""
        entry = self.get(slot_id)
        if entry is None:
            raise KeyError(f"Slot {slot_id} is not admitted")

        name = sanitize_name(candidate, self.max_name_length)
        self._slots[slot_id] = replace(entry, name=name)
        return name

    def get(self, slot_id: int) -> Optional[RegistryEntry]:
        """Get the entry in a slot, or None if it is free."""
        if 0 <= slot_id < self.capacity:
            return self._slots[slot_id]
        return None

    def snapshot(self) -> List[RegistryEntry]:
        """Current entries in slot order."""
        return [entry for entry in self._slots if entry is not None]

    def __len__(self):
        return sum(1 for entry in self._slots if entry is not None)
