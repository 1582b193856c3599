"""
Storage Module - Black Box Interface

Purpose: Persist partial session records keyed by session identifier
Interface: load(), setup(), update() (StorageAdapter protocol)
Hidden: Backend specifics, expiry handling, serialization

Any backend implementing StorageAdapter can be handed to the session
middleware without affecting other modules.
"""

from typing import Any, Dict, Protocol, runtime_checkable

from .memory import MemoryStorage
from .redis_store import RedisStorage


@runtime_checkable
class StorageAdapter(Protocol):
    """Capability set every session backend provides."""

    async def load(self, session_id: str) -> Dict[str, Any]:
        """
        Return the persisted record for session_id.

        Creates an empty record if none exists. Never returns None.
        """
        ...

    async def setup(self) -> None:
        """Prepare the backend. Safe to call any number of times."""
        ...

    async def update(self, session_id: str, value: Dict[str, Any]) -> None:
        """Merge the fields of value into the persisted record."""
        ...


__all__ = ["StorageAdapter", "MemoryStorage", "RedisStorage"]
