"""In-process session storage without expiry."""

from typing import Any, Dict


class MemoryStorage:
    """Session records held in a plain dict. Suitable for tests and single-process dev servers."""

    def __init__(self):
        self.entries: Dict[str, Dict[str, Any]] = {}

    async def load(self, session_id: str) -> Dict[str, Any]:
        if session_id not in self.entries:
            self.entries[session_id] = {}
        return self.entries[session_id]

    async def setup(self) -> None:
        return None

    async def update(self, session_id: str, value: Dict[str, Any]) -> None:
        if not value:
            return
        # New dict so snapshots handed out by load() are never mutated
        self.entries[session_id] = {**self.entries.get(session_id, {}), **value}

    def clear(self) -> None:
        """Remove all records."""
        self.entries.clear()
