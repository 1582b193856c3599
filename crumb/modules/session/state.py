"""Per-request session state container."""

from typing import Any, Dict

from .draft import Recipe, produce


class State:
    """
    Holds one session snapshot for the lifetime of a request.

    write() never mutates the held value; it swaps in a new one, so
    `state.read() is snapshot` tells whether anything changed.
    """

    def __init__(self, value: Dict[str, Any]):
        self._seed = value
        self._value = value

    def read(self) -> Dict[str, Any]:
        """Current snapshot. Treat as read-only; change it through write()."""
        return self._value

    def write(self, recipe: Recipe) -> None:
        """
        Update the snapshot.

        Args:
            recipe: Called with a mutable draft of the current snapshot.
                Mutate it in place, or return a new dict to replace it.
        """
        self._value = produce(self._value, recipe)

    @property
    def dirty(self) -> bool:
        return self._value is not self._seed

    def __repr__(self) -> str:
        return f"State({self._value!r}, dirty={self.dirty})"
