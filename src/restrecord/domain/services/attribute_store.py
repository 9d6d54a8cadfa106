"""Attribute storage and dirty tracking for a single record.

The store owns the backing ``attrs`` dict; the tracker remembers which
attributes were written locally since the last confirmed save.
"""

from typing import Any, Literal, Mapping, Optional


class AttributeStore:
    """Backing map of attribute values.

    ``representation()`` hands out the live dict, not a copy; serialization
    reads it directly.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._attrs: dict[str, Any] = dict(initial or {})

    def get(self, attribute: str) -> Any:
        """Get an attribute value, or None when unset."""
        return self._attrs.get(attribute)

    def has(self, attribute: str) -> bool:
        """Check if an attribute is present (set and not None)."""
        return self._attrs.get(attribute) is not None

    def put(self, attribute: str, value: Any) -> Any:
        """Store a value and return the previous one."""
        previous = self._attrs.get(attribute)
        self._attrs[attribute] = value
        return previous

    def representation(self) -> dict[str, Any]:
        return self._attrs


class DirtyTracker:
    """Set of attribute names mutated since the last clean state."""

    def __init__(self) -> None:
        self._dirty: dict[str, bool] = {}

    def mark(self, attribute: str) -> None:
        self._dirty[attribute] = True

    def is_dirty(self, attribute: str) -> bool:
        return attribute in self._dirty

    def changed(self) -> frozenset[str] | Literal[False]:
        """Return False when nothing is dirty, else the dirty attribute names."""
        if self._dirty:
            return frozenset(self._dirty)
        return False

    def clear(self) -> None:
        """Forget every dirty mark. Only a confirmed save/update calls this."""
        self._dirty = {}
