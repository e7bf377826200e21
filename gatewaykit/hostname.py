"""Possibly wildcarded hostnames."""

from __future__ import annotations

__all__ = ["Name"]


class Name(str):
    """A hostname that may start with a ``*`` wildcard."""

    def subset_of(self, other: str) -> bool:
        """True if every host matched by this name is matched by ``other``."""
        other = Name(other)
        self_wild = self.is_wildcarded()
        other_wild = other.is_wildcarded()
        if self_wild:
            if not other_wild or len(self) < len(other):
                return False
            return self[1:].endswith(other[1:])
        if other_wild:
            return self.endswith(other[1:])
        return str(self) == str(other)

    def is_wildcarded(self) -> bool:
        return self.startswith("*")