"""A set of unique integers."""

from __future__ import annotations

from typing import Optional


class IntSet:
    """Stores a set of unique ``int`` elements."""

    def __init__(self, *elements: int) -> None:
        self._set: set[int] = set(elements)

    def copy(self) -> IntSet:
        """Return an independent copy of this set."""
        result = IntSet()
        result._set = set(self._set)
        return result

    def insert(self, *elements: int) -> None:
        """Add elements; those already present are ignored."""
        self._set.update(elements)

    def delete(self, *elements: int) -> None:
        """Remove elements; those not present are ignored."""
        self._set.difference_update(elements)

    def intersect(self, other: Optional[IntSet]) -> IntSet:
        """Return the intersection; empty if ``other`` is None."""
        result = IntSet()
        if other is not None:
            result._set = self._set & other._set
        return result

    def disjoint(self, other: Optional[IntSet]) -> bool:
        """True if the sets share no element, or either is empty or None."""
        if other is None:
            return True
        return self._set.isdisjoint(other._set)

    def difference(self, other: Optional[IntSet]) -> IntSet:
        """Return elements of this set not in ``other``."""
        if other is None:
            return self.copy()
        result = IntSet()
        result._set = self._set - other._set
        return result

    def unique(self, other: Optional[IntSet]) -> IntSet:
        """Return elements found in exactly one of the two sets."""
        if other is None:
            return self.copy()
        result = IntSet()
        result._set = self._set ^ other._set
        return result

    def equal(self, other: Optional[IntSet]) -> bool:
        """True if both sets hold exactly the same elements; False for None."""
        if other is None:
            return False
        return self._set == other._set

    def union(self, other: Optional[IntSet]) -> IntSet:
        """Return the union; a copy of this set if ``other`` is None."""
        result = self.copy()
        if other is not None:
            result._set |= other._set
        return result

    def __contains__(self, element: int) -> bool:
        return element in self._set

    def __len__(self) -> int:
        return len(self._set)

    def empty(self) -> bool:
        """True if the set has no elements."""
        return not self._set

    def elements(self) -> list[int]:
        """Return the elements in no particular order."""
        return list(self._set)

    def sorted(self) -> list[int]:
        """Return the elements in ascending order."""
        return sorted(self._set)

    def __str__(self) -> str:
        return "{" + ", ".join(f'"{e}"' for e in self.sorted()) + "}"