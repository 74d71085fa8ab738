"""A priority queue ordered by a caller-supplied comparison."""

from __future__ import annotations

from typing import Any, Callable, Optional

Less = Callable[[Any, Any], bool]
SetIndex = Callable[[Any, int], None]


class Queue:
    """Unbounded priority queue; the minimal element under ``less`` is on top.

    If ``set_index`` is given, it is called whenever an element moves so the
    element can remember its position, which ``fix`` and ``remove`` take.
    """

    def __init__(self, less: Less, set_index: Optional[SetIndex] = None) -> None:
        self._less = less
        self._set_index = set_index
        self._items: list[Any] = []

    def __len__(self) -> int:
        return len(self._items)

    def push(self, item: Any) -> None:
        """Add ``item`` to the queue."""
        if self._set_index is not None:
            self._set_index(item, len(self._items))
        self._items.append(item)
        self._up(len(self._items) - 1)

    def min(self) -> Any:
        """Return the minimal element without removing it."""
        if not self._items:
            raise IndexError("min from empty queue")
        return self._items[0]

    def pop(self) -> Any:
        """Remove and return the minimal element."""
        if not self._items:
            raise IndexError("pop from empty queue")
        last = len(self._items) - 1
        self._swap(0, last)
        self._down(0, last)
        return self._items.pop()

    def fix(self, index: int) -> None:
        """Restore ordering after the element at ``index`` changed priority."""
        if not self._down(index, len(self._items)):
            self._up(index)

    def remove(self, index: int) -> Any:
        """Remove and return the element at ``index``."""
        if not 0 <= index < len(self._items):
            raise IndexError("queue index out of range")
        last = len(self._items) - 1
        if last != index:
            self._swap(index, last)
            if not self._down(index, last):
                self._up(index)
        return self._items.pop()

    def _swap(self, i: int, j: int) -> None:
        items = self._items
        items[i], items[j] = items[j], items[i]
        if self._set_index is not None:
            self._set_index(items[i], i)
            self._set_index(items[j], j)

    def _up(self, j: int) -> None:
        while j > 0:
            parent = (j - 1) // 2
            if parent == j or not self._less(self._items[j], self._items[parent]):
                break
            self._swap(parent, j)
            j = parent

    def _down(self, start: int, n: int) -> bool:
        i = start
        while True:
            left = 2 * i + 1
            if left >= n:
                break
            child = left
            right = left + 1
            if right < n and self._less(self._items[right], self._items[left]):
                child = right
            if not self._less(self._items[child], self._items[i]):
                break
            self._swap(i, child)
            i = child
        return i > start