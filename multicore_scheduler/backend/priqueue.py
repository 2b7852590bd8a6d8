"""
Comparator-ordered queue used to hold jobs waiting for a core.
"""

from typing import Any, Callable, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")

Comparator = Callable[[Any, Any], float]


class OrderedJobQueue(Generic[T]):
    """List-backed queue kept sorted by a caller-supplied comparator.

    ``cmp(a, b)`` returns a negative number when ``a`` should come before
    ``b``, zero when they tie and a positive number otherwise. Items that tie
    keep their insertion order, so a comparator that always returns zero
    turns the queue into a plain FIFO.
    """

    def __init__(self, cmp: Comparator):
        self._cmp = cmp
        self._items: List[T] = []

    def _insertion_point(self, item: T) -> int:
        # First index whose element the item strictly precedes.
        lo, hi = 0, len(self._items)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._cmp(item, self._items[mid]) < 0:
                hi = mid
            else:
                lo = mid + 1
        return lo

    def insert(self, item: T) -> int:
        """Insert ``item`` after every element it ties with; return its index."""
        index = self._insertion_point(item)
        self._items.insert(index, item)
        return index

    def peek_front(self) -> Optional[T]:
        return self._items[0] if self._items else None

    def poll_front(self) -> Optional[T]:
        return self._items.pop(0) if self._items else None

    def at(self, index: int) -> Optional[T]:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def remove_all_equal(self, item: T) -> int:
        """Remove every element equal to ``item`` (never consults the comparator)."""
        kept = [x for x in self._items if not (x is item or x == item)]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def remove_at(self, index: int) -> Optional[T]:
        if 0 <= index < len(self._items):
            return self._items.pop(index)
        return None

    def size(self) -> int:
        return len(self._items)

    def clear(self) -> List[T]:
        drained, self._items = self._items, []
        return drained

    def items(self) -> List[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))
