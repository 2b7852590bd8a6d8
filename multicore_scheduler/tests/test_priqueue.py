"""
Tests for the comparator-ordered job queue.
"""

import pytest

from multicore_scheduler.backend.priqueue import OrderedJobQueue


def by_value(a, b):
    return a[0] - b[0]


def always_tie(a, b):
    return 0


@pytest.fixture
def queue():
    return OrderedJobQueue(by_value)


class TestInsert:
    """Ordering and insertion positions."""

    def test_sorted_after_inserts(self, queue):
        for i, value in enumerate([5, 1, 4, 1, 5, 9, 2, 6, 5, 3]):
            queue.insert((value, i))

        items = queue.items()
        assert all(by_value(items[i], items[i + 1]) <= 0 for i in range(len(items) - 1))

    def test_returns_landing_position(self, queue):
        assert queue.insert((5, "a")) == 0
        assert queue.insert((1, "b")) == 0
        assert queue.insert((9, "c")) == 2
        assert queue.insert((5, "d")) == 2  # after the existing 5
        assert [x[1] for x in queue] == ["b", "a", "d", "c"]

    def test_ties_keep_insertion_order(self, queue):
        a, b, c = (3, "a"), (3, "b"), (3, "c")
        for item in (a, b, c):
            queue.insert(item)
        assert queue.items() == [a, b, c]

    def test_always_tie_is_fifo(self):
        q = OrderedJobQueue(always_tie)
        for name in "abcde":
            q.insert(name)
        assert [q.poll_front() for _ in range(5)] == list("abcde")

    def test_size_grows_by_one(self, queue):
        for n in range(1, 6):
            queue.insert((n % 3, n))
            assert queue.size() == n
            assert len(queue) == n


class TestAccess:
    """Peek, poll, lookup and removal."""

    def test_empty_queue(self, queue):
        assert queue.peek_front() is None
        assert queue.poll_front() is None
        assert queue.size() == 0
        assert not queue

    def test_peek_does_not_remove(self, queue):
        queue.insert((2, "x"))
        assert queue.peek_front() == (2, "x")
        assert queue.size() == 1

    def test_poll_removes_front(self, queue):
        queue.insert((2, "x"))
        queue.insert((1, "y"))
        assert queue.poll_front() == (1, "y")
        assert queue.size() == 1

    def test_at_bounds(self, queue):
        queue.insert((1, "a"))
        queue.insert((2, "b"))
        assert queue.at(0) == (1, "a")
        assert queue.at(1) == (2, "b")
        assert queue.at(2) is None  # index == size is not found
        assert queue.at(-1) is None

    def test_remove_at(self, queue):
        for v in (1, 2, 3):
            queue.insert((v, v))
        assert queue.remove_at(1) == (2, 2)
        assert queue.size() == 2
        assert queue.remove_at(2) is None
        assert queue.size() == 2

    def test_remove_all_equal_ignores_comparator(self, queue):
        target = (4, "target")
        queue.insert(target)
        queue.insert((4, "other"))  # compares equal but is a different item
        queue.insert(target)
        queue.insert((1, "low"))

        assert queue.remove_all_equal(target) == 2
        assert queue.items() == [(1, "low"), (4, "other")]
        assert queue.remove_all_equal((7, "missing")) == 0

    def test_clear_returns_items(self, queue):
        queue.insert((1, "a"))
        queue.insert((0, "b"))
        assert queue.clear() == [(0, "b"), (1, "a")]
        assert queue.size() == 0
