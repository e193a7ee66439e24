"""Single-producer / single-consumer circular buffer."""

import time


class RingFull(Exception):
    """Raised when an element cannot be pushed because the ring is full."""


class RingEmpty(Exception):
    """Raised when an element cannot be popped because the ring is empty."""


class SpscRing:
    """A circular buffer shared by exactly one producer and one consumer thread.

    The producer only calls ``push``, ``push_burst`` and ``wait_for_popping``;
    the consumer only calls ``pop``, ``pop_burst`` and ``wait_for_pushing``.
    One slot between head and tail is always kept free, so a ring of ``size``
    slots holds at most ``size - 2`` elements.
    """

    def __init__(self, size):
        if size < 1:
            raise ValueError(f"ring size must be positive, got {size}")
        self._size = size
        self._data = [None] * size
        self._head = 0
        self._tail = 0

    def _is_full_at(self, head):
        return (head + 2) % self._size == self._tail

    def push(self, item):
        """Append one item; raise RingFull if there is no room."""
        head = self._head
        if self._is_full_at(head):
            raise RingFull("ring is full")
        self._data[head] = item
        self._head = (head + 1) % self._size

    def push_burst(self, items):
        """Append as many items as fit; return how many were not pushed.

        Raises RingFull if not even one item can be pushed.
        """
        items = list(items)
        head = self._head
        if self._is_full_at(head):
            raise RingFull("ring is full")
        tail = self._tail
        pushed = 0
        for item in items:
            if (head + pushed + 2) % self._size == tail:
                break
            self._data[(head + pushed) % self._size] = item
            pushed += 1
        self._head = (head + pushed) % self._size
        return len(items) - pushed

    def pop(self):
        """Remove and return the oldest item; raise RingEmpty if there is none."""
        tail = self._tail
        if self._head == tail:
            raise RingEmpty("ring is empty")
        item = self._data[tail]
        self._data[tail] = None
        self._tail = (tail + 1) % self._size
        return item

    def pop_burst(self, limit):
        """Remove and return up to ``limit`` items from one contiguous segment.

        When the stored items wrap around the end of the buffer, only the part
        up to the end of the buffer is returned; a further call gets the rest.
        """
        tail = self._tail
        head = self._head
        if head == tail or limit <= 0:
            return []
        end = head if head > tail else self._size
        end = min(end, tail + limit)
        items = self._data[tail:end]
        self._data[tail:end] = [None] * (end - tail)
        self._tail = end % self._size
        return items

    def wait_for_pushing(self):
        """Give the producer a moment to push more items."""
        time.sleep(5e-6)

    def wait_for_popping(self):
        """Give the consumer a moment to pop items."""
        time.sleep(1e-7)

    def __len__(self):
        return (self._head - self._tail) % self._size