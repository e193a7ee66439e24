"""Linked containers: a singly linked stack and a doubly linked list."""


class _Link:
    __slots__ = ("data", "next")

    def __init__(self, data, next_link):
        self.data = data
        self.next = next_link


class LinkedStack:
    """A singly linked list where items are inserted and removed at the head."""

    def __init__(self):
        self._head = None
        self._count = 0

    def push(self, item):
        """Insert ``item`` at the head."""
        self._head = _Link(item, self._head)
        self._count += 1

    def pop(self):
        """Remove and return the item at the head; raise IndexError if empty."""
        if self._head is None:
            raise IndexError("pop from an empty stack")
        link = self._head
        self._head = link.next
        self._count -= 1
        return link.data

    def is_empty(self):
        """Return True when the stack holds no item."""
        return self._head is None

    def __len__(self):
        return self._count

    def __iter__(self):
        link = self._head
        while link is not None:
            yield link.data
            link = link.next


class _Node:
    __slots__ = ("data", "prev", "next")

    def __init__(self, data):
        self.data = data
        self.prev = None
        self.next = None


class DoublyLinkedList:
    """A doubly linked list supporting insertion at both ends and removal by value."""

    def __init__(self, items=()):
        self._head = None
        self._tail = None
        self._count = 0
        for item in items:
            self.append(item)

    def append(self, item):
        """Add ``item`` at the end."""
        node = _Node(item)
        if self._tail is None:
            self._head = self._tail = node
        else:
            node.prev = self._tail
            self._tail.next = node
            self._tail = node
        self._count += 1

    def prepend(self, item):
        """Add ``item`` at the front."""
        node = _Node(item)
        if self._head is None:
            self._head = self._tail = node
        else:
            node.next = self._head
            self._head.prev = node
            self._head = node
        self._count += 1

    def _unlink(self, node):
        if node.prev is None:
            self._head = node.next
        else:
            node.prev.next = node.next
        if node.next is None:
            self._tail = node.prev
        else:
            node.next.prev = node.prev
        node.prev = node.next = None
        self._count -= 1

    def remove(self, item):
        """Remove the first node holding ``item``.

        Returns True if a node was removed; the list is left unchanged and
        False is returned when no node holds ``item``.
        """
        node = self._head
        while node is not None:
            if node.data is item or node.data == item:
                self._unlink(node)
                return True
            node = node.next
        return False

    def clear(self):
        """Remove every node."""
        node = self._head
        while node is not None:
            following = node.next
            node.prev = node.next = None
            node = following
        self._head = self._tail = None
        self._count = 0

    def __len__(self):
        return self._count

    def __iter__(self):
        node = self._head
        while node is not None:
            yield node.data
            node = node.next