"""An ordered map kept in a binary search tree with a caller-chosen comparison."""

CMP_LESS = -1
CMP_EQUAL = 0
CMP_GREATER = 1


def compare_values(a, b):
    """Compare two values with the natural ordering; return -1, 0 or 1."""
    if a == b:
        return CMP_EQUAL
    if a > b:
        return CMP_GREATER
    return CMP_LESS


class _Node:
    __slots__ = ("key", "value", "left", "right")

    def __init__(self, key, value):
        self.key = key
        self.value = value
        self.left = None
        self.right = None


class TreeMap:
    """A map of unique keys kept in an unbalanced binary search tree.

    Keys are ordered by ``compare(a, b)``, which returns a negative number,
    zero or a positive number. Iteration yields keys in ascending order.
    """

    def __init__(self, compare=compare_values):
        self._compare = compare
        self._root = None
        self._size = 0

    def set(self, key, value, override=False):
        """Store ``value`` under ``key``.

        Returns None when the key was new. When the key already exists, the
        old value is returned and replaced if ``override`` is true; otherwise
        the map is left unchanged and ``value`` itself is returned.
        A ``None`` key is ignored and None is returned.
        """
        if key is None:
            return None
        node = self._root
        if node is None:
            self._root = _Node(key, value)
            self._size += 1
            return None
        compare = self._compare
        while True:
            result = compare(key, node.key)
            if result == 0:
                if override:
                    old = node.value
                    node.value = value
                    return old
                return value
            side = "left" if result < 0 else "right"
            child = getattr(node, side)
            if child is None:
                setattr(node, side, _Node(key, value))
                self._size += 1
                return None
            node = child

    def _find(self, key):
        if key is None:
            return None
        node = self._root
        compare = self._compare
        while node is not None:
            result = compare(key, node.key)
            if result == 0:
                return node
            node = node.left if result < 0 else node.right
        return None

    def get(self, key, default=None):
        """Return the value stored under ``key``, or ``default``."""
        node = self._find(key)
        return default if node is None else node.value

    def index(self, key):
        """Return the position of ``key`` in ascending order, or -1 if absent."""
        if key is None:
            return -1
        compare = self._compare
        for position, node in enumerate(self._nodes()):
            if compare(node.key, key) == 0:
                return position
        return -1

    def _nodes(self):
        stack = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node
            node = node.right

    def __len__(self):
        return self._size

    def __iter__(self):
        return (node.key for node in self._nodes())

    def __contains__(self, key):
        return self._find(key) is not None

    def items(self):
        """Yield ``(key, value)`` pairs in ascending key order."""
        return ((node.key, node.value) for node in self._nodes())

    def values(self):
        """Yield values in ascending key order."""
        return (node.value for node in self._nodes())

    def clone(self, clone_key=None, clone_value=None):
        """Return a copy with the same tree shape.

        Keys and values are passed through ``clone_key`` and ``clone_value``
        when given, and shared otherwise.
        """
        copy = TreeMap(self._compare)
        copy._size = self._size
        if self._root is None:
            return copy

        def duplicate(node):
            key = clone_key(node.key) if clone_key is not None else node.key
            value = clone_value(node.value) if clone_value is not None else node.value
            return _Node(key, value)

        copy._root = duplicate(self._root)
        stack = [(self._root, copy._root)]
        while stack:
            source, target = stack.pop()
            if source.left is not None:
                target.left = duplicate(source.left)
                stack.append((source.left, target.left))
            if source.right is not None:
                target.right = duplicate(source.right)
                stack.append((source.right, target.right))
        return copy

    def to_list(self):
        """Return the values as a list in ascending key order."""
        return list(self.values())