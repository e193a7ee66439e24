"""A byte-wise trie mapping short byte keys to values."""

MAX_KEY_LENGTH = 255


class _TrieNode:
    __slots__ = ("value", "children")

    def __init__(self):
        self.value = None
        self.children = {}


class ByteTrie:
    """A table whose keys are byte strings of at most 255 bytes.

    Each key byte selects one child node, so a key's value lives at the end
    of the path spelled by its bytes. A stored value of None means "absent".
    """

    def __init__(self):
        self._root = _TrieNode()

    @staticmethod
    def _key_bytes(key):
        if isinstance(key, str):
            key = key.encode("utf-8")
        data = bytes(key)
        if len(data) > MAX_KEY_LENGTH:
            raise ValueError(
                f"key of {len(data)} bytes is longer than {MAX_KEY_LENGTH} bytes"
            )
        return data

    def add(self, key, value, override=False):
        """Store ``value`` under ``key`` and return the previous value.

        An existing non-None value is replaced only when ``override`` is true.
        """
        node = self._root
        for byte in self._key_bytes(key):
            child = node.children.get(byte)
            if child is None:
                child = node.children[byte] = _TrieNode()
            node = child
        old = node.value
        if override or old is None:
            node.value = value
        return old

    def search(self, key):
        """Return the value stored under ``key``, or None."""
        node = self._root
        for byte in self._key_bytes(key):
            node = node.children.get(byte)
            if node is None:
                return None
        return node.value