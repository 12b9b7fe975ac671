"""
Byte Trie (Radix Tree): compressed prefix tree over raw byte keys.

Techniques used:
  - Path compression: every node carries a byte label, so chains of single
    children collapse into one node.  Inserting a key that diverges in the
    middle of a label splits that node into a waypoint plus two children.
  - One walk for every read: exact lookup and the three prefix-match modes
    (shortest, longest, all) run through the same traversal, so they can
    never disagree about how the tree is interpreted.
  - Bytes in, bytes compared: ``str`` input is UTF-8 encoded once and then
    matched byte by byte, exactly like ``bytes`` input.

Complexity (n = key / input length):
  insert / lookup / match_*   O(n)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Generic, Iterable, Mapping, TypeVar, Union

V = TypeVar("V")

Key = Union[bytes, bytearray, memoryview, str]


def common_prefix_length(a: bytes, b: bytes) -> int:
    """Return the length of the longest byte prefix shared by *a* and *b*."""
    limit = min(len(a), len(b))
    for i in range(limit):
        if a[i] != b[i]:
            return i
    return limit


def _as_bytes(key: Key) -> bytes:
    if isinstance(key, bytes):
        return key
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"trie keys must be bytes or str, not {type(key).__name__}")


class _KeyView:
    """Read cursor over an input; advancing moves an offset, never slices."""

    __slots__ = ("data", "consumed")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.consumed = 0

    def at_end(self) -> bool:
        return self.consumed >= len(self.data)

    def peek(self) -> int:
        return self.data[self.consumed]

    def startswith(self, label: bytes) -> bool:
        return self.data.startswith(label, self.consumed)

    def advance(self, n: int) -> None:
        self.consumed += n


class _MatchMode(enum.Enum):
    EXACT = enum.auto()
    SHORTEST = enum.auto()
    LONGEST = enum.auto()
    ALL = enum.auto()


@dataclass
class _TrieNode(Generic[V]):
    """Internal node of the byte trie."""

    label: bytes = b""
    # Keyed by the first byte of the child's label.
    children: dict[int, _TrieNode[V]] = field(default_factory=dict)
    is_end: bool = False
    value: V | None = None


@dataclass(frozen=True)
class PrefixMatch(Generic[V]):
    """A stored key found as a prefix of some input.

    ``prefix_length`` counts bytes of the (UTF-8 encoded) input.
    """

    prefix_length: int
    value: V
    source: bytes = field(default=b"", repr=False, compare=False)

    @property
    def prefix(self) -> bytes:
        """The matched bytes, i.e. ``input[:prefix_length]``."""
        return self.source[: self.prefix_length]


class RadixTrie(Generic[V]):
    """A compressed prefix tree that maps byte keys to values of one type.

    >>> t = RadixTrie()
    >>> t.insert(b"abcd", 1)
    >>> t.insert("abcdefg", 2)
    >>> t.lookup("abcd")
    1
    >>> t.lookup(b"abc") is None
    True
    >>> [(m.prefix, m.value) for m in t.match_all_prefixes("abcdefgh")]
    [(b'abcd', 1), (b'abcdefg', 2)]
    >>> t.match_longest_prefix(b"abcdeX").value
    1
    """

    def __init__(
        self, items: Mapping[Key, V] | Iterable[tuple[Key, V]] | None = None
    ) -> None:
        self._root: _TrieNode[V] = _TrieNode()
        self._size = 0
        if items is not None:
            pairs = items.items() if isinstance(items, Mapping) else items
            for key, value in pairs:
                self.insert(key, value)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def insert(self, key: Key, value: V) -> None:
        """Associate *value* with *key*, replacing any previous value."""
        key = _as_bytes(key)
        node = self._root
        i = 0
        while i < len(key):
            first = key[i]
            child = node.children.get(first)
            if child is None:
                node.children[first] = _TrieNode(label=key[i:], is_end=True, value=value)
                self._size += 1
                return
            common = common_prefix_length(child.label, memoryview(key)[i:])
            if common < len(child.label):
                # Partial match: put a waypoint holding the shared part in the
                # child's place and hang the child's remainder under it.
                split: _TrieNode[V] = _TrieNode(label=child.label[:common])
                child.label = child.label[common:]
                split.children[child.label[0]] = child
                node.children[first] = split
                child = split
            node = child
            i += common
        if not node.is_end:
            self._size += 1
        node.is_end = True
        node.value = value

    def lookup(self, key: Key, default: V | None = None) -> V | None:
        """Return the value stored under exactly *key*, or *default*."""
        found = self._walk(_KeyView(_as_bytes(key)), _MatchMode.EXACT)
        if not found:
            return default
        return found[0][1].value

    def match_shortest_prefix(self, query: Key) -> PrefixMatch[V] | None:
        """Return the shortest stored key that prefixes *query*, or ``None``."""
        matches = self._matches(query, _MatchMode.SHORTEST)
        return matches[0] if matches else None

    def match_longest_prefix(self, query: Key) -> PrefixMatch[V] | None:
        """Return the longest stored key that prefixes *query*, or ``None``."""
        matches = self._matches(query, _MatchMode.LONGEST)
        return matches[-1] if matches else None

    def match_all_prefixes(self, query: Key) -> list[PrefixMatch[V]]:
        """Return every stored key that prefixes *query*, shortest first."""
        return self._matches(query, _MatchMode.ALL)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: Key) -> bool:
        return bool(self._walk(_KeyView(_as_bytes(key)), _MatchMode.EXACT))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _matches(self, query: Key, mode: _MatchMode) -> list[PrefixMatch[V]]:
        data = _as_bytes(query)
        return [
            PrefixMatch(length, node.value, data)
            for length, node in self._walk(_KeyView(data), mode)
        ]

    def _walk(
        self, view: _KeyView, mode: _MatchMode
    ) -> list[tuple[int, _TrieNode[V]]]:
        """Follow *view* down from the root, collecting value-bearing nodes.

        Results are ``(prefix_length, node)`` pairs in root-to-deepest order.
        ``EXACT`` yields at most the node where the input ends; ``SHORTEST``
        stops at the first hit; ``LONGEST`` keeps only the deepest hit.
        """
        found: list[tuple[int, _TrieNode[V]]] = []
        node = self._root
        while not view.at_end():
            if node.is_end:
                if mode is _MatchMode.SHORTEST:
                    return [(view.consumed, node)]
                if mode is _MatchMode.ALL:
                    found.append((view.consumed, node))
                elif mode is _MatchMode.LONGEST:
                    found = [(view.consumed, node)]
            child = node.children.get(view.peek())
            if child is None or not view.startswith(child.label):
                return found
            view.advance(len(child.label))
            node = child
        if node.is_end:
            if mode is _MatchMode.LONGEST:
                found = [(view.consumed, node)]
            else:
                found.append((view.consumed, node))
        return found


# ------------------------------------------------------------------
# Quick demo
# ------------------------------------------------------------------

if __name__ == "__main__":
    trie: RadixTrie[str] = RadixTrie()

    keys = ["abcdefg", "abcdefghi", "abcdefghijk", "abcdefgk", "abcdf", "abcdxyz"]
    for k in keys:
        trie.insert(k, k.upper())

    content = "abcdefghijklm"
    print(f"Trie size: {len(trie)}")
    print(f"lookup('abcdf')               → {trie.lookup('abcdf')}")
    print(f"lookup('abcd')                → {trie.lookup('abcd')}")
    print(f"match_shortest_prefix({content!r}) → {trie.match_shortest_prefix(content)}")
    print(f"match_longest_prefix({content!r})  → {trie.match_longest_prefix(content)}")
    for m in trie.match_all_prefixes(content):
        print(f"  {m.prefix!r:16} ({m.prefix_length}) → {m.value}")
    print(f"match_all_prefixes('abcdefXX')    → {trie.match_all_prefixes('abcdefXX')}")
