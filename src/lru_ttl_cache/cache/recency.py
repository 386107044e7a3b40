"""Doubly-linked recency ordering over cache entries.

Least recently used entry sits at the head, most recently used at the tail.
Entries carry their own links, so touch/remove/evict are all O(1) given the
entry handle that the key mapping already holds.
"""

from __future__ import annotations

from typing import Generic, Iterator, Optional, TypeVar

from lru_ttl_cache.cache.entry import Entry
from lru_ttl_cache.core.errors import CacheIntegrityError

V = TypeVar("V")


class RecencyIndex(Generic[V]):
    def __init__(self) -> None:
        self._head: Optional[Entry[V]] = None
        self._tail: Optional[Entry[V]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Entry[V]]:
        node = self._head
        while node is not None:
            yield node
            node = node.next

    def __contains__(self, entry: Entry[V]) -> bool:
        return entry.prev is not None or entry.next is not None or self._head is entry

    def oldest(self) -> Optional[Entry[V]]:
        return self._head

    def newest(self) -> Optional[Entry[V]]:
        return self._tail

    def append(self, entry: Entry[V]) -> None:
        """Link a new entry at the most-recent end."""
        if entry in self:
            raise CacheIntegrityError(f"entry {entry.key!r} is already linked")
        entry.prev = self._tail
        entry.next = None
        if self._tail is None:
            self._head = entry
        else:
            self._tail.next = entry
        self._tail = entry
        self._size += 1

    def touch(self, entry: Entry[V]) -> None:
        """Move an entry to the most-recent end."""
        if entry is self._tail:
            return
        self.remove(entry)
        self.append(entry)

    def remove(self, entry: Entry[V]) -> None:
        if entry not in self:
            raise CacheIntegrityError(f"entry {entry.key!r} is not linked")
        if entry.prev is None:
            self._head = entry.next
        else:
            entry.prev.next = entry.next
        if entry.next is None:
            self._tail = entry.prev
        else:
            entry.next.prev = entry.prev
        entry.prev = entry.next = None
        self._size -= 1

    def evict_oldest(self) -> Optional[Entry[V]]:
        oldest = self._head
        if oldest is not None:
            self.remove(oldest)
        return oldest

    def clear(self) -> None:
        node = self._head
        while node is not None:
            following = node.next
            node.prev = node.next = None
            node = following
        self._head = self._tail = None
        self._size = 0
