"""Accumulators for results assembled from many concurrent fetches.

Chunks are stored under the index of the fetch that produced them (a page
number, or a location's position in a sitemap index) and read back in index
order, so the merged result does not depend on which fetch finished first.
Appends are synchronous and therefore never interleave on the event loop.
"""

from __future__ import annotations

from typing import Callable, Generic, Hashable, Iterable, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class AccumulationBuffer(Generic[T]):
    """Append-only collection of items from a paginated resource.

    Args:
        key: Optional identity of an item. Items whose key was already seen
            at a lower index are dropped, as BGG can repeat an entry across
            a page boundary when the underlying list shifts mid-pagination.
            Items without an identity (a falsy key, such as an id the
            response left out) are always kept.
    """

    def __init__(self, key: Callable[[T], Hashable] | None = None):
        self._key = key
        self._chunks: dict[int, list[T]] = {}

    def append(self, index: int, items: Iterable[T]) -> None:
        self._chunks.setdefault(index, []).extend(items)

    def items(self) -> list[T]:
        ordered = [item for index in sorted(self._chunks) for item in self._chunks[index]]
        if self._key is None:
            return ordered

        seen: set[Hashable] = set()
        unique = []
        for item in ordered:
            identity = self._key(item)
            if not identity:
                unique.append(item)
                continue
            if identity in seen:
                continue
            seen.add(identity)
            unique.append(item)
        return unique

    def __len__(self) -> int:
        return len(self.items())


class CategoryAccumulator(Generic[K, T]):
    """Category-keyed set of AccumulationBuffers."""

    def __init__(self) -> None:
        self._buffers: dict[K, AccumulationBuffer[T]] = {}

    def append(self, category: K, index: int, items: Iterable[T]) -> None:
        self._buffers.setdefault(category, AccumulationBuffer()).append(index, items)

    def result(self) -> dict[K, list[T]]:
        return {category: buffer.items() for category, buffer in self._buffers.items()}
