"""Bounded container of eviction candidates keyed by access time.

``heapq`` only provides a min-heap, so entries are stored under the negated
access time: the top of the heap is always the most recently accessed
member, which is the first one to give up when the set covers more than it
needs to.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterator
from pathlib import Path

from lruprune.models import Candidate


class CandidateSet:
    def __init__(self) -> None:
        self._heap: list[tuple[float, int, Candidate]] = []
        # tie-breaker so equal access times never compare Candidate objects
        self._counter = itertools.count()
        self.total_size = 0

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def push(self, candidate: Candidate) -> None:
        heapq.heappush(self._heap, (-candidate.accessed, next(self._counter), candidate))
        self.total_size += candidate.size

    def peek(self) -> Candidate:
        """Return the most recently accessed member without removing it."""
        if not self._heap:
            raise IndexError("peek from an empty CandidateSet")
        return self._heap[0][2]

    def pop(self) -> Candidate:
        if not self._heap:
            raise IndexError("pop from an empty CandidateSet")
        _, _, candidate = heapq.heappop(self._heap)
        self.total_size -= candidate.size
        return candidate

    def drain(self) -> Iterator[Candidate]:
        """Pop every member, most recently accessed first."""
        while self._heap:
            yield self.pop()

    def paths(self) -> set[Path]:
        return {candidate.path for _, _, candidate in self._heap}

    def over_budget(self, required_bytes: int) -> bool:
        """True when dropping the top member would still cover ``required_bytes``."""
        return bool(self._heap) and self.total_size - self.peek().size > required_bytes
