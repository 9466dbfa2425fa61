from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Candidate:
    path: Path
    size: int
    accessed: float  # st_atime, seconds since the epoch


@dataclass(frozen=True)
class EvictionTarget:
    required_bytes: int
    age_floor: float

    @classmethod
    def from_space(
        cls,
        target_available: int,
        available: int,
        age_floor: float,
    ) -> EvictionTarget:
        """Deficit between the free-space target and what is free now, never negative."""
        return cls(
            required_bytes=max(0, target_available - available),
            age_floor=age_floor,
        )


def age_floor_from_minutes(older_than: int, now: float | None = None) -> float:
    if now is None:
        now = time.time()
    return now - older_than * 60


@dataclass(frozen=True)
class EvictedFile:
    path: str
    size: int
    accessed: float


@dataclass(frozen=True)
class EvictionReport:
    root: str
    dry_run: bool
    initial_required_bytes: int
    final_required_bytes: int
    selected_bytes: int
    freed_bytes: int
    evicted: list[EvictedFile] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def shortfall_bytes(self) -> int:
        return max(0, self.final_required_bytes - self.freed_bytes)

    @property
    def target_reached(self) -> bool:
        return self.shortfall_bytes == 0
