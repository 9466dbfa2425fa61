from __future__ import annotations

import itertools
import random
from pathlib import Path

import pytest

from lruprune.candidates import CandidateSet
from lruprune.models import Candidate, EvictionTarget
from lruprune.selector import select_candidates

NOW = 1_700_000_000.0


def _file(name: str, size: int, minutes_ago: float) -> Candidate:
    return Candidate(path=Path(name), size=size, accessed=NOW - minutes_ago * 60)


class RecordingSet(CandidateSet):
    def __init__(self) -> None:
        super().__init__()
        self.events: list[tuple[str, Candidate]] = []

    def push(self, candidate: Candidate) -> None:
        self.events.append(("push", candidate))
        super().push(candidate)

    def pop(self) -> Candidate:
        candidate = super().pop()
        self.events.append(("pop", candidate))
        return candidate


def _random_files(count: int, seed: int) -> list[Candidate]:
    rng = random.Random(seed)
    minutes = rng.sample(range(1, 100_000), count)
    return [
        _file(f"f{i}", rng.randint(0, 5_000), minutes_ago)
        for i, minutes_ago in enumerate(minutes)
    ]


@pytest.mark.parametrize(
    "order",
    list(itertools.permutations(["A", "B", "C"])),
)
def test_picks_oldest_cover_in_any_order(order: tuple[str, ...]) -> None:
    files = {
        "A": _file("A", 100, 10),
        "B": _file("B", 50, 5),
        "C": _file("C", 200, 20),
    }
    target = EvictionTarget(required_bytes=250, age_floor=NOW - 60)

    selected = select_candidates((files[name] for name in order), target)

    assert selected.paths() == {Path("C"), Path("A")}
    assert selected.total_size == 300


def test_nothing_old_enough_gives_empty_set() -> None:
    files = [_file("A", 100, 10), _file("B", 50, 5), _file("C", 200, 20)]
    target = EvictionTarget(required_bytes=100, age_floor=NOW - 30 * 60)

    selected = select_candidates(files, target)

    assert len(selected) == 0
    assert selected.total_size == 0


def test_empty_input() -> None:
    selected = select_candidates([], EvictionTarget(required_bytes=10**12, age_floor=NOW))
    assert not selected


def test_zero_deficit_admits_nothing() -> None:
    files = [_file("A", 100, 10)]
    selected = select_candidates(files, EvictionTarget(required_bytes=0, age_floor=NOW))
    assert not selected


def test_file_accessed_exactly_at_floor_is_not_eligible() -> None:
    floor_file = Candidate(path=Path("edge"), size=10, accessed=NOW)
    older = Candidate(path=Path("old"), size=10, accessed=NOW - 1)

    selected = select_candidates([floor_file, older], EvictionTarget(100, NOW))

    assert selected.paths() == {Path("old")}


def test_shortfall_keeps_every_eligible_file() -> None:
    files = [_file("A", 10, 10), _file("B", 20, 20), _file("new", 500, 0.5)]
    selected = select_candidates(files, EvictionTarget(1_000, NOW - 60))

    assert selected.paths() == {Path("A"), Path("B")}
    assert selected.total_size == 30


def test_never_holds_files_newer_than_the_floor() -> None:
    files = _random_files(300, seed=3)
    target = EvictionTarget(required_bytes=200_000, age_floor=NOW - 50_000 * 60)

    selected = select_candidates(files, target)

    assert all(c.accessed < target.age_floor for c in selected.drain())


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_cover_stays_near_minimal_after_every_file(seed: int) -> None:
    files = _random_files(120, seed=seed)
    target = EvictionTarget(required_bytes=40_000, age_floor=NOW - 10_000 * 60)

    for count in range(1, len(files) + 1):
        selected = select_candidates(files[:count], target)
        if selected:
            assert selected.total_size - selected.peek().size <= target.required_bytes


@pytest.mark.parametrize("seed", [4, 5, 6])
def test_kept_files_are_the_oldest_eligible(seed: int) -> None:
    files = _random_files(200, seed=seed)
    target = EvictionTarget(required_bytes=60_000, age_floor=NOW - 20_000 * 60)
    eligible = [c for c in files if c.accessed < target.age_floor]

    selected = select_candidates(files, target)
    kept = selected.paths()
    newest_kept = selected.peek().accessed

    assert selected.total_size >= target.required_bytes
    for candidate in eligible:
        if candidate.accessed <= newest_kept:
            assert candidate.path in kept
        else:
            assert candidate.path not in kept


def test_oldest_first_input_skips_without_pushing() -> None:
    files = sorted(_random_files(500, seed=9), key=lambda c: c.accessed)
    target = EvictionTarget(required_bytes=10_000, age_floor=NOW)
    recorder = RecordingSet()

    select_candidates(files, target, candidates=recorder)

    pushes = [c for event, c in recorder.events if event == "push"]
    pops = [c for event, c in recorder.events if event == "pop"]
    assert pops == []
    assert len(pushes) == len(recorder)
    assert len(pushes) < len(files)


def test_newest_first_input_never_pops_the_file_just_pushed() -> None:
    files = sorted(_random_files(500, seed=11), key=lambda c: c.accessed, reverse=True)
    target = EvictionTarget(required_bytes=10_000, age_floor=NOW)
    recorder = RecordingSet()

    select_candidates(files, target, candidates=recorder)

    for (first, pushed), (second, popped) in zip(recorder.events, recorder.events[1:]):
        if first == "push" and second == "pop":
            assert popped is not pushed
    popped_paths = {c.path for event, c in recorder.events if event == "pop"}
    assert popped_paths.isdisjoint(recorder.paths())


def test_equal_access_time_is_admitted_and_earliest_pushed_is_dropped() -> None:
    first = Candidate(path=Path("first"), size=100, accessed=NOW - 600)
    tied = Candidate(path=Path("tied"), size=100, accessed=NOW - 600)
    newer = Candidate(path=Path("newer"), size=100, accessed=NOW - 599)
    target = EvictionTarget(required_bytes=60, age_floor=NOW)
    recorder = RecordingSet()

    select_candidates([first, tied, newer], target, candidates=recorder)

    assert recorder.events == [("push", first), ("push", tied), ("pop", first)]
    assert recorder.paths() == {Path("tied")}
    assert recorder.total_size == 100
