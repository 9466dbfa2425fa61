from __future__ import annotations

import logging
from collections.abc import Iterable

from lruprune.candidates import CandidateSet
from lruprune.models import Candidate, EvictionTarget

logger = logging.getLogger(__name__)


def select_candidates(
    files: Iterable[Candidate],
    target: EvictionTarget,
    candidates: CandidateSet | None = None,
) -> CandidateSet:
    """Pick the oldest files whose combined size covers ``target.required_bytes``.

    One pass over ``files`` in whatever order they arrive. Only files last
    accessed before ``target.age_floor`` are considered, even when that leaves
    the target uncovered. The returned set never holds more than it needs:
    once the kept files cover the target, the most recently accessed member
    is dropped whenever the rest still cover it on their own.

    A file newer than every kept member is skipped outright once the target
    is covered, rather than pushed and popped again. This keeps newest-first
    input at O(k) heap work.
    """
    if candidates is None:
        candidates = CandidateSet()
    required = target.required_bytes
    seen = 0
    eligible = 0

    for candidate in files:
        seen += 1
        if candidate.accessed >= target.age_floor:
            continue
        eligible += 1
        if candidates.total_size < required or (
            candidates and candidate.accessed <= candidates.peek().accessed
        ):
            candidates.push(candidate)
            # the set only goes over budget through the push above, so it is non-empty
            while candidates.over_budget(required):
                candidates.pop()

    logger.debug(
        "Scanned %d files, %d old enough, kept %d totalling %d bytes",
        seen,
        eligible,
        len(candidates),
        candidates.total_size,
    )
    return candidates
