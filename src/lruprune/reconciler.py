from __future__ import annotations

import logging

from lruprune.candidates import CandidateSet

logger = logging.getLogger(__name__)


def reconcile(candidates: CandidateSet, required_bytes: int) -> CandidateSet:
    """Shrink a scanned set to a deficit re-measured after the scan.

    Members are only ever dropped, most recently accessed first; a deficit
    that grew past what the scan collected is left uncovered rather than
    walking the tree again.
    """
    if required_bytes <= 0:
        dropped = sum(1 for _ in candidates.drain())
        logger.debug("Deficit cleared during scan, dropped %d candidates", dropped)
        return candidates

    dropped = 0
    while candidates.over_budget(required_bytes):
        candidates.pop()
        dropped += 1
    if dropped:
        logger.debug("Deficit shrank to %d bytes, dropped %d candidates", required_bytes, dropped)
    return candidates
