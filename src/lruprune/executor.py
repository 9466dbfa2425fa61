from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from lruprune.candidates import CandidateSet
from lruprune.models import Candidate

logger = logging.getLogger(__name__)


class FileRemover(Protocol):
    def remove(self, path: Path) -> bool: ...


class UnlinkRemover:
    def remove(self, path: Path) -> bool:
        try:
            path.unlink()
        except OSError as exc:
            logger.debug("Could not delete %s: %s", path, exc)
            return False
        return True


@dataclass
class ExecutionResult:
    freed_bytes: int = 0
    evicted: list[Candidate] = field(default_factory=list)
    failed: list[Candidate] = field(default_factory=list)


def execute(
    candidates: CandidateSet,
    dry_run: bool,
    remover: FileRemover | None = None,
) -> ExecutionResult:
    """Delete every member of ``candidates``, leaving the set empty.

    Members come out most recently accessed first. In dry-run mode nothing is
    touched and every member counts as freed. A failed deletion is recorded
    and skipped; it is not retried and does not stop the rest.
    """
    if remover is None:
        remover = UnlinkRemover()
    result = ExecutionResult()
    for candidate in candidates.drain():
        if not dry_run and not remover.remove(candidate.path):
            result.failed.append(candidate)
            continue
        result.freed_bytes += candidate.size
        result.evicted.append(candidate)
    return result
