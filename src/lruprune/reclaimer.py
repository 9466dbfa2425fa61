from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

from lruprune.executor import FileRemover, execute
from lruprune.models import Candidate, EvictedFile, EvictionReport, EvictionTarget
from lruprune.reconciler import reconcile
from lruprune.selector import select_candidates
from lruprune.sources import (
    DiskSpaceProbe,
    FileMetadataSource,
    SpaceProbe,
    SpaceProbeError,
    WalkMetadataSource,
)

logger = logging.getLogger(__name__)


def reclaim(
    root: Path,
    target_available_space: int,
    age_floor: float,
    *,
    dry_run: bool = False,
    source: FileMetadataSource | None = None,
    probe: SpaceProbe | None = None,
    remover: FileRemover | None = None,
) -> EvictionReport:
    """Free space under ``root`` until ``target_available_space`` bytes are available.

    Free space is probed once before the scan and once after it; the set
    collected by the scan is trimmed to the second measurement. A
    failing probe raises ``SpaceProbeError`` before anything is deleted.
    """
    if source is None:
        source = WalkMetadataSource()
    if probe is None:
        probe = DiskSpaceProbe()

    initial = EvictionTarget.from_space(
        target_available_space, _available_bytes(probe, root), age_floor
    )
    if initial.required_bytes == 0:
        logger.debug("%s already has at least %d bytes available", root, target_available_space)
        return EvictionReport(
            root=str(root),
            dry_run=dry_run,
            initial_required_bytes=0,
            final_required_bytes=0,
            selected_bytes=0,
            freed_bytes=0,
        )

    logger.debug("Need %d bytes under %s", initial.required_bytes, root)
    candidates = select_candidates(source.scan(root), initial)

    final = EvictionTarget.from_space(
        target_available_space, _available_bytes(probe, root), age_floor
    )
    if final.required_bytes != initial.required_bytes:
        logger.debug(
            "Deficit changed during scan: %d -> %d bytes",
            initial.required_bytes,
            final.required_bytes,
        )
    reconcile(candidates, final.required_bytes)
    selected_bytes = candidates.total_size

    result = execute(candidates, dry_run=dry_run, remover=remover)
    report = EvictionReport(
        root=str(root),
        dry_run=dry_run,
        initial_required_bytes=initial.required_bytes,
        final_required_bytes=final.required_bytes,
        selected_bytes=selected_bytes,
        freed_bytes=result.freed_bytes,
        evicted=[_evicted(c) for c in result.evicted],
        failed=[str(c.path) for c in result.failed],
    )
    if not report.target_reached:
        logger.warning(
            "Only %d of %d bytes could be reclaimed under %s; %s",
            report.freed_bytes,
            final.required_bytes,
            root,
            _shortfall_cause(report, initial),
        )
    return report


def _shortfall_cause(report: EvictionReport, initial: EvictionTarget) -> str:
    if report.failed:
        return f"{len(report.failed)} deletions failed"
    if (
        report.final_required_bytes > initial.required_bytes
        and report.selected_bytes >= initial.required_bytes
    ):
        return (
            f"the deficit grew from {initial.required_bytes} bytes during the scan "
            "and is not refilled until the next run"
        )
    return "not enough files are old enough"


def _available_bytes(probe: SpaceProbe, root: Path) -> int:
    try:
        return probe.available_bytes(root)
    except OSError as exc:
        raise SpaceProbeError(f"Cannot query available space for {root}: {exc}") from exc


def write_report(path: Path, report: EvictionReport) -> None:
    data = asdict(report)
    data["shortfall_bytes"] = report.shortfall_bytes
    data["target_reached"] = report.target_reached
    path.write_text(json.dumps(data, indent=2, sort_keys=True))


def _evicted(candidate: Candidate) -> EvictedFile:
    return EvictedFile(
        path=str(candidate.path),
        size=candidate.size,
        accessed=candidate.accessed,
    )
