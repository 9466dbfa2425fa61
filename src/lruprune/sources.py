from __future__ import annotations

import fnmatch
import logging
import os
import shutil
import stat
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from lruprune.models import Candidate

logger = logging.getLogger(__name__)


class SpaceProbeError(RuntimeError):
    """Available space on the volume holding the root could not be read."""


class FileMetadataSource(Protocol):
    def scan(self, root: Path) -> Iterator[Candidate]: ...


class SpaceProbe(Protocol):
    def available_bytes(self, root: Path) -> int: ...


class WalkMetadataSource:
    """Yield a Candidate for every regular file under a root.

    Symlinks are neither followed nor yielded. Entries whose metadata cannot
    be read are skipped.
    """

    def __init__(self, exclude: Iterable[str] = ()) -> None:
        self.exclude = list(exclude)

    def scan(self, root: Path) -> Iterator[Candidate]:
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            rel_dir = Path(dirpath).relative_to(root).as_posix()
            if rel_dir != "." and self._excluded(rel_dir + "/"):
                dirnames[:] = []
                continue
            for name in filenames:
                full_path = Path(dirpath) / name
                if self._excluded(full_path.relative_to(root).as_posix()):
                    continue
                try:
                    st = os.lstat(full_path)
                except OSError as exc:
                    logger.debug("Skipping %s: %s", full_path, exc)
                    continue
                if not stat.S_ISREG(st.st_mode):
                    continue
                yield Candidate(path=full_path, size=st.st_size, accessed=st.st_atime)

    def _excluded(self, rel_path: str) -> bool:
        return any(fnmatch.fnmatch(rel_path, pattern) for pattern in self.exclude)

    @staticmethod
    def _on_walk_error(exc: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)


class DiskSpaceProbe:
    def available_bytes(self, root: Path) -> int:
        return shutil.disk_usage(root).free
