"""Modification-time fingerprints for a watched path set."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple

from cache_warmer.logger import FingerprintError

from .config import ProjectConfiguration
from .paths import build_path_set

FingerprintMap = Dict[str, str]


def fingerprint(path: str) -> str:
    """Stable string form of the file's last-modified time."""
    try:
        st = os.stat(path)
    except OSError as exc:
        raise FingerprintError(path, exc) from exc
    return str(st.st_mtime_ns)


def build_fingerprint_map(paths: Iterable[str]) -> FingerprintMap:
    """Map every path to its fingerprint; one failed stat fails the whole map."""
    return {p: fingerprint(p) for p in paths}


def build_watch_map(config: ProjectConfiguration) -> FingerprintMap:
    """One-shot scan: enumerate the project and fingerprint every file."""
    return build_fingerprint_map(build_path_set(config))


def fingerprints_equal(a: Mapping[str, str], b: Mapping[str, str]) -> bool:
    """Same key set and same fingerprint for every key."""
    if a.keys() != b.keys():
        return False
    return all(a[k] == b[k] for k in a)


@dataclass(frozen=True)
class ChangeSummary:
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()
    modified: Tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.added or self.removed or self.modified)

    @property
    def total(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)

    def describe(self, limit: int = 5) -> str:
        """Short human summary, e.g. ``1 added, 2 modified (src/a.php, ...)``."""
        counts = [
            f"{len(paths)} {label}"
            for label, paths in (
                ("added", self.added),
                ("removed", self.removed),
                ("modified", self.modified),
            )
            if paths
        ]
        if not counts:
            return "no changes"
        sample = list(self.added + self.removed + self.modified)[:limit]
        more = ", ..." if self.total > limit else ""
        return f"{', '.join(counts)} ({', '.join(sample)}{more})"


def summarize_changes(old: Mapping[str, str], new: Mapping[str, str]) -> ChangeSummary:
    old_keys, new_keys = old.keys(), new.keys()
    return ChangeSummary(
        added=tuple(sorted(new_keys - old_keys)),
        removed=tuple(sorted(old_keys - new_keys)),
        modified=tuple(sorted(k for k in old_keys & new_keys if old[k] != new[k])),
    )


__all__ = [
    "FingerprintMap",
    "ChangeSummary",
    "fingerprint",
    "build_fingerprint_map",
    "build_watch_map",
    "fingerprints_equal",
    "summarize_changes",
]
