"""Enumeration of the files a project run watches.

The walk prunes directories in place (``os.walk``), dropping:

* any directory whose project-relative path contains an exclude fragment
  (plain substring match, so ``.git`` also drops ``.github``),
* vendor directories, unless vendor watching is on; with a vendor list only
  ``vendor/<name>`` subtrees survive.

Files ending with the ignore suffix (``.gitignore``) are never collected.
"""

from __future__ import annotations

import glob
import os
import re
from typing import Iterable, List, Optional, Sequence

from cache_warmer.logger import EnumerationError, ProjectFileNotFoundError

from .config import LOGGER, ProjectConfiguration


def _is_under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + os.sep)


def _relpath(path: str, project_dir: str) -> str:
    rel = os.path.relpath(path, project_dir)
    return "" if rel == "." else rel


def is_excluded_dir(rel_dir: str, fragments: Iterable[str]) -> bool:
    """True when ``rel_dir`` contains any exclude fragment."""
    return any(frag and frag in rel_dir for frag in fragments)


class _VendorGate:
    """Decides which vendor paths a walk may keep."""

    def __init__(self, config: ProjectConfiguration, walk_root: str, vendor_watch: bool):
        project_dir = os.path.abspath(str(config.project_dir))
        roots = [os.path.join(project_dir, config.vendor_dir)]
        nested = os.path.join(walk_root, config.vendor_dir)
        if nested not in roots:
            roots.append(nested)
        self.roots = roots
        self.watch = vendor_watch
        self.allowed = [
            os.path.join(root, os.path.normpath(name))
            for root in roots
            for name in config.vendor_list
        ]

    def _in_vendor(self, path: str) -> bool:
        return any(_is_under(path, root) for root in self.roots)

    def keep_dir(self, path: str) -> bool:
        if not self._in_vendor(path):
            return True
        if not self.watch:
            return False
        if not self.allowed:
            return True
        # descend into ancestors of allowed packages (vendor/, vendor/symfony/)
        return any(_is_under(path, a) or _is_under(a, path) for a in self.allowed)

    def keep_file(self, path: str) -> bool:
        if not self._in_vendor(path):
            return True
        if not self.watch:
            return False
        if not self.allowed:
            return True
        return any(_is_under(path, a) for a in self.allowed)


def _raise_walk_error(exc: OSError) -> None:
    raise EnumerationError(f"error while walking {exc.filename}: {exc}") from exc


def find_files(
    config: ProjectConfiguration,
    walk_root: str | os.PathLike,
    vendor_watch: Optional[bool] = None,
) -> List[str]:
    """Walk ``walk_root`` and return the absolute paths of the files to watch.

    ``vendor_watch`` defaults to the configuration's flag. Any I/O error
    during the walk aborts it with :class:`EnumerationError`.
    """
    project_dir = os.path.abspath(str(config.project_dir))
    root_abs = os.path.abspath(str(walk_root))
    if vendor_watch is None:
        vendor_watch = config.vendor_watch
    gate = _VendorGate(config, root_abs, vendor_watch)
    fragments = config.exclude_dirs

    if is_excluded_dir(_relpath(root_abs, project_dir), fragments) or not gate.keep_dir(root_abs):
        return []

    files: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root_abs, onerror=_raise_walk_error):
        keep = []
        for d in dirnames:
            full = os.path.join(dirpath, d)
            if is_excluded_dir(_relpath(full, project_dir), fragments):
                continue
            if not gate.keep_dir(full):
                continue
            keep.append(d)
        dirnames[:] = keep

        for f in filenames:
            if f.endswith(config.ignore_suffix):
                continue
            full = os.path.join(dirpath, f)
            # sockets, FIFOs and dangling links (editor lock files) have no usable mtime
            if not gate.keep_file(full) or not os.path.isfile(full):
                continue
            files.append(full)
    return files


def glob_project_files(config: ProjectConfiguration, pattern: str) -> List[str]:
    """Regular files matching ``pattern`` relative to the project directory."""
    project_dir = os.path.abspath(str(config.project_dir))
    try:
        matches = glob.glob(os.path.join(glob.escape(project_dir), pattern))
    except (re.error, OSError, ValueError) as exc:
        raise EnumerationError(f"error while globbing files: {exc}") from exc
    return [m for m in matches if os.path.isfile(m)]


def require_project_file(config: ProjectConfiguration, rel_path: str) -> str:
    """Absolute path of a mandatory project file."""
    full = os.path.join(os.path.abspath(str(config.project_dir)), rel_path)
    try:
        os.stat(full)
    except FileNotFoundError:
        raise ProjectFileNotFoundError(full) from None
    except OSError as exc:
        raise EnumerationError(f"can't read {full}: {exc}") from exc
    return full


def _vendor_walk_roots(config: ProjectConfiguration) -> Sequence[str]:
    vendor_root = os.path.join(os.path.abspath(str(config.project_dir)), config.vendor_dir)
    if not config.vendor_list:
        return [vendor_root]
    return [os.path.join(vendor_root, os.path.normpath(name)) for name in config.vendor_list]


def build_path_set(config: ProjectConfiguration) -> frozenset:
    """Return the set of absolute paths watched for ``config``."""
    project_dir = os.path.abspath(str(config.project_dir))
    files = set(glob_project_files(config, config.env_glob))
    files.add(require_project_file(config, config.front_controller))

    for name in config.watch_dirs:
        root = os.path.join(project_dir, name)
        if not os.path.isdir(root):
            LOGGER.debug(f"Skipping missing watch directory {root}")
            continue
        files.update(find_files(config, root))

    if config.vendor_watch:
        for root in _vendor_walk_roots(config):
            if not os.path.isdir(root):
                LOGGER.warning(f"Vendor path {root} does not exist, not watching it")
                continue
            files.update(find_files(config, root, vendor_watch=True))

    return frozenset(files)


__all__ = [
    "build_path_set",
    "find_files",
    "glob_project_files",
    "require_project_file",
    "is_excluded_dir",
]
