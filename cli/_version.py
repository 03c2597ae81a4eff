"""Version management using package metadata."""
from __future__ import annotations

import importlib.metadata
import re

REPOSITORY = "https://github.com/lettland/cache-warmer"

try:
    __version__ = importlib.metadata.version("cache-warmer")
except importlib.metadata.PackageNotFoundError:
    __version__ = "nightly"

_SEMVER_RE = re.compile(r"^v?\d+\.\d+\.\d+(-[a-zA-Z0-9]+(\.[a-zA-Z0-9]+)*)?$")


def is_semantic_version(version: str) -> bool:
    return bool(_SEMVER_RE.match(version))


def version_link(version: str) -> str:
    """Release page for tagged versions, commit page otherwise."""
    if is_semantic_version(version) or version == "nightly":
        return f"{REPOSITORY}/releases/tag/{version}"
    return f"{REPOSITORY}/commit/{version}"
