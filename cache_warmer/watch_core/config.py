"""Project configuration record, defaults and the watch logger."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Mapping, Optional, Tuple

from cache_warmer.logger import get_logger, safe_float, safe_int

from .utils import get_boolean_env, parse_comma_separated


LOGGER = get_logger("cache_warmer.watch", json_format=get_boolean_env("CACHE_WARMER_JSON_LOGS"))

# Symfony/Flex layout defaults
CONSOLE_PATH = "bin/console"
PHP_BINARY = "php"
SYMFONY_ENV = "dev"
SYMFONY_DEBUG = True
DIR_CONFIG = "config"
DIR_SRC = "src"
DIR_TEMPLATES = "templates"
DIR_TRANSLATIONS = "translations"
DIR_MIGRATIONS = "migrations"
DIR_VENDOR = "vendor"
DIR_CACHE = "var/cache"
FRONT_CONTROLLER = "public/index.php"
ENV_GLOB = ".env*"
IGNORE_SUFFIX = ".gitignore"

DEFAULT_WATCH_DIRS: Tuple[str, ...] = (
    DIR_CONFIG,
    DIR_SRC,
    DIR_TEMPLATES,
    DIR_TRANSLATIONS,
    DIR_MIGRATIONS,
)
DEFAULT_EXCLUDED_DIRS: Tuple[str, ...] = (".git", ".github", "node_modules")

# Watcher sleep time between two filesystem checks
SLEEP_TIME_MS = 30
COMMAND_TIMEOUT_SECS = 600.0


@dataclass(frozen=True)
class ProjectConfiguration:
    """Everything one monitoring run needs. Never mutated once built."""

    project_dir: Path
    watch_dirs: Tuple[str, ...] = DEFAULT_WATCH_DIRS
    exclude_dirs: Tuple[str, ...] = DEFAULT_EXCLUDED_DIRS
    vendor_dir: str = DIR_VENDOR
    vendor_watch: bool = False
    vendor_list: Tuple[str, ...] = ()
    sleep_time: float = SLEEP_TIME_MS / 1000.0
    ignore_suffix: str = IGNORE_SUFFIX
    env_glob: str = ENV_GLOB
    front_controller: str = FRONT_CONTROLLER

    console_path: str = CONSOLE_PATH
    php_binary: str = PHP_BINARY
    symfony_env: str = SYMFONY_ENV
    symfony_debug: bool = SYMFONY_DEBUG
    clear_cache: bool = False
    force_clear_cache: bool = False
    pools: Tuple[str, ...] = field(default_factory=tuple)
    pools_provided: bool = False
    cache_dir: str = DIR_CACHE
    command_timeout: float = COMMAND_TIMEOUT_SECS

    @property
    def console_file(self) -> Path:
        return self.project_dir / self.console_path

    def with_excludes(self, extra: Iterable[str]) -> "ProjectConfiguration":
        """Append exclude fragments to the defaults (duplicates dropped)."""
        merged = list(self.exclude_dirs)
        for frag in extra:
            if frag and frag not in merged:
                merged.append(frag)
        return replace(self, exclude_dirs=tuple(merged))

    def with_vendors(self, vendors: Iterable[str]) -> "ProjectConfiguration":
        """Enable vendor watching for the given packages; no-op when empty."""
        names = tuple(v.strip("/") for v in vendors if v.strip("/"))
        if not names:
            return self
        return replace(self, vendor_watch=True, vendor_list=names)

    @classmethod
    def from_env(
        cls,
        project_dir: Path,
        environ: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "ProjectConfiguration":
        """Build a configuration from defaults, environment, then ``overrides``.

        Recognised variables: CACHE_WARMER_SLEEP_MS, CACHE_WARMER_EXCLUDES,
        CACHE_WARMER_VENDORS, CACHE_WARMER_CONSOLE, CACHE_WARMER_PHP and
        CACHE_WARMER_TIMEOUT.
        """
        env = os.environ if environ is None else environ
        values = {
            "sleep_time": safe_int(
                env.get("CACHE_WARMER_SLEEP_MS"), SLEEP_TIME_MS, LOGGER, "CACHE_WARMER_SLEEP_MS"
            )
            / 1000.0,
            "console_path": env.get("CACHE_WARMER_CONSOLE") or CONSOLE_PATH,
            "php_binary": env.get("CACHE_WARMER_PHP") or PHP_BINARY,
            "command_timeout": safe_float(
                env.get("CACHE_WARMER_TIMEOUT"), COMMAND_TIMEOUT_SECS, LOGGER, "CACHE_WARMER_TIMEOUT"
            ),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        cfg = cls(project_dir=Path(project_dir), **values)
        cfg = cfg.with_excludes(parse_comma_separated(env.get("CACHE_WARMER_EXCLUDES", "")))
        return cfg.with_vendors(parse_comma_separated(env.get("CACHE_WARMER_VENDORS", "")))


__all__ = [
    "LOGGER",
    "ProjectConfiguration",
    "DEFAULT_WATCH_DIRS",
    "DEFAULT_EXCLUDED_DIRS",
    "SLEEP_TIME_MS",
]
