"""Shared helpers for CLI commands."""
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Optional

from cache_warmer.symfony.console import locate_project_root
from cache_warmer.watch_core.config import ProjectConfiguration
from cache_warmer.watch_core.utils import parse_comma_separated


def add_project_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("path", nargs="?", help="Symfony project directory")
    p.add_argument("--env", help="pass --env=ENV to the symfony console (default: dev)")
    p.add_argument("--no-debug", action="store_true", help="pass --no-debug to the symfony console")
    p.add_argument("--cache", action="store_true", help="clear cache instead of just warmup")
    p.add_argument("--force", action="store_true", help="force clear cache (rm -rf var/cache)")
    p.add_argument("--exclude", default="", help="comma-separated directories not to watch")
    p.add_argument("--vendor", default="", help="comma-separated list of vendors to watch")
    p.add_argument(
        "--pools",
        nargs="?",
        const="",
        default=None,
        help="comma-separated list of pools to clear (all pools when empty)",
    )
    p.add_argument("--sleep-ms", type=int, help="delay between two filesystem checks")


def build_config(args: argparse.Namespace) -> ProjectConfiguration:
    """Turn parsed arguments into a ProjectConfiguration (flags beat env)."""
    project_dir = locate_project_root(getattr(args, "path", None))

    force = bool(getattr(args, "force", False))
    pools_raw: Optional[str] = getattr(args, "pools", None)
    sleep_ms = getattr(args, "sleep_ms", None)

    cfg = ProjectConfiguration.from_env(
        project_dir,
        symfony_env=getattr(args, "env", None),
        symfony_debug=not getattr(args, "no_debug", False),
        # --force wins over --cache
        clear_cache=bool(getattr(args, "cache", False)) and not force,
        force_clear_cache=force,
        pools=tuple(parse_comma_separated(pools_raw)),
        pools_provided=pools_raw is not None,
        sleep_time=(max(sleep_ms, 0) / 1000.0) if sleep_ms is not None else None,
    )
    cfg = cfg.with_excludes(parse_comma_separated(getattr(args, "exclude", "")))
    return cfg.with_vendors(parse_comma_separated(getattr(args, "vendor", "")))


def hyperlink(url: str, text: str) -> str:
    """OSC 8 terminal hyperlink."""
    return f"\x1b]8;;{url}\x1b\\{text}\x1b]8;;\x1b\\"


def info(msg: str) -> None:
    print(f" > {msg}", file=sys.stderr)


def print_error(err: Optional[BaseException | str]) -> None:
    """Write ``/!\\ message /!\\`` to stderr; nothing for None."""
    if err is None:
        return
    print(f"/!\\ {err} /!\\", file=sys.stderr)


def output_json(data: Any) -> None:
    """Write JSON to stdout, single place for all commands."""
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")
