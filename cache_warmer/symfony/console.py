"""Symfony console collaborators: project lookup, console checks, cache commands."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from cache_warmer.logger import (
    ConfigurationError,
    ConsoleNotFoundError,
    RebuildError,
    get_logger,
)
from cache_warmer.subprocess_manager import run_subprocess_sync

if TYPE_CHECKING:  # pragma: no cover
    from cache_warmer.watch_core.config import ProjectConfiguration

logger = get_logger(__name__)

# Swappable for tests; same signature as run_subprocess_sync
_runner = run_subprocess_sync


def locate_project_root(path: Optional[str], cwd: Optional[str] = None) -> Path:
    """Resolve the project directory given on the command line.

    Relative paths are taken from ``cwd`` (default: the working directory).
    """
    if not path:
        raise ConfigurationError("no path provided")
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = Path(cwd or os.getcwd()) / candidate
    candidate = Path(os.path.abspath(candidate))
    if not candidate.exists():
        raise ConfigurationError(f"project directory not found: {candidate}")
    if not candidate.is_dir():
        raise ConfigurationError(f"project path is not a directory: {candidate}")
    return candidate


def verify_console(config: "ProjectConfiguration") -> Path:
    """Return the console path, or raise when it is missing."""
    console = config.console_file
    if not console.is_file():
        raise ConsoleNotFoundError(f"symfony console not found at {console}")
    return console


def console_command(config: "ProjectConfiguration", *args: str) -> List[str]:
    """Build ``php bin/console <args> --env=<env> [--no-debug]``."""
    cmd = [config.php_binary, str(config.console_file), *args, f"--env={config.symfony_env}"]
    if not config.symfony_debug:
        cmd.append("--no-debug")
    return cmd


def _run_console(config: "ProjectConfiguration", *args: str) -> str:
    cmd = console_command(config, *args)
    logger.debug(f"Running {' '.join(cmd)}")
    result = _runner(cmd, timeout=config.command_timeout, cwd=str(config.project_dir))
    output = (result.get("stdout") or "") + (result.get("stderr") or "")
    if not result.get("ok"):
        raise RebuildError(
            f"{' '.join(args)} failed with exit code {result.get('code')}: {output.strip()}",
            output=output,
        )
    return output


def console_version(config: "ProjectConfiguration") -> str:
    """Output of ``bin/console --version``, stripped."""
    return _run_console(config, "--version").strip()


def remove_cache_dir(config: "ProjectConfiguration") -> None:
    """``rm -rf var/cache``; a missing directory is fine."""
    cache_dir = config.project_dir / config.cache_dir
    try:
        shutil.rmtree(cache_dir)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise RebuildError(f"can't remove {cache_dir}: {exc}") from exc
    logger.debug(f"Removed {cache_dir}")


def warmup_commands(config: "ProjectConfiguration") -> List[List[str]]:
    """Console argument lists run by :func:`cache_warmup`, in order."""
    commands = [["cache:clear"] if config.clear_cache and not config.force_clear_cache else ["cache:warmup"]]
    if config.pools_provided:
        commands.append(["cache:pool:clear", *(config.pools or ("--all",))])
    return commands


def cache_warmup(config: "ProjectConfiguration") -> str:
    """Refresh the Symfony cache and return the combined console output.

    Raises :class:`RebuildError` when a command fails; later commands are
    not run in that case.
    """
    if config.force_clear_cache:
        remove_cache_dir(config)
    outputs = [_run_console(config, *args) for args in warmup_commands(config)]
    return "".join(outputs)


__all__ = [
    "locate_project_root",
    "verify_console",
    "console_command",
    "console_version",
    "remove_cache_dir",
    "warmup_commands",
    "cache_warmup",
]
