"""Watch command: refresh the Symfony cache on every file change."""
from __future__ import annotations

import argparse
import os
import sys
import time
from datetime import datetime

from cli._version import __version__, version_link
from cli.core import build_config, hyperlink, info, print_error


def cmd_watch(args: argparse.Namespace) -> None:
    """Check the project, scan it once, then watch until interrupted."""
    from cache_warmer.symfony.console import console_version, verify_console
    from cache_warmer.watch_core.fingerprint import build_watch_map
    from cache_warmer.watch_core.loop import TickResult, run_monitoring_loop
    from cache_warmer.watch_core.utils import format_duration

    info(f"Version: {hyperlink(version_link(__version__), __version__)}")
    config = build_config(args)
    info(f"Project directory: {config.project_dir}")

    console = verify_console(config)
    info(f"Symfony console path: {console}")
    info(f"Symfony env: {console_version(config)}")

    start = time.monotonic()
    baseline = build_watch_map(config)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    if not baseline:
        print_error("no file to watch found")
        return

    info(f"{len(baseline)} file(s) watched at {config.project_dir} in {format_duration(elapsed_ms)}")
    info(f"CTRL+C to stop watching or run kill -9 {os.getpid()}.")

    def report(result: TickResult) -> None:
        at = datetime.fromtimestamp(result.started_at).strftime("%H:%M:%S")
        print(file=sys.stderr)
        info(f"Update detected at {at} > refreshing cache")
        if result.error is not None:
            print_error(result.error)
        info(f"Done in {format_duration(result.elapsed_ms)}")
        info(f"{result.file_count} file(s) watched at {config.project_dir}")
        info(f"CTRL+C to stop watching or run kill -9 {os.getpid()}.")

    run_monitoring_loop(config, baseline, on_change=report)
