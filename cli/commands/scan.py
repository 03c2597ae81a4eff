"""Scan command: one-shot report of the files a watch run would monitor."""
from __future__ import annotations

import argparse
import time


def cmd_scan(args: argparse.Namespace) -> None:
    from cache_warmer.watch_core.fingerprint import build_watch_map
    from cli.core import build_config, output_json

    config = build_config(args)
    start = time.monotonic()
    watch_map = build_watch_map(config)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    report = {
        "ok": True,
        "project": str(config.project_dir),
        "files": len(watch_map),
        "elapsed_ms": elapsed_ms,
        "vendor_watch": config.vendor_watch,
        "exclude": list(config.exclude_dirs),
    }
    if getattr(args, "list", False):
        report["paths"] = sorted(watch_map)
    output_json(report)
