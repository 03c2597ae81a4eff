"""CLI entry point: argparse dispatcher for all subcommands."""
from __future__ import annotations

import argparse
import sys
import traceback


# ---------------------------------------------------------------------------
# Command registry: command name → (module_path, function_name)
# Lazy-imported at dispatch time to keep startup fast.
# ---------------------------------------------------------------------------
COMMANDS = {
    "watch": ("cli.commands.watch", "cmd_watch"),
    "scan":  ("cli.commands.scan",  "cmd_scan"),
}


# ---------------------------------------------------------------------------
# Parser builder
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    from cli._version import __version__
    from cli.core import add_project_args

    parser = argparse.ArgumentParser(
        prog="cache-warmer",
        description="Watch a Symfony project and refresh its cache on every change",
    )
    parser.add_argument("--debug", action="store_true", help="Show stack traces on error")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    # watch
    p = sub.add_parser("watch", help="Refresh the cache whenever a watched file changes")
    add_project_args(p)

    # scan
    p = sub.add_parser("scan", help="List what would be watched, as JSON")
    add_project_args(p)
    p.add_argument("--list", action="store_true", help="Include every watched path")

    return parser


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    debug = "--debug" in argv
    if debug:
        argv = [arg for arg in argv if arg != "--debug"]
    args = parser.parse_args(argv)
    args.debug = debug

    entry = COMMANDS.get(args.command)
    if not entry:
        parser.print_help()
        sys.exit(1)

    mod_path, fn_name = entry
    from cli.core import print_error

    try:
        import importlib
        mod = importlib.import_module(mod_path)
        fn = getattr(mod, fn_name)
        fn(args)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as exc:
        print_error(exc)
        if args.debug:
            traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
