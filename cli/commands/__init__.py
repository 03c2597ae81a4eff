"""Subcommand implementations, imported lazily by cli.main."""
