"""pluginseal CLI — Typer-based command-line interface.

Provides the ``pluginseal`` command with subcommands for inspecting crypto
capabilities, fingerprinting plugin files, verifying their signatures and
listing configured publishers.

All output uses Rich for formatted terminal display.
"""
