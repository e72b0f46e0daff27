"""``pluginseal fingerprint PLUGIN_FILE`` — print a plugin's code hash.

This is the value a publisher signs.  ``--fallback`` forces the
non-cryptographic rolling hash, for comparison only.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from pluginseal.core.capabilities import StaticCapabilities, default_capabilities
from pluginseal.core.errors import PluginHashError
from pluginseal.core.hasher import compute_plugin_hash, select_hash_strategy
from pluginseal.plugins.loader import load_plugin_descriptor

console = Console()


def fingerprint_cmd(
    plugin_file: Path = typer.Argument(
        ...,
        help="Path to the plugin module (.py) to fingerprint.",
    ),
    fallback: bool = typer.Option(
        False,
        "--fallback",
        help="Force the non-cryptographic fallback hash (NOT secure).",
    ),
) -> None:
    """Print the fingerprint a publisher signs for PLUGIN_FILE."""
    try:
        descriptor = load_plugin_descriptor(plugin_file)
    except (FileNotFoundError, ImportError, AttributeError) as exc:
        console.print(f"[bold red]Cannot load plugin:[/bold red] {exc}")
        raise typer.Exit(code=2)

    probe = StaticCapabilities(strong_hash=False) if fallback else default_capabilities()
    try:
        digest = compute_plugin_hash(descriptor, probe)
    except PluginHashError as exc:
        console.print(f"[bold red]Cannot fingerprint plugin:[/bold red] {exc.message}")
        raise typer.Exit(code=2)

    strategy = select_hash_strategy(probe)
    console.print(f"[bold]{descriptor.name}[/bold] v{descriptor.version}")
    console.print(f"  strategy: [cyan]{strategy.value}[/cyan]")
    console.print(f"  hash:     {digest}")
    if fallback:
        console.print("[yellow]Fallback hash is not a security control.[/yellow]")
