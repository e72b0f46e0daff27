"""Main Typer application — imports and registers all CLI commands.

Entry point: ``pluginseal`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging
from typing import Optional

import typer

from pluginseal.cli.commands.capabilities_cmd import capabilities_cmd
from pluginseal.cli.commands.fingerprint import fingerprint_cmd
from pluginseal.cli.commands.verify import verify_cmd
from pluginseal.config import SealConfig

app = typer.Typer(
    name="pluginseal",
    help="pluginseal: verify plugin signatures against trusted publisher keys.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to PLUGINSEAL_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging before any command runs."""
    level = (log_level or SealConfig().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="capabilities", help="Show available hash and signature backends.")(
    capabilities_cmd
)
app.command(name="fingerprint", help="Print the code hash a publisher signs.")(
    fingerprint_cmd
)
app.command(name="verify", help="Verify a plugin file's signature.")(verify_cmd)


@app.command(name="publishers", help="List trusted publishers from settings.")
def publishers_cmd() -> None:
    """List publishers configured through PLUGINSEAL_TRUSTED_PUBLIC_KEYS."""
    from rich.console import Console
    from rich.table import Table

    from pluginseal.core.hasher import key_fingerprint

    console = Console()
    settings = SealConfig()
    if not settings.trusted_public_keys:
        console.print("[dim]No trusted publishers configured.[/dim]")
        return

    table = Table(title="Trusted Publishers")
    table.add_column("Publisher", style="cyan")
    table.add_column("Key fingerprint", style="green")
    for publisher_id, pem in sorted(settings.trusted_public_keys.items()):
        table.add_row(publisher_id, key_fingerprint(pem))
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
