"""``pluginseal capabilities`` — report the crypto primitives this host exposes."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from pluginseal.bridge.crypto_bridge import select_backend_kind
from pluginseal.core.capabilities import BackendKind, default_capabilities
from pluginseal.core.errors import CryptoUnavailableError
from pluginseal.models.verification import SignatureAlgorithm

console = Console()


def _yes_no(flag: bool) -> str:
    return "[green]Yes[/green]" if flag else "[red]No[/red]"


def capabilities_cmd() -> None:
    """Show hash and signature backend availability."""
    probe = default_capabilities()

    table = Table(title="Crypto Capabilities")
    table.add_column("Algorithm", style="cyan")
    for kind in BackendKind:
        table.add_column(f"{kind.value} backend", justify="center")
    table.add_column("Selected", justify="center")

    for algorithm in SignatureAlgorithm:
        try:
            selected = select_backend_kind(algorithm, probe).value
        except CryptoUnavailableError:
            selected = "[bold red]unavailable[/bold red]"
        table.add_row(
            algorithm.value,
            *(_yes_no(probe.has_signature_backend(algorithm, kind)) for kind in BackendKind),
            selected,
        )

    console.print(table)
    console.print(f"Strong hash (sha256): {_yes_no(probe.has_strong_hash())}")
