"""``pluginseal verify PLUGIN_FILE`` — verify a plugin file's signature.

Policy and trusted keys come from ``PLUGINSEAL_*`` settings; command-line
options override them for this run.  In production the merged policy must
pass the production guard before any plugin is loaded.  Exit codes:

* ``0`` — signature verified
* ``1`` — not verified (lenient outcome)
* ``2`` — fatal: the plugin must not be loaded
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from pluginseal.config import SealConfig
from pluginseal.core.errors import PluginSecurityError, VerifierConfigError
from pluginseal.models.verification import SignatureAlgorithm
from pluginseal.plugins.loader import load_plugin_descriptor
from pluginseal.plugins.verifier import build_verifier

console = Console()

EXIT_VERIFIED = 0
EXIT_UNVERIFIED = 1
EXIT_FATAL = 2


def parse_key_option(value: str) -> tuple[str, str]:
    """Parse ``PUBLISHER=PEMFILE`` and read the PEM file."""
    publisher_id, sep, pem_path = value.partition("=")
    if not sep or not publisher_id or not pem_path:
        raise typer.BadParameter(
            f"Expected PUBLISHER=PEMFILE, got '{value}'.", param_hint="--key"
        )
    path = Path(pem_path)
    if not path.is_file():
        raise typer.BadParameter(f"PEM file not found: {pem_path}", param_hint="--key")
    return publisher_id, path.read_text(encoding="utf-8")


def verify_cmd(
    plugin_file: Path = typer.Argument(
        ...,
        help="Path to the plugin module (.py) to verify.",
    ),
    key: Optional[List[str]] = typer.Option(
        None,
        "--key",
        "-k",
        help="Trust a publisher key for this run: PUBLISHER=PEMFILE. Repeatable.",
    ),
    algorithm: Optional[SignatureAlgorithm] = typer.Option(
        None,
        "--algorithm",
        "-a",
        help="Signature algorithm (defaults to PLUGINSEAL_ALGORITHM).",
    ),
    strict: Optional[bool] = typer.Option(
        None,
        "--strict/--lenient",
        help="Override PLUGINSEAL_STRICT_MODE.",
    ),
    allow_self_signed: Optional[bool] = typer.Option(
        None,
        "--allow-self-signed/--no-allow-self-signed",
        help="Override PLUGINSEAL_ALLOW_SELF_SIGNED.",
    ),
) -> None:
    """Verify the signature of a plugin file against trusted publisher keys."""
    settings = SealConfig()
    trusted = dict(settings.trusted_public_keys)
    for item in key or []:
        publisher_id, pem = parse_key_option(item)
        trusted[publisher_id] = pem

    # Options override settings; the guard judges the merged policy.
    effective = settings.model_copy(
        update={
            "trusted_public_keys": trusted,
            "algorithm": algorithm or settings.algorithm,
            "strict_mode": settings.strict_mode if strict is None else strict,
            "allow_self_signed": (
                settings.allow_self_signed if allow_self_signed is None else allow_self_signed
            ),
        }
    )
    try:
        verifier = build_verifier(effective)
    except VerifierConfigError as exc:
        console.print(f"[bold red]Refusing to verify:[/bold red] {exc.message}")
        raise typer.Exit(code=EXIT_FATAL)

    try:
        descriptor = load_plugin_descriptor(plugin_file)
    except (FileNotFoundError, ImportError, AttributeError) as exc:
        console.print(f"[bold red]Cannot load plugin:[/bold red] {exc}")
        raise typer.Exit(code=EXIT_FATAL)

    try:
        result = asyncio.run(verifier.verify_plugin_signature(descriptor))
    except Exception as exc:
        # Any exception from the verifier means the plugin must not load.
        reason = exc.message if isinstance(exc, PluginSecurityError) else str(exc)
        console.print(
            Panel(
                f"[bold red]REJECTED[/bold red]  {descriptor.name} v{descriptor.version}\n"
                f"{type(exc).__name__}: {reason}",
                title="Plugin Signature",
                border_style="red",
            )
        )
        raise typer.Exit(code=EXIT_FATAL)

    if result.verified:
        console.print(
            Panel(
                f"[bold green]VERIFIED[/bold green]  {descriptor.name} v{descriptor.version}\n"
                f"Publisher: {result.publisher_id}\n"
                f"Algorithm: {result.algorithm}",
                title="Plugin Signature",
                border_style="green",
            )
        )
        raise typer.Exit(code=EXIT_VERIFIED)

    console.print(
        Panel(
            f"[bold yellow]UNVERIFIED[/bold yellow]  {descriptor.name} v{descriptor.version}\n"
            f"Publisher: {result.publisher_id or '-'}\n"
            f"Reason: {result.error}",
            title="Plugin Signature",
            border_style="yellow",
        )
    )
    raise typer.Exit(code=EXIT_UNVERIFIED)
