"""Command-line interface for smtp-bridge.

Usage:
    smtp-bridge serve [--host HOST] [--port PORT]
    smtp-bridge check

Both commands read their configuration from the environment (see
:mod:`smtp_bridge.config`). Any configuration or transport error is printed
to stderr and the process exits with status 1.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from smtp_bridge import __version__
from smtp_bridge.config import Settings, load_settings
from smtp_bridge.errors import ConfigError, TransportError
from smtp_bridge.logger import configure_logging
from smtp_bridge.transport import build_transport

console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def _load_or_exit() -> Settings:
    """Load settings from the environment, exiting with status 1 on error."""
    try:
        return load_settings()
    except ConfigError as exc:
        print_error(f"failed to load configuration from environment: {exc}")
        sys.exit(1)


def settings_table(settings: Settings) -> Table:
    """Render the effective settings, with the password masked."""
    table = Table(title="SMTP Bridge Settings")
    table.add_column("Variable", style="cyan")
    table.add_column("Value")
    table.add_row("HTTP_BIND", settings.http_bind)
    table.add_row("SMTP_HOST", settings.smtp_host)
    table.add_row("SMTP_PORT", str(settings.smtp_port))
    table.add_row("SMTP_USERNAME", settings.smtp_username)
    table.add_row("SMTP_PASSWORD", "********")
    table.add_row("SMTP_FROM", str(settings.smtp_from))
    table.add_row("SMTP_TLS", "[green]yes[/green]" if settings.smtp_use_tls else "[yellow]no[/yellow]")
    table.add_row("SMTP_TIMEOUT", f"{settings.smtp_timeout:g}s")
    table.add_row("SMTP_POOL_TTL", f"{settings.smtp_pool_ttl}s")
    return table


@click.group()
@click.version_option(__version__)
def main() -> None:
    """Relay single emails from HTTP requests to an SMTP server."""
    configure_logging(os.getenv("LOG_LEVEL"))


@main.command("serve")
@click.option("--host", "-h", default=None, help="Host to bind to (overrides HTTP_BIND).")
@click.option("--port", "-p", type=click.IntRange(0, 65535), default=None, help="Port to listen on (overrides HTTP_BIND).")
def serve(host: Optional[str], port: Optional[int]) -> None:
    """Start the HTTP server."""
    from smtp_bridge.server import run_server

    settings = _load_or_exit()
    try:
        run_server(settings, host=host, port=port)
    except TransportError as exc:
        print_error(str(exc))
        sys.exit(1)


@main.command("check")
def check() -> None:
    """Validate the configuration and the SMTP transport without serving."""
    settings = _load_or_exit()
    try:
        build_transport(settings)
    except TransportError as exc:
        print_error(str(exc))
        sys.exit(1)
    console.print(settings_table(settings))
    print_success("configuration is valid")


if __name__ == "__main__":
    main()
