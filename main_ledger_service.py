"""Mini README: Entry point CLI for the SolarFlow ledger service.

This script exposes a Typer CLI that starts the FastAPI ledger API with
configurable host, port, and production flags, and prints a quick summary
of a freshly seeded ledger. Settings come from ``SOLARFLOW_*`` environment
variables when available.
"""

from __future__ import annotations

import json

import typer
import uvicorn

from solarflow.configuration import get_settings
from solarflow.ledger import LedgerService
from solarflow.logging_utils import configure_root_logger

cli = typer.Typer(help="Launch and inspect the SolarFlow energy-trading ledger.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the 0.0.0.0 / :: wildcard addresses.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting SolarFlow ledger on {effective_host}:{effective_port}.\n"
        f"API docs at http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "solarflow.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def summary() -> None:
    """Print the dashboard summary of a ledger built from settings."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    service = LedgerService.from_settings(settings)
    payload = service.get_summary().as_dict()
    payload["peak_rate"] = str(service.get_rate(peak=True))
    typer.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    cli()
