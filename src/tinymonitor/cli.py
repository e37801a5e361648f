"""Command-line interface for the Tiny-Monitor gateway."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import structlog
from pydantic import ValidationError

from tinymonitor import __version__
from tinymonitor.config.config import Config, load_config
from tinymonitor.observability import configure_logging
from tinymonitor.server import run_server
from tinymonitor.web.handler import GatewayHandler

logger = structlog.get_logger(__name__)


def _load(ctx: click.Context, overrides: Optional[Dict[str, Dict[str, Any]]] = None) -> Config:
    """Load configuration, apply command-line overrides and configure logging."""
    try:
        config = load_config(ctx.obj["config_path"])
        if overrides:
            data = config.model_dump()
            for section, values in overrides.items():
                data[section].update({k: v for k, v in values.items() if v is not None})
            config = Config(**data)
    except (ValidationError, FileNotFoundError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    if ctx.obj["log_level"]:
        config.monitoring.log_level = ctx.obj["log_level"]
    configure_logging(config.monitoring)
    return config


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """Tasmota Tiny-Monitor - serve a power-meter status page as JSON."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None
    ctx.obj["log_level"] = log_level


@cli.command()
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port to bind to")
@click.option("--upstream-url", default=None, help="Device status page URL")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], upstream_url: Optional[str]) -> None:
    """Run the gateway until SIGINT/SIGTERM."""
    config = _load(ctx, {"server": {"host": host, "port": port}, "upstream": {"url": upstream_url}})
    sys.exit(run_server(config))


@cli.command()
@click.pass_context
def probe(ctx: click.Context) -> None:
    """Fetch and parse the status page once and print the JSON reply."""
    config = _load(ctx)
    handler = GatewayHandler(config)
    reply = asyncio.run(handler.handle("GET"))
    click.echo(reply.body)
    sys.exit(0 if reply.status_code == 200 else 1)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
