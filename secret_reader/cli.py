"""Click CLI for the secret reader."""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Optional

import click
from dotenv import load_dotenv

from totp_mcp.errors import TotpParseError
from totp_mcp.generator import generate, iter_codes
from totp_mcp.otpauth import TotpParams, parse

from .config import ConfigError, ReaderConfig
from .secrets import read_secrets

load_dotenv()

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _build_config(**options: object) -> ReaderConfig:
    """Merge CLI options over the environment; exit 1 without secrets."""
    try:
        return ReaderConfig.from_env(**options).require_secrets()
    except ConfigError as exc:
        logger.error("%s", exc)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _parse_or_exit(uri: str) -> TotpParams:
    try:
        return parse(uri)
    except TotpParseError as exc:
        raise click.UsageError(str(exc)) from exc


secrets_option = click.option(
    "--secrets",
    "-s",
    "secret_names",
    multiple=True,
    help="Secret names to display (comma-separated, repeatable)",
)
namespace_option = click.option("--namespace", "-n", default=None, help="Secret name prefix")
region_option = click.option("--region", default=None, help="AWS region for Secrets Manager")


@click.group()
@click.option("--log-level", default="INFO", show_default=True, help="Logging level")
def cli(log_level: str) -> None:
    """Secret Reader CLI."""
    _configure_logging(log_level)


@cli.command("serve")
@secrets_option
@namespace_option
@region_option
@click.option("--port", "-p", type=int, default=None, help="Listen port [default: 3000]")
@click.option("--host", default=None, help="Listen address [default: 0.0.0.0]")
def serve_cmd(
    secret_names: tuple[str, ...],
    namespace: Optional[str],
    region: Optional[str],
    port: Optional[int],
    host: Optional[str],
) -> None:
    """Serve the secrets page and API."""
    config = _build_config(
        secret_names=secret_names, namespace=namespace, region=region, port=port, host=host
    )
    logger.info("Starting secret-reader service")
    logger.info("Configured to read secrets: %s", config.secret_names)
    logger.info("Namespace: %s", config.namespace or "<none>")
    _run_server(config)


def _run_server(config: ReaderConfig) -> None:
    import uvicorn

    from .api import create_api

    logger.info("Server listening on %s:%d", config.host, config.port)
    uvicorn.run(create_api(config), host=config.host, port=config.port, log_level="info")


@cli.command("code")
@click.argument("uri")
@click.option(
    "--at", "at", type=click.IntRange(min=0), default=None, help="Unix time to compute the code for"
)
@click.option("--json", "output_json", is_flag=True, help="Output raw JSON")
def code_cmd(uri: str, at: Optional[int], output_json: bool) -> None:
    """Print the TOTP code for an otpauth URI."""
    params = _parse_or_exit(uri)
    now = time.time() if at is None else at
    result = generate(params, now)
    remaining = result.seconds_remaining(now)
    if output_json:
        payload = result.model_dump()
        payload["seconds_remaining"] = remaining
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(f"{result.code} ({remaining}s remaining)")


@cli.command("watch")
@click.argument("uri")
@click.option("--count", type=int, default=None, help="Stop after this many refreshes")
def watch_cmd(uri: str, count: Optional[int]) -> None:
    """Print a refreshed TOTP code every second."""
    params = _parse_or_exit(uri)
    for tick, (result, remaining) in enumerate(iter_codes(params), start=1):
        click.echo(f"{result.code} ({remaining}s remaining)")
        if count is not None and tick >= count:
            break


@cli.command("show")
@secrets_option
@namespace_option
@region_option
@click.option("--json", "output_json", is_flag=True, help="Output raw JSON")
def show_cmd(
    secret_names: tuple[str, ...],
    namespace: Optional[str],
    region: Optional[str],
    output_json: bool,
) -> None:
    """Print configured secrets with their current TOTP codes."""
    config = _build_config(secret_names=secret_names, namespace=namespace, region=region)
    views = read_secrets(config)
    if output_json:
        click.echo(json.dumps([v.model_dump() for v in views], indent=2))
        return
    for view in views:
        click.echo(f"[{view.name}]")
        if view.error:
            click.echo(f"  {view.error}")
            continue
        for field in view.fields:
            if field.totp:
                click.echo(
                    f"  {field.key}: {field.totp.code} ({field.totp.seconds_remaining}s remaining)"
                )
            elif field.totp_error:
                click.echo(f"  {field.key}: {field.totp_error}")
            else:
                click.echo(f"  {field.key}: {field.value}")


if __name__ == "__main__":
    cli()
