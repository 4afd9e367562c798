"""Entry point: python -m quay_mcp --url https://quay.io

Discovers the registry's API and serves it over MCP stdio, or prints a
summary of the discovered tools with --example.
"""

from __future__ import annotations

import asyncio
import dataclasses
import sys

import click
from loguru import logger

from .client import QuayClient
from .config import Settings, parse_tags
from .errors import CatalogError, ConfigError, DiscoveryError

_EXAMPLE_TOOL_COUNT = 3


def _configure_logging(level: str) -> None:
    # stdout carries the MCP stdio stream
    logger.remove()
    logger.add(sys.stderr, level=level)


def _print_example(client: QuayClient) -> None:
    tools = client.tool_surface
    click.echo(f"Found {len(tools)} tools from the API:")

    for tool in tools[:_EXAMPLE_TOOL_COUNT]:
        click.echo(f"- Tool: {tool.name}")
        click.echo(f"  Description: {tool.description}")
        if tool.required:
            click.echo(f"  Required parameters: {', '.join(tool.required)}")
        optional = [p for p in tool.optional if p != "resource_uri"]
        if optional:
            click.echo(f"  Optional parameters: {', '.join(optional)}")

    if len(tools) > _EXAMPLE_TOOL_COUNT:
        click.echo(f"... and {len(tools) - _EXAMPLE_TOOL_COUNT} more tools")

    spec = client.spec
    if spec is not None:
        click.echo(f"\nAPI description loaded from: {client.registry_url}")
        click.echo(f"Title: {spec.title or '-'}  Version: {spec.version or '-'}")
        click.echo(f"Host: {spec.host or '-'}")
        click.echo(f"Base Path: {spec.base_path or '-'}")
        click.echo(f"Schemes: {', '.join(spec.schemes) or '-'}")


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--url", "registry_url", help="Quay registry URL (or QUAY_URL)")
@click.option("--token", help="OAuth token for authentication (or QUAY_OAUTH_TOKEN)")
@click.option("--tags", help="Comma-separated API tags to expose (or QUAY_ALLOWED_TAGS)")
@click.option("--timeout", type=float, help="Per-request timeout in seconds")
@click.option("--example", is_flag=True, help="Print discovered tools instead of serving")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def main(registry_url, token, tags, timeout, example, verbose):
    """Serve a Quay registry's read-only API as MCP tools over stdio.

    Examples:
      quay-mcp --url https://quay.io
      quay-mcp --url https://quay.io --token YOUR_TOKEN
      quay-mcp --url https://quay.io --example
    """
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        raise click.UsageError(str(e))
    overrides = {
        "registry_url": registry_url,
        "token": token,
        "allowed_tags": parse_tags(tags) if tags else None,
        "timeout": timeout,
        "log_level": "DEBUG" if verbose else None,
    }
    settings = dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    _configure_logging(settings.log_level)

    if not settings.registry_url:
        raise click.UsageError("registry URL is required (--url or QUAY_URL)")

    client = QuayClient(
        settings.registry_url,
        settings.token,
        allowed_tags=settings.allowed_tags,
        timeout=settings.timeout,
    )

    try:
        client.discover()
    except (DiscoveryError, CatalogError) as e:
        logger.error(f"Failed to start: {e}")
        sys.exit(1)

    if example:
        _print_example(client)
        return

    from .server import serve

    logger.info(f"Serving {len(client.tool_surface)} tools for {settings.registry_url}")
    try:
        asyncio.run(serve(client))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
