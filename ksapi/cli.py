#!/usr/bin/env python3
"""
ksapi command-line interface

Thin debugging surface over the Service facade: send REST requests,
GraphQL documents and pagination URLs with the configured identity and
print the decoded JSON.
"""

import asyncio
import json
import sys
from typing import Any, Dict, Optional, Tuple

import click

from . import __version__
from .call import ServiceCall
from .config import ClientSettings, EnvironmentType, LogLevel, load_settings
from .exceptions import ServiceError
from .logging import cleanup_logging, setup_logging
from .models.route import Route
from .service import Service


def parse_query(pairs: Tuple[str, ...]) -> Dict[str, Any]:
    """Turn repeated ``key=value`` options into a query mapping."""
    query: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--query")
        query[key] = value
    return query


def run_call(settings: ClientSettings, make_call: Any) -> None:
    """Run one service call and print its JSON result, exiting 1 on failure."""

    async def execute() -> Any:
        async with Service.from_settings(settings) as service:
            call: ServiceCall[Any] = make_call(service)
            return await call

    try:
        result = asyncio.run(execute())
    except ServiceError as e:
        click.echo(f"✗ {e.kind.value}: {e.message}", err=True)
        sys.exit(1)

    click.echo(json.dumps(result, indent=2, default=str))


@click.group()
@click.version_option(version=__version__)
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True), help='Configuration file path')
@click.option(
    '--env',
    type=click.Choice([e.value for e in EnvironmentType if e is not EnvironmentType.CUSTOM]),
    help='Server environment preset',
)
@click.option('--token', '-t', help='OAuth token to authenticate with')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Optional[str],
    env: Optional[str],
    token: Optional[str],
    verbose: bool,
) -> None:
    """ksapi - Kickstarter API client."""
    try:
        settings = load_settings(config_file)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    updates: Dict[str, Any] = {}
    if env is not None:
        updates["environment"] = EnvironmentType(env)
        updates["server"] = None
    if token is not None:
        updates["oauth_token"] = token
    if updates:
        settings = settings.model_copy(update=updates)

    logging_config = settings.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": LogLevel.DEBUG})
    setup_logging(logging_config)
    ctx.call_on_close(cleanup_logging)

    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings


@cli.command()
@click.argument('path')
@click.option('--query', '-q', multiple=True, help='Query parameter as key=value (repeatable)')
@click.option('--no-auth', is_flag=True, help='Do not send the Authorization header')
@click.pass_context
def get(ctx: click.Context, path: str, query: Tuple[str, ...], no_auth: bool) -> None:
    """Send a GET request to a REST PATH."""
    route = Route.get(path, parse_query(query), requires_auth=not no_auth)
    run_call(ctx.obj['settings'], lambda service: service.request(route, Any))


@cli.command()
@click.argument('path')
@click.option('--query', '-q', multiple=True, help='Body parameter as key=value (repeatable)')
@click.pass_context
def post(ctx: click.Context, path: str, query: Tuple[str, ...]) -> None:
    """Send a POST request with a JSON body to a REST PATH."""
    route = Route.post(path, parse_query(query))
    run_call(ctx.obj['settings'], lambda service: service.request_optional(route, Any))


@cli.command()
@click.argument('document')
@click.option('--variables', help='GraphQL variables as a JSON object')
@click.pass_context
def graphql(ctx: click.Context, document: str, variables: Optional[str]) -> None:
    """Send a raw GraphQL DOCUMENT and print its data."""
    parsed: Optional[Dict[str, Any]] = None
    if variables:
        try:
            parsed = json.loads(variables)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"invalid JSON: {e}", param_hint="--variables") from e
        if not isinstance(parsed, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--variables")

    run_call(ctx.obj['settings'], lambda service: service.query(document, Any, parsed))


@cli.command()
@click.argument('url')
@click.pass_context
def paginate(ctx: click.Context, url: str) -> None:
    """Fetch the page at a continuation URL."""
    run_call(ctx.obj['settings'], lambda service: service.request_pagination(url, Any))


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == '__main__':
    main()
