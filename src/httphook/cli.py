"""Dry-run a rules file against a single request.

Usage:
    httphook check rules.yaml GET https://api.example.com/users/42 [-H "accept: application/json"]

Loads the rules into a fresh hook, dispatches one synthetic request, and
prints what the request would receive. Exit status is 0 when a rule
answers and 1 when the request would go to the network.
"""

from __future__ import annotations

import asyncio
import sys

import click

from httphook._config import load_rules_file, register_rules
from httphook._errors import HookError
from httphook._hook import HttpHook
from httphook._method import HttpMethod
from httphook._request import HookRequest
from httphook._response import Response, render_body


async def _resolve(hook: HttpHook, request: HookRequest) -> tuple[Response | None, bytes]:
    response = await hook.dispatch(request)
    if response is None:
        return None, b""
    body = b"".join([chunk async for chunk in render_body(response.body)])
    return response, body


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        msg = f"expected NAME:VALUE, got {raw!r}"
        raise click.BadParameter(msg, param_hint="--header")
    return name.strip(), value.strip()


@click.group()
def cli() -> None:
    """httphook — request interception rules for tests."""


@cli.command()
@click.argument("rules_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("method")
@click.argument("url")
@click.option("--header", "-H", "headers", multiple=True, help="Request header, NAME:VALUE.")
def check(rules_file: str, method: str, url: str, headers: tuple[str, ...]) -> None:
    """Show how RULES_FILE answers METHOD URL."""
    request_headers = dict(_parse_header(h) for h in headers)
    try:
        config = load_rules_file(rules_file)
        http_method = HttpMethod.from_string(method)
    except HookError as e:
        raise click.ClickException(str(e)) from e

    try:
        request = HookRequest.build(http_method, url, request_headers)
    except ValueError as e:
        msg = f"invalid URL {url!r}: {e}"
        raise click.ClickException(msg) from e

    hook = HttpHook()
    try:
        register_rules(hook, config)
    except HookError as e:
        raise click.ClickException(str(e)) from e
    hook.start()

    try:
        response, body = asyncio.run(_resolve(hook, request))
    finally:
        hook.teardown()

    if response is None:
        click.echo("no match")
        sys.exit(1)

    click.echo(f"{response.status_code} {response.reason}")
    for name, value in response.headers.items():
        click.echo(f"{name}: {value}")
    if body:
        click.echo("")
        click.echo(body.decode("utf-8", "replace"))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
