"""CLI entry point for quay-tags."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from typing import Any

import click

from quay_tags.registry.auth import resolve_token
from quay_tags.registry.client import DEFAULT_LIMIT, QUAY_API_URL, TagClient
from quay_tags.registry.errors import QuayError

logger = logging.getLogger(__name__)


def _token_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "-t",
        "--token",
        help="Quay.io robot/OAuth token. Defaults to QUAY_TAGS_TOKEN_<ORG> or QUAY_TAGS_TOKEN.",
    )(func)


def _api_url_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--api-url",
        envvar="QUAY_TAGS_API_URL",
        default=QUAY_API_URL,
        show_default=True,
        help="Base URL of the Quay.io API v1.",
    )(func)


def _make_client(organization: str, token: str | None, api_url: str) -> TagClient:
    client = TagClient(resolve_token(organization, token), api_url=api_url)
    logger.debug(
        "Client for %s (%s) against %s",
        organization,
        "authenticated" if client.authenticated else "anonymous",
        api_url,
    )
    return client


@click.group()
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable verbose (DEBUG) logging.",
)
def main(verbose: bool) -> None:
    """quay-tags: list and pick Quay.io image tags."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@main.command()
@click.argument("organization")
@click.argument("repository")
@click.option(
    "-n",
    "--limit",
    type=click.IntRange(min=1),
    default=DEFAULT_LIMIT,
    show_default=True,
    help="Maximum number of tags to fetch.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print tags as JSON.")
@click.option(
    "--pretty/--no-pretty",
    default=True,
    help="Pretty-print the JSON output (default: on).",
)
@_token_option
@_api_url_option
def tags(
    organization: str,
    repository: str,
    limit: int,
    as_json: bool,
    pretty: bool,
    token: str | None,
    api_url: str,
) -> None:
    """List the most recent active tags of ORGANIZATION/REPOSITORY."""
    client = _make_client(organization, token, api_url)
    try:
        found = client.get_tags(organization, repository, limit)
    except QuayError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Found {len(found)} tags for {organization}/{repository}", err=True)
    if as_json:
        indent = 2 if pretty else None
        click.echo(json.dumps([tag.to_dict() for tag in found], indent=indent))
    else:
        for tag in found:
            click.echo(tag.name)


@main.command()
@click.argument("organization")
@click.argument("repository")
@click.option("--tag", help="Tag to reference. Default: the most recent tag.")
@_token_option
@_api_url_option
def image(
    organization: str,
    repository: str,
    tag: str | None,
    token: str | None,
    api_url: str,
) -> None:
    """Print the image reference for ORGANIZATION/REPOSITORY."""
    client = _make_client(organization, token, api_url)
    try:
        reference = client.resolve_image_reference(organization, repository, tag)
    except QuayError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(reference)


@main.command()
@click.argument("organization")
@click.argument("repository")
@_token_option
@_api_url_option
def check(
    organization: str,
    repository: str,
    token: str | None,
    api_url: str,
) -> None:
    """Check that ORGANIZATION/REPOSITORY exists and its tags can be listed."""
    client = _make_client(organization, token, api_url)
    if not client.validate_repository(organization, repository):
        click.echo(f"  Repository {organization}/{repository} is not accessible", err=True)

    try:
        message = client.test_connection(organization, repository)
    except QuayError as exc:
        raise click.ClickException(f"Connection failed: {exc}") from exc
    click.echo(message)


if __name__ == "__main__":
    main()
