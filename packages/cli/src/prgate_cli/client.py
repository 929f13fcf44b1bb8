"""Adapter construction and error reporting shared by all commands.

The client is built lazily, on first use by a command, so `--help` and
commands that never touch the network work without credentials.
"""

from __future__ import annotations

import functools

import click
import httpx

from prgate_cli.auth import resolve_credentials
from prgate_core.bitbucket.client import BitbucketClient
from prgate_core.errors import HostError
from prgate_core.models import Repo


def build_client(config: dict, http_client: httpx.Client) -> BitbucketClient:
    """Instantiate the Bitbucket adapter from loaded configuration."""
    username, password = resolve_credentials(config)
    if not username or not password:
        raise click.UsageError(
            "No Bitbucket credentials found. Set BITBUCKET_USER and BITBUCKET_TOKEN "
            "(an app password with pull request and repository scopes)."
        )
    return BitbucketClient(
        http_client,
        username,
        password,
        callback_url=config.get("callback_url") or "",
        base_url=config["base_url"],
        max_pages=config["max_pages"],
        conflict_statuses=config["conflict_statuses"],
    )


def get_client(ctx: click.Context) -> BitbucketClient:
    """Return the client for this invocation, building it on first call."""
    root = ctx.find_root()
    obj = root.ensure_object(dict)
    client = obj.get("client")
    if client is None:
        config = obj["config"]
        http_client = httpx.Client(timeout=config.get("timeout"))
        root.call_on_close(http_client.close)
        client = build_client(config, http_client)
        obj["client"] = client
    return client


def host_errors(f):
    """Report adapter failures as CLI errors instead of tracebacks."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except HostError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def parse_repo(ctx, param, value: str) -> Repo:
    """click callback turning "owner/slug" into a Repo."""
    owner, sep, slug = value.partition("/")
    if not sep or not owner or not slug or "/" in slug:
        raise click.BadParameter("expected owner/slug, e.g. myteam/infra")
    return Repo(full_name=value)
