"""whoami and capabilities commands."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prgate_cli.client import get_client, host_errors
from prgate_core.bitbucket.client import BitbucketClient
from prgate_core.hosts.base import Capability

console = Console()


@click.command("whoami")
@click.pass_context
@host_errors
def whoami_cmd(ctx):
    """Print the account UUID of the configured credentials.

    Comment hiding only removes comments authored by this account, so this
    is the first thing to check when old comments are not being replaced.
    """
    client = get_client(ctx)
    console.print(client.get_my_uuid())


@click.command("capabilities")
def capabilities_cmd():
    """List optional host features and whether Bitbucket Cloud has them."""
    table = Table(title=f"Capabilities — {BitbucketClient.HOST}", show_header=True, header_style="bold cyan")
    table.add_column("Capability")
    table.add_column("Supported", justify="center")
    for capability in Capability:
        supported = capability in BitbucketClient.CAPABILITIES
        table.add_row(capability.value, "[green]yes[/green]" if supported else "[dim]no[/dim]")
    console.print(table)
