"""CLI entry point for prgate.

Commands:
  whoami        — show the account UUID behind the configured credentials
  capabilities  — list which optional host features Bitbucket Cloud supports
  files         — list files modified by a pull request
  approved      — check whether a pull request has a non-author approval
  mergeable     — check whether a pull request is free of conflicts
  merge         — merge a pull request
  link          — print the markdown reference for a pull request
  status        — set a build status on a commit
  comment       — list, post, delete, hide and replace pull request comments
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prgate_cli.commands.comment import comment_group
from prgate_cli.commands.identity import capabilities_cmd, whoami_cmd
from prgate_cli.commands.pull import approved_cmd, files_cmd, link_cmd, merge_cmd, mergeable_cmd
from prgate_cli.commands.status import status_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("prgate"),
    prog_name="prgate",
)
@click.option(
    "--config",
    "config_path",
    default=".prgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRGATE_CONFIG",
)
@click.option("--base-url", default=None, help="Bitbucket API base URL. Overrides config file.")
@click.option("--callback-url", default=None, help="Default link target for commit statuses.")
@click.option("--verbose", "-v", is_flag=True, help="Log every API request.")
@click.pass_context
def main(ctx: click.Context, config_path: str, base_url: str | None, callback_url: str | None, verbose: bool):
    """Drive Bitbucket Cloud pull requests from automation and the shell."""
    from prgate_core.config import load_config

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(
            config_path,
            cli_overrides={"base_url": base_url, "callback_url": callback_url},
        )
    except ValueError as e:
        raise click.UsageError(f"Invalid configuration: {e}") from e


main.add_command(whoami_cmd)
main.add_command(capabilities_cmd)
main.add_command(files_cmd)
main.add_command(approved_cmd)
main.add_command(mergeable_cmd)
main.add_command(merge_cmd)
main.add_command(link_cmd)
main.add_command(status_cmd)
main.add_command(comment_group)
