"""comment commands — list, post, delete, hide and replace pull request comments."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from prgate_cli.client import get_client, host_errors, parse_repo
from prgate_core.comments import replace_command_comment
from prgate_core.models import Repo

console = Console()

repo_option = click.option(
    "--repo", required=True, callback=parse_repo, help="Bitbucket repository in owner/slug format."
)
pr_option = click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
body_options = [
    click.option("--body", default=None, help="Comment text."),
    click.option(
        "--body-file",
        type=click.File("r"),
        default=None,
        help="Read the comment text from a file ('-' for stdin).",
    ),
]


def _with_body_options(f):
    for option in reversed(body_options):
        f = option(f)
    return f


def _non_empty(ctx, param, value: str) -> str:
    if not value:
        raise click.BadParameter("must not be empty")
    return value


def _read_body(body: str | None, body_file) -> str:
    if body is not None and body_file is not None:
        raise click.UsageError("Use either --body or --body-file, not both.")
    if body_file is not None:
        return body_file.read()
    if body is None:
        raise click.UsageError("A comment body is required: pass --body or --body-file.")
    return body


@click.group("comment")
def comment_group():
    """Work with pull request comments."""


@comment_group.command("list")
@repo_option
@pr_option
@click.option("--mine", is_flag=True, help="Only show comments posted by the configured account.")
@click.pass_context
@host_errors
def list_cmd(ctx, repo: Repo, pr_number: int, mine: bool):
    """Show comments on a pull request, one row per comment."""
    client = get_client(ctx)
    comments = client.get_pull_request_comments(repo, pr_number)
    if mine:
        me = client.get_my_uuid().lower()
        comments = [c for c in comments if c.user is not None and c.user.uuid.lower() == me]

    if not comments:
        console.print("[yellow]No comments found.[/yellow]")
        return

    table = Table(title=f"Comments — {repo.full_name}#{pr_number}", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Author", max_width=40)
    table.add_column("First line", max_width=60)
    for c in comments:
        first_line = c.content.raw.split("\n", 1)[0]
        author = Text(c.user.uuid) if c.user else Text("deleted", style="dim")
        table.add_row(str(c.id), author, Text(first_line))
    console.print(table)


@comment_group.command("post")
@repo_option
@pr_option
@_with_body_options
@click.pass_context
@host_errors
def post_cmd(ctx, repo: Repo, pr_number: int, body: str | None, body_file):
    """Post a new comment."""
    text = _read_body(body, body_file)
    get_client(ctx).create_comment(repo, pr_number, text)
    console.print(f"[green]Comment posted on #{pr_number}.[/green]")


@comment_group.command("delete")
@repo_option
@pr_option
@click.option("--id", "comment_id", type=int, required=True, help="Comment ID (see `prgate comment list`).")
@click.pass_context
@host_errors
def delete_cmd(ctx, repo: Repo, pr_number: int, comment_id: int):
    """Delete one comment."""
    get_client(ctx).delete_pull_request_comment(repo, pr_number, comment_id)
    console.print(f"[green]Deleted comment {comment_id}.[/green]")


@comment_group.command("hide")
@repo_option
@pr_option
@click.option(
    "--command",
    required=True,
    callback=_non_empty,
    help="Command whose earlier comments should go, e.g. 'plan'.",
)
@click.pass_context
@host_errors
def hide_cmd(ctx, repo: Repo, pr_number: int, command: str):
    """Delete this account's earlier comments for a command.

    A comment matches when its first line contains the command, ignoring case.
    """
    get_client(ctx).hide_prev_command_comments(repo, pr_number, command)
    console.print(f"[green]Removed earlier '{command}' comments from #{pr_number}.[/green]")


@comment_group.command("replace")
@repo_option
@pr_option
@click.option(
    "--command",
    required=True,
    callback=_non_empty,
    help="Command the comment reports on, e.g. 'plan'.",
)
@_with_body_options
@click.pass_context
@host_errors
def replace_cmd(ctx, repo: Repo, pr_number: int, command: str, body: str | None, body_file):
    """Replace this account's earlier comment for a command with a new one."""
    text = _read_body(body, body_file)
    replace_command_comment(get_client(ctx), repo, pr_number, command, text)
    console.print(f"[green]Replaced '{command}' comment on #{pr_number}.[/green]")
