"""status command — set a build status on a pull request's head commit."""

from __future__ import annotations

import click
from rich.console import Console

from prgate_cli.client import get_client, host_errors, parse_repo
from prgate_core.bitbucket.client import to_bitbucket_state, truncate_status_key
from prgate_core.models import CommitStatus, PullRequest, Repo

console = Console()


@click.command("status")
@click.option("--repo", required=True, callback=parse_repo, help="Bitbucket repository in owner/slug format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option("--commit", "head_commit", required=True, help="Commit hash the status applies to.")
@click.option(
    "--state",
    type=click.Choice([s.value for s in CommitStatus]),
    required=True,
    help="Outcome of the check.",
)
@click.option("--key", required=True, help="Name of the check; longer than 40 characters is truncated.")
@click.option("--description", default="", help="Short human-readable summary.")
@click.option("--url", default="", help="Link shown on the status. Defaults to the configured callback URL.")
@click.pass_context
@host_errors
def status_cmd(ctx, repo: Repo, pr_number: int, head_commit: str, state: str, key: str, description: str, url: str):
    """Report a check result on a commit.

    \b
    State mapping:
      pending  → INPROGRESS
      success  → SUCCESSFUL
      failed   → FAILED
    """
    status = CommitStatus(state)
    pull = PullRequest(num=pr_number, head_commit=head_commit, base_repo=repo)
    get_client(ctx).update_status(repo, pull, status, key, description, url)

    sent_key = truncate_status_key(key)
    if sent_key != key:
        console.print(f"[yellow]Key truncated to {sent_key!r}.[/yellow]")
    console.print(f"Set [bold]{sent_key}[/bold] on {head_commit[:7]} to {to_bitbucket_state(status)}.")
