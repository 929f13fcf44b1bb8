"""Pull request commands — files, approved, mergeable, merge, link."""

from __future__ import annotations

import click
from rich.console import Console

from prgate_cli.client import get_client, host_errors, parse_repo
from prgate_core.bitbucket.client import markdown_pull_link
from prgate_core.models import PullRequest, PullRequestOptions, Repo

console = Console()

repo_option = click.option(
    "--repo", required=True, callback=parse_repo, help="Bitbucket repository in owner/slug format."
)
pr_option = click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")


def _pull(repo: Repo, pr_number: int, head: str = "") -> PullRequest:
    return PullRequest(num=pr_number, head_commit=head, base_repo=repo)


@click.command("files")
@repo_option
@pr_option
@click.pass_context
@host_errors
def files_cmd(ctx, repo: Repo, pr_number: int):
    """List every path the pull request touches (renames list both paths)."""
    files = get_client(ctx).get_modified_files(repo, _pull(repo, pr_number))
    if not files:
        console.print("[yellow]No modified files.[/yellow]")
        return
    for path in files:
        click.echo(path)


@click.command("approved")
@repo_option
@pr_option
@click.pass_context
@host_errors
def approved_cmd(ctx, repo: Repo, pr_number: int):
    """Check for an approval from anyone other than the author.

    Exits with status 1 when the pull request is not approved.
    """
    status = get_client(ctx).pull_is_approved(repo, _pull(repo, pr_number))
    if status.is_approved:
        console.print(f"[green]#{pr_number} is approved.[/green]")
        return
    console.print(f"[yellow]#{pr_number} is not approved.[/yellow]")
    ctx.exit(1)


@click.command("mergeable")
@repo_option
@pr_option
@click.pass_context
@host_errors
def mergeable_cmd(ctx, repo: Repo, pr_number: int):
    """Check that no changed file is in a conflict state.

    Exits with status 1 when the pull request cannot be merged.
    """
    if get_client(ctx).pull_is_mergeable(repo, _pull(repo, pr_number)):
        console.print(f"[green]#{pr_number} is mergeable.[/green]")
        return
    console.print(f"[red]#{pr_number} has conflicts.[/red]")
    ctx.exit(1)


@click.command("merge")
@repo_option
@pr_option
@click.option("--delete-source-branch", is_flag=True, help="Close the source branch after merging.")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
@host_errors
def merge_cmd(ctx, repo: Repo, pr_number: int, delete_source_branch: bool, yes: bool):
    """Merge the pull request with the repository's default strategy."""
    if not yes:
        click.confirm(f"Merge #{pr_number} in {repo.full_name}?", abort=True)
    options = PullRequestOptions(delete_source_branch_on_merge=delete_source_branch)
    get_client(ctx).merge_pull(_pull(repo, pr_number), options)
    console.print(f"[green]Merged #{pr_number}.[/green]")


@click.command("link")
@repo_option
@pr_option
def link_cmd(repo: Repo, pr_number: int):
    """Print the markdown reference used to mention a pull request in comments."""
    click.echo(markdown_pull_link(_pull(repo, pr_number)))
