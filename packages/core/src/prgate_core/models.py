"""Host-neutral data models passed between the orchestration layer and adapters.

These are the caller's view of repositories and pull requests. Payload
shapes of a specific host API live next to that host's client (e.g.
prgate_core.bitbucket.schemas) so this module stays free of any one
platform's quirks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Repo:
    """A repository identified by its ``owner/slug`` full name."""

    full_name: str


@dataclass(frozen=True)
class PullRequest:
    """A pull request as seen by one adapter call."""

    num: int
    head_commit: str
    base_repo: Repo


@dataclass(frozen=True)
class PullRequestOptions:
    """Options applied when merging a pull request."""

    delete_source_branch_on_merge: bool = False


@dataclass(frozen=True)
class ApprovalStatus:
    is_approved: bool = False


class CommitStatus(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
