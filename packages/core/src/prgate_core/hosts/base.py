"""Host adapter contract.

Every code-hosting platform gets one adapter implementing BaseHostClient.
The orchestration layer depends on this interface, never on a concrete
adapter.

Platforms differ in what they can do. Instead of raising on operations a
host has no API for, adapters return an ``Unsupported`` value and declare
their abilities in ``CAPABILITIES``, so callers can branch on
``client.supports(...)`` or on the returned value rather than on error
text:

    labels = client.get_pull_labels(repo, pull)
    if isinstance(labels, Unsupported):
        labels = []
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from prgate_core.models import ApprovalStatus, CommitStatus, PullRequest, PullRequestOptions, Repo


class Capability(Enum):
    EDIT_COMMENT = "edit_comment"
    REACTIONS = "reactions"
    TEAM_MEMBERSHIP = "team_membership"
    SINGLE_FILE_DOWNLOAD = "single_file_download"
    CLONE_URL = "clone_url"
    PULL_LABELS = "pull_labels"
    DISCARD_REVIEWS = "discard_reviews"


@dataclass(frozen=True)
class Unsupported:
    """Outcome of an operation the host has no API for.

    Returned, not raised.
    """

    capability: Capability
    host: str

    def __str__(self) -> str:
        return f"{self.capability.value} is not supported by {self.host}"


class BaseHostClient(ABC):
    HOST: ClassVar[str] = "unknown"
    CAPABILITIES: ClassVar[frozenset[Capability]] = frozenset()

    def supports(self, capability: Capability) -> bool:
        return capability in self.CAPABILITIES

    def unsupported(self, capability: Capability) -> Unsupported:
        return Unsupported(capability=capability, host=self.HOST)

    # ------------------------------------------------------------------ #
    # Identity and comments                                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def get_my_uuid(self) -> str:
        """Return the platform identifier of the calling credential."""

    @abstractmethod
    def create_comment(self, repo: Repo, pull_num: int, comment: str, command: str = "") -> None:
        """Post ``comment`` on the pull request."""

    @abstractmethod
    def edit_comment(self, repo: Repo, pull_num: int, comment_id: int, comment: str) -> None | Unsupported:
        """Replace the body of an existing comment in place."""

    @abstractmethod
    def hide_prev_command_comments(self, repo: Repo, pull_num: int, command: str, dir: str = "") -> None:
        """Hide (or remove) earlier comments this credential posted for ``command``."""

    @abstractmethod
    def react_to_comment(self, repo: Repo, pull_num: int, comment_id: int, reaction: str) -> None:
        """Add a reaction to a comment."""

    # ------------------------------------------------------------------ #
    # Review state                                                        #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def pull_is_approved(self, repo: Repo, pull: PullRequest) -> ApprovalStatus:
        """Return whether someone other than the author approved the pull request."""

    @abstractmethod
    def pull_is_mergeable(
        self,
        repo: Repo,
        pull: PullRequest,
        vcs_status_name: str = "",
        ignore_vcs_status_names: tuple[str, ...] = (),
    ) -> bool:
        """Return whether the pull request can be merged as it stands."""

    @abstractmethod
    def get_modified_files(self, repo: Repo, pull: PullRequest) -> list[str]:
        """Return every path touched by the pull request, without duplicates."""

    # ------------------------------------------------------------------ #
    # Status and merge                                                    #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def update_status(
        self,
        repo: Repo,
        pull: PullRequest,
        status: CommitStatus,
        src: str,
        description: str,
        url: str = "",
    ) -> None:
        """Set a commit status on the pull request's head commit."""

    @abstractmethod
    def merge_pull(self, pull: PullRequest, options: PullRequestOptions) -> None:
        """Merge the pull request."""

    @abstractmethod
    def markdown_pull_link(self, pull: PullRequest) -> str:
        """Return the short reference used to link the pull request in a comment."""

    # ------------------------------------------------------------------ #
    # Optional capabilities                                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def get_team_names_for_user(self, repo: Repo, user: str) -> list[str] | Unsupported:
        """Return the teams ``user`` belongs to in the repository's organization."""

    def supports_single_file_download(self, repo: Repo) -> bool:
        return self.supports(Capability.SINGLE_FILE_DOWNLOAD)

    @abstractmethod
    def get_file_content(self, pull: PullRequest, path: str) -> tuple[bool, bytes] | Unsupported:
        """Return (found, content) for ``path`` in the pull request's base repository."""

    @abstractmethod
    def get_clone_url(self, repo_full_name: str) -> str | Unsupported:
        """Return an authenticated clone URL."""

    @abstractmethod
    def get_pull_labels(self, repo: Repo, pull: PullRequest) -> list[str] | Unsupported:
        """Return the labels attached to the pull request."""

    @abstractmethod
    def discard_reviews(self, repo: Repo, pull: PullRequest) -> None | Unsupported:
        """Dismiss existing approvals, e.g. after new commits are pushed."""
