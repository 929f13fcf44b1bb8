"""Bitbucket Cloud adapter.

Implements BaseHostClient on top of the Bitbucket Cloud REST API 2.0.
Bitbucket has no way to hide a comment, no reactions, no labels, and lets
authors approve their own pull requests; the methods below document how
each of those gaps is bridged (or reported as Unsupported).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

import httpx

from prgate_core.bitbucket.pagination import DEFAULT_MAX_PAGES, iter_pages, paginate
from prgate_core.bitbucket.schemas import (
    DiffStatPage,
    PullRequestComment,
    PullRequestCommentPage,
    PullRequestDetail,
    User,
)
from prgate_core.bitbucket.transport import Transport
from prgate_core.errors import HostError, IdentityError
from prgate_core.hosts.base import BaseHostClient, Capability, Unsupported
from prgate_core.models import ApprovalStatus, CommitStatus, PullRequest, PullRequestOptions, Repo

logger = logging.getLogger(__name__)

BASE_URL = "https://api.bitbucket.org"

# Diffstat statuses that mean the pull request cannot be merged. Bitbucket
# does not document these; they were found by manual testing and may
# change without notice. Override with the ``conflict_statuses`` setting.
CONFLICT_STATUSES: tuple[str, ...] = ("merge conflict", "local deleted")

MAX_STATUS_KEY_LENGTH = 40
_ELLIPSIS = "..."

_BITBUCKET_STATES = {
    CommitStatus.PENDING: "INPROGRESS",
    CommitStatus.SUCCESS: "SUCCESSFUL",
    CommitStatus.FAILED: "FAILED",
}


def is_conflict_status(status: str, conflict_statuses: Iterable[str] = CONFLICT_STATUSES) -> bool:
    """Return True if a diffstat entry status marks the pull request unmergeable."""
    return status in conflict_statuses


def to_bitbucket_state(status: CommitStatus) -> str:
    """Map a commit status to Bitbucket's build state; unknown values fail closed."""
    return _BITBUCKET_STATES.get(status, "FAILED")


def truncate_status_key(key: str) -> str:
    """Fit a status key into Bitbucket's 40-character limit.

    Longer keys keep their first 37 characters followed by "...". Two long
    keys sharing a prefix therefore collide.
    """
    if len(key) <= MAX_STATUS_KEY_LENGTH:
        return key
    return key[: MAX_STATUS_KEY_LENGTH - len(_ELLIPSIS)] + _ELLIPSIS


def markdown_pull_link(pull: PullRequest) -> str:
    """Bitbucket links "#N" to pull request N of the same repository."""
    return f"#{pull.num}"


class BitbucketClient(BaseHostClient):
    """Bitbucket Cloud client.

    ``callback_url`` is where build status links point when the caller has
    nothing better: Bitbucket requires a URL on every status, so we link
    back to the automation service itself.

    Pass an ``http_client`` to control timeouts, proxies or transport (tests
    pass one backed by httpx.MockTransport). A client created here is
    closed by close(); a caller-supplied one is left to its owner.
    """

    HOST = "bitbucket cloud"
    CAPABILITIES = frozenset()

    def __init__(
        self,
        http_client: httpx.Client | None,
        username: str,
        password: str,
        callback_url: str,
        base_url: str = BASE_URL,
        max_pages: int = DEFAULT_MAX_PAGES,
        conflict_statuses: Iterable[str] = CONFLICT_STATUSES,
    ):
        if isinstance(max_pages, bool) or not isinstance(max_pages, int) or max_pages < 1:
            raise ValueError(f"max_pages must be an int of at least 1, got {max_pages!r}")
        if isinstance(conflict_statuses, str):
            raise ValueError("conflict_statuses must be a collection of statuses, not a single string")
        conflict_statuses = tuple(conflict_statuses)
        if not all(isinstance(s, str) for s in conflict_statuses):
            raise ValueError(f"conflict_statuses must contain only strings, got {conflict_statuses!r}")

        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.Client()
        self._transport = Transport(self._http, username, password)
        self.base_url = base_url.rstrip("/")
        self.callback_url = callback_url
        self.max_pages = max_pages
        self.conflict_statuses = conflict_statuses

        # Identity of the credential; resolved once, never invalidated.
        self._my_uuid: str | None = None
        self._my_uuid_lock = threading.Lock()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> BitbucketClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # URLs                                                                #
    # ------------------------------------------------------------------ #

    def _repo_url(self, repo: Repo) -> str:
        return f"{self.base_url}/2.0/repositories/{repo.full_name}"

    def _pull_url(self, repo: Repo, pull_num: int) -> str:
        return f"{self._repo_url(repo)}/pullrequests/{pull_num}"

    # ------------------------------------------------------------------ #
    # Identity                                                            #
    # ------------------------------------------------------------------ #

    def get_my_uuid(self) -> str:
        """Return the account UUID of the configured credentials.

        The first call asks the API; every later call, from any thread,
        returns the cached value. The lock makes concurrent first calls
        wait for a single request instead of racing.
        """
        with self._my_uuid_lock:
            if self._my_uuid is None:
                try:
                    user = self._transport.request_model("GET", f"{self.base_url}/2.0/user", User)
                except HostError as e:
                    raise IdentityError(
                        f"cannot get my UUID, check the account scope of the credentials: {e}",
                        request=e.request,
                    ) from e
                self._my_uuid = user.uuid
            return self._my_uuid

    # ------------------------------------------------------------------ #
    # Comments                                                            #
    # ------------------------------------------------------------------ #

    def get_pull_request_comments(self, repo: Repo, pull_num: int) -> list[PullRequestComment]:
        url = f"{self._pull_url(repo, pull_num)}/comments"
        return paginate(self._transport, url, PullRequestCommentPage, self.max_pages)

    def create_comment(self, repo: Repo, pull_num: int, comment: str, command: str = "") -> None:
        # No length check: bodies of 200k characters have been accepted.
        # If Bitbucket ever rejects one, the ProtocolError says so.
        url = f"{self._pull_url(repo, pull_num)}/comments"
        self._transport.request("POST", url, {"content": {"raw": comment}})

    def delete_pull_request_comment(self, repo: Repo, pull_num: int, comment_id: int) -> None:
        url = f"{self._pull_url(repo, pull_num)}/comments/{comment_id}"
        self._transport.request("DELETE", url)

    def edit_comment(self, repo: Repo, pull_num: int, comment_id: int, comment: str) -> Unsupported:
        return self.unsupported(Capability.EDIT_COMMENT)

    def hide_prev_command_comments(self, repo: Repo, pull_num: int, command: str, dir: str = "") -> None:
        """Delete earlier comments this credential posted for ``command``.

        Bitbucket cannot hide comments, so they are deleted. A comment
        counts as ours for ``command`` when we authored it and its first
        line contains the command, ignoring case. This is a text match, not
        a marker: it can catch unrelated comments that mention the command
        and miss ones whose first line was wrapped.

        Deletes one at a time and stops at the first failure; comments
        already deleted stay deleted.
        """
        if not command:
            raise ValueError("command must not be empty; it would match every comment")

        me = self.get_my_uuid()
        logger.debug("My Bitbucket user UUID is: %s", me)

        needle = command.lower()
        for c in self.get_pull_request_comments(repo, pull_num):
            if c.user is None or c.user.uuid.lower() != me.lower():
                continue
            body = c.content.raw
            if not body:
                continue
            first_line = body.split("\n", 1)[0].lower()
            logger.debug("Comment %d first line is %r", c.id, first_line)
            if needle in first_line:
                logger.debug("Deleting comment with id %d", c.id)
                self.delete_pull_request_comment(repo, pull_num, c.id)

    def react_to_comment(self, repo: Repo, pull_num: int, comment_id: int, reaction: str) -> None:
        # Bitbucket has no reactions; nothing depends on one being added.
        return None

    # ------------------------------------------------------------------ #
    # Review state                                                        #
    # ------------------------------------------------------------------ #

    def pull_is_approved(self, repo: Repo, pull: PullRequest) -> ApprovalStatus:
        detail = self._transport.request_model("GET", self._pull_url(repo, pull.num), PullRequestDetail)
        author = detail.author.uuid
        for participant in detail.participants:
            # Bitbucket lets authors approve their own pull request; those are ignored.
            if participant.approved and participant.user.uuid != author:
                return ApprovalStatus(is_approved=True)
        return ApprovalStatus(is_approved=False)

    def pull_is_mergeable(
        self,
        repo: Repo,
        pull: PullRequest,
        vcs_status_name: str = "",
        ignore_vcs_status_names: tuple[str, ...] = (),
    ) -> bool:
        """Return False as soon as any changed file is in a conflict state.

        Only the diffstat is consulted; commit statuses are not, so the two
        status-name arguments exist for interface compatibility only.
        """
        url = f"{self._pull_url(repo, pull.num)}/diffstat"
        for page in iter_pages(self._transport, url, DiffStatPage, self.max_pages):
            for entry in page.values:
                if is_conflict_status(entry.status, self.conflict_statuses):
                    logger.debug("Pull request #%d has %r on %s", pull.num, entry.status, _entry_path(entry))
                    return False
        return True

    def get_modified_files(self, repo: Repo, pull: PullRequest) -> list[str]:
        """Return paths relative to the repo root, e.g. parent/child/file.txt.

        A renamed file contributes both its old and new path.
        """
        url = f"{self._pull_url(repo, pull.num)}/diffstat"
        files: list[str] = []
        for entry in paginate(self._transport, url, DiffStatPage, self.max_pages):
            if entry.old is not None:
                files.append(entry.old.path)
            if entry.new is not None:
                files.append(entry.new.path)
        return list(dict.fromkeys(files))

    # ------------------------------------------------------------------ #
    # Status and merge                                                    #
    # ------------------------------------------------------------------ #

    def update_status(
        self,
        repo: Repo,
        pull: PullRequest,
        status: CommitStatus,
        src: str,
        description: str,
        url: str = "",
    ) -> None:
        state = to_bitbucket_state(status)
        logger.info("Updating Bitbucket commit status for '%s' to '%s'", src, state)

        body = {
            "key": truncate_status_key(src),
            # URL is required by Bitbucket.
            "url": url or self.callback_url,
            "state": state,
            "description": description,
        }
        path = f"{self._repo_url(repo)}/commit/{pull.head_commit}/statuses/build"
        self._transport.request("POST", path, body)

    def merge_pull(self, pull: PullRequest, options: PullRequestOptions) -> None:
        body = {"close_source_branch": True} if options.delete_source_branch_on_merge else None
        logger.info("Merging pull request #%d in %s", pull.num, pull.base_repo.full_name)
        self._transport.request("POST", f"{self._pull_url(pull.base_repo, pull.num)}/merge", body)

    def markdown_pull_link(self, pull: PullRequest) -> str:
        return markdown_pull_link(pull)

    # ------------------------------------------------------------------ #
    # Capabilities Bitbucket does not have                                #
    # ------------------------------------------------------------------ #

    def get_team_names_for_user(self, repo: Repo, user: str) -> Unsupported:
        return self.unsupported(Capability.TEAM_MEMBERSHIP)

    def get_file_content(self, pull: PullRequest, path: str) -> Unsupported:
        return self.unsupported(Capability.SINGLE_FILE_DOWNLOAD)

    def get_clone_url(self, repo_full_name: str) -> Unsupported:
        return self.unsupported(Capability.CLONE_URL)

    def get_pull_labels(self, repo: Repo, pull: PullRequest) -> Unsupported:
        return self.unsupported(Capability.PULL_LABELS)

    def discard_reviews(self, repo: Repo, pull: PullRequest) -> Unsupported:
        return self.unsupported(Capability.DISCARD_REVIEWS)


def _entry_path(entry) -> str:
    if entry.new is not None:
        return entry.new.path
    if entry.old is not None:
        return entry.old.path
    return "<unknown>"
