"""Pydantic models for Bitbucket Cloud API 2.0 payloads.

Only the fields the adapter reads are modelled; anything else the API
returns is ignored. A field declared with ``...`` is required: a response
without it fails validation instead of being filled with a default.

API Reference: https://developer.atlassian.com/cloud/bitbucket/rest/
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class User(BaseModel):
    """Account behind the calling credential (GET /2.0/user)."""

    uuid: str = Field(..., description="Platform-global account identifier, e.g. '{1234-...}'")


class Account(BaseModel):
    """An account reference embedded in another object."""

    uuid: str = Field(..., description="Platform-global account identifier")


class DiffStatFile(BaseModel):
    path: str = Field(..., description="Path relative to the repository root")


class DiffStatEntry(BaseModel):
    """One changed file in a pull request diffstat.

    ``old`` is absent for added files and ``new`` is absent for removed
    files; a rename carries both.
    """

    status: str = Field(..., description="Change kind: 'added', 'modified', 'merge conflict', ...")
    old: DiffStatFile | None = Field(None, description="File before the change")
    new: DiffStatFile | None = Field(None, description="File after the change")


class Page(BaseModel):
    """Common envelope of every paginated collection."""

    next: str | None = Field(None, description="Absolute URL of the next page; absent on the last page")


class DiffStatPage(Page):
    values: list[DiffStatEntry] = Field(..., description="Changed files on this page")


class CommentContent(BaseModel):
    raw: str = Field(..., description="Comment text exactly as it was posted")


class PullRequestComment(BaseModel):
    id: int = Field(..., description="Comment identifier, unique within the pull request")
    content: CommentContent = Field(..., description="Comment body")
    user: Account | None = Field(None, description="Author; absent for comments from deleted accounts")


class PullRequestCommentPage(Page):
    values: list[PullRequestComment] = Field(..., description="Comments on this page")


class Participant(BaseModel):
    approved: bool = Field(..., description="Whether this participant approved the pull request")
    user: Account = Field(..., description="Participant account")


class PullRequestDetail(BaseModel):
    """Subset of GET /2.0/repositories/{full_name}/pullrequests/{id}."""

    id: int = Field(..., description="Pull request number")
    state: str = Field(..., description="OPEN, MERGED, DECLINED or SUPERSEDED")
    author: Account = Field(..., description="Account that opened the pull request")
    participants: list[Participant] = Field(..., description="Reviewers and other participants")
