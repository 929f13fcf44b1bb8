"""Replacing a command's previous comment with a new one.

When a command runs again, its old result comment should make way for
the new one. Hosts that can edit comments do that in place; hosts that
cannot (Bitbucket Cloud) delete the old comments and post a fresh one.
Both are strategies behind CommentReplacer, and replace_command_comment()
picks the best one the host supports.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from prgate_core.hosts.base import Capability

if TYPE_CHECKING:
    from prgate_core.hosts.base import BaseHostClient
    from prgate_core.models import Repo

logger = logging.getLogger(__name__)


class CommentReplacer(ABC):
    @abstractmethod
    def replace(self, client: BaseHostClient, repo: Repo, pull_num: int, command: str, body: str) -> None:
        """Make ``body`` the only comment this credential shows for ``command``."""


class DeleteAndRecreate(CommentReplacer):
    """Delete earlier matching comments, then post the new one.

    Not atomic: if a delete fails, the new comment is not posted and any
    comments deleted before the failure stay deleted.
    """

    def replace(self, client: BaseHostClient, repo: Repo, pull_num: int, command: str, body: str) -> None:
        client.hide_prev_command_comments(repo, pull_num, command)
        client.create_comment(repo, pull_num, body, command)


class EditInPlace(CommentReplacer):
    """Edit a known comment in place.

    The host must track which comment belongs to a command, so the caller
    supplies the comment id. Without one there is nothing to edit and a
    new comment is posted.
    """

    def __init__(self, comment_id: int | None = None):
        self.comment_id = comment_id

    def replace(self, client: BaseHostClient, repo: Repo, pull_num: int, command: str, body: str) -> None:
        if self.comment_id is None:
            client.create_comment(repo, pull_num, body, command)
            return
        client.edit_comment(repo, pull_num, self.comment_id, body)


def choose_replacer(client: BaseHostClient, comment_id: int | None = None) -> CommentReplacer:
    if client.supports(Capability.EDIT_COMMENT):
        return EditInPlace(comment_id)
    logger.debug("%s cannot edit comments; falling back to delete and recreate", client.HOST)
    return DeleteAndRecreate()


def replace_command_comment(
    client: BaseHostClient,
    repo: Repo,
    pull_num: int,
    command: str,
    body: str,
    comment_id: int | None = None,
) -> None:
    choose_replacer(client, comment_id).replace(client, repo, pull_num, command, body)
