"""Bitbucket credential resolution.

Bitbucket Cloud API calls authenticate with a username and an app password
(or an API token used the same way). Resolution order, per value:
  1. BITBUCKET_USER / BITBUCKET_TOKEN environment variables (CI / explicit override)
  2. ``username`` / ``app_password`` in .prgate.yml (local convenience)

Keeping secrets in the config file is discouraged but supported for
throwaway local setups; CI should always use the environment.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def resolve_credentials(config: dict) -> tuple[str | None, str | None]:
    """Return (username, password); either may be None if no source has it.

    Never raises; callers should check for None and emit a UsageError.
    """
    username = config.get("bitbucket_user") or config.get("username")
    password = config.get("bitbucket_token") or config.get("app_password")

    if password and not config.get("bitbucket_token"):
        logger.debug("Using Bitbucket app password from the config file.")
    return username, password
