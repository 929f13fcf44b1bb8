import os
from pathlib import Path
from typing import Optional

import yaml

from prgate_core.bitbucket.client import BASE_URL, CONFLICT_STATUSES
from prgate_core.bitbucket.pagination import DEFAULT_MAX_PAGES

DEFAULT_CONFIG: dict = {
    "base_url": BASE_URL,  # override to point at a mock server
    "callback_url": None,  # default link target for commit statuses
    "max_pages": DEFAULT_MAX_PAGES,
    "timeout": 30.0,  # seconds, applied to every HTTP request
    "conflict_statuses": list(CONFLICT_STATUSES),  # diffstat statuses that block merging
}


def _read_file(path: Path) -> dict:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of settings, got {type(data).__name__}")
    return data


def _max_pages(value) -> int:
    # YAML gives "1000" for a quoted number; bools are ints to Python but not here.
    if isinstance(value, bool):
        raise ValueError(f"max_pages must be a whole number, got {value!r}")
    try:
        pages = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"max_pages must be a whole number, got {value!r}") from None
    if pages != value and not isinstance(value, str):
        raise ValueError(f"max_pages must be a whole number, got {value!r}")
    if pages < 1:
        raise ValueError(f"max_pages must be at least 1, got {pages}")
    return pages


def _conflict_statuses(value) -> list[str]:
    # A single status written as a scalar is a list of one.
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
        raise ValueError(f"conflict_statuses must be a list of strings, got {value!r}")
    return list(value)


def load_config(config_path: str = ".prgate.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prgate.yml in the current directory
      3. CLI argument overrides

    ``max_pages`` and ``conflict_statuses`` are normalized after merging;
    a value that cannot be used raises ValueError naming the setting.
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        config.update(_read_file(path))

    for key, value in (cli_overrides or {}).items():
        if value is not None:
            config[key] = value

    config["max_pages"] = _max_pages(config["max_pages"])
    config["conflict_statuses"] = _conflict_statuses(config["conflict_statuses"])

    # Credentials only ever come from the environment here; auth.py falls
    # back to the config file's own keys.
    config["bitbucket_user"] = os.environ.get("BITBUCKET_USER")
    config["bitbucket_token"] = os.environ.get("BITBUCKET_TOKEN")

    return config
