"""
Repository identity helpers.
"""

import os
import re
from typing import Mapping, Optional
from urllib.parse import quote, urlparse

# git@host:group/project.git
SCP_LIKE_URL = re.compile(r'^(?:[\w.-]+@)?[\w.-]+:(?!//)(?P<path>.+)$')


def _url_path(url: str) -> str:
    match = SCP_LIKE_URL.match(url)
    if match:
        return match.group("path")
    return urlparse(url).path


def get_repo_id(repository_url: str, gitlab_url: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Derive the canonical ``group/project`` identifier of a repository.

    Inside the hosting platform's CI the project path is taken from the
    environment, otherwise it is parsed out of the repository URL.

    Args:
        repository_url: Repository URL (https, ssh, or scp-like git URL)
        gitlab_url: Base URL of the hosting instance
        env: Environment variables (defaults to os.environ)

    Returns:
        Repository identifier such as ``group/subgroup/project``
    """
    if env is None:
        env = os.environ
    if env.get("GITLAB_CI") and env.get("CI_PROJECT_PATH"):
        return env["CI_PROJECT_PATH"]

    path = _url_path(repository_url)

    # Self-hosted instances may be served under a sub-path
    base_path = urlparse(gitlab_url).path.rstrip("/")
    if base_path and path.startswith(base_path + "/"):
        path = path[len(base_path):]

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]
    return path


def encode_repo_id(repo_id: str) -> str:
    """URL-encode a repository identifier for use in API paths."""
    return quote(repo_id, safe="")
