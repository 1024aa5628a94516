"""
Configuration resolution for the release notifier.

Explicit options win over environment variables; inside the hosting
platform's CI the predefined CI variables fill in whatever is still missing.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple, Union

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_API_PREFIX = "/api/v4"


@dataclass(frozen=True)
class NotifierConfig:
    """Resolved notifier configuration.

    Attributes:
        token: API token sent as the private-token header
        gitlab_url: Base URL of the hosting instance, used for permalinks
        api_url: Base URL of the REST API
        success_comment: Custom comment template, None for the default comment
        comments_enabled: False when commenting is switched off entirely
        released_labels: Label templates applied to every notified item
    """

    token: Optional[str]
    gitlab_url: str
    api_url: str
    success_comment: Optional[str] = None
    comments_enabled: bool = True
    released_labels: Tuple[str, ...] = ()


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def url_join(base: str, path: str) -> str:
    """Join a base URL and a path without doubling or dropping slashes."""
    if not path:
        return base.rstrip("/")
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def _normalize_labels(released_labels: Union[None, str, Sequence[str]]) -> Tuple[str, ...]:
    if not released_labels:
        return ()
    if isinstance(released_labels, str):
        return (released_labels,)
    return tuple(label for label in released_labels if label)


def resolve_config(
    token: Optional[str] = None,
    gitlab_url: Optional[str] = None,
    api_prefix: Optional[str] = None,
    success_comment: Optional[str] = None,
    comments_enabled: bool = True,
    released_labels: Union[None, str, Sequence[str]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> NotifierConfig:
    """Resolve the notifier configuration.

    Args:
        token: API token (defaults to GL_TOKEN, then GITLAB_TOKEN)
        gitlab_url: Instance URL (defaults to GL_URL, then GITLAB_URL)
        api_prefix: API path prefix (defaults to GL_PREFIX, then GITLAB_PREFIX)
        success_comment: Custom comment template
        comments_enabled: Whether to comment at all
        released_labels: A label template or a list of them
        env: Environment variables (defaults to os.environ)

    Returns:
        Resolved NotifierConfig
    """
    if env is None:
        env = os.environ

    in_ci = bool(env.get("GITLAB_CI"))
    user_url = _first(gitlab_url, env.get("GL_URL"), env.get("GITLAB_URL"))
    user_prefix = api_prefix
    if user_prefix is None:
        user_prefix = env.get("GL_PREFIX")
    if user_prefix is None:
        user_prefix = env.get("GITLAB_PREFIX")

    project_url = env.get("CI_PROJECT_URL")
    project_path = env.get("CI_PROJECT_PATH")
    if user_url:
        resolved_url = user_url
    elif in_ci and project_url and project_path:
        resolved_url = project_url.split(project_path)[0]
    else:
        resolved_url = DEFAULT_GITLAB_URL
    resolved_url = resolved_url.rstrip("/")

    if user_url and user_prefix is not None:
        api_url = url_join(user_url, user_prefix)
    elif in_ci and env.get("CI_API_V4_URL"):
        api_url = env["CI_API_V4_URL"]
    else:
        api_url = url_join(resolved_url, DEFAULT_API_PREFIX if user_prefix is None else user_prefix)

    return NotifierConfig(
        token=_first(token, env.get("GL_TOKEN"), env.get("GITLAB_TOKEN")),
        gitlab_url=resolved_url,
        api_url=api_url,
        success_comment=success_comment or None,
        comments_enabled=comments_enabled,
        released_labels=_normalize_labels(released_labels),
    )
