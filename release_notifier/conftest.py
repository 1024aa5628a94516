"""
Shared pytest fixtures for release notifier tests.
"""

import os
from unittest.mock import patch

import pytest

from release_notifier.config import NotifierConfig
from release_notifier.fakes import API_URL, GITLAB_URL, REPO_ID, FakeGitLabApi
from release_notifier.models import NextRelease, ReleaseContext, ReleaseInfo


@pytest.fixture
def gitlab_api():
    return FakeGitLabApi()


@pytest.fixture
def clean_environ():
    """Clear environment variables for clean test state."""
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def notifier_config():
    return NotifierConfig(token="test-token", gitlab_url=GITLAB_URL, api_url=API_URL)


@pytest.fixture
def release_context():
    """A release of group/project with no commits yet."""
    return ReleaseContext(
        repository_url=f"{GITLAB_URL}/{REPO_ID}.git",
        next_release=NextRelease(version="1.2.0", git_tag="v1.2.0"),
        commits=[],
        releases=[ReleaseInfo(name="GitLab release", url=f"{GITLAB_URL}/{REPO_ID}/-/releases/v1.2.0")],
    )
