"""Tests for configuration and repository identity resolution."""

import pytest

from release_notifier.config import resolve_config, url_join
from release_notifier.repo_id import encode_repo_id, get_repo_id

CI_ENV = {
    "GITLAB_CI": "true",
    "CI_PROJECT_URL": "https://gitlab.corp.example/platform/tools",
    "CI_PROJECT_PATH": "platform/tools",
    "CI_API_V4_URL": "https://gitlab.corp.example/api/v4",
}


class TestResolveConfig:

    def test_defaults(self):
        config = resolve_config(env={})

        assert config.token is None
        assert config.gitlab_url == "https://gitlab.com"
        assert config.api_url == "https://gitlab.com/api/v4"
        assert config.success_comment is None
        assert config.comments_enabled is True
        assert config.released_labels == ()

    def test_token_precedence(self):
        env = {"GL_TOKEN": "gl", "GITLAB_TOKEN": "gitlab"}

        assert resolve_config(env=env).token == "gl"
        assert resolve_config(env={"GITLAB_TOKEN": "gitlab"}).token == "gitlab"
        assert resolve_config(token="explicit", env=env).token == "explicit"

    def test_custom_url_and_prefix(self):
        config = resolve_config(env={"GL_URL": "https://git.example.com/", "GL_PREFIX": "/api/v5"})

        assert config.gitlab_url == "https://git.example.com"
        assert config.api_url == "https://git.example.com/api/v5"

    def test_custom_url_uses_default_prefix(self):
        config = resolve_config(gitlab_url="https://git.example.com", env={})

        assert config.api_url == "https://git.example.com/api/v4"

    def test_empty_prefix(self):
        config = resolve_config(gitlab_url="https://git.example.com", api_prefix="", env={})

        assert config.api_url == "https://git.example.com"

    def test_ci_variables(self):
        config = resolve_config(env=CI_ENV)

        assert config.gitlab_url == "https://gitlab.corp.example"
        assert config.api_url == "https://gitlab.corp.example/api/v4"

    def test_explicit_url_beats_ci_variables(self):
        config = resolve_config(gitlab_url="https://other.example", api_prefix="/api/v4", env=CI_ENV)

        assert config.gitlab_url == "https://other.example"
        assert config.api_url == "https://other.example/api/v4"

    def test_single_label_is_wrapped(self):
        assert resolve_config(released_labels="released", env={}).released_labels == ("released",)

    def test_label_list(self):
        config = resolve_config(released_labels=["released", "v${next_release.version}"], env={})

        assert config.released_labels == ("released", "v${next_release.version}")

    def test_comments_disabled(self):
        config = resolve_config(comments_enabled=False, env={})

        assert config.comments_enabled is False


@pytest.mark.parametrize("base,path,expected", [
    ("https://gitlab.com", "/api/v4", "https://gitlab.com/api/v4"),
    ("https://gitlab.com/", "api/v4", "https://gitlab.com/api/v4"),
    ("https://gitlab.com/", "", "https://gitlab.com"),
])
def test_url_join(base, path, expected):
    assert url_join(base, path) == expected


class TestRepoId:

    @pytest.mark.parametrize("repository_url", [
        "https://gitlab.com/group/project.git",
        "https://gitlab.com/group/project",
        "git@gitlab.com:group/project.git",
        "ssh://git@gitlab.com/group/project.git",
        "git+https://gitlab.com/group/project.git",
    ])
    def test_url_forms(self, repository_url):
        assert get_repo_id(repository_url, "https://gitlab.com", env={}) == "group/project"

    def test_nested_groups(self):
        assert get_repo_id("https://gitlab.com/a/b/c.git", "https://gitlab.com", env={}) == "a/b/c"

    def test_instance_under_sub_path(self):
        repo_id = get_repo_id(
            "https://corp.example/gitlab/group/project.git",
            "https://corp.example/gitlab",
            env={},
        )

        assert repo_id == "group/project"

    def test_ci_project_path_wins(self):
        assert get_repo_id("https://gitlab.com/group/project.git", "https://gitlab.com", env=CI_ENV) == "platform/tools"

    def test_encode_repo_id(self):
        assert encode_repo_id("group/sub/project") == "group%2Fsub%2Fproject"
