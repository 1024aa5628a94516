"""Tests for release notifier data types."""

import pytest

from release_notifier.fakes import merge_request_payload
from release_notifier.models import NotifyTarget, ReleaseContext, TargetKind


class TestReleaseContextFromDict:

    def test_full_document(self):
        context = ReleaseContext.from_dict({
            "repository_url": "https://gitlab.com/group/project.git",
            "next_release": {"version": "2.0.0", "git_tag": "v2.0.0", "channel": "next"},
            "commits": [{"hash": "abc", "message": "fixes #1"}, {"hash": "def"}],
            "releases": [{"name": "GitLab release", "url": "https://example.com"}, {"url": "https://nameless"}],
            "unused": True,
        })

        assert context.next_release.version == "2.0.0"
        assert context.next_release.channel == "next"
        assert [c.hash for c in context.commits] == ["abc", "def"]
        assert context.commits[1].message == ""
        assert [r.name for r in context.named_releases] == ["GitLab release"]

    def test_minimal_document(self):
        context = ReleaseContext.from_dict({
            "repository_url": "https://gitlab.com/group/project.git",
            "next_release": {"version": "2.0.0"},
        })

        assert context.commits == []
        assert context.releases == []

    @pytest.mark.parametrize("document", [
        {"next_release": {"version": "1.0.0"}},
        {"repository_url": "https://gitlab.com/group/project.git"},
        {"repository_url": "https://gitlab.com/group/project.git", "next_release": {}},
    ])
    def test_missing_fields(self, document):
        with pytest.raises(ValueError):
            ReleaseContext.from_dict(document)

    def test_template_context(self, release_context):
        template_context = release_context.as_template_context()

        assert template_context["next_release"]["version"] == "1.2.0"
        assert template_context["releases"][0]["name"] == "GitLab release"
        assert "issue" not in template_context


class TestNotifyTarget:

    def test_kind_is_fixed_at_construction(self):
        assert NotifyTarget.merge_request(5).is_merge_request
        assert not NotifyTarget.issue(5).is_merge_request

    def test_from_merge_request_payload(self):
        target = NotifyTarget.from_merge_request_payload(merge_request_payload(9, description="Closes #1"))

        assert target.iid == 9
        assert target.kind is TargetKind.MERGE_REQUEST
        assert target.description == "Closes #1"
        assert target.title == "Merge request 9"

    def test_as_context(self):
        assert NotifyTarget.issue(3).as_context()["kind"] == "issue"
        assert NotifyTarget.merge_request(3).as_context()["is_merge_request"] is True
