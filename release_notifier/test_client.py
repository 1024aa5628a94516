"""Tests for the GitLab API client."""

import json
import logging

import httpx
import pytest

from release_notifier.client import GitLabClient, verify_access
from release_notifier.fakes import API_URL, PROJECT_PATH, REPO_ID


def test_token_is_required():
    with pytest.raises(ValueError, match="token is required"):
        GitLabClient(API_URL, REPO_ID, None)


@pytest.mark.asyncio
async def test_requests_are_authenticated_and_scoped(gitlab_api):
    async with GitLabClient(API_URL, REPO_ID, "secret", transport=gitlab_api.transport) as client:
        note = await client.create_issue_note(12, "hello")

    request = gitlab_api.requests[0]
    assert request.headers["PRIVATE-TOKEN"] == "secret"
    assert request.url.raw_path.decode() == f"{PROJECT_PATH}/issues/12/notes"
    assert json.loads(request.content) == {"body": "hello"}
    assert note["body"] == "hello"


@pytest.mark.asyncio
async def test_merge_request_note_endpoint(gitlab_api):
    async with GitLabClient(API_URL, REPO_ID, "secret", transport=gitlab_api.transport) as client:
        await client.create_merge_request_note(5, "hello")

    assert gitlab_api.requests[0].url.raw_path.decode() == f"{PROJECT_PATH}/merge_requests/5/notes"


@pytest.mark.asyncio
async def test_add_issue_labels(gitlab_api):
    async with GitLabClient(API_URL, REPO_ID, "secret", transport=gitlab_api.transport) as client:
        await client.add_issue_labels(12, ["released", "v1.2.0"])

    request = gitlab_api.requests[0]
    assert request.method == "PUT"
    assert request.url.raw_path.decode() == f"{PROJECT_PATH}/issues/12"
    assert json.loads(request.content) == {"add_labels": "released,v1.2.0"}


@pytest.mark.asyncio
async def test_error_status_raises(gitlab_api):
    gitlab_api.fail("POST", "/issues/12/notes", 502)

    async with GitLabClient(API_URL, REPO_ID, "secret", transport=gitlab_api.transport) as client:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await client.create_issue_note(12, "hello")

    assert exc_info.value.response.status_code == 502


class TestVerifyAccess:

    @pytest.mark.asyncio
    async def test_accessible_project(self, gitlab_api):
        async with GitLabClient(API_URL, REPO_ID, "secret", transport=gitlab_api.transport) as client:
            assert await verify_access(client) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,message", [
        (401, "Invalid GitLab token"),
        (403, "not allowed to access"),
        (404, "not found"),
    ])
    async def test_inaccessible_project(self, gitlab_api, caplog, status, message):
        gitlab_api.fail("GET", PROJECT_PATH, status)

        with caplog.at_level(logging.ERROR):
            async with GitLabClient(API_URL, REPO_ID, "secret", transport=gitlab_api.transport) as client:
                assert await verify_access(client) is False

        assert message in caplog.text

    @pytest.mark.asyncio
    async def test_server_error_propagates(self, gitlab_api):
        gitlab_api.fail("GET", PROJECT_PATH, 500)

        async with GitLabClient(API_URL, REPO_ID, "secret", transport=gitlab_api.transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await verify_access(client)
