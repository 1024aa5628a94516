"""
A fake GitLab API for tests, built on httpx.MockTransport so tests can assert
on the exact requests the notifier issues.
"""

import asyncio
import json
import re
from typing import Dict, List, Optional, Tuple

import httpx

from release_notifier.models import Commit

GITLAB_URL = "https://gitlab.example.com"
API_URL = f"{GITLAB_URL}/api/v4"
REPO_ID = "group/project"
PROJECT_PATH = "/api/v4/projects/group%2Fproject"

COMMIT_MRS = re.compile(r'/repository/commits/(?P<sha>[^/]+)/merge_requests$')


class FakeGitLabApi:
    """Records requests and answers them like the GitLab API would."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.commit_merge_requests: Dict[str, List[Dict]] = {}
        self.failures: List[Tuple[str, str, Optional[int]]] = []
        self._next_note_id = 100

    def fail(self, method: str, path_suffix: str, status: Optional[int] = 500) -> None:
        """Make matching requests fail; a status of None raises a connection error."""
        self.failures.append((method, path_suffix, status))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.raw_path.decode()

        for method, suffix, status in self.failures:
            if request.method == method and path.endswith(suffix):
                if status is None:
                    raise httpx.ConnectError("connection refused", request=request)
                return httpx.Response(status, json={"message": f"{status} error"})

        match = COMMIT_MRS.search(path)
        if request.method == "GET" and match:
            return httpx.Response(200, json=self.commit_merge_requests.get(match.group("sha"), []))
        if request.method == "GET" and path == PROJECT_PATH:
            return httpx.Response(200, json={"id": 1, "path_with_namespace": REPO_ID})
        if request.method == "POST" and path.endswith("/notes"):
            self._next_note_id += 1
            body = json.loads(request.content)["body"]
            return httpx.Response(201, json={"id": self._next_note_id, "body": body})
        if request.method == "PUT":
            return httpx.Response(200, json=json.loads(request.content))
        return httpx.Response(404, json={"message": "404 Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def concurrent_transport(self, expected: int, timeout: float = 1.0) -> httpx.MockTransport:
        """Transport that holds every request until ``expected`` of them are in flight together.

        Requests sent one after another never reach that count, so they fail
        with ``TimeoutError`` once ``timeout`` seconds have passed.
        """
        all_in_flight = asyncio.Event()
        in_flight = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight
            in_flight += 1
            if in_flight >= expected:
                all_in_flight.set()
            await asyncio.wait_for(all_in_flight.wait(), timeout)
            return self.handler(request)

        return httpx.MockTransport(handler)

    def calls(self, method: str, path_suffix: str = "") -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.raw_path.decode().endswith(path_suffix)
        ]


def make_commits(*messages: str) -> List[Commit]:
    return [Commit(hash=f"sha{i}", message=message) for i, message in enumerate(messages)]


def merge_request_payload(iid: int, description: str = "") -> Dict:
    return {
        "iid": iid,
        "title": f"Merge request {iid}",
        "description": description,
        "merge_status": "can_be_merged",
        "web_url": f"{GITLAB_URL}/{REPO_ID}/-/merge_requests/{iid}",
    }
