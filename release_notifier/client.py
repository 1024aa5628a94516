"""
Async REST client for the GitLab API endpoints used by the notifier.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from release_notifier.repo_id import encode_repo_id

logger = logging.getLogger(__name__)


class GitLabClient:
    """Thin wrapper around ``httpx.AsyncClient`` scoped to one project.

    Every method raises ``httpx.HTTPStatusError`` for non-2xx responses and
    ``httpx.RequestError`` for transport failures. Nothing is retried.
    """

    DEFAULT_TIMEOUT = 30.0  # Default timeout for HTTP requests in seconds

    def __init__(
        self,
        api_url: str,
        repo_id: str,
        token: Optional[str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            api_url: Base URL of the REST API (e.g. https://gitlab.com/api/v4)
            repo_id: Canonical repository identifier (``group/project``)
            token: API token sent as the PRIVATE-TOKEN header
            transport: Optional httpx transport, used by tests

        Raises:
            ValueError: If no token is given
        """
        if not token:
            raise ValueError("GitLab token is required. Set GL_TOKEN or GITLAB_TOKEN environment variable.")

        self.api_url = api_url.rstrip("/")
        self.repo_id = repo_id
        self.project_path = f"/projects/{encode_repo_id(repo_id)}"
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={"PRIVATE-TOKEN": token},
            timeout=self.DEFAULT_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "GitLabClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, f"{self.project_path}{path}", **kwargs)
        response.raise_for_status()
        return response.json()

    async def get_project(self) -> Dict[str, Any]:
        return await self._request("GET", "")

    async def get_commit_merge_requests(self, sha: str) -> List[Dict[str, Any]]:
        """List the merge requests associated with a commit."""
        return await self._request("GET", f"/repository/commits/{sha}/merge_requests")

    async def create_merge_request_note(self, iid: int, body: str) -> Dict[str, Any]:
        return await self._request("POST", f"/merge_requests/{iid}/notes", json={"body": body})

    async def create_issue_note(self, iid: int, body: str) -> Dict[str, Any]:
        return await self._request("POST", f"/issues/{iid}/notes", json={"body": body})

    async def add_issue_labels(self, iid: int, labels: List[str]) -> Dict[str, Any]:
        """Add labels to an issue, keeping the ones it already has."""
        return await self._request("PUT", f"/issues/{iid}", json={"add_labels": ",".join(labels)})


async def verify_access(client: GitLabClient) -> bool:
    """Check that the token can reach the project.

    Returns:
        True if the project is accessible, False on 401/403/404
    """
    try:
        project = await client.get_project()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        if status == 401:
            logger.error("Invalid GitLab token")
        elif status == 403:
            logger.error("The GitLab token is not allowed to access project %s", client.repo_id)
        elif status == 404:
            logger.error("Project %s not found or token doesn't have access", client.repo_id)
        else:
            raise
        return False

    logger.info("Verified access to project %s", project.get("path_with_namespace", client.repo_id))
    return True
