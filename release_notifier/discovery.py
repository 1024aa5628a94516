"""
Discovery of the merge requests that contributed commits to a release.
"""

import asyncio
import logging
from typing import Iterable, List

from release_notifier.client import GitLabClient
from release_notifier.models import NotifyTarget
from release_notifier.targets import unique_by_iid

logger = logging.getLogger(__name__)


async def find_merge_requests(client: GitLabClient, shas: Iterable[str]) -> List[NotifyTarget]:
    """Find the merge requests associated with any of the given commits.

    One lookup is issued per commit and all lookups run concurrently. Any
    failed lookup aborts the whole discovery.

    Args:
        client: API client for the project
        shas: Commit hashes of the release

    Returns:
        Merge request targets, one per iid
    """
    responses = await asyncio.gather(
        *(client.get_commit_merge_requests(sha) for sha in shas)
    )
    merge_requests = unique_by_iid(
        NotifyTarget.from_merge_request_payload(payload)
        for payloads in responses
        for payload in payloads
    )

    logger.debug("Found merge requests: %s", [mr.iid for mr in merge_requests])
    return merge_requests
