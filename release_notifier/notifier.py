"""
Posting release comments to the issues and merge requests a release resolves.
"""

import asyncio
import logging
from typing import List, Mapping, Optional

import httpx

from release_notifier.client import GitLabClient
from release_notifier.comments import render_labels, render_success_comment
from release_notifier.config import NotifierConfig
from release_notifier.discovery import find_merge_requests
from release_notifier.issue_parser import IssueParser
from release_notifier.models import NotifyTarget, ReleaseContext
from release_notifier.references import Parser, extract_issue_references
from release_notifier.repo_id import get_repo_id
from release_notifier.targets import resolve_notify_targets

logger = logging.getLogger(__name__)


class NotificationError(ExceptionGroup):
    """One or more targets could not be notified."""

    def derive(self, excs):
        return NotificationError(self.message, excs)


def _describe(target: NotifyTarget) -> str:
    if target.is_merge_request:
        return f"merge request !{target.iid}"
    return f"issue #{target.iid}"


def comment_permalink(gitlab_url: str, repo_id: str, target: NotifyTarget, note_id: int) -> str:
    section = "merge_requests" if target.is_merge_request else "issues"
    return f"{gitlab_url}/{repo_id}/-/{section}/{target.iid}#note_{note_id}"


async def collect_notify_targets(
    client: GitLabClient,
    parser: Parser,
    repo_id: str,
    context: ReleaseContext,
) -> List[NotifyTarget]:
    """Find every issue and merge request the release resolves."""
    merge_requests = await find_merge_requests(client, [commit.hash for commit in context.commits])
    issues = extract_issue_references(parser, repo_id, context.commits, merge_requests)
    return resolve_notify_targets(merge_requests, issues)


async def notify_target(
    client: GitLabClient,
    target: NotifyTarget,
    config: NotifierConfig,
    context: ReleaseContext,
) -> Optional[Exception]:
    """Comment on one target and apply the released labels.

    Returns:
        The failure to report, or None when the target was handled. Permission
        and not-found errors are logged and not reported.
    """
    template_context = context.as_template_context()
    try:
        body = render_success_comment(
            target,
            template_context,
            context.named_releases,
            context.next_release,
            template=config.success_comment,
        )
        logger.debug("Create comment on %s: %r", _describe(target), body)

        if target.is_merge_request:
            note = await client.create_merge_request_note(target.iid, body)
        else:
            note = await client.create_issue_note(target.iid, body)

        logger.info(
            "Added comment to %s: %s",
            _describe(target),
            comment_permalink(config.gitlab_url, client.repo_id, target, note["id"]),
        )

        if config.released_labels:
            labels = render_labels(config.released_labels, template_context)
            # Labels go through the issues endpoint for merge requests too
            await client.add_issue_labels(target.iid, labels)
            logger.info("Added labels %s to %s", labels, _describe(target))
    except Exception as e:
        status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
        if status == 403:
            logger.error("Not allowed to add a comment to the %s.", _describe(target))
            return None
        if status == 404:
            logger.error("Failed to add a comment to the %s as it doesn't exist.", _describe(target))
            return None
        logger.error("Failed to add a comment to the %s: %s", _describe(target), e)
        return e

    return None


async def notify_targets(
    client: GitLabClient,
    targets: List[NotifyTarget],
    config: NotifierConfig,
    context: ReleaseContext,
) -> None:
    """Notify every target concurrently.

    Every target is attempted even when others fail.

    Raises:
        NotificationError: If any target failed for a reason other than 403/404
    """
    results = await asyncio.gather(
        *(notify_target(client, target, config, context) for target in targets)
    )
    errors = [error for error in results if error is not None]
    if errors:
        raise NotificationError(f"Failed to notify {len(errors)} of {len(targets)} targets", errors)


async def notify_success(
    config: NotifierConfig,
    context: ReleaseContext,
    env: Optional[Mapping[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[NotifyTarget]:
    """Comment on the issues and merge requests resolved by a release.

    Args:
        config: Resolved notifier configuration
        context: The published release
        env: Environment variables used to resolve the repository id
        transport: Optional httpx transport, used by tests

    Returns:
        The targets that were attempted (empty when commenting is disabled)

    Raises:
        NotificationError: If any target failed for a reason other than 403/404
        httpx.HTTPError: If merge request discovery failed
    """
    if not config.comments_enabled:
        logger.info("Skip commenting on issues and merge requests.")
        return []

    repo_id = get_repo_id(context.repository_url, config.gitlab_url, env)
    parser = IssueParser(hosts=[config.gitlab_url])

    async with GitLabClient(config.api_url, repo_id, config.token, transport=transport) as client:
        targets = await collect_notify_targets(client, parser, repo_id, context)
        await notify_targets(client, targets, config, context)

    return targets
