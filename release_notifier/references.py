"""
Extraction of issue references from commit messages and merge request descriptions.
"""

import logging
from typing import Callable, Iterable, List, Optional

from release_notifier.issue_parser import ParsedText
from release_notifier.models import Commit, NotifyTarget

logger = logging.getLogger(__name__)

Parser = Callable[[str], ParsedText]


def extract_issue_references(
    parser: Parser,
    repo_id: str,
    commits: Iterable[Commit],
    merge_requests: Iterable[NotifyTarget] = (),
) -> List[NotifyTarget]:
    """Find the issues the release closes.

    Merge request descriptions are scanned before commit messages. Closing
    references to another repository are ignored, as are references whose
    issue token is not a number.

    Args:
        parser: Closing-keyword parser
        repo_id: Canonical repository identifier
        commits: Commits in the release
        merge_requests: Merge requests found for those commits

    Returns:
        Issue targets in discovery order, possibly with repeated iids
    """
    texts: List[Optional[str]] = [mr.description for mr in merge_requests]
    texts.extend(commit.message for commit in commits)

    issues = []
    for text in texts:
        if not text:
            continue
        for action in parser(text).actions.close:
            if action.slug is not None and action.slug != repo_id:
                continue
            # int() also accepts "1_2" and non-ASCII digits
            if not (action.issue.isascii() and action.issue.isdigit()):
                logger.warning("Ignoring closing reference %r: %r is not an issue number", action.raw, action.issue)
                continue
            issues.append(NotifyTarget.issue(int(action.issue)))

    logger.debug("Found issues via closing keywords: %s", [issue.iid for issue in issues])
    return issues
