"""
Resolution of the final list of items to notify.
"""

from typing import Iterable, List

from release_notifier.models import NotifyTarget


def unique_by_iid(targets: Iterable[NotifyTarget]) -> List[NotifyTarget]:
    """Drop repeated iids, keeping the first occurrence."""
    seen = set()
    unique = []
    for target in targets:
        if target.iid in seen:
            continue
        seen.add(target.iid)
        unique.append(target)
    return unique


def resolve_notify_targets(
    merge_requests: Iterable[NotifyTarget],
    issues: Iterable[NotifyTarget],
) -> List[NotifyTarget]:
    """Union merge requests and issue references into one notify-list.

    Merge requests come first, so a merge request record wins over a bare
    issue reference carrying the same iid.
    """
    return unique_by_iid([*merge_requests, *issues])
