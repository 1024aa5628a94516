"""
Release notifier: comments on the issues and merge requests a release resolves.
"""

from release_notifier.config import NotifierConfig, resolve_config
from release_notifier.models import NotifyTarget, ReleaseContext, TargetKind
from release_notifier.notifier import NotificationError, notify_success

__all__ = [
    "NotificationError",
    "NotifierConfig",
    "NotifyTarget",
    "ReleaseContext",
    "TargetKind",
    "notify_success",
    "resolve_config",
]
