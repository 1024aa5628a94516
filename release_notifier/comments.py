"""
Rendering of release comments and label names.

Templates use ``string.Template`` syntax extended with dotted paths, e.g.
``Released in ${next_release.version} (#${issue.iid})``.
"""

from collections.abc import Mapping, Sequence
from string import Template
from typing import Any, Dict, Iterable, List, Optional

from release_notifier.models import NextRelease, NotifyTarget, ReleaseInfo


class ReleaseTemplate(Template):
    """Template whose placeholders may be dotted paths into the context."""

    idpattern = r'(?a:[_a-z][_a-z0-9]*(?:\.[_a-z0-9]+)*)'


class _PathLookup(Mapping):
    """Resolves ``a.b.0.c`` against nested mappings and sequences."""

    def __init__(self, context: Dict[str, Any]):
        self._context = context

    def __getitem__(self, path: str) -> Any:
        value: Any = self._context
        for part in path.split("."):
            if isinstance(value, Mapping):
                value = value[part]
            elif isinstance(value, Sequence) and not isinstance(value, str) and part.isdigit():
                try:
                    value = value[int(part)]
                except IndexError:
                    raise KeyError(path) from None
            else:
                raise KeyError(path)
        if value is None:
            return ""
        return value

    def __iter__(self):
        return iter(self._context)

    def __len__(self) -> int:
        return len(self._context)


def render_template(template: str, context: Dict[str, Any]) -> str:
    """Render a template, leaving unknown placeholders untouched."""
    return ReleaseTemplate(template).safe_substitute(_PathLookup(context))


def render_labels(label_templates: Iterable[str], context: Dict[str, Any]) -> List[str]:
    return [render_template(label, context) for label in label_templates]


def _linkify(release: ReleaseInfo) -> str:
    if release.url:
        return f"[{release.name}]({release.url})"
    return f"`{release.name}`"


def default_success_comment(
    target: NotifyTarget,
    releases: List[ReleaseInfo],
    next_release: NextRelease,
) -> str:
    """Compose the comment posted when no custom template is configured.

    Args:
        target: Issue or merge request being notified
        releases: Releases with a name, linked from the comment
        next_release: The release that was just published

    Returns:
        Markdown comment body
    """
    subject = "merge request is included" if target.is_merge_request else "issue has been resolved"
    body = f":tada: This {subject} in version {next_release.version} :tada:"

    if len(releases) == 1:
        body += f"\n\nThe release is available on {_linkify(releases[0])}"
    elif releases:
        links = "\n".join(f"- {_linkify(release)}" for release in releases)
        body += f"\n\nThe release is available on:\n{links}"

    return body


def render_success_comment(
    target: NotifyTarget,
    context: Dict[str, Any],
    releases: List[ReleaseInfo],
    next_release: NextRelease,
    template: Optional[str] = None,
) -> str:
    """Render the comment body for one target."""
    if template:
        return render_template(template, {**context, "issue": target.as_context()})
    return default_success_comment(target, releases, next_release)
