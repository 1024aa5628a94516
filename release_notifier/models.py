"""
Data types shared by the release notifier.

Everything here is request-scoped: a ReleaseContext is loaded once per run and
the targets derived from it are thrown away when the run finishes.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, List, Optional


class TargetKind(StrEnum):
    """What kind of item a notification is posted to."""

    MERGE_REQUEST = "merge_request"
    ISSUE = "issue"


@dataclass(frozen=True)
class Commit:
    hash: str
    message: str = ""


@dataclass(frozen=True)
class NextRelease:
    """The release that was just published."""
    version: str
    git_tag: Optional[str] = None
    name: Optional[str] = None
    notes: Optional[str] = None
    channel: Optional[str] = None


@dataclass(frozen=True)
class ReleaseInfo:
    """A place where the release was published (e.g. a release page)."""
    name: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class NotifyTarget:
    """An issue or merge request that receives a release comment.

    The kind is fixed when the target is built, so routing never has to guess
    from which fields happen to be present.
    """
    iid: int
    kind: TargetKind
    title: Optional[str] = None
    description: Optional[str] = None
    web_url: Optional[str] = None

    @classmethod
    def merge_request(cls, iid: int, title: Optional[str] = None,
                      description: Optional[str] = None,
                      web_url: Optional[str] = None) -> "NotifyTarget":
        return cls(iid=iid, kind=TargetKind.MERGE_REQUEST, title=title,
                   description=description, web_url=web_url)

    @classmethod
    def issue(cls, iid: int) -> "NotifyTarget":
        """An issue found through a closing keyword; only the iid is known."""
        return cls(iid=iid, kind=TargetKind.ISSUE)

    @classmethod
    def from_merge_request_payload(cls, payload: Dict[str, Any]) -> "NotifyTarget":
        """Build a merge-request target from a hosting API record."""
        return cls.merge_request(
            iid=int(payload["iid"]),
            title=payload.get("title"),
            description=payload.get("description"),
            web_url=payload.get("web_url"),
        )

    @property
    def is_merge_request(self) -> bool:
        return self.kind is TargetKind.MERGE_REQUEST

    def as_context(self) -> Dict[str, Any]:
        """Mapping exposed to comment templates as ``issue``."""
        return {
            "iid": self.iid,
            "kind": str(self.kind),
            "is_merge_request": self.is_merge_request,
            "title": self.title,
            "description": self.description,
            "web_url": self.web_url,
        }


@dataclass
class ReleaseContext:
    """Everything the notifier needs to know about the release that just happened."""
    repository_url: str
    next_release: NextRelease
    commits: List[Commit] = field(default_factory=list)
    releases: List[ReleaseInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReleaseContext":
        """Load a release context from its JSON representation.

        Args:
            data: Parsed JSON document with ``repository_url``, ``next_release``,
                and optionally ``commits`` and ``releases``

        Returns:
            ReleaseContext instance

        Raises:
            ValueError: If a required field is missing
        """
        if not data.get("repository_url"):
            raise ValueError("Release context is missing 'repository_url'")
        next_release = data.get("next_release")
        if not next_release or not next_release.get("version"):
            raise ValueError("Release context is missing 'next_release.version'")

        return cls(
            repository_url=data["repository_url"],
            next_release=NextRelease(
                version=next_release["version"],
                git_tag=next_release.get("git_tag"),
                name=next_release.get("name"),
                notes=next_release.get("notes"),
                channel=next_release.get("channel"),
            ),
            commits=[
                Commit(hash=commit["hash"], message=commit.get("message") or "")
                for commit in data.get("commits") or []
            ],
            releases=[
                ReleaseInfo(name=release.get("name"), url=release.get("url"))
                for release in data.get("releases") or []
            ],
        )

    @property
    def named_releases(self) -> List[ReleaseInfo]:
        """Releases that can be linked from the default comment."""
        return [release for release in self.releases if release.name]

    def as_template_context(self) -> Dict[str, Any]:
        """Mapping exposed to comment and label templates."""
        return {
            "repository_url": self.repository_url,
            "next_release": {
                "version": self.next_release.version,
                "git_tag": self.next_release.git_tag,
                "name": self.next_release.name,
                "notes": self.next_release.notes,
                "channel": self.next_release.channel,
            },
            "releases": [{"name": r.name, "url": r.url} for r in self.releases],
            "commits": [{"hash": c.hash, "message": c.message} for c in self.commits],
        }
