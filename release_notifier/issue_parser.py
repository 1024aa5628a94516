"""
Closing-keyword parser for commit messages and merge request descriptions.

Finds phrases such as ``Fixes #12``, ``closes group/project#3, #4 and !7`` or
``Resolves https://gitlab.com/group/project/-/issues/9`` and reports each
referenced item as a closing action.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from release_notifier.config import DEFAULT_GITLAB_URL

CLOSE_KEYWORDS = (
    "close", "closes", "closed", "closing",
    "fix", "fixes", "fixed", "fixing",
    "resolve", "resolves", "resolved", "resolving",
    "implement", "implements", "implemented", "implementing",
)

ISSUE_PREFIXES = ("#", "!")

KEYWORD_PATTERN = re.compile(
    r'(?<![\w/])(?P<keyword>' + "|".join(sorted(CLOSE_KEYWORDS, key=len, reverse=True)) + r')\b:?',
    re.IGNORECASE,
)

SHORT_REFERENCE = (
    r'(?P<slug>[\w.-]+(?:/[\w.-]+)+)?'
    r'(?P<prefix>[' + "".join(re.escape(p) for p in ISSUE_PREFIXES) + r'])'
    r'(?P<issue>\w+)'
)

SEPARATOR_PATTERN = re.compile(r'\s*(?:,|&|\band\b)?\s*', re.IGNORECASE)

IGNORED_BLOCKS = re.compile(r'```.*?```|`[^`\n]*`|<!--.*?-->', re.DOTALL)


@dataclass(frozen=True)
class ClosingAction:
    """One item referenced with closing intent.

    Attributes:
        keyword: The closing keyword as written
        slug: Repository the reference points at, None for the current one
        prefix: ``#`` for issues, ``!`` for merge requests
        issue: The raw reference token (normally digits)
        raw: The reference text as it appeared
    """
    keyword: str
    slug: Optional[str]
    prefix: str
    issue: str
    raw: str


@dataclass
class Actions:
    close: List[ClosingAction] = field(default_factory=list)


@dataclass
class ParsedText:
    actions: Actions = field(default_factory=Actions)


class IssueParser:
    """Callable parser: ``IssueParser(hosts=[...])(text) -> ParsedText``."""

    def __init__(self, hosts: Optional[Sequence[str]] = None):
        self.hosts = [host.rstrip("/") for host in (hosts or [DEFAULT_GITLAB_URL])]
        url_reference = (
            r'(?:' + "|".join(re.escape(host) for host in self.hosts) + r')/'
            r'(?P<url_slug>[\w.-]+(?:/[\w.-]+)+?)/(?:-/)?'
            r'(?P<url_kind>issues|merge_requests)/(?P<url_issue>\d+)'
        )
        self._reference = re.compile(
            r'(?:' + url_reference + r'|' + SHORT_REFERENCE + r')(?![\w/])',
            re.IGNORECASE,
        )

    def __call__(self, text: str) -> ParsedText:
        parsed = ParsedText()
        if not text:
            return parsed

        text = IGNORED_BLOCKS.sub(" ", text)
        for keyword in KEYWORD_PATTERN.finditer(text):
            parsed.actions.close.extend(self._references_after(text, keyword))
        return parsed

    def _references_after(self, text: str, keyword: re.Match) -> List[ClosingAction]:
        actions = []
        pos = keyword.end()
        while True:
            separator = SEPARATOR_PATTERN.match(text, pos)
            start = separator.end() if separator else pos
            # The first reference must be separated from the keyword
            if not actions and start == keyword.end() and text[keyword.end() - 1] != ":":
                break
            reference = self._reference.match(text, start)
            if not reference:
                break
            actions.append(self._to_action(keyword.group("keyword"), reference))
            pos = reference.end()
        return actions

    @staticmethod
    def _to_action(keyword: str, reference: re.Match) -> ClosingAction:
        if reference.group("url_issue"):
            return ClosingAction(
                keyword=keyword,
                slug=reference.group("url_slug"),
                prefix="!" if reference.group("url_kind").lower() == "merge_requests" else "#",
                issue=reference.group("url_issue"),
                raw=reference.group(0),
            )
        return ClosingAction(
            keyword=keyword,
            slug=reference.group("slug"),
            prefix=reference.group("prefix"),
            issue=reference.group("issue"),
            raw=reference.group(0),
        )
