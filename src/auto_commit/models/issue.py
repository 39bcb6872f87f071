"""Data models for tracker issues."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

# Characters that force a search term to be quoted
_QUOTE_REQUIRED = re.compile(r"[\s\"':]")


class IssueState(Enum):
    """State of a tracker issue."""

    OPEN = "open"
    CLOSED = "closed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> IssueState:
        """Parse a tracker state string, case-insensitively."""
        if not isinstance(value, str):
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Issue:
    """A read-only snapshot of a tracker issue."""

    number: int
    title: str
    body: str | None = None
    state: IssueState = IssueState.UNKNOWN
    labels: tuple[str, ...] = ()
    url: str = ""


@dataclass(frozen=True)
class ScoredIssue:
    """An issue paired with its relevance score."""

    issue: Issue
    score: int

    @property
    def number(self) -> int:
        """Return the underlying issue number."""
        return self.issue.number

    @property
    def sort_key(self) -> tuple[int, int]:
        """Descending score, then ascending issue number."""
        return (-self.score, self.issue.number)


@dataclass(frozen=True)
class SelectedIssueReference:
    """The issue chosen for inclusion in the commit message."""

    number: int
    title: str

    @classmethod
    def from_issue(cls, issue: Issue) -> SelectedIssueReference:
        return cls(number=issue.number, title=issue.title)

    def __str__(self) -> str:
        return f"#{self.number}: {self.title}"


@dataclass(frozen=True)
class SearchQuery:
    """A tracker search built from keyword terms.

    Terms are kept structured until :meth:`render` is called at the
    tracker boundary, so escaping happens exactly once.
    """

    terms: tuple[str, ...] = ()

    @classmethod
    def from_terms(cls, terms: Iterable[str]) -> SearchQuery:
        cleaned = tuple(t.strip() for t in terms if t and t.strip())
        return cls(terms=cleaned)

    @property
    def is_empty(self) -> bool:
        return not self.terms

    def render(self) -> str:
        """Render the query as a single tracker search string."""
        parts: list[str] = []
        for term in self.terms:
            if _QUOTE_REQUIRED.search(term):
                escaped = term.replace("\\", "\\\\").replace('"', '\\"')
                parts.append(f'"{escaped}"')
            else:
                parts.append(term)
        return " ".join(parts)


def unique_by_number(issues: Iterable[Issue]) -> list[Issue]:
    """Drop repeated issue numbers, keeping the first occurrence."""
    seen: set[int] = set()
    unique: list[Issue] = []
    for issue in issues:
        if issue.number in seen:
            continue
        seen.add(issue.number)
        unique.append(issue)
    return unique
