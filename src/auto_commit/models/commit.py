"""Data models for commit formats, authors and the review loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum


class CommitFormat(StrEnum):
    """Supported commit message formats."""

    CONVENTIONAL = "conventional"
    SEMANTIC = "semantic"
    ANGULAR = "angular"
    KERNEL = "kernel"
    REPO = "repo"
    CUSTOM = "custom"
    ISSUE_REFERENCE = "issue"

    @classmethod
    def match(cls, text: str) -> CommitFormat | None:
        """Return the first format whose name starts with ``text``."""
        prefix = text.strip().lower()
        if not prefix:
            return None
        for fmt in cls:
            if fmt.value.startswith(prefix):
                return fmt
        return None

    @classmethod
    def resolve(cls, text: str) -> CommitFormat:
        """Like :meth:`match`, falling back to conventional commits."""
        return cls.match(text) or cls.CONVENTIONAL

    @property
    def uses_style_guide(self) -> bool:
        """Formats driven by a learned style guide instead of a template."""
        return self in (CommitFormat.REPO, CommitFormat.CUSTOM)


@dataclass(frozen=True)
class GitAuthor:
    """Git author identity from user.name and user.email."""

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


class ReviewAction(Enum):
    """What the user chose to do with a generated message."""

    ACCEPT = "a"
    EDIT = "e"
    REJECT = "r"
    NEW = "n"

    @classmethod
    def parse(cls, answer: str | None) -> ReviewAction:
        """Parse a prompt answer; anything unrecognised rejects."""
        if not answer:
            return cls.REJECT
        key = answer.strip().lower()[:1]
        for action in cls:
            if action.value == key:
                return action
        return cls.REJECT
