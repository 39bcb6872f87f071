"""Data models and transfer objects."""

from .commit import CommitFormat, GitAuthor, ReviewAction
from .issue import (
    Issue,
    IssueState,
    ScoredIssue,
    SearchQuery,
    SelectedIssueReference,
    unique_by_number,
)

__all__ = [
    # Issue models
    "IssueState",
    "Issue",
    "ScoredIssue",
    "SelectedIssueReference",
    "SearchQuery",
    "unique_by_number",
    # Commit models
    "CommitFormat",
    "GitAuthor",
    "ReviewAction",
]
