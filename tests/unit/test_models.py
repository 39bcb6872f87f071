"""Tests for data models."""

from __future__ import annotations

import pytest

from auto_commit.models.commit import CommitFormat, GitAuthor, ReviewAction
from auto_commit.models.issue import (
    Issue,
    IssueState,
    ScoredIssue,
    SearchQuery,
    SelectedIssueReference,
    unique_by_number,
)


class TestIssue:
    """Test issue models."""

    def test_frozen(self) -> None:
        """Test that issues cannot be modified."""
        issue = Issue(number=1, title="x")
        with pytest.raises(AttributeError):
            issue.title = "y"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("OPEN", IssueState.OPEN),
            (" closed ", IssueState.CLOSED),
            ("merged", IssueState.UNKNOWN),
            (None, IssueState.UNKNOWN),
        ],
    )
    def test_state_parse(self, value: object, expected: IssueState) -> None:
        """Test tolerant state parsing."""
        assert IssueState.parse(value) is expected

    def test_scored_issue_sort_key(self) -> None:
        """Test ordering by score, then number."""
        items = [
            ScoredIssue(Issue(number=9, title="a"), 10),
            ScoredIssue(Issue(number=2, title="b"), 10),
            ScoredIssue(Issue(number=5, title="c"), 30),
        ]
        assert [i.number for i in sorted(items, key=lambda i: i.sort_key)] == [5, 2, 9]

    def test_selected_reference(self) -> None:
        """Test building and rendering a selected reference."""
        reference = SelectedIssueReference.from_issue(Issue(number=3, title="Crash on start"))
        assert str(reference) == "#3: Crash on start"

    def test_unique_by_number(self) -> None:
        """Test that the first occurrence wins."""
        issues = [Issue(number=1, title="a"), Issue(number=1, title="b"), Issue(number=2, title="c")]
        assert [i.title for i in unique_by_number(issues)] == ["a", "c"]


class TestSearchQuery:
    """Test SearchQuery."""

    def test_drops_blank_terms(self) -> None:
        """Test that empty terms are removed."""
        query = SearchQuery.from_terms(["auth", " ", "", " provider "])
        assert query.terms == ("auth", "provider")

    def test_empty(self) -> None:
        """Test the empty query."""
        assert SearchQuery.from_terms([]).is_empty

    def test_render_quotes_when_needed(self) -> None:
        """Test that phrases and special characters are quoted."""
        query = SearchQuery.from_terms(["auth", "api key", 'say "hi"', "label:bug"])
        assert query.render() == 'auth "api key" "say \\"hi\\"" "label:bug"'


class TestCommitFormat:
    """Test CommitFormat."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("conventional", CommitFormat.CONVENTIONAL),
            ("sem", CommitFormat.SEMANTIC),
            ("K", CommitFormat.KERNEL),
            ("issue", CommitFormat.ISSUE_REFERENCE),
        ],
    )
    def test_match_prefix(self, text: str, expected: CommitFormat) -> None:
        """Test prefix matching of format names."""
        assert CommitFormat.match(text) is expected

    def test_match_unknown(self) -> None:
        """Test that unknown or empty names do not match."""
        assert CommitFormat.match("gitmoji") is None
        assert CommitFormat.match("") is None

    def test_resolve_falls_back(self) -> None:
        """Test the conventional fallback."""
        assert CommitFormat.resolve("gitmoji") is CommitFormat.CONVENTIONAL

    def test_uses_style_guide(self) -> None:
        """Test which formats are driven by a learned guide."""
        assert CommitFormat.REPO.uses_style_guide
        assert CommitFormat.CUSTOM.uses_style_guide
        assert not CommitFormat.KERNEL.uses_style_guide


class TestReviewAction:
    """Test ReviewAction.parse."""

    @pytest.mark.parametrize(
        ("answer", "expected"),
        [
            ("a", ReviewAction.ACCEPT),
            ("Accept", ReviewAction.ACCEPT),
            (" e ", ReviewAction.EDIT),
            ("n", ReviewAction.NEW),
            ("r", ReviewAction.REJECT),
            ("x", ReviewAction.REJECT),
            ("", ReviewAction.REJECT),
            (None, ReviewAction.REJECT),
        ],
    )
    def test_parse(self, answer: str | None, expected: ReviewAction) -> None:
        """Test answer parsing; unknown answers reject."""
        assert ReviewAction.parse(answer) is expected


class TestGitAuthor:
    """Test GitAuthor."""

    def test_str(self) -> None:
        """Test the Name <email> rendering."""
        assert str(GitAuthor("Ada", "ada@example.com")) == "Ada <ada@example.com>"
