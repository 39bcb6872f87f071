"""Interactive selection of the issue a commit refers to.

The selector walks a small state machine:

    CHECK_ORIGIN -> DIRECT_REFERENCE -> FUZZY_FETCH -> PRESENT -> RESOLVED
         |                 |                                ^
         v                 +---- issues found --------------+
     NO_TRACKER

- CHECK_ORIGIN: is there a tracker for this working tree at all?
- DIRECT_REFERENCE: ``#123`` tokens in the diff are fetched as-is.
- FUZZY_FETCH: open issues are scored against the diff; when nothing
  scores, one keyword search is tried.
- PRESENT: the user picks from the list, types an issue number, or skips.

Tracker failures are never fatal here. They become dimmed notices and the
commit continues without an issue reference.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from auto_commit.config.schema import MatchingConfig
from auto_commit.core.keyword_extractor import KeywordExtractor
from auto_commit.core.relevance_scorer import RelevanceScorer
from auto_commit.models.issue import Issue, SearchQuery, SelectedIssueReference, unique_by_number
from auto_commit.utils.async_helpers import FetchFailureError, TrackerUnavailableError
from auto_commit.utils.logging import LogEventNames

if TYPE_CHECKING:
    from auto_commit.interfaces.llm import LLMProvider
    from auto_commit.interfaces.terminal import TerminalUI
    from auto_commit.interfaces.tracker import IssueTracker

log = structlog.get_logger()

# "#123", but not "&#123;" entities or "page/#123" anchors
ISSUE_REFERENCE_PATTERN = re.compile(r"(?<![\w&/])#(\d+)\b")

SELECT_PROMPT = "Select an issue by number, enter issue ID (#123), or press Enter to skip"
MANUAL_PROMPT = "No issues found. Enter issue ID (#123) or press Enter to skip"

TrackerErrors = (FetchFailureError, TrackerUnavailableError)


class SelectionState(Enum):
    """States of the issue selection flow."""

    CHECK_ORIGIN = "check_origin"
    NO_TRACKER = "no_tracker"
    DIRECT_REFERENCE = "direct_reference"
    FUZZY_FETCH = "fuzzy_fetch"
    PRESENT = "present"
    RESOLVED = "resolved"


class ChoiceKind(Enum):
    SKIP = "skip"
    INDEX = "index"
    NUMBER = "number"
    INVALID = "invalid"


@dataclass(frozen=True)
class Choice:
    """A parsed answer to the selection prompt."""

    kind: ChoiceKind
    value: int = 0


@dataclass
class Candidates:
    """Issues to present, with scores when they came from the scorer."""

    issues: list[Issue] = field(default_factory=list)
    scores: dict[int, int] | None = None


def extract_issue_references(diff: str) -> list[int]:
    """Return the distinct positive ``#N`` references in order of appearance."""
    numbers: list[int] = []
    for match in ISSUE_REFERENCE_PATTERN.finditer(diff):
        number = int(match.group(1))
        if number > 0 and number not in numbers:
            numbers.append(number)
    return numbers


def parse_choice(answer: str | None, count: int) -> Choice:
    """Interpret the user's answer to the selection prompt.

    A bare number within ``1..count`` selects by index; any other number,
    with or without a leading ``#``, is an issue number.
    """
    text = (answer or "").strip()
    if not text:
        return Choice(ChoiceKind.SKIP)

    if text.startswith("#"):
        digits = text[1:]
        if digits.isdigit() and int(digits) > 0:
            return Choice(ChoiceKind.NUMBER, int(digits))
        return Choice(ChoiceKind.INVALID)

    if text.isdigit():
        value = int(text)
        if 1 <= value <= count:
            return Choice(ChoiceKind.INDEX, value)
        if value > 0:
            return Choice(ChoiceKind.NUMBER, value)

    return Choice(ChoiceKind.INVALID)


class IssueSelector:
    """Finds candidate issues for a diff and lets the user pick one.

    Example:
        selector = IssueSelector(tracker, ui)
        reference = await selector.select(diff)
        if reference:
            print(f"Linking #{reference.number}")
    """

    def __init__(
        self,
        tracker: IssueTracker,
        ui: TerminalUI,
        config: MatchingConfig | None = None,
        scorer: RelevanceScorer | None = None,
        keyword_timeout: float = 30.0,
    ) -> None:
        self._tracker = tracker
        self._ui = ui
        self._config = config or MatchingConfig()
        self._scorer = scorer or RelevanceScorer(self._config)
        self._keyword_timeout = keyword_timeout
        self.state = SelectionState.CHECK_ORIGIN

    def _transition(self, state: SelectionState) -> None:
        log.debug(LogEventNames.SELECTION_STATE, previous=self.state.value, state=state.value)
        self.state = state

    async def select(
        self,
        diff: str,
        llm: LLMProvider | None = None,
    ) -> SelectedIssueReference | None:
        """Run the selection flow for a diff.

        Args:
            diff: The staged diff.
            llm: When given, keywords are extracted semantically.

        Returns:
            The chosen issue, or None if the user skipped or no tracker exists.
        """
        self.state = SelectionState.CHECK_ORIGIN

        if not await self._check_origin():
            self._transition(SelectionState.NO_TRACKER)
            return None

        candidates = await self._direct_references(diff)
        if candidates is None:
            candidates = await self._fuzzy_fetch(diff, llm)

        self._transition(SelectionState.PRESENT)
        selected = await self._present(candidates)

        self._transition(SelectionState.RESOLVED)
        if selected is None:
            log.info(LogEventNames.ISSUE_NOT_SELECTED)
            return None

        reference = SelectedIssueReference.from_issue(selected)
        log.info(LogEventNames.ISSUE_SELECTED, issue=reference.number)
        self._ui.success(f"Selected issue {reference}")
        return reference

    async def _check_origin(self) -> bool:
        try:
            available = await self._tracker.is_available()
        except TrackerErrors as e:
            log.info(LogEventNames.TRACKER_UNAVAILABLE, error=str(e))
            available = False
        if not available:
            self._ui.notice("No GitHub repository found for this working tree; skipping issues.")
        return available

    async def _direct_references(self, diff: str) -> Candidates | None:
        """Fetch issues referenced in the diff. None means: go fuzzy."""
        numbers = extract_issue_references(diff)
        if not numbers:
            return None

        self._transition(SelectionState.DIRECT_REFERENCE)
        issues: list[Issue] = []
        try:
            for number in numbers:
                issue = await self._tracker.get_issue(number)
                if issue is not None:
                    issues.append(issue)
        except TrackerErrors as e:
            log.warning(LogEventNames.TRACKER_FETCH_FAILED, stage="direct_reference", error=str(e))
            self._ui.notice(f"Could not fetch referenced issues ({e}); searching instead.")
            return None

        if not issues:
            return None

        self._ui.info(f"Found {len(issues)} issue(s) referenced in the diff.")
        return Candidates(unique_by_number(issues)[: self._config.max_raw_candidates])

    async def _fuzzy_fetch(self, diff: str, llm: LLMProvider | None) -> Candidates:
        self._transition(SelectionState.FUZZY_FETCH)
        cfg = self._config

        try:
            issues = await self._tracker.list_issues(
                state="open", limit=cfg.open_issue_fetch_limit
            )
        except TrackerErrors as e:
            log.warning(LogEventNames.TRACKER_FETCH_FAILED, stage="list", error=str(e))
            self._ui.notice(f"Could not list issues ({e}).")
            return Candidates()

        extractor = KeywordExtractor(
            llm=llm, max_keywords=cfg.max_keywords, llm_timeout=self._keyword_timeout
        )
        if llm is not None:
            keywords = await extractor.extract_semantic(diff)
        else:
            keywords = extractor.extract(diff)

        ranked = self._scorer.score(issues, diff, keywords)
        if ranked:
            return Candidates(
                issues=[item.issue for item in ranked],
                scores={item.number: item.score for item in ranked},
            )

        if not keywords:
            return Candidates()

        query = SearchQuery.from_terms(keywords[: cfg.fallback_search_terms])
        try:
            found = await self._tracker.search_issues(
                query, limit=cfg.fallback_search_limit, state="open"
            )
        except TrackerErrors as e:
            log.warning(LogEventNames.TRACKER_FETCH_FAILED, stage="search", error=str(e))
            self._ui.notice(f"Issue search failed ({e}).")
            return Candidates()

        return Candidates(unique_by_number(found)[: cfg.max_raw_candidates])

    async def _present(self, candidates: Candidates) -> Issue | None:
        issues = candidates.issues
        if issues:
            self._ui.show_issues(issues, candidates.scores)
            answer = self._ui.ask(SELECT_PROMPT)
        else:
            answer = self._ui.ask(MANUAL_PROMPT)

        choice = parse_choice(answer, len(issues))

        if choice.kind is ChoiceKind.SKIP:
            return None
        if choice.kind is ChoiceKind.INVALID:
            self._ui.error(f"Invalid selection: {answer!r}")
            return None
        if choice.kind is ChoiceKind.INDEX:
            return issues[choice.value - 1]

        for issue in issues:
            if issue.number == choice.value:
                return issue
        return await self._fetch_manual(choice.value)

    async def _fetch_manual(self, number: int) -> Issue | None:
        try:
            issue = await self._tracker.get_issue(number)
        except TrackerErrors as e:
            log.warning(LogEventNames.TRACKER_FETCH_FAILED, stage="manual", error=str(e))
            self._ui.notice(f"Could not fetch issue #{number} ({e}).")
            return None
        if issue is None:
            self._ui.error(f"Issue #{number} not found.")
        return issue
