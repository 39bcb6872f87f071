"""Relevance scoring of tracker issues against a staged diff.

Scoring is a weighted substring heuristic:

- Important terms are pulled from the diff (declared and instantiated
  identifiers, imported modules, domain and configuration vocabulary, and a
  fixed set of multi-word technical phrases).
- Each term found in an issue title, label or body adds that field's weight.
- Broad technical terms earn a small bonus when the diff itself uses the
  same word.

The result is deterministic: identical inputs always rank identically,
with ties broken by ascending issue number.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import structlog

from auto_commit.config.schema import MatchingConfig
from auto_commit.core.keyword_extractor import split_compound
from auto_commit.models.issue import Issue, ScoredIssue, unique_by_number
from auto_commit.utils.logging import LogEventNames

log = structlog.get_logger()

MIN_TERM_LENGTH = 4

DECLARATION_PATTERN = re.compile(
    r"\b(?:class|def|function|const|let|var|interface|type|enum|struct|fn|func|new)"
    r"\s+([A-Za-z_][A-Za-z0-9_]*)"
)

IMPORT_PATTERNS = (
    re.compile(r"\bfrom\s+([A-Za-z_][\w.]*)\s+import\b"),
    re.compile(r"^[+\s]*import\s+([A-Za-z_][\w.]*)", re.MULTILINE),
    re.compile(r"\b(?:import|require)\b[^'\"\n]*?['\"]([^'\"]+)['\"]"),
)

# Matched against the words of the diff, including the parts of compound
# identifiers, so build_prompt contributes "prompt"
DOMAIN_TERMS: frozenset[str] = frozenset(
    {
        # LLM integration
        "provider", "model", "anthropic", "openai", "ollama", "claude", "langchain",
        "completion", "token", "tokens", "language", "prompt", "chat", "message",
        "response", "generate", "semantic", "multiple",
        # Commit messages
        "commit", "format", "style",
        # Programming concepts
        "interface", "type", "enum", "client", "service", "util", "helper",
        "auth", "authentication", "session", "cache", "database", "schema",
    }
)

_WORD = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

CONFIG_TERM_PATTERN = re.compile(
    r"\b(config|configuration|setting|settings|parameter|option|options)\b",
    re.IGNORECASE,
)

COMPOSITE_PHRASES: tuple[str, ...] = (
    "language model",
    "api key",
    "commit message",
    "commit format",
    "model selection",
    "token limit",
    "chat model",
    "base url",
    "system prompt",
    "default model",
    "multiple providers",
)

# Terms that earn the broad bonus when the diff itself uses them as words
BROAD_TERMS: tuple[str, ...] = (
    "api",
    "provider",
    "model",
    "llm",
    "language model",
    "anthropic",
    "openai",
    "ollama",
    "claude",
    "gpt",
    "config",
    "integration",
    "token",
    "completion",
)

_NON_WORD = re.compile(r"[^\w\s]")


def _add_identifier(terms: set[str], identifier: str) -> None:
    lowered = identifier.lower()
    if len(lowered) >= MIN_TERM_LENGTH:
        terms.add(lowered)
    for part in split_compound(identifier):
        if len(part) >= MIN_TERM_LENGTH:
            terms.add(part)


def diff_word_parts(diff: str) -> set[str]:
    """Return the lower-cased words of the diff and their compound parts."""
    parts: set[str] = set()
    for token in _WORD.findall(diff):
        parts.add(token.lower())
        parts.update(split_compound(token))
    return parts


def broad_terms_in_diff(diff: str) -> list[str]:
    """Return the broad terms the diff uses as whole words or phrases.

    Single words count only when longer than three characters, so short
    terms such as ``api`` never earn the bonus. Phrases match adjacent words.
    """
    words = _NON_WORD.sub(" ", diff.lower()).split()
    vocabulary = {word for word in words if len(word) >= MIN_TERM_LENGTH}
    normalized = f" {' '.join(words)} "
    return [
        term
        for term in BROAD_TERMS
        if (f" {term} " in normalized if " " in term else term in vocabulary)
    ]


class RelevanceScorer:
    """Scores and ranks issues for a diff.

    Example:
        scorer = RelevanceScorer(MatchingConfig())
        ranked = scorer.score(issues, diff, keywords)
        best = ranked[0] if ranked else None
    """

    def __init__(self, config: MatchingConfig | None = None) -> None:
        self._config = config or MatchingConfig()

    def extract_important_terms(self, diff: str) -> set[str]:
        """Collect the lower-cased terms an issue is matched against."""
        terms: set[str] = set()

        for match in DECLARATION_PATTERN.finditer(diff):
            _add_identifier(terms, match.group(1))

        for pattern in IMPORT_PATTERNS:
            for match in pattern.finditer(diff):
                module = match.group(1).strip()
                if len(module) >= MIN_TERM_LENGTH:
                    terms.add(module.lower())
                for piece in re.split(r"[./@]", module):
                    if len(piece) >= MIN_TERM_LENGTH:
                        terms.add(piece.lower())

        terms.update(DOMAIN_TERMS & diff_word_parts(diff))

        for match in CONFIG_TERM_PATTERN.finditer(diff):
            word = match.group(1).lower()
            if len(word) >= MIN_TERM_LENGTH:
                terms.add(word)

        lowered = diff.lower()
        for phrase in COMPOSITE_PHRASES:
            if phrase in lowered:
                terms.add(phrase)
                terms.update(w for w in phrase.split() if len(w) >= MIN_TERM_LENGTH)

        return terms

    def score_issue(self, issue: Issue, terms: Iterable[str], broad_terms: Iterable[str]) -> int:
        """Score one issue against precomputed important and broad terms."""
        cfg = self._config
        title = issue.title.lower()
        body = (issue.body or "").lower()
        labels = [label.lower() for label in issue.labels]

        score = 0
        for term in terms:
            if term in title:
                score += cfg.title_weight
            score += cfg.label_weight * sum(1 for label in labels if term in label)
            if body and term in body:
                score += cfg.body_weight

        for term in broad_terms:
            if term in title:
                score += cfg.broad_title_weight
            if body and term in body:
                score += cfg.broad_body_weight

        return score

    def score(
        self,
        issues: Iterable[Issue],
        diff: str,
        keywords: Iterable[str] = (),
    ) -> list[ScoredIssue]:
        """Rank issues by relevance to the diff.

        Args:
            issues: Candidate issues; repeated numbers are ignored.
            diff: The staged diff.
            keywords: Extracted keywords. They do not affect scores and are
                only recorded for diagnostics.

        Returns:
            At most ``max_scored_candidates`` issues with a positive score,
            sorted by descending score, then ascending issue number.
        """
        candidates = unique_by_number(issues)
        terms = sorted(self.extract_important_terms(diff))
        if not terms:
            log.debug(LogEventNames.ISSUES_SCORED, candidates=len(candidates), matched=0)
            return []

        broad = broad_terms_in_diff(diff)
        scored = [
            ScoredIssue(issue=issue, score=s)
            for issue in candidates
            if (s := self.score_issue(issue, terms, broad)) > 0
        ]
        scored.sort(key=lambda item: item.sort_key)
        ranked = scored[: self._config.max_scored_candidates]

        log.debug(
            LogEventNames.ISSUES_SCORED,
            candidates=len(candidates),
            important_terms=len(terms),
            keywords=len(list(keywords)),
            matched=len(scored),
            top=[(item.number, item.score) for item in ranked],
        )
        return ranked
