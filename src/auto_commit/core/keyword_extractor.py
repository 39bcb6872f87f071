"""Keyword extraction from staged diffs.

Keywords drive the fuzzy issue search. Two paths are available:

1. Lexical (always available, pure): tokens from the added lines of the
   diff, with compound identifiers split apart and a catalogue of domain
   terms matched against the whole diff.
2. Semantic (needs an LLM): one bounded completion asking for keywords,
   expanded with the same splitting plus plural/singular variants. Any
   failure falls back to the lexical path without surfacing an error.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from auto_commit.core.diff_truncation import truncate_diff
from auto_commit.utils.async_helpers import with_timeout
from auto_commit.utils.logging import LogEventNames

if TYPE_CHECKING:
    from auto_commit.interfaces.llm import LLMProvider

log = structlog.get_logger()

DEFAULT_MAX_KEYWORDS = 20

# Keywords must be longer than this
MIN_KEYWORD_LENGTH = 4

STOP_WORDS = frozenset(
    {
        # English
        "the", "and", "for", "with", "this", "that", "from", "are", "was", "were",
        "will", "would", "could", "should", "have", "has", "had", "not", "but",
        "or", "if", "then", "else", "when", "while", "do", "does", "did", "done",
        "in", "on", "at", "by", "to", "of", "a", "an", "is", "it", "as", "be",
        "can", "may", "might", "must", "shall", "which", "who", "whom", "whose",
        "what", "where", "why", "how", "all", "any", "some", "no", "none", "one",
        "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten",
        "also", "into", "only", "than", "them", "they", "their", "there", "these",
        "those", "very", "just", "more", "most", "such", "each", "about", "after",
        "before", "being", "over", "your", "here", "other",
        # Language noise common to every diff
        "return", "import", "const", "self", "null", "true", "false", "elif",
        "pass", "async", "await", "function", "class", "public", "private",
        "static", "void", "export", "default", "undefined", "todo",
    }
)  # fmt: skip

# Domain terms added when they appear anywhere in the diff
DOMAIN_TERMS: tuple[str, ...] = (
    "auth",
    "authentication",
    "authorization",
    "config",
    "configuration",
    "provider",
    "model",
    "token",
    "tokens",
    "anthropic",
    "claude",
    "openai",
    "ollama",
    "langchain",
    "completion",
    "language",
    "prompt",
    "chat",
    "message",
    "response",
    "commit",
    "format",
    "style",
    "generate",
    "semantic",
    "multiple",
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

_TOKEN = re.compile(r"[A-Za-z0-9_]+(?:-[A-Za-z0-9_]+)*")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[_-]+")
_NUMERIC = re.compile(r"[\d_.-]+")
_LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")
_KEYWORD_DELIMITERS = re.compile(r"[,;\n]")

SEMANTIC_SYSTEM_PROMPT = (
    "You extract search keywords from source code changes. "
    "Only output keywords, never explanations."
)

SEMANTIC_USER_PROMPT = """Extract 10-15 keywords that describe the purpose of the following code changes.
Prefer feature names, component names, and technical concepts that would appear in
an issue tracker. Separate keywords with commas.

<diff>
{diff}
</diff>"""


def is_valid_keyword(word: str) -> bool:
    """Return True if ``word`` is long enough, not a stop word and not numeric."""
    return (
        len(word) >= MIN_KEYWORD_LENGTH
        and word not in STOP_WORDS
        and not _NUMERIC.fullmatch(word)
    )


def split_compound(token: str) -> list[str]:
    """Split a compound identifier into its lower-cased parts.

    ``apiClientConfig`` gives ``["api", "client", "config"]`` and
    ``auth_provider-id`` gives ``["auth", "provider", "id"]``.
    """
    parts: list[str] = []
    for piece in _SEPARATORS.split(token):
        parts.extend(p.lower() for p in _CAMEL_BOUNDARY.split(piece) if p)
    return parts


def added_lines(diff: str) -> list[str]:
    """Return the content of added lines, excluding file headers."""
    return [
        line[1:]
        for line in diff.splitlines()
        if line.startswith("+") and not line.startswith("+++")
    ]


def _ordered_unique(words: Iterable[str], limit: int) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for word in words:
        if word in seen:
            continue
        seen.add(word)
        result.append(word)
        if len(result) >= limit:
            break
    return result


def _expand_token(token: str) -> list[str]:
    """The lower-cased token followed by its valid compound parts."""
    words = [token.lower()]
    parts = split_compound(token)
    if len(parts) > 1:
        words.extend(parts)
    return [w for w in words if is_valid_keyword(w)]


class KeywordExtractor:
    """Turns a diff into an ordered list of search keywords.

    Example:
        extractor = KeywordExtractor()
        keywords = extractor.extract(diff)

        semantic = KeywordExtractor(llm=adapter)
        keywords = await semantic.extract_semantic(diff)
    """

    def __init__(
        self,
        llm: LLMProvider | None = None,
        max_keywords: int = DEFAULT_MAX_KEYWORDS,
        llm_timeout: float = 30.0,
        llm_diff_budget: int = 12_000,
    ) -> None:
        self._llm = llm
        self._max_keywords = max_keywords
        self._llm_timeout = llm_timeout
        self._llm_diff_budget = llm_diff_budget

    @property
    def has_llm(self) -> bool:
        return self._llm is not None

    def extract(self, diff: str) -> list[str]:
        """Lexical extraction. Pure and deterministic."""
        candidates: list[str] = []

        for line in added_lines(diff):
            for token in _TOKEN.findall(line):
                candidates.extend(_expand_token(token))

        lowered = diff.lower()
        candidates.extend(term for term in DOMAIN_TERMS if term in lowered)

        keywords = _ordered_unique(candidates, self._max_keywords)
        log.debug(LogEventNames.KEYWORDS_EXTRACTED, method="lexical", count=len(keywords))
        return keywords

    async def extract_semantic(self, diff: str) -> list[str]:
        """Ask the LLM for keywords, falling back to :meth:`extract`.

        Never raises: every failure is logged and answered lexically.
        """
        if self._llm is None or not diff.strip():
            return self.extract(diff)

        try:
            prompt = SEMANTIC_USER_PROMPT.format(
                diff=truncate_diff(diff, self._llm_diff_budget)
            )
            response = await with_timeout(
                self._llm.complete(SEMANTIC_SYSTEM_PROMPT, prompt, max_tokens=256),
                self._llm_timeout,
                "Keyword extraction timed out",
            )
            keywords = self.parse_keywords(response)
        except Exception as e:
            log.info(LogEventNames.SEMANTIC_KEYWORDS_FALLBACK, error=str(e))
            return self.extract(diff)

        if not keywords:
            log.info(LogEventNames.SEMANTIC_KEYWORDS_FALLBACK, error="no usable keywords")
            return self.extract(diff)

        log.debug(LogEventNames.KEYWORDS_EXTRACTED, method="semantic", count=len(keywords))
        return keywords

    def parse_keywords(self, response: str) -> list[str]:
        """Parse and expand a delimited keyword list from the model."""
        candidates: list[str] = []
        for raw in _KEYWORD_DELIMITERS.split(response):
            term = _LIST_MARKER.sub("", raw).strip().strip("\"'`.").strip()
            if not term:
                continue

            if " " in term:
                phrase = " ".join(term.lower().split())
                if is_valid_keyword(phrase):
                    candidates.append(phrase)
                continue

            for word in _expand_token(term):
                candidates.append(word)
                candidates.extend(v for v in _number_variants(word) if is_valid_keyword(v))

        return _ordered_unique(candidates, self._max_keywords)


def _number_variants(word: str) -> list[str]:
    """Singular for a plural word, plural for a singular one."""
    if word.endswith("ss"):
        return [f"{word}es"]
    if word.endswith("s"):
        return [word[:-1]]
    return [f"{word}s"]
