"""Learn a commit style guide from repository history."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from auto_commit.core.commit_message import EXPERT_PREAMBLE
from auto_commit.core.diff_truncation import truncate_diff
from auto_commit.utils.logging import LogEventNames

if TYPE_CHECKING:
    from auto_commit.interfaces.llm import LLMProvider

log = structlog.get_logger()

STYLE_USER_PROMPT = """Analyze these recent commit messages and create a style guide to match their format:

{commits}

Generate a precise style guide that captures the format, structure, and conventions used. Include specific rules about:
1. Capitalization
2. Tense (past/present/imperative)
3. Header format and limits
4. Use of bullet points, asterisks, or other list styles
5. How breaking changes are marked
6. Line wrapping
7. Use of emojis or other special notation

Return ONLY the style guide, formatted as rules to follow."""  # noqa: E501

# Commit history sent for analysis, in characters
HISTORY_BUDGET = 20_000


class StyleAnalyzer:
    """Asks the LLM to describe the conventions of past commit messages."""

    def __init__(self, llm: LLMProvider) -> None:
        self._llm = llm

    async def analyze(self, commits: Sequence[str]) -> str:
        """Return a style guide for the given commit messages.

        Raises:
            ValueError: If there are no commit messages to learn from
            LLMError: If the request fails
        """
        messages = [c.strip() for c in commits if c and c.strip()]
        if not messages:
            raise ValueError("No commit history to learn from")

        history = "\n\n".join(messages)
        if len(history) > HISTORY_BUDGET:
            history = truncate_diff(history, HISTORY_BUDGET)

        style_guide = await self._llm.complete(
            EXPERT_PREAMBLE, STYLE_USER_PROMPT.format(commits=history)
        )
        log.info(LogEventNames.STYLE_LEARNED, commits=len(messages), length=len(style_guide))
        return style_guide.strip()
