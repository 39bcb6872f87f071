"""Commit message generation.

This module turns a staged diff into a commit message:
- Prompt assembly for the selected format, learned style guide and issue
- Diff truncation to the provider's budget
- Post-processing of the model output into header, body and
  breaking-change sections
- Deterministic insertion of the selected issue reference
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from auto_commit.core.diff_truncation import DiffTruncator
from auto_commit.core.formats import GIT_AUTHOR_PLACEHOLDER, get_format_template
from auto_commit.models.commit import CommitFormat, GitAuthor
from auto_commit.models.issue import SelectedIssueReference
from auto_commit.utils.async_helpers import LLMError, LLMErrorKind
from auto_commit.utils.logging import LogEventNames

if TYPE_CHECKING:
    from auto_commit.interfaces.llm import LLMProvider

log = structlog.get_logger()

EXPERT_PREAMBLE = "You are an expert in git commit message styling and formatting."

BASE_SYSTEM_PROMPT = (
    EXPERT_PREAMBLE
    + "\n\nI need you to generate a clear, comprehensive commit message for my staged changes."
    + "\n\n{template}"
)

STYLE_GUIDE_SYSTEM_PROMPT = (
    EXPERT_PREAMBLE
    + "\n\nI need you to generate a clear, comprehensive commit message for my staged changes"
    + " following this specific style guide:"
    + "\n\n{style_guide}"
)

USER_PROMPT = """Generate a commit message summarizing ALL key changes from the ENTIRE diff:

{diff}

IMPORTANT:
1. Do not include any explanatory text or formatting
2. Do not repeat the header line
3. IMPORTANT: NEVER include the diff in the response
4. Do not include "diff --git" or any git output
5. Follow this exact structure:
   - One header line
   - One blank line
   - Bullet points for actual changes
   - Breaking changes (if any)
6. Do not make up features, changes, or issue numbers not present in the diff"""

BREAKING_CHANGE_PREFIX = "BREAKING CHANGE:"
SIGNED_OFF_PREFIX = "Signed-off-by:"


class CommitMessageAssembler:
    """Builds prompts and shapes model output into a commit message."""

    def build_system_prompt(
        self,
        fmt: CommitFormat,
        style_guide: str | None = None,
        issue: SelectedIssueReference | None = None,
        author: GitAuthor | None = None,
    ) -> str:
        """Assemble the system prompt.

        Args:
            fmt: Selected commit format
            style_guide: Learned style guide; only used by repo and custom formats
            issue: Selected issue, if any
            author: Git author; only used by the kernel format

        Returns:
            The system prompt text
        """
        if style_guide and fmt.uses_style_guide:
            prompt = STYLE_GUIDE_SYSTEM_PROMPT.format(style_guide=style_guide.strip())
        else:
            prompt = BASE_SYSTEM_PROMPT.format(template=get_format_template(fmt))

        if fmt is CommitFormat.KERNEL and author is not None:
            prompt = prompt.replace(GIT_AUTHOR_PLACEHOLDER, str(author))
            prompt += f"\n\nGit Author: {author}"

        if issue is not None:
            prompt += (
                f"\n\nReferenced issue: {issue}\n"
                "Include the issue ID as a reference according to the commit message format."
            )
        else:
            prompt += "\n\nNo issue referenced"

        return prompt

    def build_user_prompt(self, diff: str) -> str:
        return USER_PROMPT.format(diff=diff)

    def postprocess(self, raw: str) -> str:
        """Normalize model output.

        Code fences and blank lines are dropped. The first remaining line is
        the header; everything from the first ``BREAKING CHANGE:`` line on is
        the footer. Sections are separated by one blank line.
        """
        lines = [
            line.rstrip()
            for line in raw.splitlines()
            if line.strip() and not line.strip().startswith("```")
        ]
        if not lines:
            return ""

        header, rest = lines[0].strip(), lines[1:]
        body: list[str] = []
        breaking: list[str] = []
        for line in rest:
            if breaking or line.startswith(BREAKING_CHANGE_PREFIX):
                breaking.append(line)
            else:
                body.append(line)

        sections = [header]
        if body:
            sections.append("\n".join(body))
        if breaking:
            sections.append("\n".join(breaking))
        return "\n\n".join(sections)

    def inject_issue_reference(
        self,
        message: str,
        fmt: CommitFormat,
        issue: SelectedIssueReference | None,
    ) -> str:
        """Make sure the selected issue is referenced exactly as the format expects.

        Messages already containing ``#<number>`` are left alone. Otherwise
        the issue format gets a ``[#n]: `` header prefix and every other
        format a ``Reference: #n`` line (above ``Signed-off-by`` when present).
        """
        if issue is None or not message:
            return message
        if re.search(rf"#{issue.number}\b", message):
            return message

        reference = f"#{issue.number}"
        lines = message.split("\n")

        if fmt is CommitFormat.ISSUE_REFERENCE:
            lines[0] = f"[{reference}]: {lines[0]}"
            return "\n".join(lines)

        for i, line in enumerate(lines):
            if line.startswith(SIGNED_OFF_PREFIX):
                before = "\n".join(lines[:i]).rstrip()
                after = "\n".join(lines[i:])
                return f"{before}\n\nReference: {reference}\n\n{after}"

        return f"{message.rstrip()}\n\nReference: {reference}"


class CommitMessageGenerator:
    """Generates commit messages with an LLM.

    Example:
        generator = CommitMessageGenerator(adapter)
        message = await generator.generate(diff, CommitFormat.CONVENTIONAL)
    """

    def __init__(
        self,
        llm: LLMProvider,
        truncator: DiffTruncator | None = None,
        assembler: CommitMessageAssembler | None = None,
    ) -> None:
        self._llm = llm
        self._truncator = truncator or DiffTruncator()
        self._assembler = assembler or CommitMessageAssembler()

    async def generate(
        self,
        diff: str,
        fmt: CommitFormat,
        *,
        style_guide: str | None = None,
        issue: SelectedIssueReference | None = None,
        author: GitAuthor | None = None,
    ) -> str:
        """Generate a commit message for a staged diff.

        Raises:
            LLMError: If the request fails or yields no usable message
        """
        truncated = self._truncator.truncate(diff, self._llm.provider_name)
        system_prompt = self._assembler.build_system_prompt(fmt, style_guide, issue, author)
        user_prompt = self._assembler.build_user_prompt(truncated)

        raw = await self._llm.complete(system_prompt, user_prompt)
        message = self._assembler.postprocess(raw)
        if not message:
            raise LLMError(
                "Model returned no commit message",
                LLMErrorKind.UNKNOWN,
                provider=self._llm.provider_name,
                model=self._llm.model_name,
            )

        message = self._assembler.inject_issue_reference(message, fmt, issue)
        log.debug(
            LogEventNames.COMMIT_MESSAGE_GENERATED,
            format=fmt.value,
            issue=issue.number if issue else None,
            length=len(message),
        )
        return message
