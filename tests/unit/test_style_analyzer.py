"""Tests for commit style learning."""

from __future__ import annotations

import pytest

from auto_commit.core.commit_message import EXPERT_PREAMBLE
from auto_commit.core.style_analyzer import HISTORY_BUDGET, StyleAnalyzer
from auto_commit.utils.async_helpers import LLMError


class TestStyleAnalyzer:
    """Test StyleAnalyzer.analyze."""

    async def test_returns_guide(self, make_llm: type) -> None:
        """Test that the model's guide is returned stripped."""
        llm = make_llm(responses=["\n- Use lowercase headers\n"])
        guide = await StyleAnalyzer(llm).analyze(["fix: a", "feat: b"])

        assert guide == "- Use lowercase headers"
        system_prompt, user_prompt = llm.calls[0]
        assert system_prompt == EXPERT_PREAMBLE
        assert "fix: a\n\nfeat: b" in user_prompt

    async def test_empty_history(self, make_llm: type) -> None:
        """Test that an empty history is rejected before calling the model."""
        llm = make_llm()

        with pytest.raises(ValueError, match="No commit history"):
            await StyleAnalyzer(llm).analyze(["", "  "])
        assert llm.calls == []

    async def test_long_history_truncated(self, make_llm: type) -> None:
        """Test that the history sent is kept within its budget."""
        llm = make_llm(responses=["guide"])
        commits = [f"chore: routine update number {i:05d}" for i in range(2000)]

        await StyleAnalyzer(llm).analyze(commits)

        _, user_prompt = llm.calls[0]
        assert "bytes truncated" in user_prompt
        assert len(user_prompt) < HISTORY_BUDGET + 2000

    async def test_llm_error_propagates(self, make_llm: type) -> None:
        """Test that provider errors reach the caller."""
        llm = make_llm(error=LLMError("down"))

        with pytest.raises(LLMError):
            await StyleAnalyzer(llm).analyze(["fix: a"])
