"""Tests for the commit workflow."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from auto_commit.config.schema import LLMConfig
from auto_commit.config.store import ConfigStore
from auto_commit.core.workflow import (
    CONTINUE_PROMPT,
    REVIEW_PROMPT,
    CommitWorkflow,
    RunOptions,
    create_llm_adapter,
)
from auto_commit.models.commit import CommitFormat, GitAuthor
from auto_commit.utils.async_helpers import LLMError, LLMErrorKind, VCSError


@pytest.fixture
def mock_vcs(sample_diff: str) -> AsyncMock:
    """VCSProvider double with one staged file."""
    vcs = AsyncMock()
    vcs.get_staged_files.return_value = ["src/client.ts"]
    vcs.get_staged_diff.return_value = sample_diff
    vcs.get_commit_history.return_value = ["fix: a", "feat: b"]
    vcs.get_author.return_value = GitAuthor("Ada Lovelace", "ada@example.com")
    return vcs


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "auto-commit")


class TestReviewLoop:
    """Test generating and reviewing the message."""

    async def test_accept(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that an accepted message is committed."""
        mock_ui.ask.return_value = "a"
        llm = make_llm(responses=["feat(client): add auth provider"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        assert await workflow.run(RunOptions()) == 0

        mock_vcs.commit.assert_awaited_once_with("feat(client): add auth provider")
        mock_ui.show_staged_files.assert_called_once_with(["src/client.ts"])
        mock_ui.ask.assert_called_once_with(REVIEW_PROMPT)
        mock_ui.success.assert_called_once_with("Commit successful!")

    async def test_regenerate_then_accept(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that asking for a new message regenerates."""
        mock_ui.ask.side_effect = ["n", "n", "a"]
        llm = make_llm(responses=["fix: one", "fix: two", "fix: three"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        assert await workflow.run(RunOptions()) == 0

        assert len(llm.calls) == 3
        mock_vcs.commit.assert_awaited_once_with("fix: three")

    async def test_edit(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that the edited message is committed."""
        mock_ui.ask.return_value = "e"
        mock_ui.edit.side_effect = lambda text: text + "\n\n- extra detail\n"
        workflow = CommitWorkflow(mock_vcs, make_llm(responses=["fix: x"]), mock_ui, store)

        assert await workflow.run(RunOptions()) == 0

        mock_vcs.commit.assert_awaited_once_with("fix: x\n\n- extra detail")

    async def test_edit_to_empty_aborts(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that clearing the message in the editor aborts."""
        mock_ui.ask.return_value = "e"
        mock_ui.edit.side_effect = lambda text: "  \n"
        workflow = CommitWorkflow(mock_vcs, make_llm(responses=["fix: x"]), mock_ui, store)

        assert await workflow.run(RunOptions()) == 1
        mock_vcs.commit.assert_not_called()

    @pytest.mark.parametrize("answer", ["r", "", "whatever"])
    async def test_reject(
        self,
        answer: str,
        mock_vcs: AsyncMock,
        mock_ui: MagicMock,
        store: ConfigStore,
        make_llm: type,
    ) -> None:
        """Test that reject and unknown answers abort without committing."""
        mock_ui.ask.return_value = answer
        workflow = CommitWorkflow(mock_vcs, make_llm(responses=["fix: x"]), mock_ui, store)

        assert await workflow.run(RunOptions()) == 1

        mock_vcs.commit.assert_not_called()
        mock_ui.notice.assert_called_with("Commit aborted")


class TestFailures:
    """Test failure handling."""

    async def test_no_staged_files(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that nothing is generated without staged changes."""
        mock_vcs.get_staged_files.return_value = []
        llm = make_llm()
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        assert await workflow.run(RunOptions()) == 1

        assert llm.calls == []
        mock_vcs.get_staged_diff.assert_not_called()
        assert "No staged changes found" in mock_ui.error.call_args.args[0]

    async def test_llm_error_shows_hint(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that LLM failures report guidance and commit nothing."""
        error = LLMError("401", LLMErrorKind.UNAUTHORIZED, provider="openai", model="gpt-4o")
        workflow = CommitWorkflow(mock_vcs, make_llm(error=error), mock_ui, store)

        assert await workflow.run(RunOptions()) == 1

        message = mock_ui.error.call_args.args[0]
        assert message.startswith("Failed to generate commit message: Invalid API key for openai")
        mock_vcs.commit.assert_not_called()

    async def test_commit_failure(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that a failing git commit is reported."""
        mock_ui.ask.return_value = "a"
        mock_vcs.commit.side_effect = VCSError("hook rejected commit")
        workflow = CommitWorkflow(mock_vcs, make_llm(responses=["fix: x"]), mock_ui, store)

        assert await workflow.run(RunOptions()) == 1
        mock_ui.error.assert_called_once_with("hook rejected commit")


class TestStyleLearning:
    """Test --learn."""

    async def test_learn_repository_style(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that the learned guide is stored and used."""
        mock_ui.ask.return_value = "a"
        llm = make_llm(responses=["- lowercase headers", "fix: x"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        assert await workflow.run(RunOptions(learn=True)) == 0

        assert store.get_style_guide() == "- lowercase headers"
        assert store.get_default_format() is CommitFormat.REPO
        mock_ui.info.assert_any_call("Format: Repo")
        system_prompt, _ = llm.calls[1]
        assert "- lowercase headers" in system_prompt

    async def test_learn_author_style(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that an author's guide is stored under their name."""
        mock_ui.ask.return_value = "a"
        llm = make_llm(responses=["- emoji first", "fix: x"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        assert await workflow.run(RunOptions(learn=True, author="ada")) == 0

        mock_vcs.get_commit_history.assert_awaited_once_with("ada", limit=50)
        assert store.get_style_guide("ada") == "- emoji first"
        assert store.get_default_format() is CommitFormat.CUSTOM
        mock_ui.info.assert_any_call("Format: Custom (customized for ada)")

    async def test_learn_failure_falls_back(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that an empty history falls back to conventional commits."""
        mock_ui.ask.return_value = "a"
        mock_vcs.get_commit_history.return_value = []
        llm = make_llm(responses=["fix: x"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        assert await workflow.run(RunOptions(learn=True)) == 0

        assert store.get_style_guide() is None
        mock_ui.notice.assert_any_call("Falling back to default commit style...")
        system_prompt, _ = llm.calls[0]
        assert "feat: New features" in system_prompt


class TestIssueSelection:
    """Test --issue and the issue format."""

    async def test_selected_issue_referenced(
        self,
        mock_vcs: AsyncMock,
        mock_ui: MagicMock,
        mock_tracker: AsyncMock,
        store: ConfigStore,
        make_llm: type,
    ) -> None:
        """Test that the chosen issue reaches the commit message."""
        mock_ui.ask.side_effect = ["1", "a"]
        llm = make_llm(responses=["authentication, provider", "feat: add auth provider"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store, tracker=mock_tracker)

        assert await workflow.run(RunOptions(issue=True)) == 0

        mock_vcs.commit.assert_awaited_once_with("feat: add auth provider\n\nReference: #1")

    async def test_no_issue_decline_aborts(
        self,
        mock_vcs: AsyncMock,
        mock_ui: MagicMock,
        mock_tracker: AsyncMock,
        store: ConfigStore,
        make_llm: type,
    ) -> None:
        """Test that declining to continue without an issue aborts."""
        llm = make_llm(responses=["provider"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store, tracker=mock_tracker)

        assert await workflow.run(RunOptions(issue=True)) == 1

        mock_ui.confirm.assert_called_once_with(CONTINUE_PROMPT)
        mock_vcs.commit.assert_not_called()

    async def test_no_issue_continue(
        self,
        mock_vcs: AsyncMock,
        mock_ui: MagicMock,
        mock_tracker: AsyncMock,
        store: ConfigStore,
        make_llm: type,
    ) -> None:
        """Test continuing without an issue."""
        mock_ui.ask.side_effect = ["", "a"]
        mock_ui.confirm.return_value = True
        llm = make_llm(responses=["provider", "fix: x"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store, tracker=mock_tracker)

        assert await workflow.run(RunOptions(issue=True)) == 0
        mock_vcs.commit.assert_awaited_once_with("fix: x")

    async def test_issue_format_selects_without_confirm(
        self,
        mock_vcs: AsyncMock,
        mock_ui: MagicMock,
        mock_tracker: AsyncMock,
        store: ConfigStore,
        make_llm: type,
    ) -> None:
        """Test that the issue format runs selection but never asks to continue."""
        mock_ui.ask.side_effect = ["", "a"]
        llm = make_llm(responses=["provider", "add client"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store, tracker=mock_tracker)

        options = RunOptions(format=CommitFormat.ISSUE_REFERENCE)
        assert await workflow.run(options) == 0

        mock_tracker.list_issues.assert_awaited_once()
        mock_ui.confirm.assert_not_called()

    async def test_without_tracker(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test --issue without a configured tracker."""
        mock_ui.ask.return_value = "a"
        mock_ui.confirm.return_value = True
        workflow = CommitWorkflow(mock_vcs, make_llm(responses=["fix: x"]), mock_ui, store)

        assert await workflow.run(RunOptions(issue=True)) == 0
        mock_ui.notice.assert_any_call("No issue tracker configured; skipping issue selection.")


class TestFormats:
    """Test format-specific inputs."""

    async def test_kernel_uses_author(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that the kernel format asks git for the author."""
        mock_ui.ask.return_value = "a"
        llm = make_llm(responses=["net: fix"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        await workflow.run(RunOptions(format=CommitFormat.KERNEL))

        mock_vcs.get_author.assert_awaited_once()
        assert "Ada Lovelace <ada@example.com>" in llm.calls[0][0]

    async def test_stored_style_guide_used_for_repo(
        self, mock_vcs: AsyncMock, mock_ui: MagicMock, store: ConfigStore, make_llm: type
    ) -> None:
        """Test that the repo format reads the stored guide."""
        store.store_style_guide("- always imperative")
        mock_ui.ask.return_value = "a"
        llm = make_llm(responses=["fix: x"])
        workflow = CommitWorkflow(mock_vcs, llm, mock_ui, store)

        await workflow.run(RunOptions(format=CommitFormat.REPO))

        assert "- always imperative" in llm.calls[0][0]


class TestCreateLLMAdapter:
    """Test create_llm_adapter."""

    @pytest.mark.parametrize("provider", ["anthropic", "openai", "ollama"])
    def test_providers(self, provider: str) -> None:
        """Test that each provider gets its adapter."""
        config = LLMConfig.model_validate(
            {
                "provider": provider,
                "anthropic": {"api_key": "sk-ant-test"},
                "openai": {"api_key": "sk-test"},
            }
        )
        adapter = create_llm_adapter(config)
        assert adapter.provider_name == provider
