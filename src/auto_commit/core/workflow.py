"""Commit workflow orchestration.

This module implements the CommitWorkflow class that runs one invocation of
the tool:
- Fail fast when nothing is staged
- Optionally learn a style guide from the commit history
- Optionally select an issue to reference
- Generate, review and regenerate the commit message
- Commit the accepted message

Regeneration is a loop, so asking for a new message any number of times
never grows the stack.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from auto_commit.config.schema import AppConfig, LLMConfig
from auto_commit.core.commit_message import CommitMessageGenerator
from auto_commit.core.diff_truncation import DiffTruncator
from auto_commit.core.formats import format_display_name
from auto_commit.core.issue_selector import IssueSelector
from auto_commit.core.style_analyzer import StyleAnalyzer
from auto_commit.models.commit import CommitFormat, GitAuthor, ReviewAction
from auto_commit.models.issue import SelectedIssueReference
from auto_commit.utils.async_helpers import EmptyStagedSetError, LLMError, VCSError
from auto_commit.utils.logging import LogEventNames, bind_context, clear_context

if TYPE_CHECKING:
    from auto_commit.config.store import ConfigStore
    from auto_commit.interfaces.llm import LLMProvider
    from auto_commit.interfaces.terminal import TerminalUI
    from auto_commit.interfaces.tracker import IssueTracker
    from auto_commit.interfaces.vcs import VCSProvider

log = structlog.get_logger()

REVIEW_PROMPT = "(a)ccept, (e)dit, (r)eject, (n)ew message?"
CONTINUE_PROMPT = "No issue selected. Continue without issue reference?"
NO_STAGED_CHANGES = (
    "No staged changes found. Please stage changes before generating a commit message."
)


class CommitAborted(Exception):
    """The user declined to commit."""


@dataclass(frozen=True)
class RunOptions:
    """Per-invocation choices from the command line."""

    format: CommitFormat = CommitFormat.CONVENTIONAL
    author: str | None = None
    learn: bool = False
    issue: bool = False


class CommitWorkflow:
    """Runs the generate-review-commit flow for the staged changes.

    Example:
        workflow = create_workflow(config, ui, store)
        exit_code = await workflow.run(RunOptions(issue=True))
    """

    def __init__(
        self,
        vcs: VCSProvider,
        llm: LLMProvider,
        ui: TerminalUI,
        store: ConfigStore,
        tracker: IssueTracker | None = None,
        config: AppConfig | None = None,
    ) -> None:
        """Initialize the workflow.

        Args:
            vcs: Working tree adapter
            llm: LLM adapter used for generation, style learning and keywords
            ui: Terminal for output and prompts
            store: Persisted user settings (style guides, default format)
            tracker: Issue tracker; issue selection is skipped without one
            config: Application configuration
        """
        self._vcs = vcs
        self._llm = llm
        self._ui = ui
        self._store = store
        self._tracker = tracker
        self._config = config or AppConfig()

        self._generator = CommitMessageGenerator(llm, DiffTruncator(self._config.truncation))
        self._selector = (
            IssueSelector(
                tracker,
                ui,
                self._config.matching,
                keyword_timeout=self._config.llm.keyword_timeout,
            )
            if tracker is not None
            else None
        )

    async def run(self, options: RunOptions) -> int:
        """Run the workflow.

        Returns:
            Exit code: 0 after a commit, 1 when aborted or on error
        """
        bind_context(provider=self._llm.provider_name, model=self._llm.model_name)
        log.info(
            LogEventNames.WORKFLOW_STARTED,
            format=options.format.value,
            learn=options.learn,
            issue=options.issue,
        )

        try:
            return await self._run(options)
        except EmptyStagedSetError as e:
            self._ui.error(str(e))
            return 1
        except CommitAborted as e:
            log.info(LogEventNames.WORKFLOW_ABORTED, reason=str(e))
            self._ui.notice("Commit aborted")
            return 1
        except LLMError as e:
            log.error(LogEventNames.LLM_REQUEST_ERROR, kind=e.kind.value, error=str(e))
            self._ui.error(f"Failed to generate commit message: {e.hint()}")
            return 1
        except VCSError as e:
            self._ui.error(str(e))
            return 1
        finally:
            clear_context()

    async def _run(self, options: RunOptions) -> int:
        files = await self._vcs.get_staged_files()
        if not files:
            raise EmptyStagedSetError(NO_STAGED_CHANGES)

        self._ui.show_staged_files(files)
        diff = await self._vcs.get_staged_diff()

        fmt = options.format
        if options.learn:
            fmt = await self._learn_style(options.author)

        issue: SelectedIssueReference | None = None
        if options.issue or fmt is CommitFormat.ISSUE_REFERENCE:
            issue = await self._select_issue(diff)
            if issue is None and options.issue and fmt is not CommitFormat.ISSUE_REFERENCE:
                if not self._ui.confirm(CONTINUE_PROMPT):
                    raise CommitAborted("no issue selected")

        style_guide = self._store.get_style_guide(options.author) if fmt.uses_style_guide else None
        author: GitAuthor | None = None
        if fmt is CommitFormat.KERNEL:
            author = await self._vcs.get_author()

        message = await self._review_loop(diff, fmt, style_guide, issue, author)

        await self._vcs.commit(message)
        log.info(LogEventNames.COMMIT_CREATED, issue=issue.number if issue else None)
        self._ui.success("Commit successful!")
        return 0

    async def _select_issue(self, diff: str) -> SelectedIssueReference | None:
        if self._selector is None:
            self._ui.notice("No issue tracker configured; skipping issue selection.")
            return None
        return await self._selector.select(diff, llm=self._llm)

    async def _review_loop(
        self,
        diff: str,
        fmt: CommitFormat,
        style_guide: str | None,
        issue: SelectedIssueReference | None,
        author: GitAuthor | None,
    ) -> str:
        """Generate until the user accepts, edits or rejects a message."""
        while True:
            self._ui.info("Generating commit message...")
            message = await self._generator.generate(
                diff, fmt, style_guide=style_guide, issue=issue, author=author
            )
            self._ui.show_commit_message(message)

            action = ReviewAction.parse(self._ui.ask(REVIEW_PROMPT))
            if action is ReviewAction.NEW:
                continue
            if action is ReviewAction.ACCEPT:
                return message
            if action is ReviewAction.EDIT:
                edited = self._ui.edit(message).strip()
                if not edited:
                    raise CommitAborted("empty message after edit")
                return edited
            raise CommitAborted("message rejected")

    async def _learn_style(self, author: str | None) -> CommitFormat:
        """Learn and store a style guide; conventional commits on failure."""
        try:
            commits = await self._vcs.get_commit_history(
                author, limit=self._config.commit.history_limit
            )
            style_guide = await StyleAnalyzer(self._llm).analyze(commits)
        except (LLMError, VCSError, ValueError) as e:
            log.warning(LogEventNames.STYLE_LEARNING_FAILED, error=str(e))
            self._ui.error(f"Failed to learn commit style: {e}")
            self._ui.notice("Falling back to default commit style...")
            return CommitFormat.CONVENTIONAL

        if author:
            self._store.store_style_guide(style_guide, author)
            self._store.store_style_guide(style_guide)
            fmt = CommitFormat.CUSTOM
        else:
            self._store.store_style_guide(style_guide)
            fmt = CommitFormat.REPO

        self._store.store_default_format(fmt)
        self._ui.info(format_display_name(fmt, author))
        return fmt


def create_llm_adapter(config: LLMConfig) -> LLMProvider:
    """Create an LLM adapter based on configuration.

    Args:
        config: LLM configuration with the provider settings filled in

    Returns:
        LLM provider instance

    Raises:
        ValueError: If provider is not supported
    """
    provider = config.provider

    if provider == "anthropic":
        # Import here to avoid loading unnecessary dependencies
        from auto_commit.adapters.llm.anthropic import AnthropicAdapter

        return AnthropicAdapter(config.anthropic)

    if provider == "openai":
        from auto_commit.adapters.llm.openai import OpenAIAdapter

        return OpenAIAdapter(config.openai)

    if provider == "ollama":
        from auto_commit.adapters.llm.ollama import OllamaAdapter

        return OllamaAdapter(config.ollama)

    raise ValueError(f"Unsupported LLM provider: {provider}")


def create_workflow(
    config: AppConfig,
    ui: TerminalUI,
    store: ConfigStore,
    path: Path | None = None,
) -> CommitWorkflow:
    """Wire the adapters for a working tree into a CommitWorkflow.

    Raises:
        CLINotFoundError: If git is not installed
        ValueError: If a provider is not supported
    """
    from auto_commit.adapters.vcs.git import GitRepository

    vcs = GitRepository(path)
    llm = create_llm_adapter(config.llm)

    tracker: IssueTracker | None = None
    if config.tracker.provider == "github" and config.tracker.github is not None:
        from auto_commit.adapters.tracker.github import GitHubIssueTracker

        tracker = GitHubIssueTracker(config.tracker.github, vcs)

    return CommitWorkflow(vcs, llm, ui, store, tracker=tracker, config=config)
