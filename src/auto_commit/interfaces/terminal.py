"""Abstract interface for the interactive terminal."""

from collections.abc import Mapping, Sequence
from typing import Protocol

from ..models.issue import Issue


class TerminalUI(Protocol):
    """Abstract interface for user interaction.

    Prompts block until the user answers. Notices are for non-fatal
    problems (tracker lookups) and are rendered dimmed; errors are for
    failures that end the run.
    """

    def info(self, message: str) -> None:
        """Show an informational message."""
        ...

    def notice(self, message: str) -> None:
        """Show a non-fatal, dimmed notice."""
        ...

    def success(self, message: str) -> None:
        """Show a success message."""
        ...

    def error(self, message: str) -> None:
        """Show an error message."""
        ...

    def show_staged_files(self, files: Sequence[str]) -> None:
        """Render the staged files as a tree."""
        ...

    def show_issues(
        self,
        issues: Sequence[Issue],
        scores: Mapping[int, int] | None = None,
    ) -> None:
        """
        Render candidate issues with a 1-based selection index.

        Args:
            issues: Candidates in presentation order
            scores: Relevance score per issue number, if the list was scored
        """
        ...

    def show_commit_message(self, message: str) -> None:
        """Render a generated commit message for review."""
        ...

    def ask(self, prompt: str, default: str = "") -> str:
        """Prompt for a line of input."""
        ...

    def ask_secret(self, prompt: str) -> str:
        """Prompt for input without echoing it."""
        ...

    def confirm(self, prompt: str, default: bool = False) -> bool:
        """Prompt for a yes/no answer."""
        ...

    def edit(self, text: str) -> str:
        """Open ``text`` in the user's editor and return the saved result."""
        ...
