"""Rich terminal implementation of the TerminalUI protocol."""

from __future__ import annotations

import os
import shlex
import subprocess
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path

import structlog
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from auto_commit.models.issue import Issue
from auto_commit.utils.security import sanitize_for_logging

log = structlog.get_logger()

DEFAULT_EDITOR = "vim"

# Score bands shown in the issue table legend
HIGH_SCORE = 70
MEDIUM_SCORE = 40


def score_style(score: int) -> str:
    if score >= HIGH_SCORE:
        return "green"
    if score >= MEDIUM_SCORE:
        return "yellow"
    return "red"


def build_file_tree(files: Sequence[str], label: str = "Staged files") -> Tree:
    """Nest slash-separated paths into a rich Tree."""
    root = Tree(f"[bold]{label}[/bold]")
    nodes: dict[tuple[str, ...], Tree] = {(): root}

    for path in sorted(files):
        parts = tuple(p for p in path.split("/") if p)
        for depth in range(1, len(parts) + 1):
            key = parts[:depth]
            if key in nodes:
                continue
            is_file = depth == len(parts)
            name = parts[depth - 1] if is_file else f"[blue]{parts[depth - 1]}/[/blue]"
            nodes[key] = nodes[parts[: depth - 1]].add(name)

    return root


class ConsoleUI:
    """Terminal UI backed by rich.

    Example:
        ui = ConsoleUI()
        ui.show_issues(issues, scores)
        answer = ui.ask("Select an issue")
    """

    def __init__(self, console: Console | None = None, editor: str | None = None) -> None:
        self.console = console or Console()
        self._editor = editor

    def info(self, message: str) -> None:
        self.console.print(message)

    def notice(self, message: str) -> None:
        self.console.print(Text(message, style="dim"))

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(Text.assemble(("Error: ", "bold red"), message))

    def show_staged_files(self, files: Sequence[str]) -> None:
        self.console.print()
        self.console.print(build_file_tree(files))

    def show_issues(
        self,
        issues: Sequence[Issue],
        scores: Mapping[int, int] | None = None,
    ) -> None:
        table = Table(title="Related issues")
        table.add_column("Sel", style="bold", justify="right")
        table.add_column("ID", style="cyan")
        table.add_column("State", style="dim")
        if scores is not None:
            table.add_column("Score", justify="right")
        table.add_column("Title", style="white")
        table.add_column("Labels", style="dim")

        for index, issue in enumerate(issues, start=1):
            row: list[str | Text] = [str(index), f"#{issue.number}", issue.state.value]
            if scores is not None:
                score = scores.get(issue.number, 0)
                row.append(f"[{score_style(score)}]{score}[/{score_style(score)}]")
            # Tracker text is user-controlled; never interpret it as markup
            row.append(Text(sanitize_for_logging(issue.title)))
            row.append(Text(sanitize_for_logging(", ".join(issue.labels))))
            table.add_row(*row)

        self.console.print(table)
        if scores is not None:
            self.console.print(
                f"Score: [green]{HIGH_SCORE}+ high[/green]  "
                f"[yellow]{MEDIUM_SCORE}-{HIGH_SCORE - 1} medium[/yellow]  "
                f"[red]<{MEDIUM_SCORE} low[/red]"
            )

    def show_commit_message(self, message: str) -> None:
        self.console.print(Panel(Text(message), title="Proposed commit message"))

    def ask(self, prompt: str, default: str = "") -> str:
        return Prompt.ask(prompt, default=default, show_default=bool(default), console=self.console)

    def ask_secret(self, prompt: str) -> str:
        return Prompt.ask(prompt, password=True, console=self.console)

    def confirm(self, prompt: str, default: bool = False) -> bool:
        return Confirm.ask(prompt, default=default, console=self.console)

    def edit(self, text: str) -> str:
        """Round-trip ``text`` through ``$EDITOR`` (vim when unset).

        Raises:
            OSError: If the editor cannot be started.
        """
        editor = self._editor or os.environ.get("EDITOR") or DEFAULT_EDITOR

        fd, name = tempfile.mkstemp(prefix="auto-commit-", suffix=".txt")
        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            result = subprocess.run([*shlex.split(editor), str(path)], check=False)
            if result.returncode != 0:
                log.warning("editor_failed", editor=editor, returncode=result.returncode)
                return ""
            return path.read_text(encoding="utf-8")
        finally:
            path.unlink(missing_ok=True)
