"""Git working tree adapter.

Implements the VCSProvider protocol by running git through SafeGitCli.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

import structlog

from ...models.commit import GitAuthor
from ...utils.async_helpers import VCSError
from ...utils.safe_subprocess import CLIError, SafeGitCli

log = structlog.get_logger()

# Separates commits in `git log` output; see get_commit_history
COMMIT_SEPARATOR = "---"

_SHORTLOG_LINE = re.compile(r"^\s*(\d+)\s+(.+?)\s*$")


class GitRepository:
    """Git adapter implementing the VCSProvider protocol.

    Example:
        repo = GitRepository()
        if await repo.get_staged_files():
            diff = await repo.get_staged_diff()
    """

    def __init__(
        self,
        path: Path | None = None,
        git_path: str | None = None,
        timeout: int = SafeGitCli.DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the repository adapter.

        Args:
            path: Working tree to operate on. Defaults to the process cwd.
            git_path: Path to the git binary. If None, searches PATH.
            timeout: Timeout for each git command in seconds.

        Raises:
            CLINotFoundError: If git is not installed.
        """
        self._git = SafeGitCli(git_path, default_timeout=timeout, cwd=path)

    async def _output(self, *args: str) -> str:
        try:
            return await self._git.output(*args)
        except CLIError as e:
            log.error("git_command_failed", args=list(args), error=str(e))
            raise VCSError(str(e)) from e

    async def get_staged_files(self) -> list[str]:
        output = await self._output("diff", "--name-only", "--staged")
        return [line for line in output.splitlines() if line.strip()]

    async def get_staged_diff(self) -> str:
        return await self._output("diff", "--staged")

    async def get_commit_history(self, author: str | None = None, limit: int = 50) -> list[str]:
        """Return recent commit messages (subject and body), newest first."""
        args = ["log", f"-{limit}", f"--pretty=format:%s%n%b%n{COMMIT_SEPARATOR}"]
        if author:
            args.append(f"--author={author}")

        output = await self._output(*args)
        commits = [chunk.strip() for chunk in output.split(f"\n{COMMIT_SEPARATOR}")]
        return [c for c in commits if c and c != COMMIT_SEPARATOR]

    async def get_author(self) -> GitAuthor:
        """Read user.name and user.email concurrently."""
        name, email = await asyncio.gather(
            self._output("config", "user.name"),
            self._output("config", "user.email"),
        )
        return GitAuthor(name=name.strip(), email=email.strip())

    async def get_remote_url(self, remote: str = "origin") -> str | None:
        try:
            result = await self._git.run("remote", "get-url", remote, check=False)
        except CLIError as e:
            log.debug("git_remote_lookup_failed", remote=remote, error=str(e))
            return None
        if not result.success:
            return None
        return result.stdout.strip() or None

    async def commit(self, message: str) -> None:
        if not message.strip():
            raise VCSError("Refusing to commit with an empty message")
        await self._output("commit", "-m", message)
        log.debug("git_commit_complete")

    async def list_authors(self) -> list[tuple[int, str]]:
        output = await self._output("shortlog", "-sne", "--all")
        authors: list[tuple[int, str]] = []
        for line in output.splitlines():
            match = _SHORTLOG_LINE.match(line)
            if match:
                authors.append((int(match.group(1)), match.group(2)))
        return authors
