"""Safe subprocess wrappers for the git and gh CLIs.

Every external command goes through :class:`SafeCli`, which:
- Never uses shell=True
- Validates repository names before they reach gh
- Enforces timeouts on all operations
- Maps common stderr messages to specific exceptions
"""

from __future__ import annotations

import asyncio
import json
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from auto_commit.utils.security import SecurityError, validate_repo_name

log = structlog.get_logger()

# Fields requested from gh for every issue
ISSUE_JSON_FIELDS = "number,title,body,state,labels,url"


class CLIError(Exception):
    """Base exception for command line tool errors."""


class CLINotFoundError(CLIError):
    """Raised when the executable is not installed."""


class AuthenticationError(CLIError):
    """Raised when the CLI is not authenticated."""


class RateLimitError(CLIError):
    """Raised when the remote API rate limit is exceeded."""


class NotFoundError(CLIError):
    """Raised when a resource is not found."""


class PermissionError(CLIError):
    """Raised when permission is denied."""


class CommandTimeoutError(CLIError):
    """Raised when a command times out."""


@dataclass
class CommandResult:
    """Result of a CLI command execution."""

    stdout: str
    stderr: str
    return_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Return True if the command succeeded."""
        return self.return_code == 0

    def json(self) -> Any:
        """Parse stdout as JSON.

        Raises:
            ValueError: If stdout is not valid JSON.
        """
        return json.loads(self.stdout)


class SafeCli:
    """Base wrapper that runs one executable without a shell.

    Subclasses set ``EXECUTABLE`` and add typed command methods.
    """

    EXECUTABLE = ""
    INSTALL_HINT = ""

    # Default timeout for commands (seconds)
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        executable_path: str | None = None,
        default_timeout: int = DEFAULT_TIMEOUT,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the wrapper.

        Args:
            executable_path: Path to the binary. If None, searches PATH.
            default_timeout: Default timeout for commands in seconds.
            cwd: Working directory for commands. Defaults to the process cwd.

        Raises:
            CLINotFoundError: If the executable cannot be found.
        """
        resolved = executable_path or shutil.which(self.EXECUTABLE)
        if not resolved:
            raise CLINotFoundError(f"{self.EXECUTABLE} not found. {self.INSTALL_HINT}".strip())

        self._path: str = resolved
        self._default_timeout = default_timeout
        self._cwd = cwd

    def _parse_error(self, result: CommandResult) -> CLIError:
        """Map a failed command result to a specific error type."""
        output = result.stderr or result.stdout
        combined = (result.stderr + result.stdout).lower()

        if "authentication" in combined or "not logged in" in combined:
            return AuthenticationError(f"Authentication failed: {output}")
        if "rate limit" in combined:
            return RateLimitError(f"Rate limit exceeded: {output}")
        if "not found" in combined or "could not resolve" in combined:
            return NotFoundError(f"Resource not found: {output}")
        if "permission denied" in combined or "forbidden" in combined:
            return PermissionError(f"Permission denied: {output}")
        return CLIError(f"Command failed: {output}")

    async def _run_command(
        self,
        args: list[str],
        timeout: int | None = None,
        check: bool = True,
    ) -> CommandResult:
        """Run a command safely.

        Args:
            args: Command arguments (without the executable).
            timeout: Timeout in seconds (uses default if None).
            check: If True, raise an exception on failure.

        Returns:
            CommandResult with stdout, stderr, and return code.

        Raises:
            CommandTimeoutError: If the command times out.
            CLIError: If check=True and the command fails.
        """
        cmd = [self._path, *args]
        effective_timeout = timeout or self._default_timeout

        log.debug("executing_command", command=cmd, timeout=effective_timeout)

        def run_sync() -> subprocess.CompletedProcess[str]:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=effective_timeout,
                cwd=self._cwd,
                stdin=subprocess.DEVNULL,
                shell=False,
            )

        try:
            proc = await asyncio.wait_for(
                asyncio.to_thread(run_sync),
                timeout=effective_timeout + 5,  # Extra buffer for thread overhead
            )
        except (subprocess.TimeoutExpired, TimeoutError) as e:
            log.error("command_timeout", command=cmd, timeout=effective_timeout)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {cmd}"
            ) from e

        result = CommandResult(
            stdout=proc.stdout,
            stderr=proc.stderr,
            return_code=proc.returncode,
            command=cmd,
        )

        if check and not result.success:
            raise self._parse_error(result)

        return result


class SafeGHCli(SafeCli):
    """Safe wrapper for GitHub CLI (gh) issue operations.

    Example:
        gh = SafeGHCli()
        result = await gh.list_issues("owner/repo", state="open", limit=30)
        issues = result.json()
    """

    EXECUTABLE = "gh"
    INSTALL_HINT = "Please install it from https://cli.github.com"

    def _validate_repo(self, repo: str) -> None:
        """Reject repository names that are not plain owner/repo slugs.

        Raises:
            SecurityError: If the repository name is invalid.
        """
        if not validate_repo_name(repo):
            log.warning("invalid_repo_name_rejected", repo=repo)
            raise SecurityError(f"Invalid repository name: {repo}")

    async def list_issues(
        self,
        repo: str,
        state: str = "open",
        limit: int = 30,
        search: str | None = None,
    ) -> CommandResult:
        """List issues in a repository, optionally filtered by a search string.

        Args:
            repo: Repository in owner/repo format.
            state: Issue state filter (open, closed, all).
            limit: Maximum number of results.
            search: gh search syntax, rendered by the caller.

        Raises:
            SecurityError: If repo name is invalid.
            CLIError: If the command fails.
        """
        self._validate_repo(repo)

        if state not in ("open", "closed", "all"):
            state = "all"
        limit = min(max(1, limit), 100)

        args = [
            "issue",
            "list",
            "--repo",
            repo,
            "--state",
            state,
            "--limit",
            str(limit),
            "--json",
            ISSUE_JSON_FIELDS,
        ]
        if search:
            args.extend(["--search", search])

        return await self._run_command(args)

    async def view_issue(self, repo: str, number: int) -> CommandResult:
        """Get a specific issue by number.

        Raises:
            SecurityError: If repo name is invalid.
            NotFoundError: If the issue does not exist.
            CLIError: If the command fails.
        """
        self._validate_repo(repo)
        if number <= 0:
            raise ValueError(f"Issue number must be positive: {number}")

        args = ["issue", "view", str(number), "--repo", repo, "--json", ISSUE_JSON_FIELDS]
        return await self._run_command(args)


class SafeGitCli(SafeCli):
    """Safe wrapper for git commands run inside the working tree."""

    EXECUTABLE = "git"
    INSTALL_HINT = "Please install git."

    def _parse_error(self, result: CommandResult) -> CLIError:
        output = (result.stderr or result.stdout).strip()
        if "not a git repository" in output.lower():
            return NotFoundError(f"Not a git repository: {output}")
        return CLIError(f"git {' '.join(result.command[1:2])} failed: {output}")

    async def run(self, *args: str, check: bool = True) -> CommandResult:
        """Run ``git <args>``."""
        return await self._run_command(list(args), check=check)

    async def output(self, *args: str) -> str:
        """Run ``git <args>`` and return stdout with trailing whitespace removed."""
        result = await self._run_command(list(args))
        return result.stdout.rstrip()
