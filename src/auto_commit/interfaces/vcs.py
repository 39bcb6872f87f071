"""Abstract interface for version control integrations."""

from typing import Protocol

from ..models.commit import GitAuthor


class VCSProvider(Protocol):
    """Abstract interface for the local version control working tree.

    All methods raise ``VCSError`` when the underlying command fails,
    except ``get_remote_url`` which returns None.
    """

    async def get_staged_files(self) -> list[str]:
        """Return the paths of staged files, relative to the repository root."""
        ...

    async def get_staged_diff(self) -> str:
        """Return the unified diff of staged changes."""
        ...

    async def get_commit_history(self, author: str | None = None, limit: int = 50) -> list[str]:
        """
        Return recent commit messages, newest first.

        Args:
            author: Only include commits whose author matches this pattern
            limit: Maximum number of commits
        """
        ...

    async def get_author(self) -> GitAuthor:
        """Return the configured author identity."""
        ...

    async def get_remote_url(self, remote: str = "origin") -> str | None:
        """Return the URL of a remote, or None if it is not configured."""
        ...

    async def commit(self, message: str) -> None:
        """Create a commit from the staged changes."""
        ...

    async def list_authors(self) -> list[tuple[int, str]]:
        """Return (commit count, "Name <email>") pairs across all refs."""
        ...
