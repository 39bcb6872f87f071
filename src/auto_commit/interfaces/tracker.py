"""Abstract interface for issue tracker integrations."""

from typing import Protocol

from ..models.issue import Issue, SearchQuery


class IssueTracker(Protocol):
    """Abstract interface for issue trackers.

    The tracker is scoped to the repository in the current working tree.
    Every method other than ``is_available`` may raise ``FetchFailureError``
    (or its ``MalformedResponseError`` subclass); callers treat those as
    non-fatal.
    """

    async def is_available(self) -> bool:
        """
        Check whether this repository has a tracker that can be queried.

        Returns:
            True if the origin remote points at a supported tracker and
            the tracker client is usable
        """
        ...

    async def list_issues(self, state: str = "open", limit: int = 30) -> list[Issue]:
        """
        List issues, most recently updated first.

        Args:
            state: "open", "closed", or "all"
            limit: Maximum number of issues to return

        Raises:
            TrackerUnavailableError: If the tracker cannot be resolved
            FetchFailureError: If the request fails
            MalformedResponseError: If the payload cannot be parsed
        """
        ...

    async def search_issues(
        self,
        query: SearchQuery,
        limit: int = 15,
        state: str = "all",
    ) -> list[Issue]:
        """
        Search issues with a keyword query.

        Args:
            query: Search terms, rendered by the adapter
            limit: Maximum number of results
            state: "open", "closed", or "all"

        Raises:
            TrackerUnavailableError: If the tracker cannot be resolved
            FetchFailureError: If the request fails
            MalformedResponseError: If the payload cannot be parsed
        """
        ...

    async def get_issue(self, number: int) -> Issue | None:
        """
        Fetch one issue by number.

        Returns:
            The issue, or None if it does not exist

        Raises:
            TrackerUnavailableError: If the tracker cannot be resolved
            FetchFailureError: If the request fails
            MalformedResponseError: If the payload cannot be parsed
        """
        ...
