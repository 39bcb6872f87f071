"""GitHub issue tracker adapter using the gh CLI.

This module implements the IssueTracker protocol for repositories whose
origin remote points at github.com. All gh calls go through the SafeGHCli
wrapper. Failures surface as FetchFailureError / MalformedResponseError so
the issue selector can degrade without aborting the commit.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import structlog
from cachetools import TTLCache

from ...config.schema import GitHubConfig
from ...models.issue import Issue, IssueState, SearchQuery
from ...utils.async_helpers import (
    FetchFailureError,
    MalformedResponseError,
    TrackerUnavailableError,
)
from ...utils.logging import LogEventNames
from ...utils.safe_subprocess import (
    CLIError,
    CLINotFoundError,
    CommandResult,
    NotFoundError,
    RateLimitError,
    SafeGHCli,
)
from ...utils.security import SecurityError, validate_repo_name

if TYPE_CHECKING:
    from ...interfaces.vcs import VCSProvider

log = structlog.get_logger()

# git@github.com:owner/repo.git, https://github.com/owner/repo, ssh://git@github.com/owner/repo.git
GITHUB_REMOTE_PATTERN = re.compile(
    r"github\.com[:/]+(?P<slug>[^/\s:]+/[^/\s]+?)(?:\.git)?/?$", re.IGNORECASE
)


def parse_github_remote(url: str | None) -> str | None:
    """Extract ``owner/repo`` from a GitHub remote URL.

    Returns None for remotes that are not on github.com or whose slug is
    not a valid repository name.
    """
    if not url:
        return None
    match = GITHUB_REMOTE_PATTERN.search(url.strip())
    if not match:
        return None
    slug = match.group("slug")
    return slug if validate_repo_name(slug) else None


class GitHubIssueTracker:
    """GitHub tracker implementing the IssueTracker protocol.

    The repository is resolved lazily from the configured remote of the
    working tree, once per instance.

    Example:
        tracker = GitHubIssueTracker(GitHubConfig(), vcs)
        if await tracker.is_available():
            issues = await tracker.list_issues(state="open", limit=30)
    """

    def __init__(
        self,
        config: GitHubConfig,
        vcs: VCSProvider,
    ) -> None:
        """Initialize the GitHub tracker.

        Args:
            config: GitHub-specific configuration.
            vcs: Working tree, used to read the remote URL.
        """
        self._config = config
        self._vcs = vcs
        self._gh: SafeGHCli | None
        try:
            self._gh = SafeGHCli(config.gh_path, default_timeout=config.command_timeout)
        except CLINotFoundError as e:
            log.info(LogEventNames.TRACKER_UNAVAILABLE, reason=str(e))
            self._gh = None

        self._repo: str | None = None
        self._resolved = False

        self._issue_cache: TTLCache[int, Issue] = TTLCache(
            maxsize=256,
            ttl=config.issue_cache_ttl,
        )

    @property
    def repository(self) -> str | None:
        """Return the resolved owner/repo slug, if any."""
        return self._repo

    async def _resolve_repository(self) -> str | None:
        if not self._resolved:
            url = await self._vcs.get_remote_url(self._config.remote)
            self._repo = parse_github_remote(url)
            self._resolved = True
            log.debug("github_repository_resolved", remote=self._config.remote, repo=self._repo)
        return self._repo

    async def _require(self) -> tuple[SafeGHCli, str]:
        """Return the gh wrapper and repo, or raise TrackerUnavailableError."""
        repo = await self._resolve_repository()
        if self._gh is None:
            raise TrackerUnavailableError("gh CLI is not installed")
        if repo is None:
            raise TrackerUnavailableError(
                f"Remote '{self._config.remote}' is not a GitHub repository"
            )
        return self._gh, repo

    async def is_available(self) -> bool:
        try:
            await self._require()
        except TrackerUnavailableError as e:
            log.info(LogEventNames.TRACKER_UNAVAILABLE, reason=str(e))
            return False
        return True

    def _parse_issue_json(self, data: Any) -> Issue:
        """Parse one issue object from gh JSON output.

        Raises:
            MalformedResponseError: If required fields are missing or invalid.
        """
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Expected an issue object, got {type(data).__name__}")

        number = data.get("number")
        title = data.get("title")
        if not isinstance(number, int) or isinstance(number, bool) or number <= 0:
            raise MalformedResponseError(f"Issue has an invalid number: {number!r}")
        if not isinstance(title, str):
            raise MalformedResponseError(f"Issue #{number} has no title")

        labels_data = data.get("labels") or []
        if isinstance(labels_data, list):
            labels = tuple(
                str(label.get("name", "")) if isinstance(label, dict) else str(label)
                for label in labels_data
            )
            labels = tuple(label for label in labels if label)
        else:
            labels = ()

        body = data.get("body")

        return Issue(
            number=number,
            title=title,
            body=body if isinstance(body, str) and body else None,
            state=IssueState.parse(data.get("state")),
            labels=labels,
            url=str(data.get("url") or ""),
        )

    def _parse_issue_list(self, result: CommandResult) -> list[Issue]:
        try:
            payload = result.json()
        except ValueError as e:
            raise MalformedResponseError(f"gh returned invalid JSON: {e}") from e
        if not isinstance(payload, list):
            raise MalformedResponseError("gh returned a non-list issue payload")

        issues = [self._parse_issue_json(item) for item in payload]
        for issue in issues:
            self._issue_cache[issue.number] = issue
        return issues

    async def list_issues(self, state: str = "open", limit: int = 30) -> list[Issue]:
        """List issues in the repository.

        Raises:
            TrackerUnavailableError: If no GitHub repository is configured.
            FetchFailureError: If gh fails.
            MalformedResponseError: If gh output cannot be parsed.
        """
        gh, repo = await self._require()
        try:
            result = await gh.list_issues(repo, state=state, limit=limit)
        except RateLimitError as e:
            log.warning("rate_limit_hit", repo=repo, operation="list_issues")
            raise FetchFailureError(f"GitHub rate limit exceeded: {e}") from e
        except (CLIError, SecurityError) as e:
            log.error(LogEventNames.TRACKER_FETCH_FAILED, repo=repo, error=str(e))
            raise FetchFailureError(f"Failed to list issues: {e}") from e

        issues = self._parse_issue_list(result)
        log.debug("list_issues_complete", repo=repo, state=state, count=len(issues))
        return issues

    async def search_issues(
        self,
        query: SearchQuery,
        limit: int = 15,
        state: str = "all",
    ) -> list[Issue]:
        """Search issues using gh search syntax.

        Raises:
            TrackerUnavailableError: If no GitHub repository is configured.
            FetchFailureError: If gh fails.
            MalformedResponseError: If gh output cannot be parsed.
        """
        if query.is_empty:
            return []

        gh, repo = await self._require()
        rendered = query.render()
        try:
            result = await gh.list_issues(repo, state=state, limit=limit, search=rendered)
        except (CLIError, SecurityError) as e:
            log.error(LogEventNames.TRACKER_FETCH_FAILED, repo=repo, query=rendered, error=str(e))
            raise FetchFailureError(f"Failed to search issues: {e}") from e

        issues = self._parse_issue_list(result)
        log.debug("search_issues_complete", repo=repo, query=rendered, count=len(issues))
        return issues

    async def get_issue(self, number: int) -> Issue | None:
        """Fetch a single issue, using the TTL cache when possible.

        Returns:
            The issue, or None if it does not exist.

        Raises:
            TrackerUnavailableError: If no GitHub repository is configured.
            FetchFailureError: If gh fails.
            MalformedResponseError: If gh output cannot be parsed.
        """
        if number <= 0:
            return None

        cached = self._issue_cache.get(number)
        if cached is not None:
            log.debug(LogEventNames.CACHE_HIT, issue=number)
            return cached
        log.debug(LogEventNames.CACHE_MISS, issue=number)

        gh, repo = await self._require()
        try:
            result = await gh.view_issue(repo, number)
        except NotFoundError:
            log.info("issue_not_found", repo=repo, issue=number)
            return None
        except (CLIError, SecurityError) as e:
            log.error(LogEventNames.TRACKER_FETCH_FAILED, repo=repo, issue=number, error=str(e))
            raise FetchFailureError(f"Failed to fetch issue #{number}: {e}") from e

        try:
            payload = result.json()
        except ValueError as e:
            raise MalformedResponseError(f"gh returned invalid JSON: {e}") from e

        issue = self._parse_issue_json(payload)
        self._issue_cache[number] = issue
        return issue
