"""
GitHub REST client used to look up the pull requests associated with a commit.

Wraps an ``httpx.AsyncClient`` that carries the bearer token and the preview
media type the commit-to-pull-request association endpoint requires.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from pr_compliance.config import settings
from pr_compliance.utils.logging import get_logger
from pr_compliance.utils.metrics import TaskMetrics, track_api_call
from pr_compliance.utils.resilience import retry_with_backoff


logger = get_logger(__name__)

# Required by the hosting service to enable commit -> pull request lookups
GROOT_PREVIEW_MEDIA_TYPE = "application/vnd.github.groot-preview+json"


class GitHubAPIError(Exception):
    """Raised when a GitHub API call fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubTransientError(GitHubAPIError):
    """Network failure or server-side error that may succeed on retry."""
    pass


class GitHubClient:
    """
    Minimal async client for the GitHub REST API.

    Use as an async context manager so the underlying connection pool is
    closed when the task ends:

        async with GitHubClient(token) as client:
            pulls = await client.list_pull_requests_for_commit("acme", "widgets", "abc123")
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: Optional[float] = 30.0,
        max_attempts: int = 1,
        retry_base_delay: float = 1.0,
        metrics: Optional[TaskMetrics] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            token: Token sent as ``Authorization: Bearer``
            base_url: API root URL
            timeout: Transport timeout in seconds, None for no timeout
            max_attempts: Attempts per request; transient errors are retried
            retry_base_delay: Base delay in seconds for exponential backoff
            metrics: Optional task metrics to record call latency in
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.metrics = metrics
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": GROOT_PREVIEW_MEDIA_TYPE,
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def list_pull_requests_for_commit(
        self,
        owner: str,
        repo: str,
        commit: str
    ) -> List[Dict[str, Any]]:
        """
        List the pull requests associated with a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            commit: Commit SHA

        Returns:
            Pull request objects in the service's response order

        Raises:
            GitHubAPIError: On transport failure, non-2xx status or a payload
                that is not a JSON array
        """
        path = "/repos/{}/{}/commits/{}/pulls".format(
            quote(owner, safe=""), quote(repo, safe=""), quote(commit, safe="")
        )

        get_json = retry_with_backoff(
            max_retries=self.max_attempts,
            base_delay=self.retry_base_delay,
            exceptions=(GitHubTransientError,),
        )(self._get_json)

        payload = await get_json(path)

        if not isinstance(payload, list):
            raise GitHubAPIError(
                f"Unexpected response for {path}: expected a list, got {type(payload).__name__}"
            )

        return payload

    async def _get_json(self, path: str) -> Any:
        """Perform one GET and decode the JSON body."""
        async with track_api_call(self.metrics, "github", path, logger) as call:
            try:
                response = await self._client.get(path)
            except httpx.HTTPError as e:
                raise GitHubTransientError(f"Request to {path} failed: {e}") from e

            call["status_code"] = response.status_code

            if response.status_code >= 500:
                raise GitHubTransientError(
                    f"GitHub returned {response.status_code} for {path}",
                    status_code=response.status_code,
                )
            if response.status_code >= 400:
                raise GitHubAPIError(
                    f"GitHub returned {response.status_code} for {path}",
                    status_code=response.status_code,
                )

            try:
                return response.json()
            except ValueError as e:
                raise GitHubAPIError(f"Invalid JSON in response for {path}: {e}") from e


def create_github_client(
    token: str,
    metrics: Optional[TaskMetrics] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> GitHubClient:
    """
    Create a GitHubClient configured from worker settings.

    Args:
        token: Token for the task
        metrics: Optional task metrics
        transport: Optional httpx transport

    Returns:
        Configured GitHubClient
    """
    return GitHubClient(
        token,
        base_url=settings.github_api_url,
        timeout=settings.http_timeout_seconds,
        max_attempts=settings.http_max_attempts,
        retry_base_delay=settings.http_retry_base_delay,
        metrics=metrics,
        transport=transport,
    )
