"""
Pull request resolution for a single commit.
"""

from typing import Optional

from pr_compliance.models.pull_request import PullRequest
from pr_compliance.services.github_client import GitHubClient
from pr_compliance.utils.logging import get_logger, log_error_with_context
from pr_compliance.utils.metrics import TaskMetrics


logger = get_logger(__name__)


class PullRequestResolver:
    """
    Finds the pull request that introduced a commit.

    Lookup failures of any kind are logged and reported as "no pull request",
    so a failing lookup never aborts the task.
    """

    def __init__(self, client: GitHubClient, metrics: Optional[TaskMetrics] = None):
        self.client = client
        self.metrics = metrics

    async def resolve(self, commit: str, owner: str, repo: str) -> Optional[PullRequest]:
        """
        Resolve the first pull request associated with ``commit``.

        Args:
            commit: Commit id
            owner: Repository owner
            repo: Repository name

        Returns:
            The first pull request in the service's response order, or None
            when there is none or the lookup failed
        """
        try:
            pulls = await self.client.list_pull_requests_for_commit(owner, repo, commit)
            if not pulls:
                return None

            if len(pulls) > 1:
                logger.debug(
                    f"Commit {commit} is associated with {len(pulls)} pull requests, using the first",
                    extra={"commit": commit}
                )

            return PullRequest.model_validate(pulls[0])

        except Exception as e:
            log_error_with_context(
                logger,
                f"Error fetching PR for commit {commit}: {e}",
                e,
                commit=commit,
                owner=owner,
                repo=repo,
            )
            if self.metrics:
                self.metrics.record_lookup_failure()
            return None
