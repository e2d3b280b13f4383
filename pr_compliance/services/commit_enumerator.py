"""
Commit enumeration boundary.

The pipeline depends on ``CommitEnumerator`` to produce the ordered commit
ids between two references. Deployments inject a real implementation; the
worker ships with ``PlaceholderCommitEnumerator`` only.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from pr_compliance.config import settings
from pr_compliance.utils.logging import get_logger


logger = get_logger(__name__)


class CommitEnumerator(ABC):
    """Produces the commits reachable between a base and a head reference."""

    @abstractmethod
    async def enumerate_commits(
        self,
        base_ref: str,
        head_ref: str,
        owner: str,
        repo: str
    ) -> List[str]:
        """
        Return the commit ids between ``base_ref`` and ``head_ref``.

        Implementations must return an ordered sequence; the validation
        result follows this order. An empty list is valid.

        Args:
            base_ref: Base reference (branch or tag)
            head_ref: Head reference (branch or tag)
            owner: Repository owner
            repo: Repository name

        Returns:
            Ordered list of commit ids
        """
        pass


class PlaceholderCommitEnumerator(CommitEnumerator):
    """Returns a fixed list of commit ids regardless of the references."""

    def __init__(self, commits: Optional[Sequence[str]] = None):
        self.commits = list(settings.placeholder_commits if commits is None else commits)

    async def enumerate_commits(
        self,
        base_ref: str,
        head_ref: str,
        owner: str,
        repo: str
    ) -> List[str]:
        logger.debug(
            f"Using placeholder commits for {owner}/{repo} {base_ref}..{head_ref}",
            extra={"owner": owner, "repo": repo}
        )
        return list(self.commits)
