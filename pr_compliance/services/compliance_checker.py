"""
Pull request compliance rules.

A pull request is compliant when it is closed and merged and carries both a
title and a description. Rules are evaluated in order and the first failing
rule decides the outcome.
"""

from typing import Callable, List, Optional, Tuple

from pr_compliance.models.pull_request import PRState, PullRequest
from pr_compliance.utils.logging import get_logger


logger = get_logger(__name__)


def _is_merged(pr: PullRequest) -> bool:
    return pr.state == PRState.CLOSED and pr.merged is True


def _has_title(pr: PullRequest) -> bool:
    return bool(pr.title)


def _has_description(pr: PullRequest) -> bool:
    return bool(pr.body)


# (rule name, predicate, failure message)
RULES: List[Tuple[str, Callable[[PullRequest], bool], str]] = [
    ("merged", _is_merged, "is not merged or closed"),
    ("title", _has_title, "is missing a title"),
    ("description", _has_description, "is missing a description"),
]


class ComplianceChecker:
    """Applies the compliance rules to a pull request."""

    def first_failure(self, pr: PullRequest) -> Optional[str]:
        """
        Return the name of the first rule ``pr`` fails, or None.

        Args:
            pr: Pull request to check

        Returns:
            Rule name ('merged', 'title' or 'description') or None when compliant
        """
        for name, predicate, message in RULES:
            if not predicate(pr):
                logger.warning(
                    f"PR #{pr.number} {message}",
                    extra={"pr_number": pr.number, "rule": name}
                )
                return name
        return None

    def check(self, pr: PullRequest) -> bool:
        """Return True when ``pr`` passes every compliance rule."""
        compliant = self.first_failure(pr) is None
        if compliant:
            logger.info(
                f"PR #{pr.number} passed compliance checks",
                extra={"pr_number": pr.number}
            )
        return compliant
