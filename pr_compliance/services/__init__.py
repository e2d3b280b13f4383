"""Validation pipeline services package."""

from pr_compliance.services.commit_enumerator import (
    CommitEnumerator,
    PlaceholderCommitEnumerator
)
from pr_compliance.services.compliance_checker import ComplianceChecker
from pr_compliance.services.github_client import (
    GitHubClient,
    GitHubAPIError,
    GitHubTransientError,
    create_github_client
)
from pr_compliance.services.pipeline import PipelineError, ValidationPipeline
from pr_compliance.services.pr_resolver import PullRequestResolver

__all__ = [
    'CommitEnumerator',
    'PlaceholderCommitEnumerator',
    'ComplianceChecker',
    'GitHubClient',
    'GitHubAPIError',
    'GitHubTransientError',
    'create_github_client',
    'PipelineError',
    'ValidationPipeline',
    'PullRequestResolver'
]
