"""
Commit validation pipeline.

Enumerates the commits between two references, resolves the pull request
that introduced each one and checks it for compliance. Commits are processed
one at a time, in enumeration order.
"""

from typing import List, Optional

from pr_compliance.models.task import TaskInputs
from pr_compliance.models.validation import ValidationRecord
from pr_compliance.services.commit_enumerator import CommitEnumerator
from pr_compliance.services.compliance_checker import ComplianceChecker
from pr_compliance.services.pr_resolver import PullRequestResolver
from pr_compliance.utils.logging import LogContext, get_logger, log_commit_validation
from pr_compliance.utils.metrics import TaskMetrics


logger = get_logger(__name__)


class PipelineError(Exception):
    """Unexpected failure while enumerating or checking commits."""
    pass


class ValidationPipeline:
    """Runs enumeration, resolution and compliance checking for one task."""

    def __init__(
        self,
        enumerator: CommitEnumerator,
        resolver: PullRequestResolver,
        checker: Optional[ComplianceChecker] = None,
        metrics: Optional[TaskMetrics] = None,
    ):
        self.enumerator = enumerator
        self.resolver = resolver
        self.checker = checker or ComplianceChecker()
        self.metrics = metrics

    async def run(self, inputs: TaskInputs) -> List[ValidationRecord]:
        """
        Validate every commit between the task's references.

        Args:
            inputs: Validated task inputs

        Returns:
            One record per enumerated commit, in enumeration order

        Raises:
            PipelineError: If enumeration or a compliance check fails
        """
        try:
            logger.info(
                f"Validating commits between {inputs.base_ref} and {inputs.head_ref} "
                f"for {inputs.repository}...",
                extra={"owner": inputs.owner, "repo": inputs.repo}
            )

            commits = await self.enumerator.enumerate_commits(
                inputs.base_ref, inputs.head_ref, inputs.owner, inputs.repo
            )
            logger.info(f"Found {len(commits)} commits.")

            results: List[ValidationRecord] = []
            for commit in commits:
                results.append(await self._validate_commit(commit, inputs))

            return results

        except Exception as e:
            raise PipelineError(f"Validation failed: {e}") from e

    async def _validate_commit(self, commit: str, inputs: TaskInputs) -> ValidationRecord:
        """Resolve and check a single commit."""
        with LogContext(logger, commit=commit):
            logger.info(f"Validating commit: {commit}")

            pr = await self.resolver.resolve(commit, inputs.owner, inputs.repo)

            if pr is None:
                record = ValidationRecord(commit=commit, pr_number=None, compliance=False)
            else:
                record = ValidationRecord(
                    commit=commit,
                    pr_number=pr.number,
                    compliance=self.checker.check(pr),
                )

            log_commit_validation(logger, commit, record.pr_number, record.compliance)

        if self.metrics:
            self.metrics.record_commit(record.pr_number, record.compliance)

        return record
