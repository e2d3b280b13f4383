"""
Task dispatcher.

Turns one inbound task message into exactly one terminal response: a result
message carrying the ordered validation records, or an error message.
"""

import uuid
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError

from pr_compliance.models.task import REQUIRED_INPUTS, TaskInputs
from pr_compliance.models.validation import ErrorMessage, ResultMessage
from pr_compliance.services.commit_enumerator import CommitEnumerator, PlaceholderCommitEnumerator
from pr_compliance.services.compliance_checker import ComplianceChecker
from pr_compliance.services.github_client import GitHubClient, create_github_client
from pr_compliance.services.pipeline import ValidationPipeline
from pr_compliance.services.pr_resolver import PullRequestResolver
from pr_compliance.utils.logging import get_logger, log_error_with_context, log_task_event
from pr_compliance.utils.metrics import TaskMetrics, emit_metric


logger = get_logger(__name__)

EXECUTE_ACTION = "execute"
MISSING_INPUTS_MESSAGE = "Missing required inputs: baseRef, headRef, owner, repo, or githubToken"


class InputValidationError(Exception):
    """Raised when a task is missing required inputs."""
    pass


def validate_inputs(raw_inputs: Any) -> TaskInputs:
    """
    Validate the inputs of a task message.

    Args:
        raw_inputs: The ``inputs`` object of the inbound message

    Returns:
        Parsed task inputs

    Raises:
        InputValidationError: If any required input is missing or empty
    """
    if not isinstance(raw_inputs, dict):
        raise InputValidationError(MISSING_INPUTS_MESSAGE)

    if not all(raw_inputs.get(name) for name in REQUIRED_INPUTS):
        raise InputValidationError(MISSING_INPUTS_MESSAGE)

    try:
        return TaskInputs.model_validate(raw_inputs)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise InputValidationError(f"Invalid inputs: {fields}") from e


class TaskDispatcher:
    """Runs the validation pipeline for inbound task messages."""

    def __init__(
        self,
        enumerator: Optional[CommitEnumerator] = None,
        checker: Optional[ComplianceChecker] = None,
        client_factory: Callable[..., GitHubClient] = create_github_client,
    ):
        """
        Initialize the dispatcher.

        Args:
            enumerator: Commit enumerator (defaults to the placeholder)
            checker: Compliance checker
            client_factory: Callable ``(token, metrics=...)`` returning a GitHubClient
        """
        self.enumerator = enumerator or PlaceholderCommitEnumerator()
        self.checker = checker or ComplianceChecker()
        self.client_factory = client_factory

    async def handle_message(self, message: Any) -> Optional[Dict[str, Any]]:
        """
        Handle one inbound message.

        Args:
            message: Decoded inbound message

        Returns:
            Outbound message as a dict, or None when the message carries an
            action other than ``execute``
        """
        if not isinstance(message, dict) or message.get("action") != EXECUTE_ACTION:
            action = message.get("action") if isinstance(message, dict) else None
            logger.debug(f"Ignoring message with action {action!r}")
            return None

        response = await self.execute(message.get("inputs"))
        return response.model_dump(by_alias=True)

    async def execute(self, raw_inputs: Any) -> Union[ResultMessage, ErrorMessage]:
        """
        Validate inputs and run the pipeline for one task.

        Args:
            raw_inputs: The ``inputs`` object of the inbound message

        Returns:
            ResultMessage on success, ErrorMessage on any failure
        """
        task_id = uuid.uuid4().hex[:12]
        task_logger = logger.with_context(task_id=task_id)

        try:
            inputs = validate_inputs(raw_inputs)
        except InputValidationError as e:
            task_logger.error(f"Rejected task: {e}")
            return ErrorMessage(error=str(e))

        log_task_event(
            task_logger, task_id, inputs.owner, inputs.repo, "received",
            base_ref=inputs.base_ref, head_ref=inputs.head_ref,
        )

        metrics = TaskMetrics(task_id, inputs.owner, inputs.repo)
        metrics.start()

        try:
            async with self.client_factory(inputs.auth_token, metrics=metrics) as client:
                pipeline = ValidationPipeline(
                    self.enumerator,
                    PullRequestResolver(client, metrics),
                    self.checker,
                    metrics,
                )
                records = await pipeline.run(inputs)

        except Exception as e:
            metrics.complete(status="failed", error_message=str(e))
            log_error_with_context(task_logger, f"Task {task_id} failed", e)
            return ErrorMessage(error=str(e))

        metrics.complete()
        emit_metric(
            "non_compliant_commits",
            metrics.non_compliant_count + metrics.unlinked_count,
            owner=inputs.owner,
            repo=inputs.repo,
        )
        log_task_event(
            task_logger, task_id, inputs.owner, inputs.repo, "completed",
            commits=len(records),
        )
        return ResultMessage(data=records)
