"""Data models for the PR compliance worker."""

from .pull_request import PRState, PullRequest
from .task import REQUIRED_INPUTS, TaskInputs
from .validation import ErrorMessage, ResultMessage, ValidationRecord

__all__ = [
    # Task models
    "REQUIRED_INPUTS",
    "TaskInputs",
    # Pull request models
    "PRState",
    "PullRequest",
    # Result models
    "ValidationRecord",
    "ResultMessage",
    "ErrorMessage",
]
