"""
Utility modules for the PR compliance worker.
"""

from pr_compliance.utils.logging import (
    get_logger,
    setup_logging,
    LogContext,
    log_task_event,
    log_commit_validation,
    log_api_call,
    log_error_with_context,
)
from pr_compliance.utils.metrics import (
    TaskMetrics,
    track_api_call,
    emit_metric,
)
from pr_compliance.utils.resilience import retry_with_backoff

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "log_task_event",
    "log_commit_validation",
    "log_api_call",
    "log_error_with_context",
    "TaskMetrics",
    "track_api_call",
    "emit_metric",
    "retry_with_backoff",
]
