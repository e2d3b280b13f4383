"""
Metrics collection and emission for observability.

This module provides metrics tracking for:
- Task execution time
- Commit validation outcomes
- API call latency
"""

import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextlib import asynccontextmanager

from pr_compliance.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class TaskMetrics:
    """
    Collects metrics during a single validation task.

    Tracks:
    - Execution start/end time
    - Commits checked, compliant, non-compliant and unlinked
    - Pull request lookups that failed and were treated as unlinked
    - API call counts and latency
    """

    def __init__(self, task_id: str, owner: str, repo: str):
        self.task_id = task_id
        self.owner = owner
        self.repo = repo

        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        self.commits_checked: int = 0
        self.compliant_count: int = 0
        self.non_compliant_count: int = 0
        self.unlinked_count: int = 0
        self.lookup_failures: int = 0

        self.api_calls: Dict[str, int] = {}
        self.api_latencies: Dict[str, list[float]] = {}

        self.status: str = "running"
        self.error_message: Optional[str] = None

    def start(self) -> None:
        """Mark task execution start."""
        self.start_time = datetime.now(timezone.utc)
        self.status = "running"

    def complete(self, status: str = "completed", error_message: Optional[str] = None) -> None:
        """
        Mark task execution completion and log the summary.

        Args:
            status: Final status ('completed' or 'failed')
            error_message: Error message if failed
        """
        self.end_time = datetime.now(timezone.utc)
        self.status = status
        self.error_message = error_message

        if self.start_time:
            duration = (self.end_time - self.start_time).total_seconds()
            self.duration_ms = int(duration * 1000)

        logger.info(
            f"Metrics collection completed for task {self.task_id}",
            extra=self.get_metrics_summary()
        )

    def record_commit(self, pr_number: Optional[int], compliant: bool) -> None:
        """
        Record the outcome of one commit.

        Args:
            pr_number: Linked pull request number, None when unlinked
            compliant: Compliance outcome
        """
        self.commits_checked += 1
        if pr_number is None:
            self.unlinked_count += 1
        elif compliant:
            self.compliant_count += 1
        else:
            self.non_compliant_count += 1

    def record_lookup_failure(self) -> None:
        """Record a pull request lookup that failed."""
        self.lookup_failures += 1

    def record_api_call(self, service: str, duration_ms: float) -> None:
        """
        Record API call and latency.

        Args:
            service: Service name (e.g., 'github')
            duration_ms: Call duration in milliseconds
        """
        self.api_calls[service] = self.api_calls.get(service, 0) + 1
        self.api_latencies.setdefault(service, []).append(duration_ms)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary = {
            "task_id": self.task_id,
            "owner": self.owner,
            "repo": self.repo,
            "status": self.status,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.duration_ms,
            "commits_checked": self.commits_checked,
            "compliant_count": self.compliant_count,
            "non_compliant_count": self.non_compliant_count,
            "unlinked_count": self.unlinked_count,
            "lookup_failures": self.lookup_failures,
            "api_calls": self.api_calls,
        }

        if self.api_latencies:
            latency_stats = {}
            for service, latencies in self.api_latencies.items():
                if latencies:
                    latency_stats[service] = {
                        "count": len(latencies),
                        "min_ms": round(min(latencies), 2),
                        "max_ms": round(max(latencies), 2),
                        "avg_ms": round(sum(latencies) / len(latencies), 2),
                    }
            summary["api_latencies"] = latency_stats

        if self.error_message:
            summary["error_message"] = self.error_message

        return summary


@asynccontextmanager
async def track_api_call(
    metrics: Optional[TaskMetrics],
    service: str,
    endpoint: str,
    logger_adapter,
    method: str = "GET"
):
    """
    Context manager to track API call timing.

    Usage:
        async with track_api_call(metrics, "github", path, logger) as call:
            response = await client.get(path)
            call["status_code"] = response.status_code

    Args:
        metrics: Task metrics (optional)
        service: Service name
        endpoint: Endpoint path
        logger_adapter: Logger for logging API calls
        method: HTTP method

    Yields:
        Mutable dict the caller may fill with ``status_code``
    """
    start_time = time.monotonic()
    call: Dict[str, Any] = {}
    error = None

    try:
        yield call
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.monotonic() - start_time) * 1000

        if metrics:
            metrics.record_api_call(service, duration_ms)

        log_api_call(
            logger_adapter,
            service=service,
            endpoint=endpoint,
            method=method,
            status_code=call.get("status_code"),
            duration_ms=duration_ms,
            error=str(error) if error else None
        )


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric as a structured log record.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )
