"""Unit tests for PullRequestResolver."""

import logging
from unittest.mock import AsyncMock, Mock

import pytest

from pr_compliance.services.github_client import GitHubAPIError, GitHubTransientError
from pr_compliance.services.pr_resolver import PullRequestResolver
from pr_compliance.utils.metrics import TaskMetrics


@pytest.fixture
def mock_client():
    client = Mock()
    client.list_pull_requests_for_commit = AsyncMock()
    return client


@pytest.fixture
def metrics():
    return TaskMetrics("t1", "acme", "widgets")


@pytest.fixture
def resolver(mock_client, metrics):
    return PullRequestResolver(mock_client, metrics)


@pytest.mark.asyncio
async def test_resolve_returns_first_pull_request(resolver, mock_client):
    mock_client.list_pull_requests_for_commit.return_value = [
        {"number": 10, "title": "Fix", "body": "Details", "state": "closed", "merged": True},
        {"number": 99, "title": "Backport", "body": "x", "state": "open", "merged": False},
    ]

    pr = await resolver.resolve("c1", "acme", "widgets")

    assert pr.number == 10
    mock_client.list_pull_requests_for_commit.assert_awaited_once_with("acme", "widgets", "c1")


@pytest.mark.asyncio
async def test_resolve_returns_none_for_empty_list(resolver, mock_client, metrics):
    mock_client.list_pull_requests_for_commit.return_value = []

    assert await resolver.resolve("c2", "acme", "widgets") is None
    assert metrics.lookup_failures == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    GitHubAPIError("GitHub returned 401", status_code=401),
    GitHubTransientError("Request failed: connection refused"),
    RuntimeError("unexpected"),
])
async def test_resolve_absorbs_lookup_errors(resolver, mock_client, metrics, error):
    mock_client.list_pull_requests_for_commit.side_effect = error

    assert await resolver.resolve("c1", "acme", "widgets") is None
    assert metrics.lookup_failures == 1


@pytest.mark.asyncio
async def test_resolve_absorbs_malformed_pull_request(resolver, mock_client, metrics):
    mock_client.list_pull_requests_for_commit.return_value = [{"title": "no number"}]

    assert await resolver.resolve("c1", "acme", "widgets") is None
    assert metrics.lookup_failures == 1


@pytest.mark.asyncio
async def test_resolve_without_metrics(mock_client):
    mock_client.list_pull_requests_for_commit.side_effect = GitHubAPIError("boom")

    assert await PullRequestResolver(mock_client).resolve("c1", "acme", "widgets") is None


@pytest.mark.asyncio
async def test_resolve_logs_absorbed_error_with_traceback(resolver, mock_client, caplog):
    mock_client.list_pull_requests_for_commit.side_effect = GitHubAPIError("GitHub returned 401", status_code=401)

    with caplog.at_level(logging.ERROR, logger="pr_compliance.services.pr_resolver"):
        assert await resolver.resolve("c1", "acme", "widgets") is None

    records = [r for r in caplog.records if r.name == "pr_compliance.services.pr_resolver"]
    assert len(records) == 1
    assert records[0].exc_info is not None
    assert records[0].exc_info[0] is GitHubAPIError
    assert records[0].commit == "c1"
