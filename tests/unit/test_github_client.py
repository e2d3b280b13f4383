"""Unit tests for the GitHub client."""

import httpx
import pytest

from pr_compliance.services.github_client import (
    GROOT_PREVIEW_MEDIA_TYPE,
    GitHubAPIError,
    GitHubClient,
    GitHubTransientError,
)
from pr_compliance.utils.metrics import TaskMetrics


PR_10 = {"number": 10, "title": "Fix", "body": "Details", "state": "closed", "merged": True}


def make_client(handler, **kwargs):
    return GitHubClient("tok", transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_list_pull_requests_request_shape():
    """Test URL and headers of the lookup request."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[PR_10])

    async with make_client(handler) as client:
        pulls = await client.list_pull_requests_for_commit("acme", "widgets", "c1")

    assert pulls == [PR_10]
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "GET"
    assert str(request.url) == "https://api.github.com/repos/acme/widgets/commits/c1/pulls"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["Accept"] == "application/vnd.github.groot-preview+json"
    assert GROOT_PREVIEW_MEDIA_TYPE == "application/vnd.github.groot-preview+json"


@pytest.mark.asyncio
async def test_custom_base_url():
    """Test enterprise base URLs keep their path prefix."""
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json=[])

    async with make_client(handler, base_url="https://github.example.com/api/v3/") as client:
        await client.list_pull_requests_for_commit("acme", "widgets", "c1")

    assert seen == ["https://github.example.com/api/v3/repos/acme/widgets/commits/c1/pulls"]


@pytest.mark.asyncio
async def test_empty_list_is_returned():
    async with make_client(lambda request: httpx.Response(200, json=[])) as client:
        assert await client.list_pull_requests_for_commit("acme", "widgets", "c1") == []


@pytest.mark.asyncio
async def test_client_error_raises_api_error():
    """Test 4xx responses raise a non-transient error."""
    async with make_client(lambda request: httpx.Response(401, json={"message": "Bad credentials"})) as client:
        with pytest.raises(GitHubAPIError) as exc_info:
            await client.list_pull_requests_for_commit("acme", "widgets", "c1")

    assert exc_info.value.status_code == 401
    assert not isinstance(exc_info.value, GitHubTransientError)


@pytest.mark.asyncio
async def test_server_error_raises_transient_error():
    async with make_client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(GitHubTransientError) as exc_info:
            await client.list_pull_requests_for_commit("acme", "widgets", "c1")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_error_raises_transient_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(GitHubTransientError):
            await client.list_pull_requests_for_commit("acme", "widgets", "c1")


@pytest.mark.asyncio
async def test_non_list_payload_raises():
    async with make_client(lambda request: httpx.Response(200, json={"message": "Not Found"})) as client:
        with pytest.raises(GitHubAPIError, match="expected a list"):
            await client.list_pull_requests_for_commit("acme", "widgets", "c1")


@pytest.mark.asyncio
async def test_invalid_json_raises():
    async with make_client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(GitHubAPIError, match="Invalid JSON"):
            await client.list_pull_requests_for_commit("acme", "widgets", "c1")


@pytest.mark.asyncio
async def test_single_attempt_by_default():
    """Test one GET per lookup when retries are not configured."""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(502)

    async with make_client(handler) as client:
        with pytest.raises(GitHubTransientError):
            await client.list_pull_requests_for_commit("acme", "widgets", "c1")

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_transient_error_retried_when_configured():
    responses = [httpx.Response(502), httpx.Response(200, json=[PR_10])]

    async with make_client(lambda request: responses.pop(0), max_attempts=2, retry_base_delay=0) as client:
        pulls = await client.list_pull_requests_for_commit("acme", "widgets", "c1")

    assert pulls == [PR_10]
    assert responses == []


@pytest.mark.asyncio
async def test_client_error_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    async with make_client(handler, max_attempts=3, retry_base_delay=0) as client:
        with pytest.raises(GitHubAPIError):
            await client.list_pull_requests_for_commit("acme", "widgets", "c1")

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_calls_recorded_in_metrics():
    metrics = TaskMetrics("t1", "acme", "widgets")

    async with make_client(lambda request: httpx.Response(200, json=[]), metrics=metrics) as client:
        await client.list_pull_requests_for_commit("acme", "widgets", "c1")
        await client.list_pull_requests_for_commit("acme", "widgets", "c2")

    assert metrics.api_calls == {"github": 2}
