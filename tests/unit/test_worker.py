"""Unit tests for the worker message loop."""

import asyncio
import json
import os
from io import StringIO
from unittest.mock import AsyncMock, Mock

import pytest

from pr_compliance.worker import Worker


def make_worker(lines, responses):
    dispatcher = Mock()
    dispatcher.handle_message = AsyncMock(side_effect=responses)
    output = StringIO()
    worker = Worker(dispatcher=dispatcher, input_stream=StringIO("".join(lines)), output_stream=output)
    return worker, dispatcher, output


@pytest.mark.asyncio
async def test_worker_answers_each_execute_message():
    result = {"action": "result", "data": []}
    error = {"action": "error", "error": "Missing required inputs: baseRef, headRef, owner, repo, or githubToken"}
    worker, dispatcher, output = make_worker(
        [
            json.dumps({"action": "execute", "inputs": {}}) + "\n",
            json.dumps({"action": "execute", "inputs": {"owner": "acme"}}) + "\n",
        ],
        [result, error],
    )

    await worker.start()

    assert [json.loads(line) for line in output.getvalue().splitlines()] == [result, error]
    assert dispatcher.handle_message.await_count == 2


@pytest.mark.asyncio
async def test_worker_writes_nothing_for_ignored_messages():
    worker, dispatcher, output = make_worker(
        [json.dumps({"action": "ping"}) + "\n"],
        [None],
    )

    await worker.start()

    assert output.getvalue() == ""
    dispatcher.handle_message.assert_awaited_once_with({"action": "ping"})


@pytest.mark.asyncio
async def test_worker_skips_blank_and_malformed_lines():
    result = {"action": "result", "data": []}
    worker, dispatcher, output = make_worker(
        ["\n", "{not json\n", json.dumps({"action": "execute", "inputs": {}}) + "\n"],
        [result],
    )

    await worker.start()

    assert json.loads(output.getvalue()) == result
    assert dispatcher.handle_message.await_count == 1


@pytest.mark.asyncio
async def test_worker_stops_at_end_of_input():
    worker, dispatcher, output = make_worker([], [])

    await worker.start()

    assert output.getvalue() == ""
    dispatcher.handle_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_request_stop_finishes_message_in_flight():
    result = {"action": "result", "data": []}
    worker, dispatcher, output = make_worker(
        [
            json.dumps({"action": "execute", "inputs": {}}) + "\n",
            json.dumps({"action": "execute", "inputs": {}}) + "\n",
        ],
        [],
    )

    async def handle(message):
        worker.request_stop()
        return result

    dispatcher.handle_message = AsyncMock(side_effect=handle)

    await worker.start()

    assert json.loads(output.getvalue()) == result
    assert dispatcher.handle_message.await_count == 1
    assert worker.running is False


@pytest.mark.asyncio
async def test_request_stop_returns_while_reader_blocked():
    """Test stop does not wait for the reader thread blocked on an open stream."""
    read_fd, write_fd = os.pipe()
    input_stream = os.fdopen(read_fd, "r")
    dispatcher = Mock()
    dispatcher.handle_message = AsyncMock()
    worker = Worker(dispatcher=dispatcher, input_stream=input_stream, output_stream=StringIO())

    try:
        asyncio.get_running_loop().call_later(0.05, worker.request_stop)
        await asyncio.wait_for(worker.start(), timeout=5)

        assert worker.running is False
        dispatcher.handle_message.assert_not_awaited()
    finally:
        # End of input lets the reader thread finish
        os.close(write_fd)
