"""
Worker process for compliance tasks.

Reads newline-delimited JSON task messages from stdin, hands each one to the
TaskDispatcher and writes every response as one JSON line to stdout. Log
output goes to stderr. Implements graceful shutdown on SIGTERM/SIGINT: the
task in flight is completed and answered before the worker exits.
"""

import asyncio
import json
import signal
import sys
import threading
from typing import Any, Dict, Optional, TextIO

from pr_compliance.config import settings
from pr_compliance.dispatcher import TaskDispatcher
from pr_compliance.utils.logging import setup_logging, get_logger

logger = get_logger(__name__)


class Worker:
    """Message loop between the parent process and the TaskDispatcher."""

    def __init__(
        self,
        dispatcher: Optional[TaskDispatcher] = None,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
    ):
        self.dispatcher = dispatcher or TaskDispatcher()
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        self.running = False
        self.current_message: Optional[Dict[str, Any]] = None
        self._lines: Optional[asyncio.Queue] = None

    async def start(self) -> None:
        """
        Start the worker.

        Returns when the input stream is exhausted or a stop is requested.
        """
        logger.info("Starting worker process...")

        loop = asyncio.get_running_loop()
        self._lines = asyncio.Queue()
        self.running = True

        # Blocking reads stay off the event loop. The thread is never joined:
        # after a stop it may stay blocked on stdin until the process exits.
        reader = threading.Thread(
            target=self._read_lines, args=(loop,), name="message-reader", daemon=True
        )
        reader.start()

        await self._process_messages()
        logger.info("Worker process stopped")

    def request_stop(self) -> None:
        """Stop after the message in flight, if any, has been answered."""
        if not self.running:
            return
        if self.current_message is not None:
            logger.info("Stop requested, finishing current task...")
        else:
            logger.info("Stop requested")
        self.running = False
        if self._lines is not None:
            self._lines.put_nowait(None)

    def register_signal_handlers(self) -> None:
        """Register SIGTERM and SIGINT handlers on the running loop."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.request_stop)
            except NotImplementedError:
                logger.warning(f"Signal handler for {sig.name} not supported on this platform")

        logger.info("Signal handlers registered (SIGTERM, SIGINT)")

    def _read_lines(self, loop: asyncio.AbstractEventLoop) -> None:
        """Feed input lines into the queue; None marks end of input."""
        try:
            for line in self.input_stream:
                loop.call_soon_threadsafe(self._lines.put_nowait, line)
            loop.call_soon_threadsafe(self._lines.put_nowait, None)
        except RuntimeError:
            # Event loop already closed
            return

    async def _process_messages(self) -> None:
        """Main message loop."""
        while self.running:
            line = await self._lines.get()
            if line is None:
                break

            line = line.strip()
            if not line:
                continue

            try:
                message = json.loads(line)
            except json.JSONDecodeError as e:
                logger.error(f"Discarding malformed message: {e}")
                continue

            self.current_message = message
            try:
                response = await self.dispatcher.handle_message(message)
            finally:
                self.current_message = None

            if response is not None:
                self._send(response)

    def _send(self, response: Dict[str, Any]) -> None:
        """Write one response line to the parent process."""
        self.output_stream.write(json.dumps(response) + "\n")
        self.output_stream.flush()
        logger.info(f"Sent {response.get('action')} message")


async def main() -> None:
    """Main entry point for the worker process."""
    setup_logging(settings.log_level.upper(), stream=sys.stderr)

    worker = Worker()

    try:
        worker.register_signal_handlers()
        await worker.start()
    except Exception as e:
        logger.error(f"Worker process failed: {e}", exc_info=True)
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
