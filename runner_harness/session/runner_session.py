"""Long-lived session with the external test runner process.

The session launches the runner once, performs a version handshake and
then forwards discovery/execution requests. Runner events are read on a
background thread and dispatched to the collector bound to the request
in flight.
"""

import logging
import subprocess
import sys
import threading
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from ..collectors.base import EventCollector
from ..collectors.schema import TestCase, TestResult
from ..errors import RunnerUnavailable
from . import protocol
from .protocol import Message, decode_message

logger = logging.getLogger(__name__)

# Handler method invoked for each runner event type
_EVENT_HANDLERS = {
    protocol.DISCOVERY_TESTS_FOUND: "handle_tests_found",
    protocol.DISCOVERY_COMPLETE: "handle_discovery_complete",
    protocol.EXECUTION_STATS_CHANGE: "handle_test_results",
    protocol.EXECUTION_COMPLETE: "handle_run_complete",
    protocol.SESSION_MESSAGE: "handle_log_message",
    protocol.SESSION_FAULT: "handle_fault",
}


class RunnerSession:
    """Connection to one external runner process.

    A session is started once and lives until close(); it is never
    reconnected. Only one request may be in flight at a time.
    """

    def __init__(
        self,
        runner_path: Union[str, Path],
        args: Iterable[str] = (),
        start_timeout: float = 30.0,
        env: Optional[dict[str, str]] = None,
    ):
        """Initialize runner session.

        Args:
            runner_path: Runner executable. ``.py`` files run with the
                current interpreter.
            args: Extra command line arguments for the runner.
            start_timeout: Seconds to wait for the runner handshake.
            env: Environment for the runner process. None inherits ours.
        """
        self.runner_path = Path(runner_path)
        self.args = [str(a) for a in args]
        self.start_timeout = start_timeout
        self.env = env
        self.protocol_version: Optional[int] = None

        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None
        self._stderr_reader: Optional[threading.Thread] = None
        self._handler: Optional[EventCollector] = None
        self._handler_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._connected = threading.Event()
        self._handshake_error: Optional[str] = None
        self._exit_code: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def start(self) -> None:
        """Launch the runner and wait for its handshake.

        Raises:
            RunnerUnavailable: If the runner is missing, fails to launch or
                doesn't complete the handshake within start_timeout.
            RuntimeError: If the session was already started.
        """
        if self._process is not None:
            raise RuntimeError("Runner session already started")

        if not self.runner_path.is_file():
            raise RunnerUnavailable(str(self.runner_path), "path not found")

        command = self._build_command()
        logger.info("Starting test runner: %s", " ".join(command))

        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                env=self.env,
            )
        except OSError as e:
            raise RunnerUnavailable(str(self.runner_path), str(e)) from e

        self._reader = threading.Thread(
            target=self._read_events, name="runner-events", daemon=True
        )
        self._stderr_reader = threading.Thread(
            target=self._drain_stderr, name="runner-stderr", daemon=True
        )
        self._reader.start()
        self._stderr_reader.start()

        try:
            self._send(Message(
                protocol.SESSION_START,
                {"protocol_version": protocol.PROTOCOL_VERSION},
            ))
        except RunnerUnavailable:
            self._kill()
            raise

        self._connected.wait(self.start_timeout)

        if self.protocol_version is None:
            if self._handshake_error is not None:
                reason = self._handshake_error
            elif self._exit_code is not None:
                reason = f"runner exited with code {self._exit_code} before handshake"
            else:
                reason = f"no handshake within {self.start_timeout}s"
            self._kill()
            raise RunnerUnavailable(str(self.runner_path), reason)

        logger.info("Runner session started (protocol %s)", self.protocol_version)

    def initialize_extensions(self, paths: Iterable[str]) -> None:
        """Register runner extension plugins."""
        paths = [str(p) for p in paths]
        logger.debug("Initializing %d runner extensions", len(paths))
        self._send(Message(protocol.EXTENSIONS_INITIALIZE, {"paths": paths}))

    def discover_tests(
        self,
        sources: list[str],
        run_settings: str,
        handler: EventCollector,
    ) -> None:
        """Start discovery; events go to handler."""
        self._bind(handler)
        self._send(Message(protocol.DISCOVERY_START, {
            "sources": list(sources),
            "run_settings": run_settings,
        }))

    def run_tests(
        self,
        sources: list[str],
        run_settings: str,
        handler: EventCollector,
    ) -> None:
        """Start execution; events go to handler."""
        self._bind(handler)
        self._send(Message(protocol.EXECUTION_START, {
            "sources": list(sources),
            "run_settings": run_settings,
        }))

    def close(self, timeout: float = 5.0) -> None:
        """End the session and stop the runner process."""
        if self._process is None:
            return

        if self._process.poll() is None:
            try:
                self._send(Message(protocol.SESSION_END))
            except RunnerUnavailable:
                logger.debug("Runner already gone when ending session")

            try:
                self._process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning("Runner did not exit after session end, terminating")
                self._kill()

        for reader in (self._reader, self._stderr_reader):
            if reader is not None:
                reader.join(timeout)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.close()

    def _build_command(self) -> list[str]:
        if self.runner_path.suffix == ".py":
            return [sys.executable, str(self.runner_path), *self.args]
        return [str(self.runner_path), *self.args]

    def _bind(self, handler: EventCollector) -> None:
        with self._handler_lock:
            self._handler = handler

    def _current_handler(self) -> Optional[EventCollector]:
        with self._handler_lock:
            return self._handler

    def _send(self, message: Message) -> None:
        if not self.is_running:
            raise RunnerUnavailable(str(self.runner_path), "runner process is not running")

        with self._write_lock:
            try:
                self._process.stdin.write(message.encode())
                self._process.stdin.flush()
            except (OSError, ValueError) as e:
                raise RunnerUnavailable(str(self.runner_path), f"write failed: {e}") from e

    def _kill(self) -> None:
        if self._process is None or self._process.poll() is not None:
            return
        self._process.terminate()
        try:
            self._process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait()

    def _read_events(self) -> None:
        """Reader thread: decode runner output and dispatch it.

        Whatever ends the loop, the request in flight is faulted so that its
        caller stops waiting.
        """
        reason = None
        try:
            for line in self._process.stdout:
                line = line.strip()
                if not line:
                    continue

                message = decode_message(line)
                if message is None:
                    logger.warning("Ignoring malformed runner output: %s", line[:200])
                    continue

                self._dispatch(message)
        except Exception as e:
            logger.exception("Reading runner output failed")
            reason = f"runner output could not be read: {e}"
            # Nothing reads the runner's events any more
            self._kill()
        finally:
            self._exit_code = self._process.wait()
            logger.info("Runner process exited with code %s", self._exit_code)
            self._connected.set()

            if reason is None:
                reason = f"runner process exited with code {self._exit_code}"
            handler = self._current_handler()
            if handler is not None and not handler.is_complete:
                handler.handle_fault(reason)

    def _drain_stderr(self) -> None:
        try:
            for line in self._process.stderr:
                logger.debug("runner stderr: %s", line.rstrip())
        except (OSError, ValueError) as e:
            logger.warning("Stopped reading runner stderr: %s", e)

    def _dispatch(self, message: Message) -> None:
        if message.type == protocol.SESSION_CONNECTED:
            version = message.payload.get("protocol_version", protocol.PROTOCOL_VERSION)
            try:
                self.protocol_version = int(version)
            except (TypeError, ValueError):
                logger.error("Runner sent invalid protocol version: %r", version)
                self._handshake_error = f"invalid protocol version {version!r}"
            self._connected.set()
            return

        method_name = _EVENT_HANDLERS.get(message.type)
        if method_name is None:
            logger.warning("Ignoring unknown runner message type: %s", message.type)
            return

        handler = self._current_handler()
        if handler is None:
            logger.debug("No collector bound, dropping %s", message.type)
            return

        method = getattr(handler, method_name, None)
        if method is None:
            logger.warning(
                "Dropping %s: bound collector handles %s events",
                message.type, handler.kind,
            )
            return

        try:
            method(**_handler_arguments(message))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            handler.handle_fault(f"invalid {message.type} payload: {e}")


def _handler_arguments(message: Message) -> dict[str, Any]:
    """Map a runner event payload onto collector handler arguments."""
    payload = message.payload

    if message.type == protocol.DISCOVERY_TESTS_FOUND:
        return {"test_cases": _test_cases(payload.get("tests"))}

    if message.type == protocol.DISCOVERY_COMPLETE:
        total = payload.get("total_tests")
        return {
            "total_tests": int(total) if total is not None else None,
            "last_discovered_tests": _test_cases(payload.get("last_tests")),
            "aborted": bool(payload.get("aborted", False)),
        }

    if message.type == protocol.EXECUTION_STATS_CHANGE:
        return {"results": _test_results(payload.get("results"))}

    if message.type == protocol.EXECUTION_COMPLETE:
        elapsed = payload.get("elapsed")
        return {
            "last_results": _test_results(payload.get("last_results")),
            "aborted": bool(payload.get("aborted", False)),
            "elapsed": float(elapsed) if elapsed is not None else None,
        }

    if message.type == protocol.SESSION_MESSAGE:
        return {
            "level": payload.get("level", "informational"),
            "message": str(payload.get("message", "")),
        }

    # session.fault
    return {"message": str(payload.get("message") or "unknown runner fault")}


def _test_cases(items: Optional[list]) -> list[TestCase]:
    return [TestCase.from_dict(item) for item in items or []]


def _test_results(items: Optional[list]) -> list[TestResult]:
    return [TestResult.from_dict(item) for item in items or []]
