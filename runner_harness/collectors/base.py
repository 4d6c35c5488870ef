"""Base event collector.

A collector receives notifications from the runner session's reader
thread and exposes them to the caller thread once the runner signals
completion. Each collector moves through idle -> accumulating ->
complete; complete is terminal.
"""

import logging
import threading
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class CollectorState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    COMPLETE = "complete"


class EventCollector:
    """Thread-safe accumulator for one discovery or execution request."""

    kind = "events"

    def __init__(self):
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._state = CollectorState.IDLE
        self._messages: list[tuple[str, str]] = []
        self._fault: Optional[str] = None
        self._aborted = False

    @property
    def state(self) -> CollectorState:
        with self._lock:
            return self._state

    @property
    def is_complete(self) -> bool:
        return self._done.is_set()

    @property
    def fault(self) -> Optional[str]:
        """Fault reported by or about the runner, if any."""
        with self._lock:
            return self._fault

    @property
    def aborted(self) -> bool:
        with self._lock:
            return self._aborted

    @property
    def messages(self) -> list[tuple[str, str]]:
        """Runner log messages as (level, text) in arrival order."""
        with self._lock:
            return list(self._messages)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the collector is complete.

        Args:
            timeout: Seconds to wait. None waits indefinitely.

        Returns:
            True if complete, False if the timeout expired first.
        """
        return self._done.wait(timeout)

    def handle_log_message(self, level: str, message: str) -> None:
        level = str(level or "informational").lower()
        with self._lock:
            self._messages.append((level, message))
        if level == "error":
            logger.error("Runner %s error: %s", self.kind, message)
        else:
            logger.debug("Runner %s %s: %s", self.kind, level, message)

    def handle_fault(self, message: str) -> None:
        """Record a runner fault and complete with the results so far."""
        with self._lock:
            if self._state is CollectorState.COMPLETE:
                logger.warning(
                    "Ignoring runner fault after %s completed: %s", self.kind, message
                )
                return
            self._fault = message
            self._aborted = True
            self._state = CollectorState.COMPLETE
        logger.error("Runner fault during %s: %s", self.kind, message)
        self._done.set()

    def _begin(self) -> bool:
        """Enter the accumulating state. Caller must hold the lock.

        Returns:
            False if the collector is already complete.
        """
        if self._state is CollectorState.COMPLETE:
            logger.warning("Dropping %s notification received after completion", self.kind)
            return False
        self._state = CollectorState.ACCUMULATING
        return True

    def _complete(self, aborted: bool) -> None:
        """Enter the complete state. Caller must hold the lock."""
        self._aborted = self._aborted or bool(aborted)
        self._state = CollectorState.COMPLETE
