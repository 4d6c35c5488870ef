"""Collector for test discovery events."""

import logging
from typing import Iterable, Optional

from .base import EventCollector
from .schema import TestCase

logger = logging.getLogger(__name__)


class DiscoveryCollector(EventCollector):
    """Accumulates discovered tests in arrival order.

    Duplicates are kept and counted.
    """

    kind = "discovery"

    def __init__(self):
        super().__init__()
        self._test_cases: list[TestCase] = []
        self._total_tests: Optional[int] = None

    @property
    def test_cases(self) -> list[TestCase]:
        with self._lock:
            return list(self._test_cases)

    @property
    def tests(self) -> list[str]:
        """Fully qualified names of the discovered tests."""
        with self._lock:
            return [tc.fully_qualified_name for tc in self._test_cases]

    @property
    def total_tests(self) -> Optional[int]:
        """Total the runner reported on completion."""
        with self._lock:
            return self._total_tests

    def handle_tests_found(self, test_cases: Iterable[TestCase]) -> None:
        with self._lock:
            if not self._begin():
                return
            self._test_cases.extend(test_cases)

    def handle_discovery_complete(
        self,
        total_tests: Optional[int] = None,
        last_discovered_tests: Optional[Iterable[TestCase]] = None,
        aborted: bool = False,
    ) -> None:
        with self._lock:
            if not self._begin():
                return
            if last_discovered_tests:
                self._test_cases.extend(last_discovered_tests)
            self._total_tests = total_tests
            self._complete(aborted)
            count = len(self._test_cases)

        logger.info("Discovery complete: %d tests (aborted=%s)", count, aborted)
        self._done.set()
