"""Collector for test execution events."""

import logging
from typing import Iterable, Optional

from .base import EventCollector
from .schema import TestOutcome, TestResult

logger = logging.getLogger(__name__)


class ExecutionCollector(EventCollector):
    """Partitions test results by outcome, preserving arrival order."""

    kind = "execution"

    def __init__(self):
        super().__init__()
        self._results: list[TestResult] = []
        self._partitions: dict[TestOutcome, list[TestResult]] = {
            outcome: [] for outcome in TestOutcome
        }
        self._elapsed: Optional[float] = None

    @property
    def all_results(self) -> list[TestResult]:
        """Every partitioned result in arrival order."""
        with self._lock:
            return list(self._results)

    @property
    def passed_tests(self) -> list[TestResult]:
        return self.results_for(TestOutcome.PASSED)

    @property
    def failed_tests(self) -> list[TestResult]:
        return self.results_for(TestOutcome.FAILED)

    @property
    def skipped_tests(self) -> list[TestResult]:
        return self.results_for(TestOutcome.SKIPPED)

    @property
    def elapsed(self) -> Optional[float]:
        """Run duration in seconds reported by the runner."""
        with self._lock:
            return self._elapsed

    def results_for(self, outcome: TestOutcome) -> list[TestResult]:
        with self._lock:
            return list(self._partitions[outcome])

    def handle_test_results(self, results: Iterable[TestResult]) -> None:
        with self._lock:
            if not self._begin():
                return
            self._add_results(results)

    def handle_run_complete(
        self,
        last_results: Optional[Iterable[TestResult]] = None,
        aborted: bool = False,
        elapsed: Optional[float] = None,
    ) -> None:
        with self._lock:
            if not self._begin():
                return
            if last_results:
                self._add_results(last_results)
            self._elapsed = elapsed
            self._complete(aborted)
            counts = {o.value: len(r) for o, r in self._partitions.items()}

        logger.info("Run complete: %s (aborted=%s)", counts, aborted)
        self._done.set()

    def _add_results(self, results: Iterable[TestResult]) -> None:
        """Partition a batch of results. Caller must hold the lock."""
        for result in results:
            if result.outcome is None:
                logger.warning(
                    "Ignoring result with unsupported outcome: %s",
                    result.fully_qualified_name,
                )
                continue
            self._partitions[result.outcome].append(result)
            self._results.append(result)
