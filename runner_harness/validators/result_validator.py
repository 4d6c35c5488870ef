"""Result validator for collected discovery and execution results.

Expected tests may be given as fully qualified names
(``SampleTest.TestCode.TestMethodPass``) or as bare method names
(``TestMethodPass``); both forms match the same reported test.
"""

import logging
from typing import Optional, Sequence

from ..collectors.discovery import DiscoveryCollector
from ..collectors.execution import ExecutionCollector
from ..collectors.schema import TestOutcome, TestResult, get_test_method_name
from ..config import DEFAULT_PLATFORM_MARKER
from ..errors import ExpectedTestNotFound, MissingStackTrace, UnexpectedResultCount

logger = logging.getLogger(__name__)


def names_match(reported: str, expected: str) -> bool:
    """Whether a reported test name satisfies an expected name."""
    if reported == expected:
        return True

    expected_method = get_test_method_name(expected)
    if expected_method and reported == expected_method:
        return True

    reported_method = get_test_method_name(reported)
    return bool(reported_method) and reported_method == expected


class ResultValidator:
    """Checks collected results against expected test names."""

    def __init__(self, platform_marker: str = DEFAULT_PLATFORM_MARKER):
        """Initialize result validator.

        Args:
            platform_marker: Sources containing this marker skip the
                stack trace check for failed tests.
        """
        self.platform_marker = platform_marker

    def validate_discovered_tests(
        self, collector: DiscoveryCollector, *expected: str
    ) -> None:
        """Validate that exactly the expected tests were discovered.

        Raises:
            UnexpectedResultCount: If more or fewer tests were discovered.
            ExpectedTestNotFound: If an expected test was not discovered.
        """
        discovered = collector.tests
        _check_count("discovered", expected, len(discovered))

        for test in expected:
            if not any(names_match(name, test) for name in discovered):
                raise ExpectedTestNotFound("discovered", test)

    def validate_passed_tests(
        self, collector: ExecutionCollector, *expected: str
    ) -> None:
        self._validate_outcome(collector, TestOutcome.PASSED, expected)

    def validate_skipped_tests(
        self, collector: ExecutionCollector, *expected: str
    ) -> None:
        self._validate_outcome(collector, TestOutcome.SKIPPED, expected)

    def validate_failed_tests(
        self, collector: ExecutionCollector, source: str, *expected: str
    ) -> None:
        """Validate failed tests and that each failure has a stack trace.

        The stack trace of every failed test must mention its method name.
        This check is skipped for sources built for the platform marker,
        whose stack traces are not captured reliably.

        Raises:
            UnexpectedResultCount: If more or fewer tests failed.
            ExpectedTestNotFound: If an expected test did not fail.
            MissingStackTrace: If a failure's stack trace lacks the method name.
        """
        matches = self._validate_outcome(collector, TestOutcome.FAILED, expected)

        if self.platform_marker and self.platform_marker in source:
            logger.info(
                "Skipping stack trace check for %s (platform marker '%s')",
                source, self.platform_marker,
            )
            return

        for test, result in zip(expected, matches):
            method_name = (
                get_test_method_name(test)
                or get_test_method_name(result.fully_qualified_name)
                or test
            )
            if method_name not in (result.error_stack_trace or ""):
                raise MissingStackTrace(test)

    def _validate_outcome(
        self,
        collector: ExecutionCollector,
        outcome: TestOutcome,
        expected: Sequence[str],
    ) -> list[TestResult]:
        """Check count and membership for one outcome category.

        Returns:
            The first matching result for each expected test, in order.
        """
        category = outcome.value.lower()
        results = collector.results_for(outcome)
        _check_count(category, expected, len(results))

        matches = []
        for test in expected:
            found = _find_result(results, test)
            if found is None:
                raise ExpectedTestNotFound(category, test)
            matches.append(found)

        return matches


def _check_count(category: str, expected: Sequence[str], actual: int) -> None:
    if len(expected) != actual:
        raise UnexpectedResultCount(category, len(expected), actual)


def _find_result(results: list[TestResult], test: str) -> Optional[TestResult]:
    for result in results:
        if names_match(result.fully_qualified_name, test):
            return result
    return None
