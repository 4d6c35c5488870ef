"""Error types raised by the runner harness.

Every error aborts the current operation and carries enough context
(path, test identity, counts) to diagnose the failure without re-running.
"""

from typing import Optional


class HarnessError(Exception):
    """Base class for all runner harness errors."""


class RunnerUnavailable(HarnessError):
    """The external runner could not be located or started."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = str(path)
        self.reason = reason
        message = f"Test runner unavailable: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class AssetNotFound(HarnessError):
    """A test source did not resolve to an existing file."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"Test asset not found: {self.path}")


class MalformedConfiguration(HarnessError):
    """Caller-supplied run settings could not be parsed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed run settings: {reason}")


class RunnerTimeout(HarnessError, TimeoutError):
    """The runner did not complete a request within the configured timeout."""

    def __init__(self, operation: str, timeout: float, sources: Optional[list[str]] = None):
        self.operation = operation
        self.timeout = timeout
        self.sources = list(sources or [])
        message = f"Test {operation} did not complete within {timeout}s"
        if self.sources:
            message += f" (sources: {', '.join(self.sources)})"
        super().__init__(message)


class ValidationFailure(HarnessError, AssertionError):
    """Collected results do not match the caller's expectations."""


class UnexpectedResultCount(ValidationFailure):
    def __init__(self, category: str, expected: int, actual: int):
        self.category = category
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected {expected} {category} tests, got {actual}."
        )


class ExpectedTestNotFound(ValidationFailure):
    def __init__(self, category: str, test_name: str):
        self.category = category
        self.test_name = test_name
        super().__init__(
            f"Test {test_name} does not appear in {category} tests list."
        )


class MissingStackTrace(ValidationFailure):
    def __init__(self, test_name: str):
        self.test_name = test_name
        super().__init__(f"No stack trace for failed test: {test_name}")
