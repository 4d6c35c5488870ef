"""Data models for tests and results reported by the runner."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class TestOutcome(str, Enum):
    """Outcome categories the harness partitions results into."""
    __test__ = False

    PASSED = "Passed"
    FAILED = "Failed"
    SKIPPED = "Skipped"

    @classmethod
    def parse(cls, value: Any) -> Optional["TestOutcome"]:
        """Parse an outcome name case-insensitively. Unknown names give None."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for outcome in cls:
            if outcome.value.lower() == text:
                return outcome
        return None


@dataclass
class TestCase:
    """A single test as reported by the runner."""
    __test__ = False

    fully_qualified_name: str
    source: Optional[str] = None
    display_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TestCase":
        return cls(
            fully_qualified_name=str(data["fully_qualified_name"]),
            source=data.get("source"),
            display_name=data.get("display_name"),
        )


@dataclass
class TestResult:
    """Outcome of executing one test."""
    __test__ = False

    test_case: TestCase
    outcome: Optional[TestOutcome]
    error_message: Optional[str] = None
    error_stack_trace: Optional[str] = None
    duration: float = 0.0

    @property
    def fully_qualified_name(self) -> str:
        return self.test_case.fully_qualified_name

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TestResult":
        return cls(
            test_case=TestCase.from_dict(data["test_case"]),
            outcome=TestOutcome.parse(data.get("outcome")),
            error_message=data.get("error_message"),
            error_stack_trace=data.get("error_stack_trace"),
            duration=float(data.get("duration") or 0.0),
        )


def get_test_method_name(test_full_name: str) -> str:
    """Get the bare method name from a fully qualified test name.

    The method name is the third dot-separated segment, so
    ``"SampleTest.TestCode.TestMethodPass"`` gives ``"TestMethodPass"``.
    Names with fewer than three segments give an empty string.
    """
    splits = test_full_name.split(".")
    if len(splits) >= 3:
        return splits[2]
    return ""
