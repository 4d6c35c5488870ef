"""Harness for driving an external test runner and validating its results."""

from .collectors import (
    CollectorState,
    DiscoveryCollector,
    ExecutionCollector,
    TestCase,
    TestOutcome,
    TestResult,
    get_test_method_name,
)
from .config import HarnessConfig, load_config
from .errors import (
    AssetNotFound,
    ExpectedTestNotFound,
    HarnessError,
    MalformedConfiguration,
    MissingStackTrace,
    RunnerTimeout,
    RunnerUnavailable,
    UnexpectedResultCount,
    ValidationFailure,
)
from .runner import TestHarness
from .session import RunnerSession
from .settings import compose_run_settings
from .validators import ResultValidator

__version__ = "0.1.0"

__all__ = [
    "CollectorState",
    "DiscoveryCollector",
    "ExecutionCollector",
    "TestCase",
    "TestOutcome",
    "TestResult",
    "get_test_method_name",
    "HarnessConfig",
    "load_config",
    "AssetNotFound",
    "ExpectedTestNotFound",
    "HarnessError",
    "MalformedConfiguration",
    "MissingStackTrace",
    "RunnerTimeout",
    "RunnerUnavailable",
    "UnexpectedResultCount",
    "ValidationFailure",
    "TestHarness",
    "RunnerSession",
    "compose_run_settings",
    "ResultValidator",
]
