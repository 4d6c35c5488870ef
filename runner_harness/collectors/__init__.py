"""Collectors module - runner event accumulation."""

from .base import CollectorState, EventCollector
from .discovery import DiscoveryCollector
from .execution import ExecutionCollector
from .schema import TestCase, TestOutcome, TestResult, get_test_method_name

__all__ = [
    "CollectorState",
    "EventCollector",
    "DiscoveryCollector",
    "ExecutionCollector",
    "TestCase",
    "TestOutcome",
    "TestResult",
    "get_test_method_name",
]
