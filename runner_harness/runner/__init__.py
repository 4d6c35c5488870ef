"""Runner module - test orchestration."""

from .harness import TestHarness

__all__ = [
    "TestHarness",
]
