"""Validators module - expectation checks over collected results."""

from .result_validator import ResultValidator, names_match

__all__ = [
    "ResultValidator",
    "names_match",
]
