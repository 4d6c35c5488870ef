"""Settings module - run settings composition."""

from .composer import (
    DEFAULT_RUN_SETTINGS,
    RUN_CONFIGURATION,
    TEST_ADAPTERS_PATHS,
    RunConfiguration,
    compose_run_settings,
)

__all__ = [
    "DEFAULT_RUN_SETTINGS",
    "RUN_CONFIGURATION",
    "TEST_ADAPTERS_PATHS",
    "RunConfiguration",
    "compose_run_settings",
]
