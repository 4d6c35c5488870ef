"""Test harness - orchestrates discovery and execution through the runner.

Coordinates one call:
1. Resolve sources to absolute asset paths
2. Install a fresh collector
3. Compose run settings with the adapter path
4. Register adapter plugins with the runner
5. Send the request
6. Block until the collector completes
"""

import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from ..collectors.base import EventCollector
from ..collectors.discovery import DiscoveryCollector
from ..collectors.execution import ExecutionCollector
from ..config import HarnessConfig
from ..errors import AssetNotFound, RunnerTimeout, RunnerUnavailable
from ..session.runner_session import RunnerSession
from ..settings.composer import compose_run_settings
from ..validators.result_validator import ResultValidator

logger = logging.getLogger(__name__)


class TestHarness:
    """Drives an external test runner and validates what it reports.

    The harness owns a single runner session for its whole lifetime.
    Calls must be made serially. A discover/execute call replaces the
    previous collector of the same kind once its sources and settings
    are accepted; a call rejected before reaching the runner leaves it
    in place.
    """

    __test__ = False

    def __init__(
        self,
        config: Optional[HarnessConfig] = None,
        session: Optional[RunnerSession] = None,
    ):
        """Initialize test harness.

        Args:
            config: Harness configuration. Defaults to HarnessConfig().
            session: Already started runner session. If None, one is
                created from config.runner_path and started.

        Raises:
            RunnerUnavailable: If the runner cannot be started.
        """
        self.config = config or HarnessConfig()
        self.validator = ResultValidator(self.config.platform_marker)
        self.discovery_collector: Optional[DiscoveryCollector] = None
        self.execution_collector: Optional[ExecutionCollector] = None

        if session is None:
            if self.config.runner_path is None:
                raise RunnerUnavailable("<unset>", "no runner path configured")
            session = RunnerSession(
                self.config.runner_path,
                args=self.config.runner_args,
                start_timeout=self.config.start_timeout,
            )
            session.start()
        self.session = session

    def get_asset_full_path(self, asset_name: str) -> str:
        """Get the full path to a test asset.

        Assets are copied to a central location,
        ``<work_dir>/<relative_root>/TestAssets/artifacts``.

        Raises:
            AssetNotFound: If the asset doesn't exist.
        """
        asset_path = self.config.asset_root / asset_name
        if not asset_path.exists():
            raise AssetNotFound(str(asset_path))
        return str(asset_path)

    def get_test_adapter_path(self) -> str:
        """Directory holding the runner's adapter plugins."""
        return str(self.config.asset_root)

    def normalize_sources(self, sources: Sequence[str]) -> list[str]:
        """Resolve relative sources against the asset root.

        Absolute sources are passed through unchanged.
        """
        return [
            source if os.path.isabs(source) else self.get_asset_full_path(source)
            for source in sources
        ]

    def discover(self, sources: Sequence[str], run_settings: str = "") -> DiscoveryCollector:
        """Discover tests in the given sources.

        Args:
            sources: Test containers, absolute or relative to the asset root.
            run_settings: Run settings XML. Empty uses the defaults.

        Returns:
            The completed DiscoveryCollector.

        Raises:
            AssetNotFound: If a source cannot be resolved.
            MalformedConfiguration: If run_settings is not valid XML.
            RunnerTimeout: If the runner doesn't finish within request_timeout.
        """
        resolved = self.normalize_sources(sources)
        settings_xml = self._prepare(run_settings)

        collector = DiscoveryCollector()
        self.discovery_collector = collector
        logger.info("Discovering tests in %s", ", ".join(resolved))
        self.session.discover_tests(resolved, settings_xml, collector)
        self._wait(collector, "discovery", resolved)
        return collector

    def execute(self, sources: Sequence[str], run_settings: str = "") -> ExecutionCollector:
        """Execute tests in the given sources.

        Same contract as discover(), returning the completed
        ExecutionCollector.
        """
        resolved = self.normalize_sources(sources)
        settings_xml = self._prepare(run_settings)

        collector = ExecutionCollector()
        self.execution_collector = collector
        logger.info("Running tests in %s", ", ".join(resolved))
        self.session.run_tests(resolved, settings_xml, collector)
        self._wait(collector, "execution", resolved)
        return collector

    def validate_discovered_tests(self, *discovered_tests: str) -> None:
        self.validator.validate_discovered_tests(self._discovery(), *discovered_tests)

    def validate_passed_tests(self, *passed_tests: str) -> None:
        self.validator.validate_passed_tests(self._execution(), *passed_tests)

    def validate_failed_tests(self, source: str, *failed_tests: str) -> None:
        self.validator.validate_failed_tests(self._execution(), source, *failed_tests)

    def validate_skipped_tests(self, *skipped_tests: str) -> None:
        self.validator.validate_skipped_tests(self._execution(), *skipped_tests)

    def close(self) -> None:
        """End the runner session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _prepare(self, run_settings: str) -> str:
        """Compose settings and register adapters for the next request."""
        adapter_path = self.get_test_adapter_path()
        settings_xml = compose_run_settings(run_settings, adapter_path)

        # Runner extension state is not reliable across requests, so
        # adapters are registered before every call.
        adapters = sorted(
            str(p) for p in Path(adapter_path).glob(self.config.adapter_pattern)
        )
        self.session.initialize_extensions(adapters)
        return settings_xml

    def _wait(self, collector: EventCollector, operation: str, sources: list[str]) -> None:
        timeout = self.config.request_timeout
        if not collector.wait(timeout):
            raise RunnerTimeout(operation, timeout, sources)
        if collector.fault:
            logger.warning("Test %s finished with runner fault: %s", operation, collector.fault)

    def _discovery(self) -> DiscoveryCollector:
        if self.discovery_collector is None:
            raise RuntimeError("No discovery has been run")
        return self.discovery_collector

    def _execution(self) -> ExecutionCollector:
        if self.execution_collector is None:
            raise RuntimeError("No execution has been run")
        return self.execution_collector
