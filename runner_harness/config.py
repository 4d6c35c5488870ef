"""Harness configuration.

Values come from dataclass defaults, an optional YAML file and
``RUNNER_HARNESS_*`` environment variables, in that order of precedence
(environment wins).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml


# Fixed asset layout below the relative root
TEST_ASSETS_DIR = "TestAssets"
ARTIFACTS_DIR = "artifacts"

# Runner extension plugins are discovered by file name suffix
DEFAULT_ADAPTER_PATTERN = "*TestAdapter.dll"

# Sources containing this marker skip the failed-test stack trace check
DEFAULT_PLATFORM_MARKER = "x64"

ENV_PREFIX = "RUNNER_HARNESS_"


@dataclass
class HarnessConfig:
    """Configuration for a test harness instance."""
    runner_path: Optional[Path] = None
    runner_args: list[str] = field(default_factory=list)
    work_dir: Path = field(default_factory=Path.cwd)
    relative_root: str = ""
    adapter_pattern: str = DEFAULT_ADAPTER_PATTERN
    platform_marker: str = DEFAULT_PLATFORM_MARKER
    start_timeout: float = 30.0
    request_timeout: Optional[float] = 300.0

    def __post_init__(self):
        if self.runner_path is not None:
            self.runner_path = Path(self.runner_path)
        self.work_dir = Path(self.work_dir)
        self.runner_args = [str(arg) for arg in self.runner_args]

    @property
    def asset_root(self) -> Path:
        """Directory holding test containers and adapter plugins."""
        return self.work_dir / self.relative_root / TEST_ASSETS_DIR / ARTIFACTS_DIR


def load_config(path: Optional[Union[str, Path]] = None) -> HarnessConfig:
    """Load harness configuration.

    Args:
        path: Optional YAML file with keys matching HarnessConfig fields.

    Returns:
        HarnessConfig with file values and environment overrides applied.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the config file is not a YAML mapping.
    """
    values: dict = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Config must be a YAML mapping, got {type(data).__name__} in {path}"
            )

        values.update({
            k: v for k, v in data.items()
            if k in HarnessConfig.__dataclass_fields__
        })

    values.update(_env_overrides())
    return HarnessConfig(**values)


def _env_overrides() -> dict:
    """Read overrides from RUNNER_HARNESS_* environment variables."""
    overrides: dict = {}

    runner_path = os.environ.get(f"{ENV_PREFIX}RUNNER_PATH")
    if runner_path:
        overrides["runner_path"] = runner_path.strip()

    work_dir = os.environ.get(f"{ENV_PREFIX}WORK_DIR")
    if work_dir:
        overrides["work_dir"] = work_dir.strip()

    relative_root = os.environ.get(f"{ENV_PREFIX}RELATIVE_ROOT")
    if relative_root is not None:
        overrides["relative_root"] = relative_root.strip()

    timeout = os.environ.get(f"{ENV_PREFIX}REQUEST_TIMEOUT")
    if timeout:
        timeout = timeout.strip().lower()
        if timeout in ("none", "0"):
            overrides["request_timeout"] = None
        else:
            try:
                overrides["request_timeout"] = float(timeout)
            except ValueError:
                raise ValueError(
                    f"{ENV_PREFIX}REQUEST_TIMEOUT must be a number, got '{timeout}'"
                ) from None

    return overrides
