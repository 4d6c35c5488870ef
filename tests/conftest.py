from __future__ import annotations

import json
from pathlib import Path

import pytest

from runner_harness import HarnessConfig, TestHarness


FIXTURES = Path(__file__).parent / "fixtures"
FAKE_RUNNER = FIXTURES / "fake_runner.py"

ADAPTERS = ["Fake.TestAdapter.dll", "Other.TestAdapter.dll"]


@pytest.fixture
def asset_dir(tmp_path: Path) -> Path:
    root = tmp_path / "TestAssets" / "artifacts"
    root.mkdir(parents=True)
    for name in ADAPTERS:
        (root / name).write_bytes(b"")
    (root / "Unrelated.dll").write_bytes(b"")
    return root


@pytest.fixture
def make_asset(asset_dir: Path):
    """Write a source file the fake runner reads its tests from."""

    def _make(name: str, tests: list[dict], **behavior) -> Path:
        path = asset_dir / name
        path.write_text(json.dumps({"tests": tests, **behavior}), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def runner_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    log = tmp_path / "runner-log.jsonl"
    monkeypatch.setenv("FAKE_RUNNER_LOG", str(log))
    return log


@pytest.fixture
def config(tmp_path: Path, runner_log: Path) -> HarnessConfig:
    return HarnessConfig(
        runner_path=FAKE_RUNNER,
        work_dir=tmp_path,
        start_timeout=15.0,
        request_timeout=15.0,
    )


@pytest.fixture
def harness(config: HarnessConfig, asset_dir: Path):
    test_harness = TestHarness(config)
    yield test_harness
    test_harness.close()


def read_log(path: Path) -> list[dict]:
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]
