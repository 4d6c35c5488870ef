"""JSON report generator for collected runner results.

Generates structured JSON reports from discovery and execution collectors.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from ..collectors.discovery import DiscoveryCollector
from ..collectors.execution import ExecutionCollector
from ..collectors.schema import TestResult

Collector = Union[DiscoveryCollector, ExecutionCollector]


class JsonReporter:
    """Generates JSON reports from collector state."""

    def generate(
        self,
        command: str,
        sources: list[str],
        collector: Optional[Collector] = None,
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report.

        Args:
            command: "discover" or "run".
            sources: Sources the request was made for.
            collector: Collector holding the results. None if the request
                never reached the runner.
            error: Harness or validation error message, if any.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        fault = collector.fault if collector is not None else None
        succeeded = error is None and fault is None

        report: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "command": command,
            "sources": list(sources),
            "status": "passed" if succeeded else "failed",
            "complete": collector.is_complete if collector is not None else False,
            "aborted": collector.aborted if collector is not None else False,
            "messages": [
                {"level": level, "message": message}
                for level, message in (collector.messages if collector is not None else [])
            ],
            "fault": fault,
            "error": error,
        }

        if isinstance(collector, DiscoveryCollector):
            tests = collector.tests
            report["summary"] = {"total": len(tests)}
            report["tests"] = tests
        elif isinstance(collector, ExecutionCollector):
            passed = collector.passed_tests
            failed = collector.failed_tests
            skipped = collector.skipped_tests
            report["summary"] = {
                "total": len(passed) + len(failed) + len(skipped),
                "passed": len(passed),
                "failed": len(failed),
                "skipped": len(skipped),
                "elapsed": collector.elapsed,
            }
            report["results"] = [_result_entry(r) for r in collector.all_results]
        else:
            report["summary"] = {"total": 0}

        return report

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, output: dict[str, Any], pretty: bool = False) -> str:
        """Serialize a report or CLI output.

        Compact output is a single line; pretty output is indented by two
        spaces. Non-ASCII test names are written as is.
        """
        return json.dumps(output, indent=2 if pretty else None, ensure_ascii=False)

    def generate_cli_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate the command line JSON output.

        Follows the output standard:
        {
            "success": bool,
            "command": "discover" | "run",
            "data": { ... },
            "message": str
        }

        Args:
            report: Report dictionary from generate().
            report_path: Path where report was saved.

        Returns:
            Command line JSON output.
        """
        summary = report["summary"]
        succeeded = report["status"] == "passed"

        data: dict[str, Any] = {"sources": report["sources"], **summary}
        if "tests" in report:
            data["tests"] = report["tests"]
        if report_path:
            data["report_path"] = report_path

        if report.get("error"):
            message = report["error"]
        elif report.get("fault"):
            message = f"Runner fault: {report['fault']}"
        elif report["command"] == "discover":
            message = f"Discovered {summary['total']} tests"
        else:
            message = (
                f"{summary.get('passed', 0)} passed, {summary.get('failed', 0)} failed, "
                f"{summary.get('skipped', 0)} skipped"
            )

        return {
            "success": succeeded,
            "command": report["command"],
            "data": data,
            "message": message,
        }


def _result_entry(result: TestResult) -> dict[str, Any]:
    return {
        "name": result.fully_qualified_name,
        "source": result.test_case.source,
        "outcome": result.outcome.value if result.outcome else None,
        "duration": result.duration,
        "error_message": result.error_message,
        "error_stack_trace": result.error_stack_trace,
    }
