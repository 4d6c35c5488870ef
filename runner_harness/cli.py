"""CLI entry point for the runner harness.

    runner-harness [options] discover <sources...> [--expect NAME]...
    runner-harness [options] run <sources...> [--expect-passed NAME]...
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import click

from .config import HarnessConfig, load_config
from .errors import HarnessError
from .reporting.json_reporter import JsonReporter
from .runner.harness import TestHarness


@dataclass
class CliOptions:
    config: HarnessConfig
    pretty: bool = False
    save_report: Optional[Path] = None


@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path),
              help="YAML harness configuration file.")
@click.option("--runner", "runner_path", type=click.Path(path_type=Path),
              help="Test runner executable.")
@click.option("--relative-root", help="Asset root relative to the working directory.")
@click.option("--timeout", type=float, help="Seconds to wait for each request.")
@click.option("--save-report", type=click.Path(path_type=Path),
              help="Write the full JSON report to this file.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.option("-v", "--verbose", is_flag=True, help="Log runner activity to stderr.")
@click.pass_context
def main(ctx, config_path, runner_path, relative_root, timeout, save_report, pretty, verbose):
    """Discover and run tests through an external test runner."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Failed to load config: {e}")
        sys.exit(1)

    if runner_path is not None:
        config.runner_path = runner_path
    if relative_root is not None:
        config.relative_root = relative_root
    if timeout is not None:
        config.request_timeout = timeout if timeout > 0 else None

    ctx.obj = CliOptions(config=config, pretty=pretty, save_report=save_report)


@main.command()
@click.argument("sources", nargs=-1, required=True)
@click.option("--settings", "settings_file", type=click.Path(path_type=Path),
              help="Run settings XML file.")
@click.option("--expect", multiple=True, help="Expected discovered test (repeatable).")
@click.pass_obj
def discover(options: CliOptions, sources, settings_file, expect):
    """Discover tests in SOURCES."""

    def validate(harness: TestHarness) -> None:
        if expect:
            harness.validate_discovered_tests(*expect)

    _run_command(options, "discover", list(sources), settings_file, validate)


@main.command()
@click.argument("sources", nargs=-1, required=True)
@click.option("--settings", "settings_file", type=click.Path(path_type=Path),
              help="Run settings XML file.")
@click.option("--expect-passed", multiple=True, help="Expected passed test (repeatable).")
@click.option("--expect-failed", multiple=True, help="Expected failed test (repeatable).")
@click.option("--expect-skipped", multiple=True, help="Expected skipped test (repeatable).")
@click.pass_obj
def run(options: CliOptions, sources, settings_file, expect_passed, expect_failed, expect_skipped):
    """Run tests in SOURCES."""

    def validate(harness: TestHarness) -> None:
        if expect_passed:
            harness.validate_passed_tests(*expect_passed)
        if expect_failed:
            harness.validate_failed_tests(" ".join(sources), *expect_failed)
        if expect_skipped:
            harness.validate_skipped_tests(*expect_skipped)

    _run_command(options, "run", list(sources), settings_file, validate)


def _run_command(
    options: CliOptions,
    command: str,
    sources: list[str],
    settings_file: Optional[Path],
    validate: Callable[[TestHarness], None],
) -> None:
    """Run one harness request, validate it and print the result."""
    reporter = JsonReporter()

    run_settings = ""
    if settings_file is not None:
        try:
            run_settings = settings_file.read_text(encoding="utf-8")
        except OSError as e:
            output_error(f"Failed to read run settings: {e}")
            sys.exit(1)

    harness: Optional[TestHarness] = None
    collector = None
    error: Optional[str] = None

    try:
        harness = TestHarness(options.config)
        if command == "discover":
            harness.discover(sources, run_settings)
        else:
            harness.execute(sources, run_settings)
        validate(harness)
    except HarnessError as e:
        error = str(e)
    finally:
        if harness is not None:
            if command == "discover":
                collector = harness.discovery_collector
            else:
                collector = harness.execution_collector
            harness.close()

    report = reporter.generate(command, sources, collector, error)

    report_path = None
    if options.save_report is not None:
        report_path = str(reporter.save(report, options.save_report))

    output = reporter.generate_cli_output(report, report_path)
    click.echo(reporter.to_json_string(output, pretty=options.pretty))

    if not output["success"]:
        sys.exit(1)


def output_error(message: str, **extra):
    """Output an error in the command line JSON format."""
    output = {
        "success": False,
        "command": None,
        "data": extra or None,
        "message": message,
    }
    click.echo(JsonReporter().to_json_string(output))


if __name__ == "__main__":
    main()
