from __future__ import annotations

import threading

from runner_harness import (
    CollectorState,
    DiscoveryCollector,
    ExecutionCollector,
    TestCase,
    TestOutcome,
    TestResult,
    get_test_method_name,
)


def _case(name: str, source: str = "Sample.dll") -> TestCase:
    return TestCase(fully_qualified_name=name, source=source)


def _result(name: str, outcome: TestOutcome, stack_trace: str | None = None) -> TestResult:
    return TestResult(test_case=_case(name), outcome=outcome, error_stack_trace=stack_trace)


def test_discovery_collector_state_transitions() -> None:
    collector = DiscoveryCollector()
    assert collector.state is CollectorState.IDLE
    assert not collector.is_complete

    collector.handle_tests_found([_case("A.B.M1")])
    assert collector.state is CollectorState.ACCUMULATING

    collector.handle_discovery_complete(total_tests=2, last_discovered_tests=[_case("A.B.M2")])
    assert collector.state is CollectorState.COMPLETE
    assert collector.wait(0)
    assert collector.tests == ["A.B.M1", "A.B.M2"]
    assert collector.total_tests == 2
    assert collector.fault is None


def test_discovery_collector_counts_duplicates() -> None:
    collector = DiscoveryCollector()
    collector.handle_tests_found([_case("A.B.M1"), _case("A.B.M1")])
    collector.handle_discovery_complete()

    assert collector.tests == ["A.B.M1", "A.B.M1"]


def test_notifications_after_complete_are_dropped() -> None:
    collector = DiscoveryCollector()
    collector.handle_discovery_complete(last_discovered_tests=[_case("A.B.M1")])
    collector.handle_tests_found([_case("A.B.M2")])
    collector.handle_fault("late crash")

    assert collector.tests == ["A.B.M1"]
    assert collector.fault is None


def test_fault_completes_with_partial_results() -> None:
    collector = ExecutionCollector()
    collector.handle_test_results([_result("A.B.M1", TestOutcome.PASSED)])

    collector.handle_fault("runner process exited with code 2")

    assert collector.is_complete
    assert collector.aborted
    assert collector.fault == "runner process exited with code 2"
    assert [r.fully_qualified_name for r in collector.passed_tests] == ["A.B.M1"]


def test_execution_collector_partitions_by_outcome() -> None:
    collector = ExecutionCollector()
    collector.handle_test_results([
        _result("A.B.P1", TestOutcome.PASSED),
        _result("A.B.F1", TestOutcome.FAILED, "at A.B.F1()"),
        _result("A.B.S1", TestOutcome.SKIPPED),
    ])
    collector.handle_test_results([_result("A.B.P2", TestOutcome.PASSED)])
    collector.handle_run_complete(
        last_results=[_result("A.B.F2", TestOutcome.FAILED)], elapsed=1.5
    )

    assert [r.fully_qualified_name for r in collector.passed_tests] == ["A.B.P1", "A.B.P2"]
    assert [r.fully_qualified_name for r in collector.failed_tests] == ["A.B.F1", "A.B.F2"]
    assert [r.fully_qualified_name for r in collector.skipped_tests] == ["A.B.S1"]
    assert len(collector.all_results) == 5
    assert collector.elapsed == 1.5


def test_execution_collector_ignores_unknown_outcomes() -> None:
    collector = ExecutionCollector()
    collector.handle_test_results([
        TestResult.from_dict({
            "test_case": {"fully_qualified_name": "A.B.N1"},
            "outcome": "NotFound",
        }),
        TestResult.from_dict({
            "test_case": {"fully_qualified_name": "A.B.P1"},
            "outcome": "passed",
        }),
    ])

    assert [r.fully_qualified_name for r in collector.all_results] == ["A.B.P1"]


def test_log_messages_are_kept_in_order() -> None:
    collector = DiscoveryCollector()
    collector.handle_log_message("Informational", "starting")
    collector.handle_log_message("error", "adapter failed to load")

    assert collector.messages == [
        ("informational", "starting"),
        ("error", "adapter failed to load"),
    ]


def test_wait_blocks_until_complete_from_another_thread() -> None:
    collector = DiscoveryCollector()
    assert not collector.wait(0.01)

    def deliver() -> None:
        for index in range(50):
            collector.handle_tests_found([_case(f"A.B.M{index}")])
        collector.handle_discovery_complete()

    thread = threading.Thread(target=deliver)
    thread.start()
    assert collector.wait(10)
    thread.join()

    assert collector.tests == [f"A.B.M{index}" for index in range(50)]


def test_get_test_method_name() -> None:
    assert get_test_method_name("SampleTest.TestCode.TestMethodPass") == "TestMethodPass"
    assert get_test_method_name("A.B.C.D") == "C"
    assert get_test_method_name("B.M") == ""
    assert get_test_method_name("M") == ""
