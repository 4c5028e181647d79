# Where: lifecycle_timeline/tests/test_assertions.py
# What: Scenario and property tests for relational timeline checks.
# Why: False positives here hide broken hook ordering in real workloads.
from __future__ import annotations

import itertools

import pytest

from lifecycle_timeline import assertions
from lifecycle_timeline.events import PRE_STOP_PREFIX, prefixed_name
from lifecycle_timeline.exceptions import TimelineAssertionError
from lifecycle_timeline.narration import Narrator
from lifecycle_timeline.parser import parse_output

REGULAR = "regular-1"
PRE_STOP = prefixed_name(PRE_STOP_PREFIX, REGULAR)


def _blob(*lines: str) -> str:
    return "".join(f"{line}\n" for line in lines)


@pytest.fixture
def prestop_results():
    return parse_output(
        {
            REGULAR: _blob(
                f"{REGULAR} | Started | 0",
                f"{PRE_STOP} | HookStart | 100",
                f"{PRE_STOP} | HookEnd | 101",
                f"{REGULAR} | Exited | 120 | 0",
            )
        }
    )


def test_prestop_hook_runs_with_its_container(prestop_results) -> None:
    assert prestop_results.run_together(REGULAR, PRE_STOP) is None
    assert prestop_results.starts(PRE_STOP) is None
    assert prestop_results.exits(REGULAR, 0) is None
    assert prestop_results.exits(REGULAR) is None
    assert prestop_results.exits_before(PRE_STOP, REGULAR) is None
    assert prestop_results.starts_before(REGULAR, PRE_STOP) is None


def test_container_killed_by_startup_probe_never_started() -> None:
    results = parse_output(
        {
            REGULAR: _blob(
                "Startup probe failed: exit status 1",
                f"{PRE_STOP} | HookStart | 1000",
                f"{PRE_STOP} | HookEnd | 1100",
            )
        }
    )

    error = results.starts(REGULAR)

    assert isinstance(error, TimelineAssertionError)
    assert "container never started" in str(error)
    assert results.doesnt_start(REGULAR) is None
    assert results.starts(PRE_STOP) is None


def test_present_container_without_started_event_never_started() -> None:
    results = parse_output({REGULAR: _blob(f"{REGULAR} | Exited | 7 | 137")})

    error = results.starts(REGULAR)

    assert "container never started" in str(error)
    assert "has no Started event" in str(error)
    assert results.exits(REGULAR, 137) is None


def test_missing_and_present_containers_fail_differently() -> None:
    results = parse_output({REGULAR: _blob(f"{REGULAR} | Started | 1")})

    missing = results.exits("other")
    not_exited = results.exits(REGULAR)

    assert "no output recorded for container other" in str(missing)
    assert str(not_exited) == f"container {REGULAR} never exited"


def test_exit_code_mismatch_message(prestop_results) -> None:
    error = prestop_results.exits(REGULAR, 1)

    assert str(error) == f"exit code mismatch for {REGULAR}: got 0 want 1"
    assert error.details["got"] == 0
    assert error.details["want"] == 1
    assert error.check == "exits"


def test_hook_timeline_never_exits(prestop_results) -> None:
    error = prestop_results.exits(PRE_STOP)

    assert str(error) == f"container {PRE_STOP} never exited"
    assert error.details["events"] == ["HookStart", "HookEnd"]
    assert str(prestop_results.exits(PRE_STOP, 0)) == f"container {PRE_STOP} never exited"
    assert prestop_results.exits_before(PRE_STOP, REGULAR) is None


def test_disjoint_containers_do_not_run_together() -> None:
    results = parse_output(
        {
            "a": _blob("a | Started | 0", "a | Exited | 10 | 0"),
            "b": _blob("b | Started | 20", "b | Exited | 30 | 0"),
        }
    )

    error = results.run_together("a", "b")

    assert "a [0, 10]" in str(error)
    assert "b [20, 30]" in str(error)
    assert error.details["intervals"] == {"a": (0, 10), "b": (20, 30)}


def test_touching_intervals_overlap_but_are_not_ordered() -> None:
    results = parse_output(
        {
            "a": _blob("a | Started | 0", "a | Exited | 10 | 0"),
            "b": _blob("b | Started | 10", "b | Exited | 20 | 0"),
            "c": _blob("c | Started | 10", "c | Exited | 25 | 0"),
        }
    )

    assert results.run_together("a", "b") is None
    assert results.starts_before("a", "b") is None
    error = results.starts_before("b", "c")
    assert "is not before" in str(error)
    assert error.details["timestamps"] == {"b": 10, "c": 10}


def test_run_together_needs_complete_interval() -> None:
    results = parse_output({"a": _blob("a | Started | 0"), "b": _blob("b | Started | 1")})

    error = results.run_together("a", "b")

    assert "cannot determine active interval for a" in str(error)
    assert "end=missing" in str(error)


def test_ordering_checks_report_missing_events() -> None:
    results = parse_output({"a": _blob("a | Started | 0"), "b": _blob("b | Started | 1")})

    assert str(results.exits_before("a", "b")) == "cannot compare exit order: a has no exit event"
    assert "no output recorded for container z" in str(results.starts_before("a", "z"))


def test_doesnt_start_fails_when_container_started(prestop_results) -> None:
    error = prestop_results.doesnt_start(REGULAR)

    assert "started at 0" in str(error)


def test_run_together_is_symmetric() -> None:
    results = parse_output(
        {
            "a": _blob("a | Started | 0", "a | Exited | 10 | 0"),
            "b": _blob("b | Started | 5", "b | Exited | 15 | 0"),
            "c": _blob("c | Started | 10", "c | Exited | 12 | 0"),
            "d": _blob("d | Started | 20", "d | Exited | 30 | 0"),
            "e": _blob("e | Started | 3"),
            "h": _blob("h | HookStart | 11", "h | HookEnd | 19"),
        }
    )
    names = list(results) + ["missing"]

    for left, right in itertools.product(names, repeat=2):
        forward = results.run_together(left, right) is None
        backward = results.run_together(right, left) is None
        assert forward == backward, (left, right)


def test_collect_failures_keeps_only_errors(prestop_results) -> None:
    failures = assertions.collect_failures(
        prestop_results.starts(REGULAR),
        prestop_results.exits(REGULAR, 2),
        prestop_results.starts("ghost"),
    )

    assert [f.check for f in failures] == ["exits", "starts"]


def test_expect_no_error_raises_and_narrates(prestop_results) -> None:
    lines: list[str] = []
    narrator = Narrator(printer=lines.append)

    assertions.expect_no_error(prestop_results.starts(REGULAR), narrator)
    with pytest.raises(AssertionError, match="exit code mismatch"):
        assertions.expect_no_error(prestop_results.exits(REGULAR, 9), narrator)

    assert lines == [f"  FAILED exits: exit code mismatch for {REGULAR}: got 0 want 9"]
