"""
Relational checks over a parsed result set.

Every check returns None on success or a TimelineAssertionError describing
the compared values, so callers can run several checks before reporting.
Timestamps compare with the tie-break the emitters can support:
- ordering checks are strict (equal timestamps are not "before")
- overlap checks are inclusive (equal timestamps overlap)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from lifecycle_timeline.events import EventKind
from lifecycle_timeline.exceptions import TimelineAssertionError

if TYPE_CHECKING:
    from lifecycle_timeline.events import Event
    from lifecycle_timeline.narration import Narrator
    from lifecycle_timeline.results import ContainerTimeline, ResultSet

logger = logging.getLogger(__name__)


def _missing(check: str, prefix: str, name: str) -> TimelineAssertionError:
    return TimelineAssertionError(
        check,
        f"{prefix}: no output recorded for container {name}",
        container=name,
    )


def starts(results: ResultSet, name: str) -> TimelineAssertionError | None:
    timeline = results.get(name)
    if timeline is None:
        return _missing("starts", "container never started", name)
    if timeline.start_event is None:
        return TimelineAssertionError(
            "starts",
            f"container never started: {name} has no Started event",
            container=name,
            events=[event.kind.value for event in timeline.events],
        )
    return None


def doesnt_start(results: ResultSet, name: str) -> TimelineAssertionError | None:
    timeline = results.get(name)
    if timeline is None:
        return None
    start = timeline.start_event
    if start is not None:
        return TimelineAssertionError(
            "doesnt_start",
            f"container {name} was not expected to start but started at {start.timestamp}",
            container=name,
            started=start.timestamp,
        )
    return None


def exits(
    results: ResultSet, name: str, expected_code: int | None = None
) -> TimelineAssertionError | None:
    timeline = results.get(name)
    if timeline is None:
        return _missing("exits", f"container {name} never exited", name)
    end = timeline.find(EventKind.EXITED)
    if end is None:
        return TimelineAssertionError(
            "exits",
            f"container {name} never exited",
            container=name,
            events=[event.kind.value for event in timeline.events],
        )
    if expected_code is None:
        return None
    if end.exit_code != expected_code:
        return TimelineAssertionError(
            "exits",
            f"exit code mismatch for {name}: got {end.exit_code} want {expected_code}",
            container=name,
            got=end.exit_code,
            want=expected_code,
        )
    return None


def run_together(results: ResultSet, name_a: str, name_b: str) -> TimelineAssertionError | None:
    intervals = {}
    for name in (name_a, name_b):
        timeline = results.get(name)
        if timeline is None:
            return _missing("run_together", "cannot determine active interval", name)
        interval = timeline.interval()
        if interval is None:
            return TimelineAssertionError(
                "run_together",
                f"cannot determine active interval for {name}: "
                f"start={_ts(timeline.start_event)} end={_ts(timeline.end_event)}",
                container=name,
            )
        intervals[name] = interval

    start_a, end_a = intervals[name_a]
    start_b, end_b = intervals[name_b]
    if start_a <= end_b and start_b <= end_a:
        return None
    return TimelineAssertionError(
        "run_together",
        f"{name_a} [{start_a}, {end_a}] and {name_b} [{start_b}, {end_b}] did not run together",
        intervals={name_a: (start_a, end_a), name_b: (start_b, end_b)},
    )


def starts_before(results: ResultSet, name_a: str, name_b: str) -> TimelineAssertionError | None:
    return _ordered(results, "starts_before", "start", name_a, name_b, lambda t: t.start_event)


def exits_before(results: ResultSet, name_a: str, name_b: str) -> TimelineAssertionError | None:
    return _ordered(results, "exits_before", "exit", name_a, name_b, lambda t: t.end_event)


def _ordered(
    results: ResultSet,
    check: str,
    label: str,
    name_a: str,
    name_b: str,
    pick: Callable[[ContainerTimeline], Event | None],
) -> TimelineAssertionError | None:
    stamps = {}
    for name in (name_a, name_b):
        timeline = results.get(name)
        if timeline is None:
            return _missing(check, f"cannot compare {label} order", name)
        event = pick(timeline)
        if event is None:
            return TimelineAssertionError(
                check,
                f"cannot compare {label} order: {name} has no {label} event",
                container=name,
            )
        stamps[name] = event.timestamp

    if stamps[name_a] < stamps[name_b]:
        return None
    return TimelineAssertionError(
        check,
        f"{name_a} did not {label} before {name_b}: "
        f"{label} {stamps[name_a]} is not before {stamps[name_b]}",
        timestamps=dict(stamps),
    )


def _ts(event: Event | None) -> str:
    return "missing" if event is None else str(event.timestamp)


def collect_failures(*errors: TimelineAssertionError | None) -> list[TimelineAssertionError]:
    return [error for error in errors if error is not None]


def expect_no_error(
    error: TimelineAssertionError | None, narrator: Narrator | None = None
) -> None:
    """Raise a returned check failure, narrating it first when a narrator is given."""
    if error is None:
        return
    logger.error("Timeline check %s failed: %s", error.check, error)
    if narrator is not None:
        narrator.log(f"FAILED {error.check}: {error}")
    raise error
