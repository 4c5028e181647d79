# Where: lifecycle_timeline/parser.py
# What: Turn captured container output into a ResultSet.
# Why: Keep parsing pure so it can run on any fully captured snapshot.
from __future__ import annotations

import logging
from typing import Iterable, Mapping

from lifecycle_timeline.events import Event, parse_event_line
from lifecycle_timeline.exceptions import ParseError
from lifecycle_timeline.results import ContainerTimeline, ResultSet

logger = logging.getLogger(__name__)


def parse_output(
    blobs: Mapping[str, str],
    expected: Iterable[str] | None = None,
) -> ResultSet:
    """Parse one output blob per container into a ResultSet.

    Lines are routed to timelines by the name written on each line, so a
    container's blob may also carry the lines of its hooks. Non-event
    lines are ignored. ``expected`` defaults to every blob key; the blob of
    an expected name must hold at least one event line, and an expected
    name without a blob must appear on some other blob's lines.
    """
    expected_names = list(blobs) if expected is None else list(expected)
    collected: dict[str, list[Event]] = {}
    origins: dict[str, str] = {}

    for source, text in blobs.items():
        matched = 0
        for line_no, line in enumerate(text.splitlines(), start=1):
            event = parse_event_line(line, source=source, line_no=line_no)
            if event is None:
                continue
            matched += 1
            name = event.container_name
            timeline = collected.setdefault(name, [])
            _check_order(timeline, event, source, line_no)
            timeline.append(event)
            origins.setdefault(name, source)
        if matched == 0 and source in expected_names:
            raise ParseError(source, f"no events for container {source}")

    for name in expected_names:
        if name not in blobs and name not in collected:
            raise ParseError(name, f"no events for container {name}")

    for name, events in collected.items():
        logger.debug(
            "Parsed timeline %s from %s: %s",
            name,
            origins[name],
            ", ".join(f"{event.kind.value}@{event.timestamp}" for event in events),
        )
    timelines = {
        name: ContainerTimeline(name=name, events=tuple(events)) for name, events in collected.items()
    }
    return ResultSet(timelines)


def _check_order(timeline: list[Event], event: Event, source: str, line_no: int) -> None:
    if not timeline:
        return
    previous = timeline[-1]
    name = event.container_name
    if event.timestamp <= previous.timestamp:
        raise ParseError(
            name,
            f"timestamps out of order for {name} in output of {source}: "
            f"{event.kind.value}@{event.timestamp} follows "
            f"{previous.kind.value}@{previous.timestamp}",
            line_no=line_no,
        )
    if event.kind.rank <= previous.kind.rank:
        raise ParseError(
            name,
            f"illegal lifecycle transition for {name} in output of {source}: "
            f"{previous.kind.value} -> {event.kind.value}",
            line_no=line_no,
        )
