# Where: lifecycle_timeline/results.py
# What: Parsed per-container timelines and the read-only result set.
# Why: Give test code one immutable object to run relational checks against.
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

from lifecycle_timeline import assertions
from lifecycle_timeline.events import Event, EventKind, format_event
from lifecycle_timeline.exceptions import TimelineAssertionError, UnknownContainerError


@dataclass(frozen=True)
class ContainerTimeline:
    name: str
    events: tuple[Event, ...]

    def find(self, kind: EventKind) -> Event | None:
        for event in self.events:
            if event.kind is kind:
                return event
        return None

    def has(self, kind: EventKind) -> bool:
        return self.find(kind) is not None

    @property
    def is_hook(self) -> bool:
        """True when the timeline only holds hook events."""
        kinds = {event.kind for event in self.events}
        return bool(kinds) and kinds <= {EventKind.HOOK_START, EventKind.HOOK_END}

    @property
    def start_event(self) -> Event | None:
        if self.is_hook:
            return self.find(EventKind.HOOK_START)
        return self.find(EventKind.STARTED)

    @property
    def end_event(self) -> Event | None:
        if self.is_hook:
            return self.find(EventKind.HOOK_END)
        return self.find(EventKind.EXITED)

    def interval(self) -> tuple[int, int] | None:
        start = self.start_event
        end = self.end_event
        if start is None or end is None:
            return None
        return start.timestamp, end.timestamp

    def to_text(self) -> str:
        return "".join(f"{format_event(event)}\n" for event in self.events)


class ResultSet:
    """Read-only mapping of container name to its parsed timeline."""

    def __init__(self, timelines: Mapping[str, ContainerTimeline]) -> None:
        self._timelines = MappingProxyType(dict(timelines))

    def __getitem__(self, name: str) -> ContainerTimeline:
        try:
            return self._timelines[name]
        except KeyError:
            raise UnknownContainerError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._timelines

    def __iter__(self) -> Iterator[str]:
        return iter(self._timelines)

    def __len__(self) -> int:
        return len(self._timelines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultSet):
            return NotImplemented
        return dict(self._timelines) == dict(other._timelines)

    def __repr__(self) -> str:
        return f"ResultSet({sorted(self._timelines)!r})"

    def get(self, name: str) -> ContainerTimeline | None:
        return self._timelines.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._timelines)

    def to_blobs(self) -> dict[str, str]:
        return {name: timeline.to_text() for name, timeline in self._timelines.items()}

    def starts(self, name: str) -> TimelineAssertionError | None:
        return assertions.starts(self, name)

    def doesnt_start(self, name: str) -> TimelineAssertionError | None:
        return assertions.doesnt_start(self, name)

    def exits(self, name: str, expected_code: int | None = None) -> TimelineAssertionError | None:
        return assertions.exits(self, name, expected_code)

    def run_together(self, name_a: str, name_b: str) -> TimelineAssertionError | None:
        return assertions.run_together(self, name_a, name_b)

    def starts_before(self, name_a: str, name_b: str) -> TimelineAssertionError | None:
        return assertions.starts_before(self, name_a, name_b)

    def exits_before(self, name_a: str, name_b: str) -> TimelineAssertionError | None:
        return assertions.exits_before(self, name_a, name_b)
