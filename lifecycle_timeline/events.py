# Where: lifecycle_timeline/events.py
# What: Lifecycle event kinds, the event record and its wire-line grammar.
# Why: Provide a stable contract between the emitting shell and the parser.
from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from lifecycle_timeline.exceptions import ParseError

PRE_STOP_PREFIX = "PreStop"
POST_START_PREFIX = "PostStart"

FIELD_DELIMITER = "|"

_NAME_PATTERN = r"[A-Za-z0-9][A-Za-z0-9._-]*"
NAME_RE = re.compile(rf"^{_NAME_PATTERN}$")
_LINE_RE = re.compile(
    rf"^\s*(?P<name>{_NAME_PATTERN})\s*\|\s*(?P<kind>[A-Za-z]+)\s*\|\s*(?P<ts>\d+)"
    r"\s*(?:\|\s*(?P<code>-?\d+)\s*)?$"
)


class EventKind(enum.Enum):
    STARTED = "Started"
    HOOK_START = "HookStart"
    HOOK_END = "HookEnd"
    EXITED = "Exited"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @classmethod
    def from_wire(cls, value: str) -> EventKind | None:
        try:
            return cls(value)
        except ValueError:
            return None


_RANKS = {
    EventKind.STARTED: 0,
    EventKind.HOOK_START: 1,
    EventKind.HOOK_END: 2,
    EventKind.EXITED: 3,
}


@dataclass(frozen=True)
class Event:
    container_name: str
    kind: EventKind
    timestamp: int
    exit_code: int | None = None


def prefixed_name(prefix: str, name: str) -> str:
    return f"{prefix}-{name}"


def validate_name(name: str) -> str:
    if not NAME_RE.fullmatch(name):
        raise ValueError(f"Invalid container name: {name!r}")
    return name


def format_event(event: Event) -> str:
    fields = [event.container_name, event.kind.value, str(event.timestamp)]
    if event.exit_code is not None:
        fields.append(str(event.exit_code))
    return f" {FIELD_DELIMITER} ".join(fields)


def parse_event_line(line: str, *, source: str = "", line_no: int | None = None) -> Event | None:
    """Parse one captured line.

    Returns None for lines that are not event lines (framework noise,
    probe output, unknown kinds). Raises ParseError for lines that have
    the event shape but break the exit-code payload rule.
    """
    match = _LINE_RE.match(line.rstrip("\r\n"))
    if not match:
        return None
    kind = EventKind.from_wire(match.group("kind"))
    if kind is None:
        return None

    name = match.group("name")
    raw_code = match.group("code")
    if kind is EventKind.EXITED and raw_code is None:
        raise ParseError(
            source or name, f"Exited event for {name} has no exit code", line_no=line_no
        )
    if kind is not EventKind.EXITED and raw_code is not None:
        raise ParseError(
            source or name,
            f"{kind.value} event for {name} carries an exit code",
            line_no=line_no,
        )
    return Event(
        container_name=name,
        kind=kind,
        timestamp=int(match.group("ts")),
        exit_code=int(raw_code) if raw_code is not None else None,
    )
