from lifecycle_timeline.assertions import collect_failures, expect_no_error
from lifecycle_timeline.command import ExecParams, exec_command
from lifecycle_timeline.events import (
    POST_START_PREFIX,
    PRE_STOP_PREFIX,
    Event,
    EventKind,
    prefixed_name,
)
from lifecycle_timeline.exceptions import (
    CollaboratorError,
    ParseError,
    TimelineAssertionError,
    TimelineError,
    UnknownContainerError,
    WorkloadStillRunningError,
)
from lifecycle_timeline.narration import Narrator
from lifecycle_timeline.parser import parse_output
from lifecycle_timeline.results import ContainerTimeline, ResultSet

__all__ = [
    "POST_START_PREFIX",
    "PRE_STOP_PREFIX",
    "CollaboratorError",
    "ContainerTimeline",
    "Event",
    "EventKind",
    "ExecParams",
    "Narrator",
    "ParseError",
    "ResultSet",
    "TimelineAssertionError",
    "TimelineError",
    "UnknownContainerError",
    "WorkloadStillRunningError",
    "collect_failures",
    "exec_command",
    "expect_no_error",
    "parse_output",
    "prefixed_name",
]
