"""
Custom exception classes.

Represent failures of the lifecycle timeline engine and of the
collaborators that feed it captured output.
"""

from __future__ import annotations

from typing import Any


class TimelineError(Exception):
    """Base exception class for the timeline engine."""

    pass


class ParseError(TimelineError):
    """Raised when captured output cannot be turned into a timeline."""

    def __init__(self, container_name: str, reason: str, *, line_no: int | None = None):
        self.container_name = container_name
        self.reason = reason
        self.line_no = line_no
        location = f" (line {line_no})" if line_no is not None else ""
        super().__init__(f"{reason}{location}")


class UnknownContainerError(TimelineError, KeyError):
    """Raised when a result set has no timeline for the requested name."""

    def __init__(self, container_name: str):
        self.container_name = container_name
        super().__init__(f"no output recorded for container {container_name}")

    def __str__(self) -> str:
        return self.args[0]


class TimelineAssertionError(AssertionError):
    """A well-formed result set did not satisfy a relational check.

    ``details`` keeps the compared values (timestamps, intervals, exit
    codes) so a failure can be read without re-running the workload.
    """

    def __init__(self, check: str, message: str, **details: Any):
        self.check = check
        self.message = message
        self.details = details
        super().__init__(message)


class CollaboratorError(TimelineError):
    """Raised by an output source when the workload is not in a readable state."""

    pass


class WorkloadStillRunningError(CollaboratorError):
    """Raised when output is requested for a container that has not stopped."""

    def __init__(self, container_name: str, status: str):
        self.container_name = container_name
        self.status = status
        super().__init__(
            f"Container {container_name} is still {status}; output is only read after it stops"
        )
