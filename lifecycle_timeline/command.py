# Where: lifecycle_timeline/command.py
# What: Build shell commands that emit lifecycle event lines.
# Why: Keep command construction pure so tests can inspect exact tokens.
from __future__ import annotations

import shlex
from dataclasses import dataclass

from lifecycle_timeline.config import config
from lifecycle_timeline.events import EventKind, prefixed_name, validate_name


@dataclass(frozen=True)
class ExecParams:
    delay_seconds: int = 0
    termination_seconds: int = 0
    exit_code: int = 0
    dependent_container_name: str | None = None
    start_delay_seconds: int = 0

    @property
    def is_hook(self) -> bool:
        return self.dependent_container_name is not None


def event_tag(name: str, params: ExecParams) -> str:
    """Return the name written on every event line the command emits.

    Hook commands are tagged "<hook>-<container>"; a name that already
    carries the dependent container suffix is used unchanged.
    """
    validate_name(name)
    dependent = params.dependent_container_name
    if dependent is None:
        return name
    validate_name(dependent)
    if name.endswith(f"-{dependent}"):
        return name
    return prefixed_name(name, dependent)


def exec_command(
    name: str,
    params: ExecParams,
    *,
    shell: str | None = None,
    clock_source: str | None = None,
    hook_output: str | None = None,
) -> list[str]:
    _validate_params(params)
    tag = event_tag(name, params)
    clock = clock_source or config.TIMELINE_CLOCK_SOURCE

    lines = _prelude(tag, clock)
    if params.is_hook:
        lines.extend(_hook_body(params, hook_output or config.TIMELINE_HOOK_OUTPUT))
    else:
        lines.extend(_container_body(params))
    return [shell or config.TIMELINE_SHELL, "-c", "\n".join(lines)]


def _validate_params(params: ExecParams) -> None:
    for field_name in ("delay_seconds", "termination_seconds", "start_delay_seconds"):
        value = getattr(params, field_name)
        if value < 0:
            raise ValueError(f"{field_name} must be >= 0, got {value}")
    if not 0 <= params.exit_code <= 255:
        raise ValueError(f"exit_code must be within 0..255, got {params.exit_code}")


def _prelude(tag: str, clock: str) -> list[str]:
    # Hundredths of a second since boot; bumped by one when the clock has not advanced.
    return [
        "_last=0",
        "_ts() { "
        f"_now=$(awk '{{ printf \"%.0f\", $1 * 100 }}' {shlex.quote(clock)}); "
        'if [ "$_now" -le "$_last" ]; then _now=$((_last + 1)); fi; '
        "_last=$_now; }",
        "_emit() { _ts; "
        f'if [ -n "$2" ]; then echo "{tag} | $1 | $_last | $2"; '
        f'else echo "{tag} | $1 | $_last"; fi; }}',
    ]


def _container_body(params: ExecParams) -> list[str]:
    code = params.exit_code
    exited = EventKind.EXITED.value
    body = [
        "_term() { kill $! 2>/dev/null; "
        f"sleep {params.termination_seconds}; _emit {exited} {code}; exit {code}; }}",
        "trap _term TERM",
    ]
    if params.start_delay_seconds:
        body.append(f"sleep {params.start_delay_seconds} & wait $!")
    body.extend(
        [
            f"_emit {EventKind.STARTED.value}",
            f"sleep {params.delay_seconds} & wait $!",
            f"_emit {exited} {code}",
            f"exit {code}",
        ]
    )
    return body


def _hook_body(params: ExecParams, hook_output: str) -> list[str]:
    target = shlex.quote(hook_output)
    body = []
    if params.start_delay_seconds:
        body.append(f"sleep {params.start_delay_seconds}")
    body.extend(
        [
            f"_emit {EventKind.HOOK_START.value} >> {target}",
            f"sleep {params.delay_seconds}",
            f"_emit {EventKind.HOOK_END.value} >> {target}",
            f"exit {params.exit_code}",
        ]
    )
    return body
