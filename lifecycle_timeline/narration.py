# Where: lifecycle_timeline/narration.py
# What: Test name/step/log narration passed in by the caller.
# Why: Report progress without ambient global helpers.
from __future__ import annotations

import logging
from typing import Any, Callable

import yaml

_default_logger = logging.getLogger(__name__)


def make_prefix_printer(label: str, *, width: int = 0) -> Callable[[str], None]:
    formatted = label.ljust(width) if width > 0 else label
    prefix = f"[{formatted}]"

    def _printer(line: str) -> None:
        print(f"{prefix} {line}", flush=True)

    return _printer


class Narrator:
    def __init__(
        self,
        printer: Callable[[str], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._printer = printer
        self._logger = logger or _default_logger
        self._test_name: str | None = None
        self._step_count = 0

    @property
    def current_test(self) -> str | None:
        return self._test_name

    def _emit(self, line: str) -> None:
        self._logger.info(line)
        if self._printer:
            self._printer(line)

    def test_name(self, name: str) -> None:
        self._test_name = name
        self._step_count = 0
        self._emit(f"=== {name}")

    def step(self, text: str) -> None:
        self._step_count += 1
        self._emit(f"STEP {self._step_count}: {text}")

    def log(self, text: str) -> None:
        for line in str(text).splitlines() or [""]:
            self._emit(f"  {line}")

    def describe(self, label: str, data: Any) -> None:
        """Narrate a workload specification as YAML."""
        self._emit(f"{label}:")
        rendered = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
        for line in rendered.rstrip("\n").splitlines():
            self._emit(f"  {line}")
