# Where: lifecycle_timeline/cli.py
# What: Command-line entry for building emitter commands and verifying output.
# Why: Allow timeline checks against logs captured outside of pytest.
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass

from lifecycle_timeline import assertions
from lifecycle_timeline.collector import DirectoryOutputSource, DockerOutputSource, OutputSource
from lifecycle_timeline.command import ExecParams, exec_command
from lifecycle_timeline.config import config
from lifecycle_timeline.exceptions import ParseError, TimelineAssertionError
from lifecycle_timeline.logging_config import setup_logging
from lifecycle_timeline.narration import Narrator, make_prefix_printer
from lifecycle_timeline.parser import parse_output
from lifecycle_timeline.results import ResultSet

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CHECK_FAILED = 1
EXIT_PARSE_ERROR = 2

_ARITY = {
    "starts": (1, 1),
    "doesnt-start": (1, 1),
    "exits": (1, 2),
    "run-together": (2, 2),
    "starts-before": (2, 2),
    "exits-before": (2, 2),
}


@dataclass(frozen=True)
class Check:
    kind: str
    args: tuple[str, ...]

    def __str__(self) -> str:
        return ":".join((self.kind,) + self.args)

    def run(self, results: ResultSet) -> TimelineAssertionError | None:
        if self.kind == "starts":
            return assertions.starts(results, self.args[0])
        if self.kind == "doesnt-start":
            return assertions.doesnt_start(results, self.args[0])
        if self.kind == "exits":
            code = int(self.args[1]) if len(self.args) > 1 else None
            return assertions.exits(results, self.args[0], code)
        if self.kind == "run-together":
            return assertions.run_together(results, *self.args)
        if self.kind == "starts-before":
            return assertions.starts_before(results, *self.args)
        if self.kind == "exits-before":
            return assertions.exits_before(results, *self.args)
        raise ValueError(f"Unknown check: {self.kind}")


def parse_check(raw: str) -> Check:
    kind, _, rest = raw.partition(":")
    arity = _ARITY.get(kind)
    if arity is None:
        choices = ", ".join(sorted(_ARITY))
        raise argparse.ArgumentTypeError(f"unknown check '{kind}' (choose from {choices})")
    args = tuple(part for part in rest.split(":") if part) if rest else ()
    low, high = arity
    if not low <= len(args) <= high:
        raise argparse.ArgumentTypeError(f"check '{kind}' takes {low}..{high} arguments: {raw}")
    if kind == "exits" and len(args) == 2:
        try:
            int(args[1])
        except ValueError:
            raise argparse.ArgumentTypeError(f"exit code must be an integer: {raw}") from None
    return Check(kind=kind, args=args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifecycle-timeline",
        description="Lifecycle event timelines for container hook and probe tests",
    )
    parser.add_argument("--log-level", type=str, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    cmd = sub.add_parser("command", help="Print the emitter command for a container or hook")
    cmd.add_argument("name", help="Container name, or hook prefix when --container-name is set")
    cmd.add_argument("--delay", type=int, default=0, help="Seconds to run (or hook duration)")
    cmd.add_argument(
        "--termination-seconds", type=int, default=0, help="Seconds to linger after TERM"
    )
    cmd.add_argument("--exit-code", type=int, default=0, help="Exit code of the command")
    cmd.add_argument("--start-delay", type=int, default=0, help="Seconds before Started")
    cmd.add_argument(
        "--container-name",
        type=str,
        help="Build a hook command for this container (events tagged <name>-<container>)",
    )

    verify = sub.add_parser("verify", help="Parse captured output and run timeline checks")
    source = verify.add_mutually_exclusive_group(required=True)
    source.add_argument("--logs-dir", type=str, help="Directory holding <container>.log files")
    source.add_argument("--docker", action="store_true", help="Read logs through the Docker API")
    verify.add_argument(
        "--container",
        dest="containers",
        action="append",
        required=True,
        help="Container whose output is read (repeatable)",
    )
    verify.add_argument(
        "--expect",
        action="append",
        help="Container that must have produced events (default: every --container)",
    )
    verify.add_argument(
        "--check",
        dest="checks",
        action="append",
        type=parse_check,
        default=[],
        help="Check such as starts:NAME, exits:NAME[:CODE], run-together:A:B (repeatable)",
    )
    verify.add_argument(
        "--wait-timeout",
        type=int,
        default=None,
        help="Seconds to wait for containers to stop (docker only, default DOCKER_WAIT_TIMEOUT)",
    )
    return parser


def _run_command(args: argparse.Namespace) -> int:
    params = ExecParams(
        delay_seconds=args.delay,
        termination_seconds=args.termination_seconds,
        exit_code=args.exit_code,
        dependent_container_name=args.container_name,
        start_delay_seconds=args.start_delay,
    )
    print(json.dumps(exec_command(args.name, params)))
    return EXIT_OK


def _make_source(args: argparse.Namespace) -> OutputSource:
    if args.docker:
        wait_timeout = args.wait_timeout
        if wait_timeout is None:
            wait_timeout = config.DOCKER_WAIT_TIMEOUT
        return DockerOutputSource(wait_timeout=wait_timeout)
    return DirectoryOutputSource(args.logs_dir)


def _run_verify(args: argparse.Namespace, narrator: Narrator) -> int:
    narrator.test_name("Timeline verification")
    narrator.step(f"Collecting output for {', '.join(args.containers)}")
    blobs = _make_source(args).fetch(args.containers)

    narrator.step("Parsing the test results")
    try:
        results = parse_output(blobs, expected=args.expect)
    except ParseError as e:
        narrator.log(f"PARSE ERROR [{e.container_name}]: {e}")
        return EXIT_PARSE_ERROR
    narrator.log(f"Timelines: {', '.join(results.names) or '(none)'}")

    narrator.step("Analyzing the test results")
    failures = []
    for check in args.checks:
        error = check.run(results)
        if error is None:
            narrator.log(f"ok      {check}")
        else:
            narrator.log(f"failed  {check}: {error}")
            failures.append(error)

    if failures:
        narrator.log(f"{len(failures)} of {len(args.checks)} checks failed")
        return EXIT_CHECK_FAILED
    narrator.log(f"All {len(args.checks)} checks passed")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(config.LOG_CONFIG_PATH, level=args.log_level or config.LOG_LEVEL)

    if args.command == "command":
        try:
            return _run_command(args)
        except ValueError as e:
            print(f"[ERROR] {e}", file=sys.stderr)
            return EXIT_PARSE_ERROR
    narrator = Narrator(make_prefix_printer("verify"))
    return _run_verify(args, narrator)
