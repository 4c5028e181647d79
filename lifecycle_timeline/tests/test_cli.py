# Where: lifecycle_timeline/tests/test_cli.py
# What: Unit tests for the lifecycle-timeline command line.
from __future__ import annotations

import argparse
import json

import pytest

from lifecycle_timeline import cli


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)


def _write_logs(tmp_path) -> None:
    (tmp_path / "regular-1.log").write_text(
        "regular-1 | Started | 0\n"
        "PreStop-regular-1 | HookStart | 100\n"
        "PreStop-regular-1 | HookEnd | 101\n"
        "regular-1 | Exited | 120 | 0\n",
        encoding="utf-8",
    )


def test_command_prints_json_tokens(capsys) -> None:
    rc = cli.main(["command", "PreStop", "--delay", "1", "--container-name", "regular-1"])

    tokens = json.loads(capsys.readouterr().out)
    assert rc == cli.EXIT_OK
    assert tokens[1] == "-c"
    assert "PreStop-regular-1 | $1 | $_last" in tokens[2]


def test_command_rejects_bad_exit_code(capsys) -> None:
    rc = cli.main(["command", "regular-1", "--exit-code", "300"])

    assert rc == cli.EXIT_PARSE_ERROR
    assert "exit_code" in capsys.readouterr().err


def test_verify_passes_all_checks(tmp_path, capsys) -> None:
    _write_logs(tmp_path)

    rc = cli.main(
        [
            "verify",
            "--logs-dir",
            str(tmp_path),
            "--container",
            "regular-1",
            "--check",
            "run-together:regular-1:PreStop-regular-1",
            "--check",
            "starts:PreStop-regular-1",
            "--check",
            "exits:regular-1:0",
        ]
    )

    out = capsys.readouterr().out
    assert rc == cli.EXIT_OK
    assert "[verify]   ok      run-together:regular-1:PreStop-regular-1" in out
    assert "All 3 checks passed" in out


def test_verify_reports_every_failure(tmp_path, capsys) -> None:
    _write_logs(tmp_path)

    rc = cli.main(
        [
            "verify",
            "--logs-dir",
            str(tmp_path),
            "--container",
            "regular-1",
            "--check",
            "exits:regular-1:1",
            "--check",
            "starts:ghost",
        ]
    )

    out = capsys.readouterr().out
    assert rc == cli.EXIT_CHECK_FAILED
    assert "exit code mismatch for regular-1: got 0 want 1" in out
    assert "no output recorded for container ghost" in out
    assert "2 of 2 checks failed" in out


def test_verify_reports_parse_errors(tmp_path, capsys) -> None:
    rc = cli.main(["verify", "--logs-dir", str(tmp_path), "--container", "regular-1"])

    assert rc == cli.EXIT_PARSE_ERROR
    assert "no events for container regular-1" in capsys.readouterr().out


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("starts:a", cli.Check("starts", ("a",))),
        ("exits:a", cli.Check("exits", ("a",))),
        ("exits:a:3", cli.Check("exits", ("a", "3"))),
        ("exits-before:a:b", cli.Check("exits-before", ("a", "b"))),
    ],
)
def test_parse_check(raw: str, expected: cli.Check) -> None:
    assert cli.parse_check(raw) == expected
    assert str(expected) == raw


@pytest.mark.parametrize("raw", ["bogus:a", "starts", "run-together:a", "exits:a:x", "starts:a:b"])
def test_parse_check_rejects_malformed(raw: str) -> None:
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_check(raw)


def test_verify_reads_docker_with_default_wait(monkeypatch, capsys) -> None:
    created: list[int | None] = []

    class _FakeDockerSource:
        def __init__(self, client=None, *, wait_timeout=None):
            created.append(wait_timeout)

        def fetch(self, names):
            return {name: f"{name} | Started | 1\n{name} | Exited | 2 | 0\n" for name in names}

    monkeypatch.setattr(cli, "DockerOutputSource", _FakeDockerSource)

    rc = cli.main(["verify", "--docker", "--container", "app", "--check", "exits:app:0"])

    assert rc == cli.EXIT_OK
    assert created == [cli.config.DOCKER_WAIT_TIMEOUT]
