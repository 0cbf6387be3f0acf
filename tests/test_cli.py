"""Unit tests for the command line entry point."""

from __future__ import annotations

import json
from asyncio import run as asyncio_run
from logging import DEBUG
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest

from telnet_tools.cli.args import parse_args
from telnet_tools.cli.console import log
from telnet_tools.cli.main import main
from telnet_tools.clients.telnet import TelnetConnectionError

if TYPE_CHECKING:
    from pathlib import Path

RESULTS = [{"host": "router1", "command": "show clock", "output": "12:00:00 UTC\nMon Jan 1"}]


def run_main(argv: list[str], run_commands: AsyncMock) -> int:
    """Patch argument parsing and the device session, then run main()."""
    with (
        patch("telnet_tools.cli.main.parse_args", side_effect=lambda: parse_args(argv)),
        patch("telnet_tools.cli.main.run_commands", run_commands),
    ):
        return asyncio_run(main())


def test_parse_args_defaults() -> None:
    """Test the defaults applied to a minimal command line."""
    args = parse_args(["-H", "router1"])
    if (args.port, args.timeout, args.read_timeout, args.max_wait) != (23, 5.0, 1.0, 10.0):
        pytest.fail(f"Unexpected defaults: {args!r}")
    if args.terminal_type != "xterm" or args.no_negotiation:
        pytest.fail(f"Unexpected negotiation defaults: {args!r}")
    if args.command != [] or args.output_format != "plain":
        pytest.fail(f"Unexpected command defaults: {args!r}")


def test_parse_args_repeated_commands() -> None:
    """Test --command can be given more than once and -v is counted."""
    level = log.level
    try:
        args = parse_args(["-H", "router1", "-c", "show version", "-c", "show clock", "-vv"])
        if args.command != ["show version", "show clock"]:
            pytest.fail(f"Unexpected commands: {args.command!r}")
        if log.level != DEBUG:
            pytest.fail(f"-vv should enable debug logging, level was {log.level}")
    finally:
        log.setLevel(level)


@pytest.mark.parametrize(
    "argv",
    [
        ["-H", "router1", "-p", "0"],
        ["-H", "router1", "-p", "70000"],
        ["-H", "router1", "-r", "10", "-w", "5"],
        ["-p", "23"],
    ],
)
def test_parse_args_rejects(argv: list[str]) -> None:
    """Test invalid command lines exit with a usage error."""
    with pytest.raises(SystemExit) as exc_info:
        parse_args(argv)
    if exc_info.value.code != 2:  # noqa: PLR2004
        pytest.fail(f"Expected usage error exit code 2, got {exc_info.value.code}")


def test_parse_args_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    """Test running with no arguments prints help and exits cleanly."""
    with pytest.raises(SystemExit) as exc_info:
        parse_args([])
    if exc_info.value.code != 0:
        pytest.fail(f"Expected exit code 0, got {exc_info.value.code}")
    if "usage:" not in capsys.readouterr().out:
        pytest.fail("Help text was not printed")


def test_main_without_commands() -> None:
    """Test main does nothing when no command was given."""
    run_commands = AsyncMock(return_value=RESULTS)
    if run_main(["-H", "router1"], run_commands) != 0:
        pytest.fail("main should succeed with nothing to do")
    run_commands.assert_not_awaited()


def test_main_reads_command_file(tmp_path: Path) -> None:
    """Test commands from --command and --input are run together."""
    commands_file = tmp_path / "commands.txt"
    commands_file.write_text("show version\n# skipped\n")
    run_commands = AsyncMock(return_value=RESULTS)

    status = run_main(["-H", "router1", "-c", "show clock", "-i", str(commands_file)], run_commands)
    if status != 0:
        pytest.fail(f"Expected exit status 0, got {status}")
    commands = run_commands.await_args.args[1]
    if commands != ["show clock", "show version"]:
        pytest.fail(f"Unexpected commands run: {commands!r}")


def test_main_writes_output_file(tmp_path: Path) -> None:
    """Test results are saved in the requested format."""
    output_file = tmp_path / "results.json"
    run_commands = AsyncMock(return_value=RESULTS)

    run_main(["-H", "router1", "-c", "show clock", "-o", str(output_file), "-of", "json"], run_commands)
    if json.loads(output_file.read_text()) != RESULTS:
        pytest.fail(f"Unexpected output file content: {output_file.read_text()!r}")


def test_main_prints_output() -> None:
    """Test results are printed when no output file is given."""
    run_commands = AsyncMock(return_value=RESULTS)

    with patch("telnet_tools.cli.main.console") as mock_console:
        run_main(["-H", "router1", "-c", "show clock"], run_commands)
    mock_console.rule.assert_called_once_with("router1: show clock")
    mock_console.print.assert_called_once_with("12:00:00 UTC\nMon Jan 1", markup=False, highlight=False)


def test_main_reports_telnet_errors() -> None:
    """Test a failed session is logged and gives a non-zero status."""
    run_commands = AsyncMock(side_effect=TelnetConnectionError("Failed to connect to router1:23"))

    with patch("telnet_tools.cli.main.log") as mock_log:
        status = run_main(["-H", "router1", "-c", "show clock"], run_commands)
    if status != 1:
        pytest.fail(f"Expected exit status 1, got {status}")
    if not mock_log.error.called:
        pytest.fail("Failure was not logged")
