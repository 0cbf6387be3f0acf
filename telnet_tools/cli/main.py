"""Main entry point for telnet tools CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from telnet_tools.clients.telnet import TelnetError, TelnetSession

from .args import parse_args
from .console import complete_progress, console, create_progress, log, update_progress
from .files import FileReader, FileWriter

if TYPE_CHECKING:
    from argparse import Namespace as Arguments


async def run_commands(args: Arguments, commands: list[str]) -> list[dict[str, str]]:
    """Log in to the device and capture the output of each command.

    Returns:
        One result per command with the host, command and output
    """
    session = TelnetSession(
        host=args.host,
        port=args.port,
        connect_timeout=args.timeout,
        read_timeout=args.read_timeout,
        terminal_type=args.terminal_type,
        negotiation=not args.no_negotiation,
    )
    results: list[dict[str, str]] = []
    async with session:
        if args.username:
            await session.login(args.username, args.password, max_wait=args.max_wait)
        if args.prompt:
            session.prompt = args.prompt

        task_id = create_progress(f"Running commands on {args.host}", total=len(commands))
        try:
            for command in commands:
                update_progress(task_id, description=f"{args.host}: {command}")
                output = await session.get_output_of(command, max_wait=args.max_wait)
                results.append({"host": args.host, "command": command, "output": output.replace("\r", "\n")})
                update_progress(task_id, advance=1)
        finally:
            complete_progress(task_id, description=f"Finished commands on {args.host}")
    return results


async def main() -> int:
    """Main entry point for telnet tools CLI.

    Returns:
        Process exit status
    """
    args = parse_args()
    commands = list(args.command)
    if args.input:
        commands.extend(FileReader(args.input, args.input_format).data)
    if not commands:
        log.warning("No commands given, nothing to do")
        return 0

    try:
        results = await run_commands(args, commands)
    except (TelnetError, ValueError) as exc:
        log.error("%s: %s", args.host, exc)  # noqa: TRY400
        return 1

    if args.output:
        FileWriter(args.output, args.output_format, results)
        log.info("Wrote %d results to %s", len(results), args.output)
    else:
        for result in results:
            console.rule(f"{result['host']}: {result['command']}")
            console.print(result["output"], markup=False, highlight=False)
    return 0
