"""Command line argument parser for telnet tools.

The parser is built from the ``CLI_ARGUMENTS`` table so the argument groups and
their defaults live in one place.
"""

from __future__ import annotations

from argparse import (
    ArgumentParser,
    Namespace as Arguments,
    RawDescriptionHelpFormatter as Formatter,
)
from sys import argv as sys_argv, exit as sys_exit

from telnet_tools.constants import (
    CLI_ARGUMENTS,
    CLI_HELP_DESCRIPTION,
    CLI_HELP_EPILOGUE,
    CLI_HELP_NAME,
    MAX_PORT,
    MIN_PORT,
)

from .console import set_verbosity


def build_parser() -> ArgumentParser:
    """Create the argument parser with every argument group.

    Returns:
        Configured ArgumentParser instance
    """
    parser = ArgumentParser(
        description=CLI_HELP_DESCRIPTION,
        epilog=CLI_HELP_EPILOGUE,
        prog=CLI_HELP_NAME,
        formatter_class=Formatter,
    )
    for category_name, args in CLI_ARGUMENTS.items():
        category = parser.add_argument_group(category_name)
        for flags, kwargs in args:
            category.add_argument(*flags, **kwargs)
    return parser


def parse_args(argv: list[str] | None = None) -> Arguments:
    """Parse command line arguments and apply the requested verbosity.

    Args:
        argv: Arguments to parse, defaults to those the program was started with

    Returns:
        The parsed arguments
    """
    parser = build_parser()
    if argv is None:
        argv = sys_argv[1:]

    # Show help rather than an error when run without arguments
    if not argv:
        parser.print_help()
        sys_exit(0)

    parsed_args = parser.parse_args(argv)
    if not MIN_PORT <= parsed_args.port <= MAX_PORT:
        parser.error(f"port must be between {MIN_PORT} and {MAX_PORT}")
    if parsed_args.read_timeout >= parsed_args.max_wait:
        parser.error("--read-timeout must be shorter than --max-wait")

    set_verbosity(parsed_args.verbose)
    return parsed_args
