"""Constants for telnet tools."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Telnet session defaults

DEFAULT_PORT = 23
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 1.0  # Must stay below DEFAULT_MAX_WAIT
DEFAULT_MAX_WAIT = 10.0
DEFAULT_TERMINAL_TYPE = "xterm"
MIN_PORT = 1
MAX_PORT = 65535

# CLI constants

CLI_ARGUMENTS: dict[str, list[tuple[Any]]] = {
    "connection": [
        (["-H", "--host"], {"help": "Device hostname or IP address", "required": True}),
        (["-p", "--port"], {"type": int, "default": DEFAULT_PORT, "metavar": f"<{DEFAULT_PORT}>"}),
        (
            ["-t", "--timeout"],
            {
                "help": "Connection timeout in seconds",
                "type": float,
                "default": DEFAULT_CONNECT_TIMEOUT,
                "metavar": f"<{DEFAULT_CONNECT_TIMEOUT:g}>",
            },
        ),
        (
            ["-r", "--read-timeout"],
            {
                "help": "Seconds a single read may block",
                "type": float,
                "default": DEFAULT_READ_TIMEOUT,
                "metavar": f"<{DEFAULT_READ_TIMEOUT:g}>",
            },
        ),
        (
            ["--terminal-type"],
            {"default": DEFAULT_TERMINAL_TYPE, "metavar": f"<{DEFAULT_TERMINAL_TYPE}>"},
        ),
        (["--no-negotiation"], {"help": "Treat all received bytes as data", "action": "store_true"}),
    ],
    "session": [
        (["-u", "--username"], {"help": "Log in with this username"}),
        (["-P", "--password"], {"help": "Password for --username", "default": ""}),
        (["--prompt"], {"help": "Prompt to expect instead of the one learnt at login"}),
        (["-c", "--command"], {"help": "Command to run (repeatable)", "action": "append", "default": []}),
        (
            ["-w", "--max-wait"],
            {
                "help": "Seconds to wait for each prompt",
                "type": float,
                "default": DEFAULT_MAX_WAIT,
                "metavar": f"<{DEFAULT_MAX_WAIT:g}>",
            },
        ),
    ],
    "files": [
        (["-i", "--input"], {"help": "File with commands to run", "type": Path}),
        (
            ["-if", "--input-format"],
            {"choices": ["csv", "json", "txt", "xlsx"], "default": "txt", "metavar": "csv|json|<txt>|xlsx"},
        ),
        (["-o", "--output"], {"help": "Output file path (default: stdout)", "type": Path}),
        (
            ["-of", "--output-format"],
            {"choices": ["csv", "json", "plain", "xlsx"], "default": "plain", "metavar": "csv|json|<plain>|xlsx"},
        ),
    ],
    "logging": [
        (["-v", "--verbose"], {"help": "Repeat for more detail", "action": "count", "default": 0}),
    ],
}
CLI_HELP_DESCRIPTION: str = """Telnet tools: log in to devices over telnet and capture command output.

Connects to a single device, optionally logs in, then runs each command
given with --command or listed in an --input file, paging through any
"--More--" prompts, and prints or saves what each command returned.
"""
CLI_HELP_EPILOGUE: str | None = "If an argument has a default, it's shown in <parentheses>."
CLI_HELP_NAME: str = "telnet_tools"
