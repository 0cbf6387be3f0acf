"""Telnet automation package.

This package provides an asynchronous telnet client for scripting network devices
and other hosts that still speak telnet. It answers option negotiation inline,
keeps a buffer of everything received, and offers expect-style helpers to wait for
text, log in and capture command output through interactive pagers.

A small command line tool built on the client runs commands on a device and
prints or saves their output.
"""

from __future__ import annotations

from importlib.metadata import version

from .cli import (
    complete_progress,
    console,
    create_progress,
    log,
    parse_args,
    update_progress,
)
from .clients.telnet import (
    AsyncTelnetClient,
    AuthenticationError,
    TelnetConnectionError,
    TelnetError,
    TelnetSession,
    TelnetTimeoutError,
)

__all__ = [
    "AsyncTelnetClient",
    "AuthenticationError",
    "TelnetConnectionError",
    "TelnetError",
    "TelnetSession",
    "TelnetTimeoutError",
    "complete_progress",
    "console",
    "create_progress",
    "log",
    "parse_args",
    "update_progress",
]

__version__ = version("telnet-tools")
