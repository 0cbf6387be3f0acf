"""Telnet client exceptions.

The concrete errors also derive from the matching builtin so callers can catch
``ConnectionError`` or ``TimeoutError`` without importing this module.
"""

from __future__ import annotations


class TelnetError(Exception):
    """Base class for every error raised by the telnet client."""


class TelnetConnectionError(TelnetError, ConnectionError):
    """No open stream, or a read/write on the stream failed."""


class TelnetTimeoutError(TelnetError, TimeoutError):
    """A pattern or prompt was not seen within the allowed time."""


class AuthenticationError(TelnetError):
    """The login sequence failed or the device reported a login failure."""
