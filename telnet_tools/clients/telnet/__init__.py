"""Telnet Client Module.

This module provides an asyncio-based implementation of the Telnet protocol for
scripting legacy devices that still use telnet: inline option negotiation, a
session buffer, and expect-style helpers for logging in and capturing command
output.

Example usage:
    ```python
    import asyncio
    from telnet_tools.clients.telnet import TelnetSession

    async def main():
        async with TelnetSession(host="device.example.com") as session:
            await session.login("admin", "secret")
            print(await session.get_output_of("show version"))

    asyncio.run(main())
    ```
"""

from __future__ import annotations

from .client import AsyncTelnetClient
from .errors import AuthenticationError, TelnetConnectionError, TelnetError, TelnetTimeoutError
from .negotiate import TelnetNegotiator
from .session import TelnetSession

__all__ = [
    "AsyncTelnetClient",
    "AuthenticationError",
    "TelnetConnectionError",
    "TelnetError",
    "TelnetNegotiator",
    "TelnetSession",
    "TelnetTimeoutError",
]
