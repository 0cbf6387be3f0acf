"""Shared fixtures and stream doubles for the telnet tests."""

from __future__ import annotations

from asyncio import sleep as asyncio_sleep
from typing import TYPE_CHECKING, Any, TypeAlias

import pytest

from telnet_tools.clients.telnet import TelnetSession

if TYPE_CHECKING:
    from collections.abc import Callable

IAC = 255
DONT = 254
DO = 253
WONT = 252
WILL = 251
SB = 250
SE = 240

# One scripted step: bytes sent straight away, or (trigger, bytes) sent once the
# client has written the trigger
ScriptStep: TypeAlias = bytes | tuple[bytes, bytes]


class MockStreamWriter:
    """Mock StreamWriter for testing."""

    def __init__(self) -> None:
        """Initialise with empty write buffer."""
        self.written_data: list[bytes] = []
        self.closed = False

    def write(self, data: bytes) -> None:
        """Store written data in buffer."""
        self.written_data.append(bytes(data))

    async def drain(self) -> None:
        """Mock drain operation."""

    def close(self) -> None:
        """Mark writer as closed."""
        self.closed = True

    async def wait_closed(self) -> None:
        """Mock wait_closed operation."""


class MockStreamReader:
    """Mock StreamReader replaying a scripted server.

    Steps are released in order. A gated step waits until the client has written
    its trigger since the previous step was released; until then reads block, so
    the client's read timeout fires. Once the script is used up the stream ends.
    """

    def __init__(self, script: list[ScriptStep], writer: MockStreamWriter) -> None:
        """Initialise with the script and the writer the client sends to."""
        self.steps = list(script)
        self.writer = writer
        self.pending = bytearray()
        self.write_mark = 0

    def _release(self) -> None:
        while not self.pending and self.steps:
            step = self.steps[0]
            if isinstance(step, tuple):
                trigger, data = step
                written = b"".join(self.writer.written_data[self.write_mark :])
                if trigger not in written:
                    return
            else:
                data = step
            self.steps.pop(0)
            self.write_mark = len(self.writer.written_data)
            self.pending.extend(data)

    async def read(self, size: int) -> bytes:
        """Return up to size scripted bytes, block while gated, or signal EOF."""
        self._release()
        if self.pending:
            data = bytes(self.pending[:size])
            del self.pending[:size]
            return data
        if self.steps:
            await asyncio_sleep(3600)
        return b""


def telnet_bytes(*values: int) -> bytes:
    """Build a raw telnet byte sequence."""
    return bytes(values)


@pytest.fixture
def make_session() -> Callable[..., TelnetSession]:
    """Fixture providing a factory for sessions wired to a scripted server."""

    def _make(script: list[ScriptStep], **kwargs: Any) -> TelnetSession:
        kwargs.setdefault("read_timeout", 0.05)
        kwargs.setdefault("display_host", "client.example.com")
        session = TelnetSession(host="test.example.com", port=23, **kwargs)
        writer = MockStreamWriter()
        session.writer = writer
        session.reader = MockStreamReader(script, writer)
        return session

    return _make
