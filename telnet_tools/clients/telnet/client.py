"""Asynchronous Telnet client implementation module.

This module provides the connection and byte-level half of the telnet client: it
opens the stream, answers option negotiation inline while reading, and keeps a
session buffer of every application byte received.

All reads go through ``read_byte``, which is the single place where protocol
control bytes are told apart from data. Higher level helpers (``read_line`` and
``read_all``) and the pattern-driven ``TelnetSession`` are built on top of it.
"""

from __future__ import annotations

from asyncio import (
    StreamReader,
    StreamWriter,
    open_connection,
    timeout as asyncio_timeout,
    wait_for as asyncio_wait_for,
)
from dataclasses import dataclass, field
from socket import gethostname
from typing import Any, Self

from telnet_tools.cli import log

from .errors import TelnetConnectionError
from .negotiate import TelnetNegotiator
from .types import IAC_BYTE, SUBNEG_END, TelnetCommand


def _unescape_subnegotiation(data: bytes | bytearray) -> bytes | None:
    """Collapse doubled IAC bytes in a subnegotiation payload.

    Returns:
        The payload up to the closing IAC SE, or None if it has not arrived yet
    """
    payload = bytearray()
    escaped = False
    for byte in data:
        if escaped:
            if byte == TelnetCommand.SE:
                return bytes(payload)
            # IAC IAC inside the payload stands for a single 255
            payload.append(byte)
            escaped = False
        elif byte == IAC_BYTE:
            escaped = True
        else:
            payload.append(byte)
    return None


@dataclass(slots=True)
class AsyncTelnetClient:
    """Telnet client with inline option negotiation and a session buffer.

    This class implements the async context manager protocol for easy use in
    async with statements.

    Examples:
        Basic usage with context manager:

        ```python
        async with AsyncTelnetClient.connect_to("device.example.com", 23) as client:
            await client.send("show version")
            print(await client.read_all())
        ```

        Manual connection management:

        ```python
        client = AsyncTelnetClient("device.example.com", 23)
        try:
            await client.connect()
            line = await client.read_line()
        finally:
            await client.close()
        ```
    """

    host: str
    port: int = field(default=23)
    connect_timeout: float = field(default=5.0)
    read_timeout: float = field(default=1.0)  # Keep below any wait_for/login bound
    reader: StreamReader | None = field(default=None)
    writer: StreamWriter | None = field(default=None)

    # Telnet options
    terminal_type: str = field(default="xterm")
    speed_in: str = field(default="38000")
    speed_out: str = field(default="38000")
    display_host: str = field(default_factory=gethostname)
    negotiation: bool = field(default=True)

    # Application data settings
    terminator: str = field(default="\n")
    encoding: str = field(default="utf-8")

    # Negotiation handler, reading the terminal settings above from this client
    negotiator: TelnetNegotiator = field(init=False, repr=False, compare=False)

    # State of the most recent raw read
    timed_out: bool = field(default=False, init=False)
    at_eof: bool = field(default=False, init=False)

    # Every application byte received since the last clear_buffer()
    _buffer: bytearray = field(default_factory=bytearray, init=False, repr=False)

    # Control sequence bytes received so far when a read timed out part way
    _control: bytearray = field(default_factory=bytearray, init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialise negotiator with our settings."""
        self.negotiator = TelnetNegotiator(settings=self)

    @classmethod
    async def connect_to(cls, host: str, port: int = 23, connect_timeout: float = 5.0, **kwargs: Any) -> Self:
        """Create and connect to a telnet server in one step.

        Args:
            host: The hostname or IP address of the telnet server
            port: The port number of the telnet server
            connect_timeout: Connection timeout in seconds
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            A connected client instance

        Raises:
            TelnetConnectionError: If the connection attempt fails
        """
        client = cls(host=host, port=port, connect_timeout=connect_timeout, **kwargs)
        if not await client.connect():
            msg = f"Failed to connect to {host}:{port}"
            raise TelnetConnectionError(msg)
        return client

    async def __aenter__(self) -> Self:
        """Enter the async context manager, connecting if needed.

        Returns:
            The connected client instance

        Raises:
            TelnetConnectionError: If the connection attempt fails
        """
        if not self.is_connected and not await self.connect():
            msg = f"Failed to connect to {self.host}:{self.port}"
            raise TelnetConnectionError(msg)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Exit the async context manager, closing the connection."""
        await self.close()

    @property
    def is_connected(self) -> bool:
        """Check if the client is currently connected."""
        return self.reader is not None and self.writer is not None

    async def connect(self) -> bool:
        """Establish telnet connection.

        This method opens a connection to the telnet server and, unless
        negotiation is disabled, announces the options we support.

        Returns:
            True if connection was successful, False otherwise.
        """
        if self.is_connected:
            return True

        try:
            async with asyncio_timeout(self.connect_timeout):
                log.info("Connecting with telnet to %s:%d", self.host, self.port)
                self.reader, self.writer = await open_connection(self.host, self.port)

                # Send initial negotiation options
                self.timed_out = self.at_eof = False
                self._control.clear()
                if self.negotiation:
                    await self._write_raw(self.negotiator.get_initial_negotiation())
        except (TimeoutError, ConnectionRefusedError, OSError):
            log.exception("Telnet connection error")
            await self.close()
            return False
        else:
            log.debug("Connected with telnet to %s:%d", self.host, self.port)
            return True

    def disable_negotiation(self) -> Self:
        """Treat every received byte as data, including IAC.

        Returns:
            The client, for chaining
        """
        self.negotiation = False
        return self

    @property
    def buffer(self) -> str:
        """Decoded copy of the session buffer."""
        return self._decode(self._buffer)

    @property
    def raw_buffer(self) -> bytes:
        """Copy of the session buffer as received."""
        return bytes(self._buffer)

    def clear_buffer(self) -> None:
        """Forget all data received so far."""
        self._buffer.clear()

    def _decode(self, data: bytes | bytearray) -> str:
        return bytes(data).decode(self.encoding, errors="replace")

    async def _read_raw(self) -> bytes:
        """Read one byte straight from the stream.

        Returns:
            The byte, or empty bytes when the stream ended or the read timed out

        Raises:
            TelnetConnectionError: If there is no stream or reading from it fails
        """
        if not self.reader:
            msg = "Connection gone"
            raise TelnetConnectionError(msg)

        try:
            data = await asyncio_wait_for(self.reader.read(1), timeout=self.read_timeout)
        except TimeoutError:
            self.timed_out = True
            return b""
        except OSError as exc:
            msg = f"Error while reading from {self.host}:{self.port}"
            raise TelnetConnectionError(msg) from exc

        self.timed_out = False
        if not data:
            self.at_eof = True
        return data

    async def read_byte(self) -> bytes | None:
        """Read one byte of application data.

        A control sequence cut off by a read timeout is kept and finished on the
        next call, so its remaining bytes are never mistaken for data.

        Returns:
            The byte read; empty bytes when a control sequence was consumed instead
            (keep reading); None when nothing arrived, either because the stream
            ended (``at_eof``) or the read timed out (``timed_out``).

        Raises:
            TelnetConnectionError: If there is no stream or reading from it fails
        """
        if not self._control:
            char = await self._read_raw()
            if not char:
                return None
            if char[0] != IAC_BYTE or not self.negotiation:
                self._buffer.extend(char)
                return char
            self._control.extend(char)

        char = await self._negotiate()
        if char:
            self._buffer.extend(char)
        return char

    async def _negotiate(self) -> bytes | None:
        """Read the rest of the control sequence held in ``_control`` and act on it.

        Returns:
            A literal IAC data byte for an escaped IAC IAC, empty bytes once any
            other sequence is handled, None if the stream ended or went quiet first

        Raises:
            TelnetConnectionError: If reading fails or a reply cannot be sent
        """
        sequence = self._control
        while True:
            char = await self._read_raw()
            if not char:
                return None
            sequence.extend(char)

            match sequence[1]:
                case TelnetCommand.IAC:
                    sequence.clear()
                    return char
                case TelnetCommand.SB:
                    if len(sequence) < 5 or sequence[-2:] != SUBNEG_END:  # noqa: PLR2004
                        continue
                    payload = _unescape_subnegotiation(sequence[3:])
                    if payload is None:
                        continue
                    reply = self.negotiator.handle_subnegotiation(sequence[2], payload)
                case verb if TelnetCommand.is_negotiation(verb):
                    if len(sequence) < 3:  # noqa: PLR2004
                        continue
                    reply = self.negotiator.handle_negotiation(verb, sequence[2])
                case verb:
                    log.debug("Ignoring telnet command %d", verb)
                    reply = b""

            sequence.clear()
            if reply:
                await self._write_raw(reply)
            return b""

    async def read_line(self, delimiter: str = "\n") -> str:
        """Read until the delimiter has been received.

        Args:
            delimiter: Text that ends a line

        Returns:
            The line including the delimiter, or whatever was collected when the
            stream ended or went quiet (possibly an empty string)
        """
        wanted = delimiter.encode(self.encoding)
        line = bytearray()
        while not self.at_eof:
            char = await self.read_byte()
            if char is None:
                break
            line.extend(char)
            if wanted in line:
                break
        return self._decode(line)

    async def read_all(self) -> str:
        """Read everything the server sends until it ends or goes quiet.

        Returns:
            All data read
        """
        data = bytearray()
        while (char := await self.read_byte()) is not None:
            data.extend(char)
        return self._decode(data)

    async def _write_raw(self, data: bytes) -> None:
        """Write bytes to the stream as they are.

        Raises:
            TelnetConnectionError: If there is no stream or the write fails
        """
        if not self.writer:
            msg = "Connection unexpectedly closed"
            raise TelnetConnectionError(msg)

        try:
            self.writer.write(data)
            await self.writer.drain()
        except OSError as exc:
            msg = f"Error while sending data to {self.host}:{self.port}"
            raise TelnetConnectionError(msg) from exc

    async def write(self, data: bytes) -> None:
        """Write application data, doubling any IAC bytes it contains."""
        if IAC_BYTE in data:
            data = data.replace(bytes([IAC_BYTE]), bytes([IAC_BYTE, IAC_BYTE]))
        await self._write_raw(data)

    async def send(self, data: str | bytes, add_terminator: bool = True) -> None:
        """Send text or bytes to the telnet device.

        Args:
            data: The text or bytes to send
            add_terminator: Append the configured line terminator
        """
        if isinstance(data, str):
            data = data.encode(self.encoding)
        if add_terminator:
            data += self.terminator.encode(self.encoding)
        await self.write(data)

    async def close(self) -> None:
        """Close telnet connection, safe to call any number of times."""
        if self.writer:
            try:
                self.writer.close()
                await self.writer.wait_closed()
            except Exception:
                log.exception("Error closing telnet connection")
            finally:
                self.writer = None
                log.debug("Closed telnet connection to %s:%d", self.host, self.port)
        # A reader can outlive its writer when the stream was wired up by hand
        self.reader = None
