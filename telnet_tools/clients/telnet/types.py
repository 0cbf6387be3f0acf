"""Telnet protocol types module."""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple

IAC_BYTE = 0xFF  # Interpret As Command byte


class TelnetCommand(IntEnum):
    """Telnet protocol commands."""

    IAC = 255  # Interpret As Command
    DONT = 254
    DO = 253
    WONT = 252
    WILL = 251
    SB = 250  # Subnegotiation Begin
    GA = 249  # Go Ahead (as a command, not the option)
    NOP = 241
    SE = 240  # Subnegotiation End

    @classmethod
    def is_negotiation(cls, cmd: int) -> bool:
        """Check if a command byte is a negotiation command.

        Returns:
            True if the command is a negotiation command, False otherwise
        """
        return cmd in {cls.DO, cls.DONT, cls.WILL, cls.WONT}


class TelnetOption(IntEnum):
    """Telnet protocol options."""

    BINARY = 0
    ECHO = 1
    GA = 3  # Suppress Go Ahead
    STATUS = 5
    TERMINAL_TYPE = 24
    NAWS = 31  # Negotiate About Window Size
    TERMINAL_SPEED = 32
    REMOTE_FLOW = 33
    LINEMODE = 34
    XDISPLOC = 35  # X Display Location
    NEW_ENVIRON = 39

    @classmethod
    def name_of(cls, option: int) -> str:
        """Describe an option byte for log output.

        Returns:
            The option name, or its numeric value when unknown
        """
        try:
            return cls(option).name
        except ValueError:
            return str(option)


# Subnegotiation payload qualifiers (RFC 1091 and friends)
SUBNEG_IS = 0
SUBNEG_SEND = 1

# Closes a subnegotiation span
SUBNEG_END = bytes([TelnetCommand.IAC, TelnetCommand.SE])


class TelnetSequence(NamedTuple):
    """Represents a complete telnet command sequence."""

    command: int
    option: int = 0
    data: bytes = b""

    def __bytes__(self) -> bytes:
        """Serialise the sequence in wire format."""
        if self.command == TelnetCommand.SB:
            return self.create_subnegotiation(self.option, self.data)
        return self.create_command(self.command, self.option)

    @classmethod
    def create_command(cls, command: int, option: int) -> bytes:
        """Create a simple telnet command sequence.

        Returns:
            The created command sequence
        """
        return bytes([TelnetCommand.IAC, command, option])

    @classmethod
    def create_subnegotiation(cls, option: int, data: bytes) -> bytes:
        """Create a telnet subnegotiation sequence.

        Returns:
            The created subnegotiation sequence
        """
        result = bytearray([TelnetCommand.IAC, TelnetCommand.SB, option])
        result.extend(data)
        result.extend([TelnetCommand.IAC, TelnetCommand.SE])
        return bytes(result)
