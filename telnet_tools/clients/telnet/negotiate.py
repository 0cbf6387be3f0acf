"""Telnet protocol negotiation helper class."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from telnet_tools.cli import log

from .types import SUBNEG_SEND, TelnetCommand, TelnetOption, TelnetSequence

if TYPE_CHECKING:
    from collections.abc import Callable


class TerminalSettings(Protocol):
    """Terminal details reported to the server, read fresh for every reply."""

    terminal_type: str
    speed_in: str
    speed_out: str
    display_host: str


@dataclass(slots=True)
class TelnetNegotiator:
    """Decide how to answer the option requests a telnet server sends us.

    The negotiator never touches the stream itself: the client reads the verb and
    option bytes, hands them over here, and writes back whatever reply bytes are
    returned (an empty result means "stay silent").
    """

    # Usually the client itself, so later changes to its fields take effect
    settings: TerminalSettings

    # Options the server asked us to use (DO/DONT) and offered itself (WILL/WONT)
    requested: dict[int, bool] = field(default_factory=dict)
    offered: dict[int, bool] = field(default_factory=dict)

    # Subnegotiation payload builders by option code
    _option_handlers: dict[int, Callable[[], str]] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        """Initialise option handlers."""
        self._option_handlers[TelnetOption.TERMINAL_TYPE] = self._terminal_type
        self._option_handlers[TelnetOption.XDISPLOC] = self._display_location
        self._option_handlers[TelnetOption.NEW_ENVIRON] = self._environment
        self._option_handlers[TelnetOption.TERMINAL_SPEED] = self._terminal_speed

    def handle_negotiation(self, cmd: int, option: int) -> bytes:
        """Process a single DO/DONT/WILL/WONT request.

        Args:
            cmd: The telnet command (DO/DONT/WILL/WONT)
            option: The option being negotiated

        Returns:
            The reply to send to the server, empty when no reply is due
        """
        log.debug("Received %s %s", TelnetCommand(cmd).name, TelnetOption.name_of(option))
        match cmd:
            case TelnetCommand.DO:
                self.requested[option] = True
                return self._handle_do(option)
            case TelnetCommand.WILL:
                self.offered[option] = True
                return self._handle_will(option)
            case TelnetCommand.DONT:
                self.requested[option] = False
            case TelnetCommand.WONT:
                self.offered[option] = False
        return b""

    def _handle_do(self, option: int) -> bytes:
        """Answer a DO request.

        Options with a payload builder are answered straight away with their
        subnegotiation. ECHO is refused because some servers misuse it, and every
        option we cannot provide is declined so the server does not wait for it.

        Returns:
            The reply to send to the server
        """
        if option in self._option_handlers:
            return self._subnegotiation_reply(option)
        match option:
            case TelnetOption.GA:
                return b""
            case TelnetOption.ECHO:
                return TelnetSequence.create_command(TelnetCommand.WONT, TelnetOption.ECHO)
        return TelnetSequence.create_command(TelnetCommand.DONT, option)

    @staticmethod
    def _handle_will(option: int) -> bytes:
        """Answer a WILL offer: accept GA and ECHO silently, refuse the rest.

        Returns:
            The reply to send to the server
        """
        if option in {TelnetOption.GA, TelnetOption.ECHO}:
            return b""
        return TelnetSequence.create_command(TelnetCommand.WONT, option)

    def handle_subnegotiation(self, option: int, data: bytes) -> bytes:
        """Handle a complete SB ... SE span.

        Only SEND requests for options we build payloads for get an answer, which
        is the same subnegotiation we send in reply to DO. Everything else is
        dropped.

        Args:
            option: The option being negotiated
            data: The subnegotiation payload between the option byte and IAC SE

        Returns:
            The reply to send to the server, empty when no reply is due
        """
        log.debug("Received subnegotiation for %s (%d bytes)", TelnetOption.name_of(option), len(data))
        if option in self._option_handlers and data[:1] == bytes([SUBNEG_SEND]):
            return self._subnegotiation_reply(option)
        return b""

    def _subnegotiation_reply(self, option: int) -> bytes:
        """Frame the payload for an option as IAC SB option BINARY payload IAC SE.

        Returns:
            The subnegotiation sequence
        """
        payload = self._option_handlers[option]().encode("ascii", errors="replace")
        return TelnetSequence.create_subnegotiation(option, bytes([TelnetOption.BINARY]) + payload)

    def _terminal_type(self) -> str:
        return self.settings.terminal_type

    def _display_location(self) -> str:
        return f"{self.settings.display_host}:0.0"

    def _environment(self) -> str:
        return f"DISPLAY {self.settings.display_host}:0.0"

    def _terminal_speed(self) -> str:
        return f"{self.settings.speed_in},{self.settings.speed_out}"

    @staticmethod
    def get_initial_negotiation() -> bytes:
        """Return the initial negotiation sequence to send when connecting."""
        requests = [
            (TelnetCommand.DO, TelnetOption.GA),
            (TelnetCommand.WILL, TelnetOption.TERMINAL_TYPE),
            (TelnetCommand.WILL, TelnetOption.NAWS),
            (TelnetCommand.WILL, TelnetOption.TERMINAL_SPEED),
            (TelnetCommand.WILL, TelnetOption.REMOTE_FLOW),
            (TelnetCommand.WILL, TelnetOption.LINEMODE),
            (TelnetCommand.WILL, TelnetOption.NEW_ENVIRON),
            (TelnetCommand.DO, TelnetOption.STATUS),
            (TelnetCommand.WILL, TelnetOption.XDISPLOC),
        ]
        return b"".join(TelnetSequence.create_command(cmd, opt) for cmd, opt in requests)
