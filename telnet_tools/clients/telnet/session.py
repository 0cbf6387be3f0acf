"""Pattern-driven telnet interaction.

``TelnetSession`` adds the expect-style layer on top of ``AsyncTelnetClient``:
waiting for text, answering prompts, logging in and capturing the output of a
command while paging through ``--More--`` style pagers.

All of the timed loops here check their deadline between reads, so a single read
can overrun the bound by up to ``read_timeout`` seconds. Keep ``read_timeout``
well below the ``max_wait`` values passed in.

Example usage:
    ```python
    async with TelnetSession(host="router.example.com") as session:
        await session.login("admin", "secret")
        print(await session.get_output_of("show version"))
    ```
"""

from __future__ import annotations

from asyncio import get_running_loop as asyncio_get_running_loop
from dataclasses import dataclass, field
from re import IGNORECASE, Pattern, compile as re_compile, error as re_error
from typing import ClassVar, Self

from telnet_tools.cli import log

from .client import AsyncTelnetClient
from .errors import AuthenticationError, TelnetTimeoutError


def _compile(pattern: str | Pattern[str], flags: int = 0) -> Pattern[str]:
    """Compile a regex pattern, passing compiled patterns through.

    Raises:
        re.error: If the pattern is not a valid regex
    """
    if isinstance(pattern, Pattern):
        return pattern
    try:
        return re_compile(pattern, flags)
    except re_error:
        log.warning("Failed to compile regex pattern: %r", pattern)
        raise


def _elapsed(start: float) -> float:
    return asyncio_get_running_loop().time() - start


def _now() -> float:
    return asyncio_get_running_loop().time()


@dataclass(slots=True)
class TelnetSession(AsyncTelnetClient):
    """Telnet client with expect-style helpers for scripted device access."""

    # Recognised at the end of a command's output, set by login() or by hand
    prompt: str | None = field(default=None)
    pager_pattern: str = field(default=r"(ctrl\+C|--more--|quit\))")

    USER_PATTERN: ClassVar[Pattern[str]] = re_compile(r"(user|login)(name)?:?", IGNORECASE)
    PASSWORD_PATTERN: ClassVar[Pattern[str]] = re_compile(r"pass(word)?:?", IGNORECASE)
    LOGIN_FAILED_PATTERN: ClassVar[Pattern[str]] = re_compile(r"(fail|wrong|incorrect|failed)", IGNORECASE)
    SHELL_PROMPT_PATTERN: ClassVar[Pattern[str]] = re_compile(r"[#>$]")

    async def wait_for(self, pattern: str | Pattern[str], max_wait: float = 10.0) -> bool:
        """Read until the received text matches a pattern.

        Args:
            pattern: Regex searched for in everything read by this call
            max_wait: Seconds to wait before giving up

        Returns:
            True once the pattern is found

        Raises:
            TelnetTimeoutError: If the pattern is not seen in time, or the stream
                ends first
        """
        regex = _compile(pattern)
        received = bytearray()
        start = _now()
        while True:
            char = await self.read_byte()
            if char:
                received.extend(char)
                if regex.search(self._decode(received)):
                    return True
            elif char is None and self.at_eof:
                msg = f"Connection closed while waiting for [ {regex.pattern} ]"
                raise TelnetTimeoutError(msg)

            if _elapsed(start) >= max_wait:
                msg = f"Could not find occurrence [ {regex.pattern} ] within timeout"
                raise TelnetTimeoutError(msg)

    async def wait_reply(self, max_wait: float = 10.0) -> bool:
        """Wait for the server to send any data at all.

        Returns:
            True if data arrived, False if the stream ended or the time ran out
        """
        start = _now()
        while _elapsed(start) < max_wait:
            char = await self.read_byte()
            if char:
                return True
            if self.at_eof:
                return False
        return False

    async def expect(
        self,
        pattern: str | Pattern[str],
        response: str | bytes,
        add_terminator: bool = True,
        max_wait: float = 10.0,
    ) -> bool:
        """Wait for a pattern, then send a response.

        Returns:
            True once the response has been sent

        Raises:
            TelnetTimeoutError: If the pattern is not seen in time
        """
        await self.wait_for(pattern, max_wait)
        await self.send(response, add_terminator)
        return True

    async def find(self, pattern: str | Pattern[str]) -> str | None:
        """Search incoming lines for a pattern.

        Reading stops at the first line that matches, or once the server stops
        sending.

        Returns:
            The matched text, or None if nothing matched
        """
        regex = _compile(pattern)
        while line := await self.read_line():
            if match := regex.search(line):
                return match.group(0)
        return None

    async def find_all(self, pattern: str | Pattern[str]) -> str | None:
        """Drain pending data, then search the whole session buffer line by line.

        Returns:
            The first matched text, or None if nothing matched
        """
        regex = _compile(pattern)
        await self.read_all()
        for line in self.buffer.split(self.terminator):
            if match := regex.search(line):
                return match.group(0)
        return None

    async def login(self, user: str, password: str, max_wait: float = 10.0) -> Self:
        """Log in and learn the device prompt.

        After the credentials are sent, lines are read until one looks like a
        shell prompt (``#``, ``>`` or ``$``). The last non-empty line received
        then becomes ``prompt``.

        Args:
            user: Username
            password: Password
            max_wait: Seconds to wait for each step

        Returns:
            The session, for chaining

        Raises:
            AuthenticationError: If a login step times out, the device reports a
                failure, or no prompt shows up
        """
        try:
            await self.expect(self.USER_PATTERN, user, max_wait=max_wait)
            await self.expect(self.PASSWORD_PATTERN, password, max_wait=max_wait)
        except TelnetTimeoutError as exc:
            msg = "Could not find username or password request, login failed"
            raise AuthenticationError(msg) from exc

        start = _now()
        while True:
            line = await self.read_line()
            if self.LOGIN_FAILED_PATTERN.search(line):
                msg = "Username or password wrong, login failed"
                raise AuthenticationError(msg)
            if self.SHELL_PROMPT_PATTERN.search(line):
                break
            if self.at_eof:
                msg = "Connection closed before a prompt appeared, login failed"
                raise AuthenticationError(msg)
            if _elapsed(start) >= max_wait:
                msg = "Could not get reply from device, login failed"
                raise AuthenticationError(msg)

        lines = [line.strip() for line in self.buffer.split("\n")]
        self.prompt = next((line for line in reversed(lines) if line), None)
        log.info("Logged in to %s:%d as %s, prompt is %r", self.host, self.port, user, self.prompt)
        return self

    async def get_output_of(self, command: str, add_terminator: bool = True, max_wait: float = 10.0) -> str:
        """Run a command and return only what it printed.

        Pending output is drained first. Pager prompts are answered with a space
        and restart the timer. The first captured line (the echoed command) and
        the last (the prompt) are dropped from the result.

        Args:
            command: Command to run
            add_terminator: Append the line terminator to the command
            max_wait: Seconds to wait for the prompt to return

        Returns:
            The output lines, without line endings, joined by carriage returns

        Raises:
            ValueError: If no prompt is known yet
            TelnetTimeoutError: If the prompt does not come back in time
        """
        if not self.prompt:
            msg = "No prompt known, log in or set the prompt first"
            raise ValueError(msg)
        pager = _compile(self.pager_pattern, IGNORECASE)

        await self.read_all()
        await self.send(command, add_terminator)

        captured: list[str] = []
        start = _now()
        while True:
            line = await self.read_line()
            if self.prompt in line:
                captured.append(line)
                break
            if pager.search(line):
                log.debug("Pager prompt %r seen, requesting more output", line)
                await self.send(" ", add_terminator=False)
                start = _now()
                continue

            if line:
                captured.append(line)
            if self.at_eof:
                msg = f"Connection closed while waiting to execute command: [ {command} ]"
                raise TelnetTimeoutError(msg)
            if _elapsed(start) >= max_wait:
                msg = f"Timeout reached while waiting to execute command: [ {command} ]"
                raise TelnetTimeoutError(msg)

        return "\r".join(line.rstrip("\r\n") for line in captured[1:-1])
