"""Type definitions module for telnet tools.

Shared type aliases used by the CLI file handling.
"""

from __future__ import annotations

from typing import TypeAlias

JSON_TYPE: TypeAlias = bool | dict[str, "JSON_TYPE"] | float | int | list["JSON_TYPE"] | str | None
