"""Identity of the terminal session an operation runs in."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TerminalContext:
    terminal_id: int
    device_id: str
    user_id: int | None = None
