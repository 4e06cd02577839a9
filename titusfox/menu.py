"""Main menu choices, password entry and fade timing."""

from __future__ import annotations

import enum
from typing import Iterable, Sequence

from titusfox.keyboard import CONFIRM_KEYS, Key, KeyEvent, QuitRequested

CODE_LENGTH = 4
BLANK = "_"
DEFAULT_FADE_TIME = 1000


class MenuChoice(enum.IntEnum):
    """Entries of the main menu."""

    START = 0
    PASSWORD = 1


def find_level(code: str, levelcodes: Sequence[str]) -> int | None:
    """Level number (from 1) whose code is `code`, or None."""
    for number, levelcode in enumerate(levelcodes, start=1):
        if levelcode == code:
            return number
    return None


class PasswordEntry:
    """Collects the four hexadecimal characters of a level code."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    @property
    def code(self) -> str:
        """The code typed so far, padded with underscores."""
        return "".join(self._chars).ljust(CODE_LENGTH, BLANK)

    def feed(self, char: str) -> bool:
        """Add one typed character; return True if it was accepted."""
        if self.complete() or len(char) != 1 or ord(char) >= 0x80:
            return False
        if "0" <= char <= "9":
            self._chars.append(char)
            return True
        if "a" <= char <= "f":
            char = char.upper()
        if "A" <= char <= "F":
            self._chars.append(char)
            return True
        return False

    def complete(self) -> bool:
        """True once all four characters have been typed."""
        return len(self._chars) == CODE_LENGTH


def enter_password(chars: Iterable[KeyEvent], levelcodes: Sequence[str]) -> int | None:
    """Read a code from key events and return its level number, or None if wrong.

    Raises QuitRequested on quit, on Escape, or if the events end early.
    """
    entry = PasswordEntry()
    for event in chars:
        if event.quit:
            raise QuitRequested("quit requested")
        if event.key is Key.ESCAPE:
            raise QuitRequested("escape pressed")
        if event.char:
            entry.feed(event.char)
        if entry.complete():
            return find_level(entry.code, levelcodes)
    raise QuitRequested("no more input events")


def menu_selection(events: Iterable[KeyEvent]) -> MenuChoice:
    """Follow Up/Down presses until a confirm key and return the chosen entry.

    Raises QuitRequested on quit, on Escape, or if the events run out.
    """
    selection = MenuChoice.START
    for event in events:
        if event.quit:
            raise QuitRequested("quit requested")
        if event.key is Key.ESCAPE:
            raise QuitRequested("escape pressed")
        if event.key is Key.UP:
            selection = MenuChoice.START
        elif event.key is Key.DOWN:
            selection = MenuChoice.PASSWORD
        if event.key in CONFIRM_KEYS:
            return selection
    raise QuitRequested("no more input events")


def fade_alpha(elapsed_ms: int, fade_time: int = DEFAULT_FADE_TIME) -> int:
    """Opacity (0-255) of the menu image `elapsed_ms` into a fade."""
    if fade_time <= 0:
        raise ValueError("fade_time must be positive")
    if elapsed_ms < 0:
        raise ValueError("elapsed_ms must not be negative")
    return min(elapsed_ms * 256 // fade_time, 255)