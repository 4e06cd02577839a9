"""Key events and waiting for the player to confirm."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable


class Key(enum.Enum):
    """Keys the game reacts to."""

    RETURN = "return"
    ENTER = "enter"
    SPACE = "space"
    ESCAPE = "escape"
    UP = "up"
    DOWN = "down"
    MUSIC = "music"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    """A key press, or a request to quit when `quit` is set."""

    key: Key | None = None
    char: str = ""
    quit: bool = False


class QuitRequested(Exception):
    """Raised when the player asks to leave the game."""


CONFIRM_KEYS = frozenset({Key.RETURN, Key.ENTER, Key.SPACE})


def wait_for_button(events: Iterable[KeyEvent]) -> Key:
    """Consume events until a confirm key is pressed and return that key.

    Raises QuitRequested on a quit event, on Escape, or if the events run out.
    """
    for event in events:
        if event.quit:
            raise QuitRequested("quit requested")
        if event.key in CONFIRM_KEYS:
            return event.key
        if event.key is Key.ESCAPE:
            raise QuitRequested("escape pressed")
    raise QuitRequested("no more input events")