"""Keyboard keys and key sequences used by keymaps."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

_NAMED_CODES = frozenset(
    {
        "enter",
        "tab",
        "backtab",
        "backspace",
        "esc",
        "left",
        "right",
        "up",
        "down",
        "insert",
        "delete",
        "home",
        "end",
        "page_up",
        "page_down",
        *(f"f{n}" for n in range(1, 13)),
    }
)

_SPACE = " "


class Modifier(enum.Flag):
    """Modifier keys held while a key is pressed."""

    NONE = 0
    SHIFT = enum.auto()
    CTRL = enum.auto()
    ALT = enum.auto()


def _code_to_string(code: str) -> str:
    if code == _SPACE:
        return "space"
    if len(code) == 1 or code in _NAMED_CODES:
        return code
    raise ValueError(f"unknown key: {code!r}")


@dataclass(frozen=True)
class Key:
    """A single pressed key: a key code plus at most one of Ctrl or Alt.

    A key whose ``code`` is ``None`` is the unknown key, produced for modifier
    combinations that cannot be represented.
    """

    code: str | None
    modifier: Modifier = Modifier.NONE

    @property
    def is_unknown(self) -> bool:
        return self.code is None

    def __str__(self) -> str:
        if self.code is None:
            return "unknown key"
        name = _code_to_string(self.code)
        if self.modifier == Modifier.CTRL:
            return f"C-{name}"
        if self.modifier == Modifier.ALT:
            return f"M-{name}"
        return name


UNKNOWN_KEY = Key(None)


@dataclass(frozen=True)
class KeySequence:
    """A sequence of keys pressed one after another."""

    keys: tuple[Key, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(self.keys))

    def is_prefix(self, other: KeySequence) -> bool:
        """Return True if this sequence is a prefix of ``other``."""
        if len(self.keys) > len(other.keys):
            return False
        return all(a == b for a, b in zip(self.keys, other.keys))

    def __add__(self, key: Key) -> KeySequence:
        return KeySequence(self.keys + (key,))

    def __len__(self) -> int:
        return len(self.keys)

    def __str__(self) -> str:
        return " ".join(str(key) for key in self.keys)


def _parse_key_code(text: str) -> str | None:
    if text == "space":
        return _SPACE
    if text in _NAMED_CODES:
        return text
    if len(text) == 1 and text != _SPACE:
        return text
    return None


def _try_parse_key(text: str) -> Key | None:
    if len(text) > 2 and text[1] == "-" and text[2] != _SPACE:
        code = _parse_key_code(text[2:])
        if code is None:
            return None
        modifier = {"C": Modifier.CTRL, "M": Modifier.ALT}.get(text[0])
        if modifier is None:
            return None
        return Key(code, modifier)
    code = _parse_key_code(text)
    return None if code is None else Key(code)


def parse_key(text: str) -> Key:
    """Parse a key such as ``"a"``, ``"enter"``, ``"C-r"`` or ``"M-space"``."""
    key = _try_parse_key(text)
    if key is None:
        raise ValueError(f"failed to parse key: unknown key {text}")
    return key


def parse_key_sequence(text: str) -> KeySequence:
    """Parse space-separated keys such as ``"g a"`` into a key sequence."""
    keys = [_try_parse_key(part) for part in text.split(" ")]
    if any(key is None for key in keys):
        raise ValueError(f"failed to parse key sequence: invalid key sequence {text}")
    return KeySequence(tuple(keys))


def key_from_event(code: str, modifiers: Modifier | Iterable[Modifier] = Modifier.NONE) -> Key:
    """Build a key from a terminal key event.

    Shift is dropped since ``code`` already holds the shifted character.
    Combinations other than no modifier, Ctrl alone or Alt alone give the
    unknown key.
    """
    if not isinstance(modifiers, Modifier):
        combined = Modifier.NONE
        for modifier in modifiers:
            combined |= modifier
        modifiers = combined
    modifiers &= ~Modifier.SHIFT
    if modifiers in (Modifier.NONE, Modifier.CTRL, Modifier.ALT):
        return Key(code, modifiers)
    return UNKNOWN_KEY