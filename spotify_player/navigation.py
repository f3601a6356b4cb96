"""Moving the selection or scroll position of a list in response to commands."""

from __future__ import annotations

from typing import Protocol

from .keymap import Command

DEFAULT_PAGE_SIZE = 20


class Selectable(Protocol):
    """Anything whose selected row or scroll offset can be set."""

    def select(self, index: int) -> None: ...


def handle_navigation_command(
    command: Command,
    page: Selectable,
    index: int,
    length: int,
    count: int | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> bool:
    """Apply a navigation command to ``page``.

    ``index`` is the current position in a list of ``length`` items, ``count``
    an optional repeat count typed before the command and ``page_size`` the
    number of rows a page step moves. Returns True if the command was a
    navigation command and was applied, False otherwise (also for an empty list).
    """
    if length == 0:
        return False

    steps = 1 if count is None else count
    last = length - 1

    if command == Command.SELECT_NEXT_OR_SCROLL_DOWN:
        page.select(min(index + steps, last))
    elif command == Command.SELECT_PREVIOUS_OR_SCROLL_UP:
        page.select(max(index - steps, 0))
    elif command == Command.PAGE_SELECT_NEXT_OR_SCROLL_DOWN:
        page.select(min(index + steps * page_size, last))
    elif command == Command.PAGE_SELECT_PREVIOUS_OR_SCROLL_UP:
        page.select(max(index - steps * page_size, 0))
    elif command == Command.SELECT_LAST_OR_SCROLL_TO_BOTTOM:
        page.select(last)
    elif command == Command.SELECT_FIRST_OR_SCROLL_TO_TOP:
        page.select(0)
    else:
        return False
    return True