"""Reading and writing the system clipboard through external programs."""

from __future__ import annotations

import abc
import functools
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

from .config import ShellCommand

logger = logging.getLogger(__name__)


class ClipboardError(RuntimeError):
    """The clipboard could not be read or written."""


class ClipboardProvider(abc.ABC):
    """Something that can read and write the clipboard."""

    @abc.abstractmethod
    def get_contents(self) -> str:
        """Return the clipboard's text."""

    @abc.abstractmethod
    def set_contents(self, contents: str) -> None:
        """Replace the clipboard's text with ``contents``."""


@dataclass(frozen=True)
class CommandProvider(ClipboardProvider):
    """A clipboard reached through a copy and a paste program."""

    copy_command: ShellCommand
    paste_command: ShellCommand

    def get_contents(self) -> str:
        result = subprocess.run(
            [self.paste_command.command, *self.paste_command.args],
            capture_output=True,
            check=False,
        )
        return result.stdout.decode("utf-8")

    def set_contents(self, contents: str) -> None:
        result = subprocess.run(
            [self.copy_command.command, *self.copy_command.args],
            input=contents.encode("utf-8"),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
        if result.returncode != 0:
            raise ClipboardError("copy command failed")


class NopProvider(ClipboardProvider):
    """Used when no clipboard program is available; every call fails."""

    def get_contents(self) -> str:
        raise ClipboardError("no clipboard provider found!")

    def set_contents(self, contents: str) -> None:
        raise ClipboardError("no clipboard provider found!")


def _binary_exists(name: str) -> bool:
    return shutil.which(name) is not None


def _env_var_is_set(name: str) -> bool:
    return name in os.environ


def get_clipboard_provider() -> ClipboardProvider:
    """Pick a clipboard provider from the programs and display found in the environment."""
    if _binary_exists("pbcopy") and _binary_exists("pbpaste"):
        return CommandProvider(
            copy_command=ShellCommand("pbcopy"),
            paste_command=ShellCommand("pbpaste"),
        )
    if (
        _env_var_is_set("WAYLAND_DISPLAY")
        and _binary_exists("wl-copy")
        and _binary_exists("wl-paste")
    ):
        return CommandProvider(
            copy_command=ShellCommand("wl-copy", ["--type", "text/plain"]),
            paste_command=ShellCommand("wl-paste", ["--no-newline"]),
        )
    if _env_var_is_set("DISPLAY") and _binary_exists("xclip"):
        return CommandProvider(
            copy_command=ShellCommand("xclip", ["-i", "-selection", "clipboard"]),
            paste_command=ShellCommand("xclip", ["-o", "-selection", "clipboard"]),
        )
    if _env_var_is_set("DISPLAY") and _binary_exists("xsel"):
        return CommandProvider(
            copy_command=ShellCommand("xsel", ["--nodetach", "-i", "-b"]),
            paste_command=ShellCommand("xsel", ["-o", "-b"]),
        )
    logger.warning("No clipboard provider found! Fallback to a NOP clipboard provider.")
    return NopProvider()


@functools.cache
def _shared_provider() -> ClipboardProvider:
    return get_clipboard_provider()


def get_clipboard_content() -> str:
    """Return the clipboard's text using the provider chosen on first use."""
    return _shared_provider().get_contents()


def execute_copy_command(text: str) -> None:
    """Copy ``text`` to the clipboard using the provider chosen on first use."""
    _shared_provider().set_contents(text)