import shutil
import sys

import pytest

from spotify_player import clipboard
from spotify_player.clipboard import (
    ClipboardError,
    CommandProvider,
    NopProvider,
    execute_copy_command,
    get_clipboard_content,
    get_clipboard_provider,
)
from spotify_player.config import ShellCommand

_WRITE = "import sys; open(sys.argv[1], 'w', encoding='utf-8').write(sys.stdin.read())"
_READ = "import sys; sys.stdout.write(open(sys.argv[1], encoding='utf-8').read())"


def _file_provider(path):
    return CommandProvider(
        copy_command=ShellCommand(sys.executable, ["-c", _WRITE, str(path)]),
        paste_command=ShellCommand(sys.executable, ["-c", _READ, str(path)]),
    )


def _only_binaries(monkeypatch, available):
    monkeypatch.setattr(
        shutil, "which", lambda name: f"/usr/bin/{name}" if name in available else None
    )


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("WAYLAND_DISPLAY", "DISPLAY"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def fresh_shared_provider():
    clipboard._shared_provider.cache_clear()
    yield
    clipboard._shared_provider.cache_clear()


def test_command_provider_round_trip(tmp_path):
    provider = _file_provider(tmp_path / "board.txt")
    provider.set_contents("hello clipboard")
    assert provider.get_contents() == "hello clipboard"


def test_failed_copy_command_raises():
    provider = CommandProvider(
        copy_command=ShellCommand(sys.executable, ["-c", "import sys; sys.exit(1)"]),
        paste_command=ShellCommand(sys.executable, ["-c", "pass"]),
    )
    with pytest.raises(ClipboardError, match="copy command failed"):
        provider.set_contents("text")


def test_nop_provider_always_fails():
    provider = NopProvider()
    with pytest.raises(ClipboardError):
        provider.get_contents()
    with pytest.raises(ClipboardError):
        provider.set_contents("text")


def test_prefers_pbcopy(clean_env):
    _only_binaries(clean_env, {"pbcopy", "pbpaste", "xclip"})
    clean_env.setenv("DISPLAY", ":0")
    provider = get_clipboard_provider()
    assert provider == CommandProvider(
        copy_command=ShellCommand("pbcopy"), paste_command=ShellCommand("pbpaste")
    )


def test_wayland_needs_display_variable(clean_env):
    _only_binaries(clean_env, {"wl-copy", "wl-paste"})
    assert isinstance(get_clipboard_provider(), NopProvider)
    clean_env.setenv("WAYLAND_DISPLAY", "wayland-0")
    provider = get_clipboard_provider()
    assert provider.paste_command == ShellCommand("wl-paste", ["--no-newline"])
    assert provider.copy_command == ShellCommand("wl-copy", ["--type", "text/plain"])


def test_xclip_then_xsel(clean_env):
    clean_env.setenv("DISPLAY", ":0")
    _only_binaries(clean_env, {"xclip", "xsel"})
    provider = get_clipboard_provider()
    assert provider.paste_command == ShellCommand("xclip", ["-o", "-selection", "clipboard"])
    _only_binaries(clean_env, {"xsel"})
    provider = get_clipboard_provider()
    assert provider.copy_command == ShellCommand("xsel", ["--nodetach", "-i", "-b"])
    assert provider.paste_command == ShellCommand("xsel", ["-o", "-b"])


def test_shared_provider_without_programs_fails(clean_env, fresh_shared_provider):
    _only_binaries(clean_env, set())
    with pytest.raises(ClipboardError):
        get_clipboard_content()
    with pytest.raises(ClipboardError):
        execute_copy_command("text")