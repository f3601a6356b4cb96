"""Application configuration: the app config file and the folders it lives in."""

from __future__ import annotations

import enum
import logging
import subprocess
import sys
import tomllib
from collections.abc import Callable
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any

import tomli_w

from .keymap import KeymapConfig, load_keymap_config
from .theme import ThemeConfig, load_theme_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FOLDER = ".config/spotify-player"
DEFAULT_CACHE_FOLDER = ".cache/spotify-player"
APP_CONFIG_FILE = "app.toml"


class CommandError(RuntimeError):
    """An external command exited with a failure status; holds its stderr."""


@dataclass
class ShellCommand:
    """An external program and the arguments it is always run with."""

    command: str
    args: list[str] = field(default_factory=list)

    def execute(self, extra_args: list[str] | None = None) -> str:
        """Run the command and return its stdout; raise CommandError with stderr on failure."""
        argv = [self.command, *self.args, *(extra_args or [])]
        result = subprocess.run(argv, capture_output=True, check=False)
        if result.returncode != 0:
            raise CommandError(result.stderr.decode("utf-8"))
        return result.stdout.decode("utf-8")


class Position(enum.Enum):
    TOP = "Top"
    BOTTOM = "Bottom"


class BorderType(enum.Enum):
    HIDDEN = "Hidden"
    PLAIN = "Plain"
    ROUNDED = "Rounded"
    DOUBLE = "Double"
    THICK = "Thick"


class ProgressBarType(enum.Enum):
    LINE = "Line"
    RECTANGLE = "Rectangle"


class StreamingType(enum.Enum):
    ALWAYS = "Always"
    DAEMON_ONLY = "DaemonOnly"
    NEVER = "Never"


def parse_streaming_type(value: Any) -> StreamingType:
    """Parse a streaming mode; booleans are accepted for backward compatibility."""
    if isinstance(value, bool):
        return StreamingType.ALWAYS if value else StreamingType.NEVER
    if isinstance(value, str):
        try:
            return StreamingType(value)
        except ValueError:
            raise ValueError(f"unknown variant `{value}` for enable_streaming") from None
    raise ValueError(f"invalid enable_streaming value: {value!r}")


@dataclass
class DeviceConfig:
    """Settings of the integrated playback device."""

    name: str = "spotify-player"
    device_type: str = "speaker"
    volume: int = 70
    bitrate: int = 320
    audio_cache: bool = False
    normalization: bool = False
    autoplay: bool = False


@dataclass
class LibraryLayoutConfig:
    playlist_percent: int = 40
    album_percent: int = 40


@dataclass
class LayoutConfig:
    """Layout of the application's windows."""

    library: LibraryLayoutConfig = field(default_factory=LibraryLayoutConfig)
    playback_window_position: Position = Position.TOP
    playback_window_height: int = 6

    def check_values(self) -> None:
        """Raise ValueError if the library layout percentages are out of range."""
        if self.library.album_percent + self.library.playlist_percent > 99:
            raise ValueError(
                "Invalid library layout: summation of album_percent and "
                "playlist_percent cannot be greater than 99!"
            )


@dataclass
class NotifyFormat:
    summary: str = "{track} • {artists}"
    body: str = "{album}"


def _default_enable_media_control() -> bool:
    # Media control opens a window on macOS and Windows, so it is opt-in there.
    return sys.platform not in ("darwin", "win32")


@dataclass
class AppConfig:
    """General application settings read from the app config file."""

    theme: str = "dracula"
    client_id: str = "65b708073fc0480ea92a077233ca87bd"
    client_id_command: ShellCommand | None = None
    client_port: int = 8080
    login_redirect_uri: str = "http://127.0.0.1:8989/login"
    player_event_hook_command: ShellCommand | None = None
    playback_format: str = "{status} {track} • {artists} {liked}\n{album}\n{metadata}"
    playback_metadata_fields: list[str] = field(
        default_factory=lambda: ["repeat", "shuffle", "volume", "device"]
    )
    notify_format: NotifyFormat = field(default_factory=NotifyFormat)
    notify_timeout_in_secs: int = 0
    tracks_playback_limit: int = 50
    proxy: str | None = None
    ap_port: int | None = None
    app_refresh_duration_in_ms: int = 32
    playback_refresh_duration_in_ms: int = 0
    page_size_in_rows: int = 20
    play_icon: str = "▶"
    pause_icon: str = "▌▌"
    liked_icon: str = "♥"
    border_type: BorderType = BorderType.PLAIN
    progress_bar_type: ProgressBarType = ProgressBarType.RECTANGLE
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    cover_img_length: int = 9
    cover_img_width: int = 5
    cover_img_scale: float = 1.0
    enable_media_control: bool = field(default_factory=_default_enable_media_control)
    enable_streaming: StreamingType = StreamingType.ALWAYS
    enable_notify: bool = True
    enable_cover_image_cache: bool = True
    default_device: str = "spotify-player"
    device: DeviceConfig = field(default_factory=DeviceConfig)
    notify_streaming_only: bool = False
    seek_duration_secs: int = 5
    sort_artist_albums_by_type: bool = False

    def get_client_id(self) -> str:
        """Return the trimmed output of ``client_id_command`` if set, else ``client_id``."""
        if self.client_id_command is not None:
            return self.client_id_command.execute().strip()
        return self.client_id

    def update(self, data: dict[str, Any]) -> None:
        """Overwrite the settings present in ``data``, a parsed TOML table."""
        _update(self, _table(data))

    def to_dict(self) -> dict[str, Any]:
        """Return the settings as a TOML-ready table, leaving out unset options."""
        return _to_dict(self)


@dataclass
class Configs:
    """All configurations of the application."""

    app_config: AppConfig
    keymap_config: KeymapConfig
    theme_config: ThemeConfig
    cache_folder: Path


_Parser = Callable[[Any, Any], Any]


def _table(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"expected a table, got {value!r}")
    return value


def _string(value: Any, _current: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _boolean(value: Any, _current: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {value!r}")
    return value


def _number(value: Any, _current: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _unsigned(bits: int) -> _Parser:
    def parse(value: Any, _current: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"expected an integer, got {value!r}")
        if not 0 <= value < 1 << bits:
            raise ValueError(f"integer {value} out of range for u{bits}")
        return value

    return parse


def _string_list(value: Any, _current: Any) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"expected an array, got {value!r}")
    return [_string(item, None) for item in value]


def _enum(cls: type[enum.Enum]) -> _Parser:
    def parse(value: Any, _current: Any) -> enum.Enum:
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown variant {value!r} for {cls.__name__}") from None

    return parse


def _nested(value: Any, current: Any) -> Any:
    return _update(current, _table(value))


def _shell_command(value: Any, current: ShellCommand | None) -> ShellCommand:
    data = _table(value)
    if current is None:
        if "command" not in data:
            raise ValueError("missing field `command`")
        current = ShellCommand(command=_string(data["command"], None))
    return _update(current, data)


_U8, _U16, _U64 = _unsigned(8), _unsigned(16), _unsigned(64)

_SPECS: dict[type, dict[str, _Parser]] = {
    ShellCommand: {"command": _string, "args": _string_list},
    DeviceConfig: {
        "name": _string,
        "device_type": _string,
        "volume": _U8,
        "bitrate": _U16,
        "audio_cache": _boolean,
        "normalization": _boolean,
        "autoplay": _boolean,
    },
    NotifyFormat: {"summary": _string, "body": _string},
    LibraryLayoutConfig: {"playlist_percent": _U16, "album_percent": _U16},
    LayoutConfig: {
        "library": _nested,
        "playback_window_position": _enum(Position),
        "playback_window_height": _U64,
    },
    AppConfig: {
        "theme": _string,
        "client_id": _string,
        "client_id_command": _shell_command,
        "client_port": _U16,
        "login_redirect_uri": _string,
        "player_event_hook_command": _shell_command,
        "playback_format": _string,
        "playback_metadata_fields": _string_list,
        "notify_format": _nested,
        "notify_timeout_in_secs": _U64,
        "tracks_playback_limit": _U64,
        "proxy": _string,
        "ap_port": _U16,
        "app_refresh_duration_in_ms": _U64,
        "playback_refresh_duration_in_ms": _U64,
        "page_size_in_rows": _U64,
        "play_icon": _string,
        "pause_icon": _string,
        "liked_icon": _string,
        "border_type": _enum(BorderType),
        "progress_bar_type": _enum(ProgressBarType),
        "layout": _nested,
        "cover_img_length": _U64,
        "cover_img_width": _U64,
        "cover_img_scale": _number,
        "enable_media_control": _boolean,
        "enable_streaming": lambda value, _current: parse_streaming_type(value),
        "enable_notify": _boolean,
        "enable_cover_image_cache": _boolean,
        "default_device": _string,
        "device": _nested,
        "notify_streaming_only": _boolean,
        "seek_duration_secs": _U16,
        "sort_artist_albums_by_type": _boolean,
    },
}


def _update(obj: Any, data: dict[str, Any]) -> Any:
    for name, parse in _SPECS[type(obj)].items():
        if name not in data:
            continue
        try:
            setattr(obj, name, parse(data[name], getattr(obj, name)))
        except ValueError as err:
            raise ValueError(f"{name}: {err}") from err
    return obj


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if is_dataclass(value):
        return _to_dict(value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _to_dict(obj: Any) -> dict[str, Any]:
    return {
        f.name: _plain(getattr(obj, f.name))
        for f in fields(obj)
        if getattr(obj, f.name) is not None
    }


def load_app_config(path: str | Path) -> AppConfig:
    """Load the app config file from the ``path`` folder.

    Settings missing from the file keep their defaults. If there is no file,
    one holding the defaults is written there.
    """
    config = AppConfig()
    file_path = Path(path) / APP_CONFIG_FILE
    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        file_path.write_text(tomli_w.dumps(config.to_dict()), encoding="utf-8")
    else:
        config.update(tomllib.loads(content))
    config.layout.check_values()
    return config


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError:
        raise RuntimeError("cannot find the $HOME folder") from None


def get_config_folder_path() -> Path:
    """Return the default configuration folder."""
    return _home() / DEFAULT_CONFIG_FOLDER


def get_cache_folder_path() -> Path:
    """Return the default cache folder."""
    return _home() / DEFAULT_CACHE_FOLDER


def load_configs(config_folder: str | Path, cache_folder: str | Path) -> Configs:
    """Load the app, keymap and theme configurations from ``config_folder``."""
    return Configs(
        app_config=load_app_config(config_folder),
        keymap_config=load_keymap_config(config_folder),
        theme_config=load_theme_config(config_folder),
        cache_folder=Path(cache_folder),
    )