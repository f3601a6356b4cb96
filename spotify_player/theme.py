"""Colour themes: palettes, component styles and the theme config file."""

from __future__ import annotations

import enum
import functools
import logging
import operator
import re
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

THEME_CONFIG_FILE = "theme.toml"

_NAMED_COLORS = {
    "reset": "Reset",
    "black": "Black",
    "red": "Red",
    "green": "Green",
    "yellow": "Yellow",
    "blue": "Blue",
    "magenta": "Magenta",
    "cyan": "Cyan",
    "gray": "Gray",
    "darkgray": "DarkGray",
    "lightred": "LightRed",
    "lightgreen": "LightGreen",
    "lightyellow": "LightYellow",
    "lightblue": "LightBlue",
    "lightmagenta": "LightMagenta",
    "lightcyan": "LightCyan",
    "white": "White",
}

_HEX_COLOR = re.compile(r"#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")
_INDEX = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class Color:
    """A terminal colour: a named ANSI colour, an RGB triple or a palette index."""

    name: str | None = None
    rgb: tuple[int, int, int] | None = None
    index: int | None = None

    def __post_init__(self) -> None:
        given = [v for v in (self.name, self.rgb, self.index) if v is not None]
        if len(given) != 1:
            raise ValueError("a color needs exactly one of name, rgb or index")
        if self.name is not None and self.name not in _NAMED_COLORS.values():
            raise ValueError(f"unknown color name: {self.name}")
        if self.rgb is not None:
            object.__setattr__(self, "rgb", tuple(self.rgb))
            if len(self.rgb) != 3 or not all(0 <= c <= 255 for c in self.rgb):
                raise ValueError(f"invalid rgb color: {self.rgb}")
        if self.index is not None and not 0 <= self.index <= 255:
            raise ValueError(f"invalid color index: {self.index}")

    def __str__(self) -> str:
        if self.name is not None:
            return self.name
        if self.rgb is not None:
            return "#{:02x}{:02x}{:02x}".format(*self.rgb)
        return str(self.index)


def _rgb_from_hex(text: str) -> tuple[int, int, int] | None:
    match = _HEX_COLOR.fullmatch(text)
    if match is None:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return r, g, b


def parse_color(text: str) -> Color:
    """Parse a colour name, a ``#rrggbb`` hex value or a 0-255 palette index."""
    normalized = text.lower()
    for ch in " -_":
        normalized = normalized.replace(ch, "")
    for old, new in (
        ("bright", "light"),
        ("grey", "gray"),
        ("silver", "gray"),
        ("lightblack", "darkgray"),
        ("lightwhite", "white"),
        ("lightgray", "white"),
    ):
        normalized = normalized.replace(old, new)
    if normalized in _NAMED_COLORS:
        return Color(name=_NAMED_COLORS[normalized])
    if _INDEX.fullmatch(text) and int(text) <= 255:
        return Color(index=int(text))
    rgb = _rgb_from_hex(text)
    if rgb is not None:
        return Color(rgb=rgb)
    raise ValueError(f"invalid color {text}: failed to parse Colors")


class StyleModifier(enum.Flag):
    """Text attributes applied on top of colours."""

    NONE = 0
    BOLD = enum.auto()
    DIM = enum.auto()
    ITALIC = enum.auto()
    UNDERLINED = enum.auto()
    RAPID_BLINK = enum.auto()
    REVERSED = enum.auto()
    HIDDEN = enum.auto()
    CROSSED_OUT = enum.auto()


_MODIFIER_NAMES = {
    "Bold": StyleModifier.BOLD,
    "Dim": StyleModifier.DIM,
    "Italic": StyleModifier.ITALIC,
    "Underlined": StyleModifier.UNDERLINED,
    "RapidBlink": StyleModifier.RAPID_BLINK,
    "Reversed": StyleModifier.REVERSED,
    "Hidden": StyleModifier.HIDDEN,
    "CrossedOut": StyleModifier.CROSSED_OUT,
}


class StyleColor(enum.Enum):
    """A reference to one of the sixteen palette colours."""

    BLACK = "black"
    BLUE = "blue"
    CYAN = "cyan"
    GREEN = "green"
    MAGENTA = "magenta"
    RED = "red"
    WHITE = "white"
    YELLOW = "yellow"
    BRIGHT_BLACK = "bright_black"
    BRIGHT_WHITE = "bright_white"
    BRIGHT_RED = "bright_red"
    BRIGHT_MAGENTA = "bright_magenta"
    BRIGHT_GREEN = "bright_green"
    BRIGHT_CYAN = "bright_cyan"
    BRIGHT_BLUE = "bright_blue"
    BRIGHT_YELLOW = "bright_yellow"

    def color(self, palette: Palette) -> Color:
        return getattr(palette, self.value)


_STYLE_COLOR_NAMES = {
    "".join(part.capitalize() for part in member.value.split("_")): member
    for member in StyleColor
}


def parse_style_color(text: str) -> StyleColor | Color:
    """Parse a palette colour name such as ``"BrightBlack"`` or a ``#rrggbb`` value."""
    if text in _STYLE_COLOR_NAMES:
        return _STYLE_COLOR_NAMES[text]
    rgb = _rgb_from_hex(text)
    if rgb is None:
        raise ValueError(f"invalid hex color: {text}")
    return Color(rgb=rgb)


@dataclass(frozen=True)
class Style:
    """A resolved style ready to be drawn."""

    fg: Color | None = None
    bg: Color | None = None
    modifiers: StyleModifier = StyleModifier.NONE


def _resolve_color(value: StyleColor | Color, palette: Palette) -> Color:
    return value.color(palette) if isinstance(value, StyleColor) else value


@dataclass(frozen=True)
class StyleSpec:
    """A style as written in a theme, with colours that may refer to the palette."""

    fg: StyleColor | Color | None = None
    bg: StyleColor | Color | None = None
    modifiers: tuple[StyleModifier, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "modifiers", tuple(self.modifiers))

    def resolve(self, palette: Palette) -> Style:
        """Turn palette references into concrete colours."""
        return Style(
            fg=None if self.fg is None else _resolve_color(self.fg, palette),
            bg=None if self.bg is None else _resolve_color(self.bg, palette),
            modifiers=functools.reduce(operator.or_, self.modifiers, StyleModifier.NONE),
        )


@dataclass(frozen=True)
class Palette:
    """The sixteen terminal colours plus optional background and foreground."""

    background: Color | None = None
    foreground: Color | None = None
    black: Color = Color(name="Black")
    blue: Color = Color(name="Blue")
    cyan: Color = Color(name="Cyan")
    green: Color = Color(name="Green")
    magenta: Color = Color(name="Magenta")
    red: Color = Color(name="Red")
    white: Color = Color(name="Gray")
    yellow: Color = Color(name="Yellow")
    bright_black: Color = Color(name="DarkGray")
    bright_white: Color = Color(name="White")
    bright_red: Color = Color(name="LightRed")
    bright_magenta: Color = Color(name="LightMagenta")
    bright_green: Color = Color(name="LightGreen")
    bright_cyan: Color = Color(name="LightCyan")
    bright_blue: Color = Color(name="LightBlue")
    bright_yellow: Color = Color(name="LightYellow")


@dataclass(frozen=True)
class ComponentStyle:
    """User overrides for the style of each UI component."""

    block_title: StyleSpec | None = None
    border: StyleSpec | None = None
    playback_status: StyleSpec | None = None
    playback_track: StyleSpec | None = None
    playback_artists: StyleSpec | None = None
    playback_album: StyleSpec | None = None
    playback_metadata: StyleSpec | None = None
    playback_progress_bar: StyleSpec | None = None
    playback_progress_bar_unfilled: StyleSpec | None = None
    current_playing: StyleSpec | None = None
    page_desc: StyleSpec | None = None
    playlist_desc: StyleSpec | None = None
    table_header: StyleSpec | None = None
    selection: StyleSpec | None = None
    secondary_row: StyleSpec | None = None
    like: StyleSpec | None = None
    lyrics_played: StyleSpec | None = None
    lyrics_playing: StyleSpec | None = None


_BOLD = (StyleModifier.BOLD,)
_CYAN_BOLD = StyleSpec(fg=StyleColor.CYAN, modifiers=_BOLD)
_GREEN_BOLD = StyleSpec(fg=StyleColor.GREEN, modifiers=_BOLD)

_DEFAULT_STYLES = {
    "selection": StyleSpec(modifiers=(StyleModifier.REVERSED, StyleModifier.BOLD)),
    "block_title": StyleSpec(fg=StyleColor.MAGENTA),
    "border": StyleSpec(),
    "playback_status": _CYAN_BOLD,
    "playback_track": _CYAN_BOLD,
    "playback_artists": _CYAN_BOLD,
    "playback_album": StyleSpec(fg=StyleColor.YELLOW),
    "playback_metadata": StyleSpec(fg=StyleColor.BRIGHT_BLACK),
    "playback_progress_bar": StyleSpec(fg=StyleColor.GREEN, bg=StyleColor.BRIGHT_BLACK),
    "playback_progress_bar_unfilled": StyleSpec(bg=StyleColor.BRIGHT_BLACK),
    "current_playing": _GREEN_BOLD,
    "page_desc": _CYAN_BOLD,
    "playlist_desc": StyleSpec(fg=StyleColor.BRIGHT_BLACK, modifiers=(StyleModifier.DIM,)),
    "table_header": StyleSpec(fg=StyleColor.BLUE),
    "secondary_row": StyleSpec(),
    "like": StyleSpec(),
    "lyrics_played": StyleSpec(modifiers=(StyleModifier.DIM,)),
    "lyrics_playing": _GREEN_BOLD,
}


@dataclass(frozen=True)
class Theme:
    """A named theme: a palette plus per-component style overrides."""

    name: str = "default"
    palette: Palette = field(default_factory=Palette)
    component_style: ComponentStyle = field(default_factory=ComponentStyle)

    def _component(self, component: str) -> Style:
        spec = getattr(self.component_style, component) or _DEFAULT_STYLES[component]
        return spec.resolve(self.palette)

    def app(self) -> Style:
        return Style(fg=self.palette.foreground, bg=self.palette.background)

    def selection(self, is_active: bool) -> Style:
        return self._component("selection") if is_active else Style()

    def block_title(self) -> Style:
        return self._component("block_title")

    def border(self) -> Style:
        return self._component("border")

    def playback_status(self) -> Style:
        return self._component("playback_status")

    def playback_track(self) -> Style:
        return self._component("playback_track")

    def playback_artists(self) -> Style:
        return self._component("playback_artists")

    def playback_album(self) -> Style:
        return self._component("playback_album")

    def playback_metadata(self) -> Style:
        return self._component("playback_metadata")

    def playback_progress_bar(self) -> Style:
        return self._component("playback_progress_bar")

    def playback_progress_bar_unfilled(self) -> Style:
        return self._component("playback_progress_bar_unfilled")

    def current_playing(self) -> Style:
        return self._component("current_playing")

    def page_desc(self) -> Style:
        return self._component("page_desc")

    def playlist_desc(self) -> Style:
        return self._component("playlist_desc")

    def table_header(self) -> Style:
        return self._component("table_header")

    def secondary_row(self) -> Style:
        return self._component("secondary_row")

    def like(self) -> Style:
        return self._component("like")

    def lyrics_played(self) -> Style:
        return self._component("lyrics_played")

    def lyrics_playing(self) -> Style:
        return self._component("lyrics_playing")


@dataclass
class ThemeConfig:
    """The list of available themes."""

    themes: list[Theme] = field(default_factory=lambda: [Theme()])

    def find_theme(self, name: str) -> Theme | None:
        """Return the theme called ``name``, or None."""
        return next((theme for theme in self.themes if theme.name == name), None)


def _expect_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"invalid {what}: expected a string, got {value!r}")
    return value


def _expect_table(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"invalid {what}: expected a table, got {value!r}")
    return value


def _parse_palette(data: dict[str, Any]) -> Palette:
    names = {f.name for f in fields(Palette)}
    values = {
        key: parse_color(_expect_str(value, f"palette color {key}"))
        for key, value in data.items()
        if key in names
    }
    return Palette(**values)


def _parse_style_spec(data: dict[str, Any]) -> StyleSpec:
    fg = data.get("fg")
    bg = data.get("bg")
    raw_modifiers = data.get("modifiers", [])
    if not isinstance(raw_modifiers, list):
        raise ValueError(f"invalid modifiers: expected a list, got {raw_modifiers!r}")
    modifiers = []
    for name in raw_modifiers:
        modifier = _MODIFIER_NAMES.get(_expect_str(name, "modifier"))
        if modifier is None:
            raise ValueError(f"unknown style modifier: {name}")
        modifiers.append(modifier)
    return StyleSpec(
        fg=None if fg is None else parse_style_color(_expect_str(fg, "fg color")),
        bg=None if bg is None else parse_style_color(_expect_str(bg, "bg color")),
        modifiers=tuple(modifiers),
    )


def _parse_component_style(data: dict[str, Any]) -> ComponentStyle:
    names = {f.name for f in fields(ComponentStyle)}
    values = {
        key: _parse_style_spec(_expect_table(value, f"component style {key}"))
        for key, value in data.items()
        if key in names
    }
    return ComponentStyle(**values)


def parse_theme(data: dict[str, Any]) -> Theme:
    """Build a theme from a parsed TOML table."""
    data = _expect_table(data, "theme")
    if "name" not in data:
        raise ValueError("missing field `name`")
    return Theme(
        name=_expect_str(data["name"], "theme name"),
        palette=_parse_palette(_expect_table(data.get("palette", {}), "palette")),
        component_style=_parse_component_style(
            _expect_table(data.get("component_style", {}), "component_style")
        ),
    )


def parse_theme_config(text: str) -> ThemeConfig:
    """Parse the themes defined in a theme config document."""
    document = tomllib.loads(text)
    themes = document.get("themes", [])
    if not isinstance(themes, list):
        raise ValueError("invalid themes: expected an array of tables")
    return ThemeConfig(themes=[parse_theme(theme) for theme in themes])


def load_theme_config(path: str | Path) -> ThemeConfig:
    """Load the theme config file from the ``path`` folder, merged with the defaults.

    Themes whose names are already taken are skipped. A missing or unreadable
    file leaves the default configuration.
    """
    config = ThemeConfig()
    file_path = Path(path) / THEME_CONFIG_FILE
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as err:
        logger.warning(
            "Failed to open the theme config file (path=%s): %s. "
            "Use the default configurations instead",
            file_path,
            err,
        )
        return config
    for theme in parse_theme_config(content).themes:
        if config.find_theme(theme.name) is None:
            config.themes.append(theme)
    return config