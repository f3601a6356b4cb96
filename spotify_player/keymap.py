"""Key bindings: commands, actions and the keymap config file."""

from __future__ import annotations

import enum
import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

from .key import KeySequence, parse_key_sequence

logger = logging.getLogger(__name__)

KEYMAP_CONFIG_FILE = "keymap.toml"

_VOLUME_CHANGE = "VolumeChange"

_UNIT_COMMANDS = (
    "None",
    "NextTrack",
    "PreviousTrack",
    "ResumePause",
    "PlayRandom",
    "Repeat",
    "ToggleFakeTrackRepeatMode",
    "Shuffle",
    "Mute",
    "SeekForward",
    "SeekBackward",
    "Quit",
    "ClosePopup",
    "SelectNextOrScrollDown",
    "SelectPreviousOrScrollUp",
    "PageSelectNextOrScrollDown",
    "PageSelectPreviousOrScrollUp",
    "SelectFirstOrScrollToTop",
    "SelectLastOrScrollToBottom",
    "ChooseSelected",
    "RefreshPlayback",
    "RestartIntegratedClient",
    "ShowActionsOnSelectedItem",
    "ShowActionsOnCurrentTrack",
    "AddSelectedItemToQueue",
    "BrowseUserPlaylists",
    "BrowseUserFollowedArtists",
    "BrowseUserSavedAlbums",
    "CurrentlyPlayingContextPage",
    "TopTrackPage",
    "RecentlyPlayedTrackPage",
    "LikedTrackPage",
    "LyricsPage",
    "LibraryPage",
    "SearchPage",
    "BrowsePage",
    "PreviousPage",
    "OpenCommandHelp",
    "Queue",
    "OpenSpotifyLinkFromClipboard",
    "SortTrackByTitle",
    "SortTrackByArtists",
    "SortTrackByAlbum",
    "SortTrackByDuration",
    "SortTrackByAddedDate",
    "ReverseTrackOrder",
    "SortLibraryAlphabetically",
    "SortLibraryByRecent",
    "MovePlaylistItemUp",
    "MovePlaylistItemDown",
    "CreatePlaylist",
    "JumpToCurrentTrackInContext",
    "JumpToHighlightTrackInContext",
    "FocusNextWindow",
    "FocusPreviousWindow",
    "SwitchTheme",
    "SwitchDevice",
    "Search",
)


def _constant_name(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()


@dataclass(frozen=True)
class Command:
    """A command that a key sequence can trigger.

    Every command is identified by its name; ``VolumeChange`` also carries
    the volume ``offset`` to apply. The commands without data are available
    as class attributes such as ``Command.NEXT_TRACK``.
    """

    name: str
    offset: int | None = None

    NAMES: ClassVar[frozenset[str]] = frozenset((*_UNIT_COMMANDS, _VOLUME_CHANGE))

    def __post_init__(self) -> None:
        if self.name not in self.NAMES:
            raise ValueError(f"unknown command: {self.name}")
        if self.name == _VOLUME_CHANGE:
            if not isinstance(self.offset, int) or isinstance(self.offset, bool):
                raise ValueError("VolumeChange needs an integer offset")
        elif self.offset is not None:
            raise ValueError(f"command {self.name} takes no offset")

    @classmethod
    def volume_change(cls, offset: int) -> Command:
        return cls(_VOLUME_CHANGE, offset)

    def __str__(self) -> str:
        if self.name == _VOLUME_CHANGE:
            return f"{_VOLUME_CHANGE} {{ offset: {self.offset} }}"
        return self.name


for _name in _UNIT_COMMANDS:
    setattr(Command, _constant_name(_name), Command(_name))


class Action(enum.Enum):
    """An action applied to an item such as a track, album or artist."""

    GO_TO_ARTIST = "GoToArtist"
    GO_TO_ALBUM = "GoToAlbum"
    GO_TO_RADIO = "GoToRadio"
    GO_TO_SHOW = "GoToShow"
    ADD_TO_LIBRARY = "AddToLibrary"
    ADD_TO_PLAYLIST = "AddToPlaylist"
    ADD_TO_QUEUE = "AddToQueue"
    ADD_TO_LIKED = "AddToLiked"
    DELETE_FROM_LIKED = "DeleteFromLiked"
    DELETE_FROM_LIBRARY = "DeleteFromLibrary"
    DELETE_FROM_PLAYLIST = "DeleteFromPlaylist"
    SHOW_ACTIONS_ON_ALBUM = "ShowActionsOnAlbum"
    SHOW_ACTIONS_ON_ARTIST = "ShowActionsOnArtist"
    SHOW_ACTIONS_ON_SHOW = "ShowActionsOnShow"
    TOGGLE_LIKED = "ToggleLiked"
    COPY_LINK = "CopyLink"
    FOLLOW = "Follow"
    UNFOLLOW = "Unfollow"


class ActionTarget(enum.Enum):
    """The item an action is applied to."""

    PLAYING_TRACK = "PlayingTrack"
    SELECTED_ITEM = "SelectedItem"


@dataclass(frozen=True)
class Keymap:
    """A key sequence mapped to a command."""

    key_sequence: KeySequence
    command: Command

    def include_in_help_screen(self) -> bool:
        return self.command != Command.NONE

    def __str__(self) -> str:
        return f"{self.key_sequence} -> {self.command}"


@dataclass(frozen=True)
class ActionMap:
    """A key sequence that triggers an action on a target."""

    key_sequence: KeySequence
    action: Action
    target: ActionTarget = ActionTarget.SELECTED_ITEM


_DEFAULT_BINDINGS: tuple[tuple[str, Command], ...] = (
    ("n", Command.NEXT_TRACK),
    ("p", Command.PREVIOUS_TRACK),
    (".", Command.PLAY_RANDOM),
    ("space", Command.RESUME_PAUSE),
    ("C-r", Command.REPEAT),
    ("M-r", Command.TOGGLE_FAKE_TRACK_REPEAT_MODE),
    ("C-s", Command.SHUFFLE),
    ("+", Command.volume_change(5)),
    ("-", Command.volume_change(-5)),
    ("_", Command.MUTE),
    (">", Command.SEEK_FORWARD),
    ("<", Command.SEEK_BACKWARD),
    ("enter", Command.CHOOSE_SELECTED),
    ("r", Command.REFRESH_PLAYBACK),
    ("/", Command.SEARCH),
    ("z", Command.QUEUE),
    ("C-z", Command.ADD_SELECTED_ITEM_TO_QUEUE),
    ("Z", Command.ADD_SELECTED_ITEM_TO_QUEUE),
    ("C-g", Command.JUMP_TO_HIGHLIGHT_TRACK_IN_CONTEXT),
    ("C-space", Command.SHOW_ACTIONS_ON_SELECTED_ITEM),
    ("g a", Command.SHOW_ACTIONS_ON_SELECTED_ITEM),
    ("a", Command.SHOW_ACTIONS_ON_CURRENT_TRACK),
    ("R", Command.RESTART_INTEGRATED_CLIENT),
    ("tab", Command.FOCUS_NEXT_WINDOW),
    ("backtab", Command.FOCUS_PREVIOUS_WINDOW),
    ("T", Command.SWITCH_THEME),
    ("D", Command.SWITCH_DEVICE),
    ("u p", Command.BROWSE_USER_PLAYLISTS),
    ("u a", Command.BROWSE_USER_FOLLOWED_ARTISTS),
    ("u A", Command.BROWSE_USER_SAVED_ALBUMS),
    ("g space", Command.CURRENTLY_PLAYING_CONTEXT_PAGE),
    ("g t", Command.TOP_TRACK_PAGE),
    ("g r", Command.RECENTLY_PLAYED_TRACK_PAGE),
    ("g y", Command.LIKED_TRACK_PAGE),
    ("g L", Command.LYRICS_PAGE),
    ("l", Command.LYRICS_PAGE),
    ("g l", Command.LIBRARY_PAGE),
    ("g s", Command.SEARCH_PAGE),
    ("g b", Command.BROWSE_PAGE),
    ("backspace", Command.PREVIOUS_PAGE),
    ("C-q", Command.PREVIOUS_PAGE),
    ("O", Command.OPEN_SPOTIFY_LINK_FROM_CLIPBOARD),
    ("?", Command.OPEN_COMMAND_HELP),
    ("C-h", Command.OPEN_COMMAND_HELP),
    ("q", Command.QUIT),
    ("C-c", Command.QUIT),
    ("esc", Command.CLOSE_POPUP),
    ("j", Command.SELECT_NEXT_OR_SCROLL_DOWN),
    ("C-n", Command.SELECT_NEXT_OR_SCROLL_DOWN),
    ("down", Command.SELECT_NEXT_OR_SCROLL_DOWN),
    ("k", Command.SELECT_PREVIOUS_OR_SCROLL_UP),
    ("C-p", Command.SELECT_PREVIOUS_OR_SCROLL_UP),
    ("up", Command.SELECT_PREVIOUS_OR_SCROLL_UP),
    ("page_up", Command.PAGE_SELECT_PREVIOUS_OR_SCROLL_UP),
    ("C-b", Command.PAGE_SELECT_PREVIOUS_OR_SCROLL_UP),
    ("page_down", Command.PAGE_SELECT_NEXT_OR_SCROLL_DOWN),
    ("C-f", Command.PAGE_SELECT_NEXT_OR_SCROLL_DOWN),
    ("g g", Command.SELECT_FIRST_OR_SCROLL_TO_TOP),
    ("home", Command.SELECT_FIRST_OR_SCROLL_TO_TOP),
    ("G", Command.SELECT_LAST_OR_SCROLL_TO_BOTTOM),
    ("end", Command.SELECT_LAST_OR_SCROLL_TO_BOTTOM),
    ("s t", Command.SORT_TRACK_BY_TITLE),
    ("s a", Command.SORT_TRACK_BY_ARTISTS),
    ("s A", Command.SORT_TRACK_BY_ALBUM),
    ("s d", Command.SORT_TRACK_BY_DURATION),
    ("s D", Command.SORT_TRACK_BY_ADDED_DATE),
    ("s r", Command.REVERSE_TRACK_ORDER),
    ("s l a", Command.SORT_LIBRARY_ALPHABETICALLY),
    ("s l r", Command.SORT_LIBRARY_BY_RECENT),
    ("C-k", Command.MOVE_PLAYLIST_ITEM_UP),
    ("C-j", Command.MOVE_PLAYLIST_ITEM_DOWN),
    ("N", Command.CREATE_PLAYLIST),
    ("g c", Command.JUMP_TO_CURRENT_TRACK_IN_CONTEXT),
)


def default_keymaps() -> list[Keymap]:
    """Return the built-in key bindings."""
    return [Keymap(parse_key_sequence(seq), command) for seq, command in _DEFAULT_BINDINGS]


@dataclass
class KeymapConfig:
    """The key bindings for commands and actions."""

    keymaps: list[Keymap] = field(default_factory=default_keymaps)
    actions: list[ActionMap] = field(default_factory=list)

    def merge(self, keymaps: list[Keymap], actions: list[ActionMap]) -> None:
        """Put the given bindings first, keeping current ones whose key sequence is unused."""
        used = {k.key_sequence for k in keymaps}
        self.keymaps = list(keymaps) + [k for k in self.keymaps if k.key_sequence not in used]
        used = {a.key_sequence for a in actions}
        self.actions = list(actions) + [a for a in self.actions if a.key_sequence not in used]

    def find_matched_prefix_keymaps(self, prefix: KeySequence) -> list[Keymap]:
        """Return the keymaps whose key sequence starts with ``prefix``."""
        return [k for k in self.keymaps if prefix.is_prefix(k.key_sequence)]

    def find_matched_prefix_actions(self, prefix: KeySequence) -> list[ActionMap]:
        """Return the action maps whose key sequence starts with ``prefix``."""
        return [a for a in self.actions if prefix.is_prefix(a.key_sequence)]

    def has_matched_prefix(self, prefix: KeySequence) -> bool:
        """Return True if any command or action binding starts with ``prefix``."""
        return bool(
            self.find_matched_prefix_keymaps(prefix) or self.find_matched_prefix_actions(prefix)
        )

    def find_command_from_key_sequence(self, key_sequence: KeySequence) -> Command | None:
        """Return the command bound to ``key_sequence``, ignoring ``None`` bindings."""
        return next(
            (
                k.command
                for k in self.keymaps
                if k.key_sequence == key_sequence and k.command != Command.NONE
            ),
            None,
        )

    def find_action_from_key_sequence(
        self, key_sequence: KeySequence
    ) -> tuple[Action, ActionTarget] | None:
        """Return the action and its target bound to ``key_sequence``."""
        return next(
            ((a.action, a.target) for a in self.actions if a.key_sequence == key_sequence),
            None,
        )

    def find_command_or_action_from_key_sequence(
        self, key_sequence: KeySequence
    ) -> Command | tuple[Action, ActionTarget] | None:
        """Return the bound command, else the bound (action, target) pair, else None."""
        command = self.find_command_from_key_sequence(key_sequence)
        if command is not None:
            return command
        return self.find_action_from_key_sequence(key_sequence)


def parse_command(value: Any) -> Command:
    """Parse a command written as ``"NextTrack"`` or ``{VolumeChange = {offset = 5}}``."""
    if isinstance(value, str):
        if value == _VOLUME_CHANGE:
            raise ValueError("VolumeChange needs an offset")
        return Command(value)
    if isinstance(value, dict) and len(value) == 1:
        ((name, body),) = value.items()
        if name == _VOLUME_CHANGE:
            if not isinstance(body, dict) or "offset" not in body:
                raise ValueError("missing field `offset`")
            return Command.volume_change(body["offset"])
        raise ValueError(f"unknown command: {name}")
    raise ValueError(f"invalid command: {value!r}")


def _require(entry: Any, name: str) -> Any:
    if not isinstance(entry, dict):
        raise ValueError(f"expected a table, got {entry!r}")
    if name not in entry:
        raise ValueError(f"missing field `{name}`")
    return entry[name]


def _parse_key_sequence_field(entry: Any) -> KeySequence:
    text = _require(entry, "key_sequence")
    if not isinstance(text, str):
        raise ValueError(f"invalid key sequence: {text!r}")
    return parse_key_sequence(text)


def _parse_enum(enum_cls: type[enum.Enum], value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"unknown {enum_cls.__name__}: {value!r}") from None


def _parse_keymap(entry: Any) -> Keymap:
    return Keymap(_parse_key_sequence_field(entry), parse_command(_require(entry, "command")))


def _parse_action_map(entry: Any) -> ActionMap:
    key_sequence = _parse_key_sequence_field(entry)
    action = _parse_enum(Action, _require(entry, "action"))
    target = _parse_enum(ActionTarget, entry.get("target", ActionTarget.SELECTED_ITEM.value))
    return ActionMap(key_sequence, action, target)


def _list_field(document: dict[str, Any], name: str) -> list[Any]:
    value = document.get(name, [])
    if not isinstance(value, list):
        raise ValueError(f"invalid {name}: expected an array of tables")
    return value


def parse_keymap_config(text: str) -> KeymapConfig:
    """Parse only the bindings written in a keymap config document."""
    document = tomllib.loads(text)
    return KeymapConfig(
        keymaps=[_parse_keymap(e) for e in _list_field(document, "keymaps")],
        actions=[_parse_action_map(e) for e in _list_field(document, "actions")],
    )


def load_keymap_config(path: str | Path) -> KeymapConfig:
    """Load the keymap config file from the ``path`` folder, merged with the defaults.

    A missing or unreadable file leaves the default configuration.
    """
    config = KeymapConfig()
    file_path = Path(path) / KEYMAP_CONFIG_FILE
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as err:
        logger.warning(
            "Failed to open the keymap config file (path=%s): %s. "
            "Use the default configurations instead",
            file_path,
            err,
        )
        return config
    parsed = parse_keymap_config(content)
    config.merge(parsed.keymaps, parsed.actions)
    return config