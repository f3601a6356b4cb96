# spotify_player

The configuration layer of a terminal music player: key parsing, key-sequence
bindings, list navigation, colour themes, application settings and clipboard
access.

## Installation

```
pip install .
```

To run the tests, install the `test` extra and run `pytest`:

```
pip install ".[test]"
pytest
```

## Keys and key sequences

`spotify_player.key` reads key descriptions such as `q`, `C-r` (Control+r),
`M-r` (Alt+r), `space`, `enter`, `page_down` or `f1` to `f12`, and sequences
of them separated by single spaces, such as `g a`. Invalid text raises
`ValueError`.

```python
from spotify_player.key import Modifier, key_from_event, parse_key, parse_key_sequence

key = parse_key("C-r")
seq = parse_key_sequence("g a")
print(seq)                                            # g a
print(parse_key_sequence("g").is_prefix(seq))         # True
print(key_from_event("R", Modifier.SHIFT))            # R
```

`key_from_event(code, modifiers)` builds a `Key` from a terminal key event.
Shift is dropped; any combination other than no modifier, Ctrl alone or Alt
alone gives the unknown key.

## Key bindings

`spotify_player.keymap` defines `Command` (for example `Command.NEXT_TRACK`
or `Command.volume_change(5)`), `Action`, `ActionTarget`, the built-in
bindings (`default_keymaps()`) and `KeymapConfig`.
`load_keymap_config(path)` reads `keymap.toml` from the folder `path`. A
binding in the file replaces the built-in binding for the same key sequence;
if the file is missing or unreadable, the defaults are used and a warning is
logged.

```toml
[[keymaps]]
command = "NextTrack"
key_sequence = "g n"

[[keymaps]]
command = { VolumeChange = { offset = 1 } }
key_sequence = "C-+"

[[actions]]
action = "GoToArtist"
key_sequence = "g A"
target = "PlayingTrack"
```

`target` defaults to `SelectedItem`. A binding to the `None` command disables
a key sequence.

`KeymapConfig.find_command_or_action_from_key_sequence` returns the bound
`Command`, else an `(Action, ActionTarget)` pair, else `None`.
`KeymapConfig.has_matched_prefix` tells whether further keys could still
complete a binding.

## Navigation

`spotify_player.navigation.handle_navigation_command(command, page, index,
length, count=None, page_size=20)` applies the select-next/previous,
page-next/previous and first/last commands to anything with a
`select(index)` method, clamping to the list bounds. It returns `False` for
other commands and for an empty list.

## Themes

`spotify_player.theme` reads `theme.toml` with `load_theme_config(path)`. A
theme defines a palette and optional styles for each UI component:

```toml
[[themes]]
name = "mine"
[themes.palette]
background = "black"
foreground = "white"
[themes.component_style]
selection = { bg = "#3b4252", modifiers = ["Bold"] }
```

The built-in theme is called `default`; themes in the file whose name is
already taken are skipped. `ThemeConfig.find_theme(name)` returns a theme by
name or `None`. Methods such as `Theme.playback_track()` return the resolved
`Style` (foreground, background and modifiers) for each component, falling
back to a built-in style when the theme does not set one.

## Application settings

`spotify_player.config` holds the application settings (`AppConfig`) and
reads them from `app.toml` with `load_app_config(path)`. Settings missing
from the file keep their defaults; if the file does not exist yet, it is
written with the defaults. A library layout whose `playlist_percent` and
`album_percent` add up to more than 99 raises `ValueError`.
`enable_streaming` accepts `"Always"`, `"DaemonOnly"`, `"Never"`, or a
boolean.

`AppConfig.get_client_id()` runs `client_id_command` when it is set and
returns its trimmed output; a failing command raises `CommandError` holding
its stderr. `load_configs(config_folder, cache_folder)` loads the
application, keymap and theme settings together. `get_config_folder_path()`
and `get_cache_folder_path()` give the default locations under the home
directory.

## Clipboard

`spotify_player.clipboard` picks a clipboard tool from the environment
(`pbcopy`/`pbpaste`, `wl-copy`/`wl-paste` under Wayland, `xclip` or `xsel`
under X). `get_clipboard_content()` and `execute_copy_command(text)` use the
tool chosen on first use. When no tool is found, both raise `ClipboardError`.

## What this package does not do

It does not play music, talk to any streaming service, or draw a terminal
interface, and it installs no command. It provides the settings, bindings,
themes and helpers such a player is built on.