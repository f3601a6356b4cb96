import pytest

from spotify_player.key import parse_key_sequence
from spotify_player.keymap import (
    Action,
    ActionMap,
    ActionTarget,
    Command,
    Keymap,
    KeymapConfig,
    default_keymaps,
    load_keymap_config,
    parse_command,
    parse_keymap_config,
)


def seq(text):
    return parse_key_sequence(text)


def test_default_bindings():
    config = KeymapConfig()
    assert config.find_command_from_key_sequence(seq("n")) == Command.NEXT_TRACK
    assert config.find_command_from_key_sequence(seq("+")) == Command.volume_change(5)
    assert config.find_command_from_key_sequence(seq("-")) == Command.volume_change(-5)
    assert config.find_command_from_key_sequence(seq("s l r")) == Command.SORT_LIBRARY_BY_RECENT
    assert config.actions == []


def test_default_key_sequences_are_unique():
    sequences = [k.key_sequence for k in default_keymaps()]
    assert len(sequences) == len(set(sequences))


def test_prefix_matching():
    config = KeymapConfig()
    matched = config.find_matched_prefix_keymaps(seq("s l"))
    assert {k.command for k in matched} == {
        Command.SORT_LIBRARY_ALPHABETICALLY,
        Command.SORT_LIBRARY_BY_RECENT,
    }
    assert config.has_matched_prefix(seq("g"))
    assert not config.has_matched_prefix(seq("x"))
    assert config.find_command_from_key_sequence(seq("g")) is None


def test_parse_command_forms():
    assert parse_command("Quit") == Command.QUIT
    assert parse_command({"VolumeChange": {"offset": -5}}) == Command.volume_change(-5)
    assert str(Command.volume_change(5)) == "VolumeChange { offset: 5 }"


@pytest.mark.parametrize(
    "value",
    ["NoSuchCommand", "VolumeChange", {"VolumeChange": {}}, {"Quit": {}}, 3],
)
def test_parse_command_errors(value):
    with pytest.raises(ValueError):
        parse_command(value)


def test_command_validation():
    with pytest.raises(ValueError):
        Command("VolumeChange")
    with pytest.raises(ValueError):
        Command("Quit", offset=1)


def test_parse_keymap_config():
    text = """
[[keymaps]]
key_sequence = "q"
command = "None"

[[keymaps]]
key_sequence = "C-v"
command = { VolumeChange = { offset = 10 } }

[[actions]]
key_sequence = "g A"
action = "GoToAlbum"

[[actions]]
key_sequence = "C-l"
action = "ToggleLiked"
target = "PlayingTrack"
"""
    config = parse_keymap_config(text)
    assert config.keymaps == [
        Keymap(seq("q"), Command.NONE),
        Keymap(seq("C-v"), Command.volume_change(10)),
    ]
    assert config.actions == [
        ActionMap(seq("g A"), Action.GO_TO_ALBUM, ActionTarget.SELECTED_ITEM),
        ActionMap(seq("C-l"), Action.TOGGLE_LIKED, ActionTarget.PLAYING_TRACK),
    ]


@pytest.mark.parametrize(
    "text",
    [
        '[[keymaps]]\ncommand = "Quit"\n',
        '[[keymaps]]\nkey_sequence = "q"\n',
        '[[keymaps]]\nkey_sequence = "foo"\ncommand = "Quit"\n',
        '[[actions]]\nkey_sequence = "q"\naction = "Nope"\n',
        '[[actions]]\nkey_sequence = "q"\naction = "CopyLink"\ntarget = "Nope"\n',
    ],
)
def test_parse_keymap_config_errors(text):
    with pytest.raises(ValueError):
        parse_keymap_config(text)


def test_load_without_file_gives_defaults(tmp_path):
    config = load_keymap_config(tmp_path)
    assert config.keymaps == default_keymaps()
    assert config.actions == []


def test_load_merges_user_bindings(tmp_path):
    (tmp_path / "keymap.toml").write_text(
        """
[[keymaps]]
key_sequence = "q"
command = "None"

[[keymaps]]
key_sequence = "n"
command = "PreviousTrack"

[[actions]]
key_sequence = "C-y"
action = "CopyLink"
""",
        encoding="utf-8",
    )
    config = load_keymap_config(tmp_path)
    assert config.find_command_from_key_sequence(seq("q")) is None
    assert config.find_command_from_key_sequence(seq("n")) == Command.PREVIOUS_TRACK
    assert config.find_command_from_key_sequence(seq("C-c")) == Command.QUIT
    assert len(config.keymaps) == len(default_keymaps())
    assert config.find_command_or_action_from_key_sequence(seq("C-y")) == (
        Action.COPY_LINK,
        ActionTarget.SELECTED_ITEM,
    )


def test_merge_keeps_user_bindings_first():
    config = KeymapConfig(keymaps=[Keymap(seq("a"), Command.QUIT)], actions=[])
    user = [Keymap(seq("b"), Command.MUTE), Keymap(seq("a"), Command.SHUFFLE)]
    config.merge(user, [])
    assert config.keymaps == user


def test_command_takes_precedence_over_action():
    config = KeymapConfig(
        keymaps=[Keymap(seq("x"), Command.QUIT)],
        actions=[ActionMap(seq("x"), Action.FOLLOW), ActionMap(seq("y"), Action.UNFOLLOW)],
    )
    assert config.find_command_or_action_from_key_sequence(seq("x")) == Command.QUIT
    assert config.find_command_or_action_from_key_sequence(seq("y")) == (
        Action.UNFOLLOW,
        ActionTarget.SELECTED_ITEM,
    )
    assert config.find_command_or_action_from_key_sequence(seq("z")) is None
    assert config.has_matched_prefix(seq("y"))


def test_include_in_help_screen():
    assert Keymap(seq("q"), Command.QUIT).include_in_help_screen()
    assert not Keymap(seq("q"), Command.NONE).include_in_help_screen()


def test_keymap_str():
    assert str(Keymap(seq("g a"), Command.SHOW_ACTIONS_ON_SELECTED_ITEM)) == (
        "g a -> ShowActionsOnSelectedItem"
    )