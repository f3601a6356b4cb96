import pytest

from spotify_player.key import (
    UNKNOWN_KEY,
    Key,
    KeySequence,
    Modifier,
    key_from_event,
    parse_key,
    parse_key_sequence,
)


@pytest.mark.parametrize(
    "text",
    ["n", ".", "+", "-", "Z", "?", "space", "enter", "tab", "backtab", "backspace",
     "esc", "page_up", "page_down", "home", "end", "f1", "f12", "C-r", "M-r",
     "C-space", "C-z", "M-enter"],
)
def test_key_round_trip(text):
    assert str(parse_key(text)) == text


def test_parse_plain_char():
    assert parse_key("n") == Key("n", Modifier.NONE)


def test_parse_ctrl_and_alt():
    assert parse_key("C-r").modifier == Modifier.CTRL
    assert parse_key("M-r").modifier == Modifier.ALT
    assert parse_key("C-r").code == parse_key("r").code


def test_space_is_space_char():
    assert parse_key("space").code == " "


@pytest.mark.parametrize("text", ["", " ", "ab", "X-a", "C-ab", "C- ", "f13", "C-"])
def test_parse_key_errors(text):
    with pytest.raises(ValueError):
        parse_key(text)


def test_sequence_round_trip():
    for text in ["g a", "s l a", "u A", "g space", "C-q"]:
        assert str(parse_key_sequence(text)) == text


def test_sequence_keys():
    seq = parse_key_sequence("s l r")
    assert seq.keys == (parse_key("s"), parse_key("l"), parse_key("r"))
    assert len(seq) == 3


@pytest.mark.parametrize("text", ["", "g  a", "g bad", "g "])
def test_sequence_errors(text):
    with pytest.raises(ValueError):
        parse_key_sequence(text)


def test_is_prefix():
    g = parse_key_sequence("g")
    ga = parse_key_sequence("g a")
    gb = parse_key_sequence("g b")
    assert g.is_prefix(ga)
    assert ga.is_prefix(ga)
    assert not ga.is_prefix(g)
    assert not ga.is_prefix(gb)
    assert KeySequence().is_prefix(ga)


def test_sequence_append():
    seq = parse_key_sequence("g") + parse_key("a")
    assert seq == parse_key_sequence("g a")


def test_event_shift_dropped():
    assert key_from_event("A", Modifier.SHIFT) == parse_key("A")
    assert key_from_event("r", Modifier.CTRL | Modifier.SHIFT) == parse_key("C-r")


def test_event_plain_and_modifiers():
    assert key_from_event("n") == parse_key("n")
    assert key_from_event("r", Modifier.ALT) == parse_key("M-r")
    assert key_from_event("enter", [Modifier.CTRL]) == parse_key("C-enter")


def test_event_unknown_combination():
    key = key_from_event("a", Modifier.CTRL | Modifier.ALT)
    assert key == UNKNOWN_KEY
    assert key.is_unknown
    assert str(key) == "unknown key"


def test_display_unknown_code_raises():
    with pytest.raises(ValueError):
        str(Key("f20"))


def test_sequence_hashable_equality():
    assert {parse_key_sequence("g a"): 1}[parse_key_sequence("g a")] == 1