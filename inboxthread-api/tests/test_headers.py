import pytest

from inboxthread.infrastructure.email.headers import parse_in_reply_to, parse_message_id, parse_references


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("<abc@example.com>", "abc@example.com"),
        ("  <abc@example.com>  ", "abc@example.com"),
        ("abc@example.com", "abc@example.com"),
        ("< abc@example.com >", "abc@example.com"),
        ("", None),
        ("   ", None),
        ("<>", None),
        (None, None),
    ],
)
def test_parse_message_id(raw, expected):
    assert parse_message_id(raw) == expected


def test_parse_message_id_strips_only_one_layer():
    assert parse_message_id("<<abc@x>>") == "<abc@x>"


def test_parse_in_reply_to():
    assert parse_in_reply_to("<o@x>") == "o@x"
    assert parse_in_reply_to(None) is None
    assert parse_in_reply_to("") is None


def test_parse_in_reply_to_takes_direct_parent_when_several_listed():
    assert parse_in_reply_to("<a@x> <b@x>") == "b@x"


def test_parse_references_dedupes_and_keeps_order():
    assert parse_references("<a@x> <b@x> <a@x>") == ["a@x", "b@x"]


@pytest.mark.parametrize(
    "raw",
    [
        "<a@x>\r\n\t<b@x>",
        "<a@x>,<b@x>",
        "<a@x><b@x>",
        ["<a@x>", "<b@x>"],
    ],
    ids=["folded", "comma", "no-separator", "list"],
)
def test_parse_references_separators(raw):
    assert parse_references(raw) == ["a@x", "b@x"]


@pytest.mark.parametrize("raw", [None, "", "   ", []])
def test_parse_references_empty(raw):
    assert parse_references(raw) == []


@pytest.mark.parametrize("raw", [42, True, 1.5, {"a@x": 1}])
def test_parse_references_ignores_non_text(raw):
    assert parse_references(raw) == []


def test_parse_references_accepts_tuples_and_skips_non_strings():
    assert parse_references(("<a@x>", 3, "<b@x>")) == ["a@x", "b@x"]
