import pytest

from inboxthread.domain.entities.email_address import EmailAddress
from inboxthread.infrastructure.email.addresses import (
    extract_domain,
    parse_email_address,
    parse_email_addresses,
    split_address_list,
)


@pytest.mark.parametrize(
    "raw, name, address",
    [
        ("John Doe <john@example.com>", "John Doe", "john@example.com"),
        ('"John Doe" <john@example.com>', "John Doe", "john@example.com"),
        ('"Doe, John" <john@example.com>', "Doe, John", "john@example.com"),
        ("<john@example.com>", "", "john@example.com"),
        ("john@example.com", "", "john@example.com"),
        ("  john@example.com  ", "", "john@example.com"),
        ("John Doe john@example.com", "John Doe", "john@example.com"),
        ("John <john@example.com> (work)", "John", "john@example.com"),
    ],
    ids=["named", "quoted", "quoted-comma", "brackets-only", "bare", "padded", "space-separated", "trailing-comment"],
)
def test_parse_email_address_forms(raw, name, address):
    parsed = parse_email_address(raw)
    assert parsed.name == name
    assert parsed.address == address


def test_address_is_lowercased_but_display_casing_kept():
    parsed = parse_email_address("Jane <Jane.Doe@Example.COM>")
    assert parsed.address == "jane.doe@example.com"
    assert parsed.raw_address == "Jane.Doe@Example.COM"
    assert parsed.display() == "Jane <Jane.Doe@Example.COM>"


@pytest.mark.parametrize("raw", ["not an address", "Support Team <support>", "   "])
def test_parse_email_address_without_at_keeps_input(raw):
    parsed = parse_email_address(raw)
    assert parsed == EmailAddress(address=raw.strip(), name="", raw_address=raw.strip())


def test_parse_email_address_never_raises_on_non_strings():
    assert parse_email_address(None).address == ""
    assert parse_email_address(42).address == ""


def test_split_respects_quotes_and_brackets():
    value = '"Doe, John" <john@x.com>, <weird,addr@x.com>, jane@x.com'
    assert split_address_list(value) == ['"Doe, John" <john@x.com>', "<weird,addr@x.com>", "jane@x.com"]


def test_parse_email_addresses_drops_empty_tokens_and_keeps_duplicates():
    parsed = parse_email_addresses("a@x.com,, b@x.com, a@x.com,")
    assert [p.address for p in parsed] == ["a@x.com", "b@x.com", "a@x.com"]


def test_parse_email_addresses_accepts_lists():
    parsed = parse_email_addresses(["A <a@x.com>", "b@x.com, c@x.com"])
    assert [p.address for p in parsed] == ["a@x.com", "b@x.com", "c@x.com"]
    assert parsed[0].name == "A"


@pytest.mark.parametrize("value", [None, "", []])
def test_parse_email_addresses_empty(value):
    assert parse_email_addresses(value) == []


@pytest.mark.parametrize(
    "address, domain",
    [
        ("user@sub.example.org", "sub.example.org"),
        ("User@EXAMPLE.com", "example.com"),
        ('"odd@name"@example.net', "example.net"),
        ("no-at-sign", ""),
        ("", ""),
    ],
)
def test_extract_domain(address, domain):
    assert extract_domain(address) == domain


def test_email_address_domain_property():
    assert parse_email_address("Ops <ops@Mail.Example.org>").domain == "mail.example.org"


@pytest.mark.parametrize("value", [5, True, 3.5, {"to": "a@x.com"}, ("a@x.com", 7)])
def test_parse_email_addresses_ignores_non_text(value):
    expected = ["a@x.com"] if isinstance(value, tuple) else []
    assert [p.address for p in parse_email_addresses(value)] == expected


def test_domain_property_and_extract_domain_agree():
    addr = parse_email_address("Ops <ops@Mail.Example.org>")
    assert addr.domain == extract_domain(addr.raw_address) == "mail.example.org"
