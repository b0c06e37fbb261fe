from inboxthread.domain.entities.email_address import EmailAddress
from inboxthread.infrastructure.email.addresses import parse_email_address
from inboxthread.infrastructure.email.thread_key import build_thread_key


def _addrs(*raw):
    return [parse_email_address(r) for r in raw]


def test_key_ignores_participant_order():
    a = build_thread_key("Need help", _addrs("alice@example.com", "bob@example.org"))
    b = build_thread_key("Need help", _addrs("bob@example.org", "alice@example.com"))
    assert a == b


def test_key_ignores_reply_prefixes_and_subject_case():
    original = build_thread_key("Need help", _addrs("alice@example.com", "bob@example.org"))
    reply = build_thread_key("RE: Re: need HELP", _addrs("bob@example.org", "alice@example.com"))
    assert original == reply


def test_key_ignores_duplicates_and_address_casing():
    a = build_thread_key("x", _addrs("Alice@Example.com", "bob@example.org", "alice@example.com"))
    b = build_thread_key("x", _addrs("alice@example.com", "bob@example.org"))
    assert a == b


def test_key_differs_by_subject_and_participants():
    base = build_thread_key("Need help", _addrs("alice@example.com", "bob@example.org"))
    assert build_thread_key("Other", _addrs("alice@example.com", "bob@example.org")) != base
    assert build_thread_key("Need help", _addrs("alice@example.com", "carol@example.org")) != base


def test_key_layout():
    key = build_thread_key("Re: Need Help", _addrs("bob@example.org", "Alice <alice@example.com>"))
    assert key == "need help|alice@example.com,bob@example.org"


def test_key_accepts_strings_and_skips_blank_participants():
    from_strings = build_thread_key("x", ["Alice <alice@example.com>", "", "bob@example.org"])
    from_objects = build_thread_key("x", [EmailAddress(address="alice@example.com"), EmailAddress(address="bob@example.org")])
    assert from_strings == from_objects


def test_key_with_nothing_to_go_on():
    assert build_thread_key("", []) == "|"
