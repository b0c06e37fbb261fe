from datetime import datetime, timezone

from inboxthread.domain.entities.email_address import EmailAddress
from inboxthread.domain.entities.parsed_email import ParsedEmail


def _email(**overrides):
    fields = dict(
        message_id="m@x",
        in_reply_to=None,
        references=(),
        sender=EmailAddress(address="alice@example.com", name="Alice", raw_address="Alice@Example.com"),
        to=(EmailAddress(address="bob@example.org"),),
        cc=(),
        bcc=(),
        subject="Re: hi",
        normalized_subject="hi",
        date=datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc),
        text="body",
        is_auto_reply=False,
        thread_key="hi|alice@example.com,bob@example.org",
    )
    fields.update(overrides)
    return ParsedEmail(**fields)


def test_reference_chain_appends_in_reply_to():
    assert _email(references=("a", "b"), in_reply_to="c").reference_chain == ("a", "b", "c")


def test_reference_chain_moves_in_reply_to_to_the_end():
    assert _email(references=("a", "c", "b"), in_reply_to="c").reference_chain == ("a", "b", "c")


def test_reference_chain_without_in_reply_to():
    assert _email(references=("a", "b")).reference_chain == ("a", "b")
    assert _email().reference_chain == ()


def test_participants_exclude_cc_and_bcc():
    email = _email(cc=(EmailAddress(address="carol@example.net"),), bcc=(EmailAddress(address="audit@example.com"),))
    assert [p.address for p in email.participants] == ["alice@example.com", "bob@example.org"]


def test_dict_round_trip_keeps_every_field():
    email = _email(
        in_reply_to="p@x",
        references=("r@x", "p@x"),
        cc=(EmailAddress(address="carol@example.net", name="Carol"),),
        bcc=(EmailAddress(address="audit@example.com"),),
        raw_headers={"X-Test": "1"},
    )
    data = email.to_dict()
    assert data["from"]["raw_address"] == "Alice@Example.com"
    assert data["date"] == "2024-03-01T10:00:00+00:00"
    assert data["bcc"] == [{"name": "", "address": "audit@example.com", "raw_address": ""}]
    assert ParsedEmail.from_dict(data) == email
