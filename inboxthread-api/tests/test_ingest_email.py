from datetime import datetime, timezone

import pytest

from inboxthread.application.use_cases import IngestEmailUseCase, ThreadResolver
from inboxthread.domain.entities.thread import ResolutionRule


@pytest.fixture(name="use_case")
def use_case_fixture(store, clock):
    return IngestEmailUseCase(store=store, resolver=ThreadResolver(store, clock=clock))


def test_new_message_is_processed(use_case, make_payload):
    result = use_case.ingest(make_payload())

    assert result.status == "processed"
    assert result.thread_id == "o@x"
    assert result.message_key == "o@x"
    assert result.is_new_thread is True
    assert result.rule is ResolutionRule.NEW_THREAD
    assert result.reason is None


def test_reply_joins_thread(use_case, store, make_payload):
    use_case.ingest(make_payload())
    result = use_case.ingest(make_payload(message_id="<r@x>", in_reply_to="<o@x>", subject="Re: Need help"))

    assert result.status == "processed"
    assert result.thread_id == "o@x"
    assert result.is_new_thread is False
    assert [m.message_key for m in store.list_messages("o@x")] == ["o@x", "r@x"]


def test_redelivery_reports_duplicate(use_case, make_payload):
    use_case.ingest(make_payload())
    result = use_case.ingest(make_payload())

    assert result.status == "duplicate"
    assert result.thread_id == "o@x"
    assert result.reason == "already ingested"


def test_auto_reply_is_skipped_and_not_stored(use_case, store, make_payload):
    result = use_case.ingest(make_payload(subject="Automatic reply: Need help", message_id="<ooo@x>"))

    assert result.status == "skipped"
    assert result.reason == "auto-reply"
    assert result.message_key == "ooo@x"
    assert result.thread_id is None
    assert store.get_thread("ooo@x") is None


def test_auto_reply_threaded_when_not_skipping(store, clock, make_payload):
    use_case = IngestEmailUseCase(store=store, resolver=ThreadResolver(store, clock=clock), skip_auto_replies=False)
    result = use_case.ingest(make_payload(headers={"Auto-Submitted": "auto-replied"}))

    assert result.status == "processed"
    assert store.list_messages(result.thread_id)[0].email.is_auto_reply is True


def test_received_at_used_when_date_missing(use_case, store, make_payload):
    received = datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc)
    result = use_case.ingest(make_payload(date=None), received_at=received)

    assert store.list_messages(result.thread_id)[0].date == received


def test_default_resolver_is_built_from_store(memory_store, make_payload):
    use_case = IngestEmailUseCase(store=memory_store)
    assert use_case.resolver.store is memory_store
    assert use_case.ingest(make_payload()).status == "processed"


def test_merge_is_reported(use_case, make_payload):
    use_case.ingest(make_payload(subject="Alpha", message_id="<a@x>"))
    use_case.ingest(make_payload(subject="Beta", message_id="<b@x>"))
    result = use_case.ingest(make_payload(subject="Gamma", message_id="<c@x>", references="<a@x> <b@x>"))

    assert result.thread_id == "a@x"
    assert result.merged_thread_ids == ["b@x"]
    assert result.rule is ResolutionRule.REFERENCES
