from __future__ import annotations

from datetime import datetime, timezone

import pytest

from subsidy_navigator.engine import (
    DeduplicationCheck,
    RecordAssembler,
    StaticRecordSource,
    SummarizationFanout,
    Summarizer,
)
from subsidy_navigator.errors import FanoutError, StoreError, SummarizationError
from subsidy_navigator.pipeline import SubsidyPipeline

from tests.conftest import ACCOUNTANT_PAYLOAD, CLIENT_PAYLOAD, COLLECTION, TAGS_PAYLOAD, FakeChatClient


def _urls(store) -> list[str]:
    return [doc["source_url"] for doc in store.list_documents(COLLECTION)]


def test_first_run_persists_each_new_candidate(make_pipeline, fake_client, candidate_items, sqlite_store) -> None:
    pipeline: SubsidyPipeline = make_pipeline(fake_client, candidate_items)
    result = pipeline.run()

    assert result.summary() == {"processed": 2, "skipped": 0, "failed": 0}
    ids = [record.id for record in result.records]
    assert len(set(ids)) == 2 and all(ids)
    assert _urls(sqlite_store) == [item["url"] for item in candidate_items]


def test_second_run_on_unchanged_source_adds_nothing(
    make_pipeline, fake_client, candidate_items, sqlite_store
) -> None:
    make_pipeline(fake_client, candidate_items).run()
    calls_after_first = len(fake_client.calls)

    second = make_pipeline(fake_client, candidate_items).run()

    assert second.records == []
    assert second.skipped == [item["url"] for item in candidate_items]
    assert len(sqlite_store.list_documents(COLLECTION)) == 2
    # duplicates never reach the AI collaborator
    assert len(fake_client.calls) == calls_after_first


def test_existing_url_is_not_written_again(make_pipeline, fake_client, candidate_items, sqlite_store) -> None:
    existing = dict(candidate_items[0])
    sqlite_store.set_document(COLLECTION, "pre-existing", {"source_url": existing["url"], "name": "old"})

    result = make_pipeline(fake_client, candidate_items).run()

    assert result.skipped == [existing["url"]]
    assert [record.source_url for record in result.records] == [candidate_items[1]["url"]]
    assert sqlite_store.get_document(COLLECTION, "pre-existing")["name"] == "old"
    assert _urls(sqlite_store).count(existing["url"]) == 1


def test_persisted_record_carries_fanout_values(make_pipeline, fake_client, candidate_items, sqlite_store) -> None:
    result = make_pipeline(fake_client, candidate_items[:1]).run()
    record = result.records[0]
    stored = sqlite_store.get_document(COLLECTION, record.id)

    assert stored["id"] == record.id
    assert stored["name"] == candidate_items[0]["name"]
    assert stored["source_url"] == candidate_items[0]["url"]
    assert stored["processed_date"]
    assert stored["industry_tags"] == TAGS_PAYLOAD["industry_tags"]
    assert stored["summary_for_client"] == CLIENT_PAYLOAD
    assert stored["summary_for_accountant"] == ACCOUNTANT_PAYLOAD
    assert stored["deadline"].startswith("2025-12-31T00:00:00")


@pytest.mark.parametrize("failing_task", ["client_summary", "accountant_summary", "tagging"])
def test_single_failed_summary_blocks_the_record(
    make_pipeline, candidate_items, sqlite_store, failing_task
) -> None:
    client = FakeChatClient({failing_task: "not json at all"})
    result = make_pipeline(client, candidate_items[:1]).run()

    assert result.records == []
    assert len(result.failures) == 1
    assert result.failures[0].stage == "summarize"
    assert failing_task in result.failures[0].error
    assert sqlite_store.list_documents(COLLECTION) == []


def test_failing_candidate_does_not_stop_later_ones(make_pipeline, candidate_items, sqlite_store) -> None:
    def _fail_for_a(prompt: str):
        if "補助金Aの本文" in prompt:
            return RuntimeError("quota exceeded")
        return TAGS_PAYLOAD

    client = FakeChatClient({"tagging": _fail_for_a})
    result = make_pipeline(client, candidate_items).run()

    assert [failure.url for failure in result.failures] == [candidate_items[0]["url"]]
    assert _urls(sqlite_store) == [candidate_items[1]["url"]]


def test_fail_fast_aborts_the_run(make_pipeline, candidate_items, sqlite_store) -> None:
    client = FakeChatClient({"client_summary": {"merit": "missing other fields"}})
    pipeline = make_pipeline(client, candidate_items, fail_fast=True)

    with pytest.raises(FanoutError) as excinfo:
        pipeline.run()

    assert isinstance(excinfo.value.failures["client_summary"], SummarizationError)
    assert sqlite_store.list_documents(COLLECTION) == []


@pytest.mark.parametrize("deadline", ["予算がなくなり次第終了", "0001-01-01T00:00:00+09:00"])
def test_unparseable_deadline_falls_back_to_processing_time(
    make_pipeline, candidate_items, sqlite_store, deadline
) -> None:
    fixed_now = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)
    client = FakeChatClient({"client_summary": {**CLIENT_PAYLOAD, "deadline": deadline}})
    result = make_pipeline(client, candidate_items[:1], clock=lambda: fixed_now).run()

    record = result.records[0]
    assert record.deadline == record.processed_date == fixed_now
    stored = sqlite_store.get_document(COLLECTION, record.id)
    assert stored["deadline"] == stored["processed_date"]


def test_write_failure_is_isolated(make_pipeline, fake_client, candidate_items, sqlite_store, monkeypatch) -> None:
    original = sqlite_store.set_document

    def _flaky(collection, doc_id, document):
        if document["source_url"] == candidate_items[0]["url"]:
            raise StoreError("disk full")
        original(collection, doc_id, document)

    monkeypatch.setattr(sqlite_store, "set_document", _flaky)
    result = make_pipeline(fake_client, candidate_items).run()

    assert result.failures[0].stage == "persist"
    assert [record.source_url for record in result.records] == [candidate_items[1]["url"]]


def test_missing_ai_client_fails_each_candidate(candidate_items, sqlite_store, fanout_executor, ai_config) -> None:
    pipeline = SubsidyPipeline(
        source=StaticRecordSource(candidate_items),
        dedup=DeduplicationCheck(sqlite_store, COLLECTION),
        fanout=SummarizationFanout(Summarizer(None, ai_config), fanout_executor),
        assembler=RecordAssembler(sqlite_store, COLLECTION),
    )

    result = pipeline.run()

    assert result.summary() == {"processed": 0, "skipped": 0, "failed": 2}
    assert {failure.stage for failure in result.failures} == {"summarize"}
    assert sqlite_store.list_documents(COLLECTION) == []
