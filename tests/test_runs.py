from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from subsidy_navigator.pipeline import PipelineResult
from subsidy_navigator.runs import PipelineDispatcher, RunRecord, RunStatus


@pytest.fixture
def runs_executor():
    executor = ThreadPoolExecutor(max_workers=1)
    yield executor
    executor.shutdown(wait=True)


def test_submit_returns_before_the_run_finishes(runs_executor) -> None:
    release = threading.Event()

    def _runner(run_id: str) -> PipelineResult:
        release.wait(5)
        return PipelineResult()

    dispatcher = PipelineDispatcher(_runner, runs_executor)
    run_id = dispatcher.submit(trigger="api")

    assert run_id
    assert dispatcher.status(run_id).status in (RunStatus.PENDING, RunStatus.RUNNING)
    release.set()
    record = dispatcher.wait(run_id, timeout=5)
    assert record.status is RunStatus.SUCCEEDED


def test_successful_run_records_summary(make_pipeline, fake_client, candidate_items, runs_executor) -> None:
    pipeline = make_pipeline(fake_client, candidate_items)
    dispatcher = PipelineDispatcher(pipeline.run, runs_executor)

    run_id = dispatcher.submit()
    record = dispatcher.wait(run_id, timeout=10)

    assert record.status is RunStatus.SUCCEEDED
    assert record.summary == {"processed": 2, "skipped": 0, "failed": 0}
    assert len(record.record_ids) == 2
    assert record.started_at is not None and record.finished_at >= record.started_at


def test_failed_run_is_reported_not_raised(runs_executor) -> None:
    def _runner(run_id: str) -> PipelineResult:
        raise RuntimeError("store unavailable")

    completed: list[RunRecord] = []
    dispatcher = PipelineDispatcher(_runner, runs_executor, on_complete=completed.append)

    run_id = dispatcher.submit(trigger="scheduler")
    record = dispatcher.wait(run_id, timeout=5)

    assert record.status is RunStatus.FAILED
    assert record.error == "store unavailable"
    assert [item.run_id for item in completed] == [run_id]


def test_dispatch_failure_still_returns_run_id() -> None:
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown(wait=True)
    dispatcher = PipelineDispatcher(lambda run_id: PipelineResult(), executor)

    run_id = dispatcher.submit()

    record = dispatcher.status(run_id)
    assert record.status is RunStatus.FAILED
    assert "executor refused" in record.error


def test_callback_errors_do_not_break_the_dispatcher(runs_executor) -> None:
    def _explode(record: RunRecord) -> None:
        raise ValueError("callback bug")

    dispatcher = PipelineDispatcher(lambda run_id: PipelineResult(), runs_executor, on_complete=_explode)
    run_id = dispatcher.submit()
    assert dispatcher.wait(run_id, timeout=5).status is RunStatus.SUCCEEDED


def test_runner_receives_the_run_id(runs_executor) -> None:
    seen: list[str] = []

    def _runner(run_id: str) -> PipelineResult:
        seen.append(run_id)
        return PipelineResult()

    dispatcher = PipelineDispatcher(_runner, runs_executor)
    run_id = dispatcher.submit()
    dispatcher.wait(run_id, timeout=5)
    assert seen == [run_id]


def test_list_runs_newest_first_and_history_is_bounded(runs_executor) -> None:
    dispatcher = PipelineDispatcher(lambda run_id: PipelineResult(), runs_executor, max_history=3)
    run_ids = []
    for _ in range(5):
        run_id = dispatcher.submit()
        dispatcher.wait(run_id, timeout=5)
        run_ids.append(run_id)

    listed = [record.run_id for record in dispatcher.list_runs()]
    assert listed == list(reversed(run_ids))[:3]
    assert dispatcher.status(run_ids[0]) is None
    assert [record.run_id for record in dispatcher.list_runs(limit=1)] == [run_ids[-1]]


def test_unknown_run() -> None:
    dispatcher = PipelineDispatcher(lambda run_id: PipelineResult(), ThreadPoolExecutor(max_workers=1))
    assert dispatcher.status("missing") is None
    assert dispatcher.wait("missing", timeout=0.1) is None


def test_run_record_as_dict(runs_executor) -> None:
    dispatcher = PipelineDispatcher(lambda run_id: PipelineResult(), runs_executor)
    run_id = dispatcher.submit(trigger="cli")
    payload = dispatcher.wait(run_id, timeout=5).as_dict()
    assert payload["status"] == "succeeded"
    assert payload["trigger"] == "cli"
    assert isinstance(payload["submitted_at"], str)
