"""Run submission and status tracking for background pipeline runs."""

from __future__ import annotations

from collections import OrderedDict
from concurrent.futures import Executor
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Event, Lock
from typing import Callable
from uuid import uuid4

from .errors import DispatchError
from .logging_conf import configure_logging
from .pipeline import PipelineResult


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def finished(self) -> bool:
        return self in (RunStatus.SUCCEEDED, RunStatus.FAILED)


@dataclass(slots=True)
class RunRecord:
    run_id: str
    trigger: str
    status: RunStatus
    submitted_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None
    summary: dict[str, int] = field(default_factory=dict)
    record_ids: list[str] = field(default_factory=list)
    error: str | None = None

    def as_dict(self) -> dict:
        payload = asdict(self)
        payload["status"] = self.status.value
        for key in ("submitted_at", "started_at", "finished_at"):
            value = payload[key]
            payload[key] = value.isoformat() if value is not None else None
        return payload


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PipelineDispatcher:
    """Hand pipeline runs to an executor and report on them by run id.

    ``submit`` never blocks on the run and never raises because of it; the
    outcome is observable through ``status`` or the ``on_complete`` callback.
    """

    def __init__(
        self,
        runner: Callable[[str], PipelineResult],
        executor: Executor,
        on_complete: Callable[[RunRecord], None] | None = None,
        max_history: int = 100,
    ) -> None:
        self.runner = runner
        self.executor = executor
        self.on_complete = on_complete
        self.max_history = max_history
        self.logger = configure_logging().bind(component="dispatcher")
        self._runs: "OrderedDict[str, RunRecord]" = OrderedDict()
        self._done: dict[str, Event] = {}
        self._lock = Lock()

    def submit(self, trigger: str = "api") -> str:
        run_id = uuid4().hex
        record = RunRecord(
            run_id=run_id, trigger=trigger, status=RunStatus.PENDING, submitted_at=_now()
        )
        with self._lock:
            self._runs[run_id] = record
            self._done[run_id] = Event()
            self._evict_locked()
        try:
            self._dispatch(run_id)
        except DispatchError as exc:
            self.logger.error("run_dispatch_failed", run_id=run_id, trigger=trigger, error=str(exc))
            self._finish(run_id, RunStatus.FAILED, error=str(exc))
        else:
            self.logger.info("run_submitted", run_id=run_id, trigger=trigger)
        return run_id

    def status(self, run_id: str) -> RunRecord | None:
        with self._lock:
            return self._runs.get(run_id)

    def list_runs(self, limit: int = 20) -> list[RunRecord]:
        with self._lock:
            runs = list(self._runs.values())
        return list(reversed(runs))[:limit]

    def wait(self, run_id: str, timeout: float | None = None) -> RunRecord | None:
        with self._lock:
            done = self._done.get(run_id)
        if done is None:
            return None
        done.wait(timeout)
        return self.status(run_id)

    def _dispatch(self, run_id: str) -> None:
        try:
            self.executor.submit(self._execute, run_id)
        except RuntimeError as exc:
            raise DispatchError(f"executor refused run {run_id}: {exc}") from exc

    def _execute(self, run_id: str) -> None:
        with self._lock:
            record = self._runs[run_id]
            record.status = RunStatus.RUNNING
            record.started_at = _now()
        self.logger.info("run_started", run_id=run_id)
        try:
            result = self.runner(run_id)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("run_failed", run_id=run_id, error=str(exc), exc_info=True)
            self._finish(run_id, RunStatus.FAILED, error=str(exc))
            return
        self.logger.info("run_succeeded", run_id=run_id, **result.summary())
        self._finish(
            run_id,
            RunStatus.SUCCEEDED,
            summary=result.summary(),
            record_ids=[record.id for record in result.records],
        )

    def _finish(
        self,
        run_id: str,
        status: RunStatus,
        *,
        summary: dict[str, int] | None = None,
        record_ids: list[str] | None = None,
        error: str | None = None,
    ) -> None:
        with self._lock:
            record = self._runs[run_id]
            record.status = status
            record.finished_at = _now()
            record.summary = summary or {}
            record.record_ids = record_ids or []
            record.error = error
            done = self._done[run_id]
        if self.on_complete is not None:
            try:
                self.on_complete(record)
            except Exception as exc:  # noqa: BLE001
                self.logger.warning("run_callback_failed", run_id=run_id, error=str(exc))
        done.set()

    def _evict_locked(self) -> None:
        while len(self._runs) > self.max_history:
            oldest_id = next(
                (rid for rid, rec in self._runs.items() if rec.status.finished), None
            )
            if oldest_id is None:
                break
            del self._runs[oldest_id]
            self._done.pop(oldest_id, None)


__all__ = ["PipelineDispatcher", "RunRecord", "RunStatus"]
