"""Response models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel

from ..engine.records import SubsidyRecord


class TriggerResponse(BaseModel):
    success: bool
    message: str
    run_id: str


class RunResponse(BaseModel):
    run_id: str
    trigger: str
    status: str
    submitted_at: str
    started_at: str | None = None
    finished_at: str | None = None
    summary: dict[str, int] = {}
    record_ids: list[str] = []
    error: str | None = None


class RunListResponse(BaseModel):
    runs: list[RunResponse]


class SubsidyListResponse(BaseModel):
    subsidies: list[SubsidyRecord]
    total: int


__all__ = ["RunListResponse", "RunResponse", "SubsidyListResponse", "TriggerResponse"]
