"""Pipeline trigger and run status endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from ...logging_conf import configure_logging
from ...runs import PipelineDispatcher, RunRecord
from ..dependencies import get_dispatcher
from ..models import RunListResponse, RunResponse, TriggerResponse

router = APIRouter(prefix="/api", tags=["runs"])

TRIGGER_ACCEPTED_MESSAGE = "AIフローの実行を開始しました。"


def _to_response(record: RunRecord) -> RunResponse:
    return RunResponse(**record.as_dict())


@router.post("/run-flow", response_model=TriggerResponse)
def run_flow(dispatcher: Annotated[PipelineDispatcher, Depends(get_dispatcher)]):
    """Start one pipeline run and acknowledge immediately.

    The run's own outcome is never reported here; poll ``/api/runs/{run_id}``.
    """

    logger = configure_logging().bind(component="api")
    logger.info("run_flow_requested")
    try:
        run_id = dispatcher.submit(trigger="api")
    except Exception as exc:  # noqa: BLE001
        logger.error("run_flow_rejected", error=str(exc))
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
    return TriggerResponse(success=True, message=TRIGGER_ACCEPTED_MESSAGE, run_id=run_id)


@router.get("/runs", response_model=RunListResponse)
def list_runs(
    dispatcher: Annotated[PipelineDispatcher, Depends(get_dispatcher)],
    limit: Annotated[int, Query(ge=1, le=100, description="Max results")] = 20,
):
    return RunListResponse(runs=[_to_response(record) for record in dispatcher.list_runs(limit)])


@router.get("/runs/{run_id}", response_model=RunResponse)
def get_run(run_id: str, dispatcher: Annotated[PipelineDispatcher, Depends(get_dispatcher)]):
    record = dispatcher.status(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return _to_response(record)


__all__ = ["TRIGGER_ACCEPTED_MESSAGE", "router"]
