"""Subsidy listing endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ...engine.records import SubsidyRecord
from ..dependencies import get_subsidy_service
from ..models import SubsidyListResponse
from ..service import SubsidyService

router = APIRouter(prefix="/api/subsidies", tags=["subsidies"])


@router.get("", response_model=SubsidyListResponse)
def list_subsidies(
    service: Annotated[SubsidyService, Depends(get_subsidy_service)],
    tag: Annotated[str | None, Query(description="Filter by industry tag")] = None,
):
    """List stored subsidies, earliest deadline first."""

    subsidies = service.list_subsidies()
    if tag:
        subsidies = [record for record in subsidies if tag in record.industry_tags]
    return SubsidyListResponse(subsidies=subsidies, total=len(subsidies))


@router.get("/{subsidy_id}", response_model=SubsidyRecord)
def get_subsidy(
    subsidy_id: str, service: Annotated[SubsidyService, Depends(get_subsidy_service)]
):
    record = service.get_subsidy(subsidy_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Subsidy not found")
    return record


__all__ = ["router"]
