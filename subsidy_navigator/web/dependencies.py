"""FastAPI dependencies resolving the shared application state."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from ..runs import PipelineDispatcher
from ..state import AppState
from .service import SubsidyService


def get_state(request: Request) -> AppState:
    return request.app.state.navigator


def get_dispatcher(state: Annotated[AppState, Depends(get_state)]) -> PipelineDispatcher:
    return state.dispatcher


def get_subsidy_service(state: Annotated[AppState, Depends(get_state)]) -> SubsidyService:
    return SubsidyService(state.store, state.config.store.collection)


__all__ = ["get_dispatcher", "get_state", "get_subsidy_service"]
