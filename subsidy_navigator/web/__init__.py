"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from ..state import AppState
from .routers import runs, subsidies


def create_app(state: AppState) -> FastAPI:
    app = FastAPI(
        title="Kanagawa Subsidy Navigator",
        description="神奈川県の補助金・助成金情報をAIがナビゲート",
    )
    app.state.navigator = state
    app.include_router(runs.router)
    app.include_router(subsidies.router)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


__all__ = ["create_app"]
