"""
BlockGov Audit API

Read-only FastAPI surface over a decision ledger.

Endpoints:
    GET  /health             - Liveness check
    GET  /audit              - Query entries (action, q, case_id, batch_id, limit)
    GET  /audit/export.csv   - Same query, as CSV
    POST /audit/verify       - Verify one exported entry
    GET  /audit/integrity    - Verify the whole ledger

Usage:
    from blockgov.api import create_app

    app = create_app(ledger)
    # uvicorn.run(app)
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import Settings
from ..engine.ledger import DecisionLedger
from ..exceptions import BlockGovError
from .routers import audit
from .schemas import HealthResponse

__all__ = ["create_app"]


def create_app(
    ledger: DecisionLedger,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the audit API over an existing ledger."""
    settings = settings or Settings()
    app = FastAPI(
        title="BlockGov Audit",
        description="Decision ledger query, export and verification",
        version="0.1.0",
    )
    app.state.ledger = ledger
    app.state.settings = settings

    @app.exception_handler(BlockGovError)
    async def blockgov_error_handler(request: Request, exc: BlockGovError):
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            entries=len(ledger),
            fingerprint_mode=ledger.mode.value,
        )

    app.include_router(audit.router)
    return app
