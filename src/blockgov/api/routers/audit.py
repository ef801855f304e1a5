"""
Audit routes: read, export and verify the decision ledger.

The ledger is read-only through this surface; decisions are only ever
appended by the workspace services.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from ...engine.ledger import DecisionLedger, LedgerQuery, compute_fingerprint
from ...export import decisions_to_csv
from ...models import Decision, DecisionAction
from ..schemas import (
    AuditListResponse,
    DecisionModel,
    ErrorResponse,
    IntegrityResponse,
    VerifyResponse,
)

router = APIRouter(
    prefix="/audit",
    tags=["Audit"],
    responses={400: {"model": ErrorResponse}},
)

MAX_LIMIT = 1000


def get_ledger(request: Request) -> DecisionLedger:
    return request.app.state.ledger


def _query(
    action: Optional[DecisionAction] = Query(None, description="Decision kind"),
    q: Optional[str] = Query(None, description="Free-text search"),
    case_id: Optional[str] = None,
    batch_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=MAX_LIMIT),
) -> LedgerQuery:
    return LedgerQuery.create(
        action=action, search=q, case_id=case_id, batch_id=batch_id, limit=limit
    )


@router.get("", response_model=AuditListResponse)
async def list_decisions(
    query: LedgerQuery = Depends(_query),
    ledger: DecisionLedger = Depends(get_ledger),
):
    """Ledger entries matching the filters, newest first."""
    entries = ledger.query(query)
    return {"count": len(entries), "entries": [e.to_dict() for e in entries]}


@router.get("/export.csv")
async def export_decisions(
    query: LedgerQuery = Depends(_query),
    ledger: DecisionLedger = Depends(get_ledger),
):
    """Matching entries as CSV, newest first."""
    content = decisions_to_csv(ledger.query(query))
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="decisions-{stamp}.csv"'},
    )


@router.post("/verify", response_model=VerifyResponse)
async def verify_decision(
    entry: DecisionModel,
    ledger: DecisionLedger = Depends(get_ledger),
):
    """
    Re-derive a submitted entry's fingerprint from its own fields.

    Works on any exported entry; ``known`` additionally reports whether
    this ledger holds an entry with the same fingerprint.
    """
    try:
        decision = Decision.from_dict(entry.model_dump())
        recomputed = compute_fingerprint(decision)
    except (TypeError, ValueError) as e:
        return VerifyResponse(
            valid=False,
            fingerprint=entry.fingerprint,
            reason=f"Entry could not be read: {e}",
        )

    valid = recomputed == entry.fingerprint
    known = any(existing.fingerprint == entry.fingerprint for existing in ledger)
    return VerifyResponse(
        valid=valid,
        fingerprint=entry.fingerprint,
        recomputed=recomputed,
        known=known,
        reason="Fingerprint matches entry content" if valid else "Fingerprint mismatch",
    )


@router.get("/integrity", response_model=IntegrityResponse)
async def ledger_integrity(ledger: DecisionLedger = Depends(get_ledger)):
    """Verify every entry, sequence continuity and chain links."""
    return ledger.verify_all().to_dict()
