"""Request/response models for the audit API."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str
    entries: int
    fingerprint_mode: str


class ActorModel(BaseModel):
    id: str
    name: str
    role: str


class SnapshotModel(BaseModel):
    subject: str = ""
    bureau: str = ""
    impact: Optional[str] = None
    delay_days: int = 0
    amount: str = ""


class DecisionModel(BaseModel):
    """A ledger entry as exported (``Decision.to_dict`` form)."""
    batch_id: str
    action: str
    case_id: str
    snapshot: SnapshotModel
    priority: int
    actor: ActorModel
    details: str = ""
    at: str
    sequence: int
    previous_fingerprint: Optional[str] = None
    fingerprint: str


class AuditListResponse(BaseModel):
    count: int
    entries: list[DecisionModel]


class VerifyResponse(BaseModel):
    """Result of verifying one submitted entry."""
    valid: bool
    fingerprint: str
    recomputed: Optional[str] = None
    known: bool = Field(False, description="An entry with this fingerprint exists in the ledger")
    reason: str


class IntegrityResponse(BaseModel):
    is_valid: bool
    entries_checked: int
    mode: str
    errors: list[str]
    invalid_sequences: list[int]


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
