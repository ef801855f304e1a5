"""
BlockGov Decision Models

Models for entries in the decision ledger.

Key components:
- DecisionDraft: What a caller asks the ledger to record
- Decision: The completed, fingerprinted, immutable ledger entry

Core Principle: once appended, a Decision is never mutated or removed.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import uuid4

from .case import Actor, CaseSnapshot
from .enums import DecisionAction


def new_batch_id(action: DecisionAction) -> str:
    """
    Generate a batch identifier grouping entries committed together.

    Example:
        >>> new_batch_id(DecisionAction.RESOLUTION)[:10]
        'BATCH-RES-'
    """
    return f"BATCH-{action.batch_prefix}-{uuid4().hex[:12].upper()}"


# =============================================================================
# Decision Draft
# =============================================================================

@dataclass(frozen=True)
class DecisionDraft:
    """
    A decision before the ledger has scored, timestamped and fingerprinted it.

    Attributes:
        batch_id: Groups entries committed by one user action
        action: escalation, substitution or resolution
        case_id: The case the decision is about
        snapshot: Case fields at decision time
        actor: Who is recording the decision
        details: Free-text justification
    """
    batch_id: str
    action: DecisionAction
    case_id: str
    snapshot: CaseSnapshot
    actor: Actor
    details: str = ""


# =============================================================================
# Decision
# =============================================================================

@dataclass(frozen=True)
class Decision:
    """
    A ledger entry.

    Attributes:
        batch_id: Batch this entry was committed in
        action: Kind of decision
        case_id: Case the decision is about
        snapshot: Case fields captured at decision time
        priority: Priority score computed at commit time
        actor: Who recorded the decision
        details: Free-text justification
        at: UTC timestamp assigned by the ledger
        sequence: Position in the ledger (0-based)
        previous_fingerprint: Fingerprint of the prior entry (chained mode only)
        fingerprint: ``SHA-256:<hex>`` over every other field
    """
    batch_id: str
    action: DecisionAction
    case_id: str
    snapshot: CaseSnapshot
    priority: int
    actor: Actor
    details: str
    at: datetime
    sequence: int
    fingerprint: str
    previous_fingerprint: Optional[str] = None

    @property
    def subject(self) -> str:
        return self.snapshot.subject

    def fingerprint_payload(self) -> dict[str, Any]:
        """Every field except the fingerprint itself, in serializable form."""
        payload = self.to_dict()
        del payload["fingerprint"]
        return payload

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "batch_id": self.batch_id,
            "action": self.action.value,
            "case_id": self.case_id,
            "snapshot": self.snapshot.to_dict(),
            "priority": self.priority,
            "actor": self.actor.to_dict(),
            "details": self.details,
            "at": self.at.isoformat(),
            "sequence": self.sequence,
            "previous_fingerprint": self.previous_fingerprint,
            "fingerprint": self.fingerprint,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Decision:
        """Rebuild an entry from its serialized form (no verification)."""
        return cls(
            batch_id=data["batch_id"],
            action=DecisionAction(data["action"]),
            case_id=data["case_id"],
            snapshot=CaseSnapshot.from_dict(data["snapshot"]),
            priority=int(data["priority"]),
            actor=Actor.from_dict(data["actor"]),
            details=data.get("details", ""),
            at=datetime.fromisoformat(data["at"]),
            sequence=int(data["sequence"]),
            fingerprint=data["fingerprint"],
            previous_fingerprint=data.get("previous_fingerprint"),
        )
