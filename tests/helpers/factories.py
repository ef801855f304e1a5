"""
Factory helpers for BlockGov tests.

Build models with sensible defaults so each test states only what it
cares about.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from blockgov.models import (
    Actor,
    Case,
    CaseStatus,
    DecisionAction,
    DecisionDraft,
    new_batch_id,
)


def make_case(
    id: str = "BLK-001",
    impact: Optional[str] = "high",
    delay_days: Optional[int] = 10,
    amount: str = "1 000 000 FCFA",
    bureau: str = "BF",
    status: str = CaseStatus.PENDING.value,
    subject: str = None,
    type: str = "validation",
    reason: str = "Awaiting signature",
    description: str = "",
    blocked_since: Optional[date] = None,
    sla_days: Optional[int] = None,
) -> Case:
    """Create a Case with required fields."""
    return Case(
        id=id,
        impact=impact,
        delay_days=delay_days,
        amount=amount,
        bureau=bureau,
        status=status,
        subject=subject if subject is not None else f"Subject of {id}",
        type=type,
        reason=reason,
        description=description,
        blocked_since=blocked_since,
        sla_days=sla_days,
    )


def make_actor(
    id: str = "USR-001",
    name: str = "A. Diallo",
    role: str = "Governance officer",
) -> Actor:
    return Actor(id=id, name=name, role=role)


def make_draft(
    case: Case = None,
    action: DecisionAction = DecisionAction.RESOLUTION,
    batch_id: str = None,
    actor: Actor = None,
    details: str = "Resolved after review",
) -> DecisionDraft:
    """Create a DecisionDraft for a case."""
    case = case or make_case()
    return DecisionDraft(
        batch_id=batch_id or new_batch_id(action),
        action=action,
        case_id=case.id,
        snapshot=case.snapshot(),
        actor=actor or make_actor(),
        details=details,
    )


class StepClock:
    """Deterministic clock: each call returns the next second."""

    def __init__(self, start: datetime = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2024, 6, 15, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now
