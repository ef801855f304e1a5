"""
BlockGov Case Models

Models for the blocked cases this core reasons about.

Key components:
- Case: A blocked work item as read from the case store
- CaseSnapshot: The subset of a case frozen into a decision
- Actor: The staff member recording a decision

Cases are owned by the case store. The core never mutates them; it
filters, ranks and records decisions about them.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from .enums import CaseStatus


# =============================================================================
# Case
# =============================================================================

@dataclass(frozen=True)
class Case:
    """
    A blocked case.

    Attributes:
        id: Case identifier (e.g. "BLK-2024-001")
        impact: critical/high/medium/low; other values are tolerated
        delay_days: Days the case has been blocked (None treated as 0)
        amount: Free-text amount, may contain separators and currency
        bureau: Bureau that owns the case
        status: Current lifecycle status
        subject: Short title
        type: Kind of blocking (e.g. "validation", "paiement")
        reason: Why the case is blocked
        description: Longer description
        blocked_since: Date the case became blocked
        sla_days: Days allowed before the case breaches its SLA
    """
    id: str
    impact: Optional[str] = None
    delay_days: Optional[int] = 0
    amount: Any = ""
    bureau: str = ""
    status: str = CaseStatus.PENDING.value
    subject: str = ""
    type: str = ""
    reason: str = ""
    description: str = ""
    blocked_since: Optional[date] = None
    sla_days: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Case:
        """
        Build a Case from an external record.

        Accepts both snake_case and the camelCase keys used by the
        case store API (``delayDays``/``delay``, ``blockedSince``, ``sla``).
        """
        delay = _first(data, "delay_days", "delayDays", "delay")
        return cls(
            id=str(data["id"]),
            impact=_enum_value(data.get("impact")),
            delay_days=parse_int(delay),
            amount=data.get("amount", ""),
            bureau=data.get("bureau") or "",
            status=_enum_value(data.get("status")) or CaseStatus.PENDING.value,
            subject=data.get("subject") or "",
            type=data.get("type") or "",
            reason=data.get("reason") or "",
            description=data.get("description") or "",
            blocked_since=parse_date(_first(data, "blocked_since", "blockedSince")),
            sla_days=parse_int(_first(data, "sla_days", "slaDays", "sla")),
        )

    @property
    def effective_delay(self) -> int:
        """Delay in days, clamped at zero. Unreadable values count as zero."""
        try:
            return max(0, int(self.delay_days or 0))
        except (TypeError, ValueError, OverflowError):
            return 0

    def snapshot(self) -> CaseSnapshot:
        """Freeze the fields a decision records about this case."""
        return CaseSnapshot(
            subject=self.subject,
            bureau=self.bureau,
            impact=self.impact,
            delay_days=self.effective_delay,
            amount=str(self.amount if self.amount is not None else ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "impact": self.impact,
            "delay_days": self.delay_days,
            "amount": self.amount,
            "bureau": self.bureau,
            "status": self.status,
            "subject": self.subject,
            "type": self.type,
            "reason": self.reason,
            "description": self.description,
            "blocked_since": self.blocked_since.isoformat() if self.blocked_since else None,
            "sla_days": self.sla_days,
        }


# =============================================================================
# Case Snapshot
# =============================================================================

@dataclass(frozen=True)
class CaseSnapshot:
    """
    Case fields captured at decision time.

    Immutable so later changes in the case store never alter what an
    auditor sees for a past decision.
    """
    subject: str = ""
    bureau: str = ""
    impact: Optional[str] = None
    delay_days: int = 0
    amount: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "bureau": self.bureau,
            "impact": self.impact,
            "delay_days": self.delay_days,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CaseSnapshot:
        return cls(
            subject=data.get("subject", ""),
            bureau=data.get("bureau", ""),
            impact=data.get("impact"),
            delay_days=int(data.get("delay_days", 0)),
            amount=str(data.get("amount", "")),
        )


# =============================================================================
# Actor
# =============================================================================

@dataclass(frozen=True)
class Actor:
    """The staff member on whose authority a decision is recorded."""
    id: str
    name: str
    role: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "role": self.role}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Actor:
        return cls(id=data["id"], name=data["name"], role=data["role"])


# =============================================================================
# Parsing helpers
# =============================================================================

def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _enum_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", value)


def parse_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None
