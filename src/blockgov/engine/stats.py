"""
BlockGov Queue Statistics

Aggregates over a list of blocked cases (and optionally the ledger) for
dashboards, plus SLA alerts.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from ..models import Case, Decision, DecisionAction, Impact
from .scoring import DEFAULT_SCORER, PriorityScorer, parse_amount, round_half_up

UNASSIGNED_BUREAU = "Unassigned"
DEFAULT_OVERDUE_DAYS = 14
DEFAULT_ALERT_DAYS = 7


@dataclass(frozen=True)
class BureauCount:
    bureau: str
    count: int
    critical: int


@dataclass(frozen=True)
class TypeCount:
    type: str
    count: int


@dataclass
class QueueStats:
    """
    Snapshot of a case queue.

    avg_delay and avg_priority are rounded half up to integers. by_bureau
    and by_type are sorted by count descending, then name.
    """
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    avg_delay: int = 0
    avg_priority: int = 0
    total_amount: int = 0
    overdue_sla: int = 0
    resolved_today: int = 0
    escalated_today: int = 0
    by_bureau: list[BureauCount] = field(default_factory=list)
    by_type: list[TypeCount] = field(default_factory=list)
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "avg_delay": self.avg_delay,
            "avg_priority": self.avg_priority,
            "total_amount": self.total_amount,
            "overdue_sla": self.overdue_sla,
            "resolved_today": self.resolved_today,
            "escalated_today": self.escalated_today,
            "by_bureau": [
                {"bureau": b.bureau, "count": b.count, "critical": b.critical}
                for b in self.by_bureau
            ],
            "by_type": [{"type": t.type, "count": t.count} for t in self.by_type],
            "computed_at": self.computed_at.isoformat(),
        }


def compute_queue_stats(
    cases: Iterable[Case],
    decisions: Iterable[Decision] = (),
    now: Optional[datetime] = None,
    overdue_days: int = DEFAULT_OVERDUE_DAYS,
    scorer: PriorityScorer = DEFAULT_SCORER,
) -> QueueStats:
    """
    Compute queue statistics.

    Args:
        cases: Cases in the queue
        decisions: Ledger entries, used for the "today" counters
        now: Reference instant (UTC now by default)
        overdue_days: A case delayed strictly longer than this is overdue
    """
    now = now or datetime.now(timezone.utc)
    cases = list(cases)
    stats = QueueStats(total=len(cases), computed_at=now)

    impacts = Counter(c.impact for c in cases)
    stats.critical = impacts[Impact.CRITICAL.value]
    stats.high = impacts[Impact.HIGH.value]
    stats.medium = impacts[Impact.MEDIUM.value]
    stats.low = impacts[Impact.LOW.value]

    if cases:
        stats.avg_delay = round_half_up(sum(c.effective_delay for c in cases) / len(cases))
        stats.avg_priority = round_half_up(sum(scorer.score(c) for c in cases) / len(cases))
    stats.total_amount = sum(parse_amount(c.amount) for c in cases)
    stats.overdue_sla = sum(1 for c in cases if c.effective_delay > overdue_days)

    bureau_counts: Counter[str] = Counter()
    bureau_critical: Counter[str] = Counter()
    for case in cases:
        bureau = case.bureau or UNASSIGNED_BUREAU
        bureau_counts[bureau] += 1
        if case.impact == Impact.CRITICAL.value:
            bureau_critical[bureau] += 1
    stats.by_bureau = [
        BureauCount(bureau=b, count=n, critical=bureau_critical[b])
        for b, n in sorted(bureau_counts.items(), key=lambda item: (-item[1], item[0]))
    ]

    type_counts = Counter(c.type for c in cases if c.type)
    stats.by_type = [
        TypeCount(type=t, count=n)
        for t, n in sorted(type_counts.items(), key=lambda item: (-item[1], item[0]))
    ]

    today = now.date()
    for decision in decisions:
        if decision.at.date() != today:
            continue
        if decision.action == DecisionAction.RESOLUTION:
            stats.resolved_today += 1
        elif decision.action == DecisionAction.ESCALATION:
            stats.escalated_today += 1

    return stats


@dataclass(frozen=True)
class SlaAlert:
    """A case past the alert threshold."""
    case: Case
    days_overdue: int

    @property
    def case_id(self) -> str:
        return self.case.id


def sla_alerts(
    cases: Iterable[Case],
    threshold_days: int = DEFAULT_ALERT_DAYS,
) -> list[SlaAlert]:
    """Cases delayed past the threshold, most overdue first."""
    alerts = [
        SlaAlert(case=c, days_overdue=c.effective_delay - threshold_days)
        for c in cases
        if c.effective_delay > threshold_days
    ]
    return sorted(alerts, key=lambda a: (-a.days_overdue, a.case.id))
