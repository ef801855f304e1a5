"""
BlockGov Queue Statistics Tests
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from blockgov.engine import DecisionLedger, compute_queue_stats, sla_alerts
from blockgov.models import DecisionAction

from helpers.factories import StepClock, make_case, make_draft

NOW = datetime(2024, 6, 15, 18, 0, tzinfo=timezone.utc)


class TestQueueStats:
    """compute_queue_stats over the shared fixture queue."""

    def test_counts_and_averages(self, cases) -> None:
        stats = compute_queue_stats(cases, now=NOW)

        assert stats.total == 4
        assert (stats.critical, stats.high, stats.medium, stats.low) == (1, 1, 1, 1)
        assert stats.avg_delay == 15
        # (33600 + 1050 + 720 + 5) / 4 = 8843.75
        assert stats.avg_priority == 8844
        assert stats.total_amount == 17_500_000
        assert stats.overdue_sla == 2

    def test_groupings(self, cases) -> None:
        stats = compute_queue_stats(cases, now=NOW)
        assert [(b.bureau, b.count, b.critical) for b in stats.by_bureau] == [
            ("BF", 2, 1),
            ("BCT", 1, 0),
            ("Unassigned", 1, 0),
        ]
        assert [(t.type, t.count) for t in stats.by_type] == [
            ("validation", 2),
            ("paiement", 1),
            ("technique", 1),
        ]

    def test_empty_queue(self) -> None:
        stats = compute_queue_stats([], now=NOW)
        assert stats.total == 0
        assert stats.avg_delay == 0
        assert stats.by_bureau == []

    def test_overdue_threshold_is_strict(self) -> None:
        stats = compute_queue_stats([make_case(delay_days=14)], now=NOW, overdue_days=14)
        assert stats.overdue_sla == 0

    def test_today_counters_from_ledger(self, cases) -> None:
        yesterday = StepClock(start=NOW - timedelta(days=1))
        old = DecisionLedger(clock=yesterday)
        old.append(make_draft(cases[0], DecisionAction.RESOLUTION))

        ledger = DecisionLedger(clock=StepClock(start=NOW - timedelta(hours=2)))
        ledger.append(make_draft(cases[0], DecisionAction.RESOLUTION))
        ledger.append(make_draft(cases[1], DecisionAction.RESOLUTION))
        ledger.append(make_draft(cases[2], DecisionAction.ESCALATION))
        ledger.append(make_draft(cases[3], DecisionAction.SUBSTITUTION))

        stats = compute_queue_stats(cases, [*old, *ledger], now=NOW)
        assert stats.resolved_today == 2
        assert stats.escalated_today == 1

    def test_to_dict(self, cases) -> None:
        data = compute_queue_stats(cases, now=NOW).to_dict()
        assert data["by_bureau"][0] == {"bureau": "BF", "count": 2, "critical": 1}
        assert data["computed_at"] == NOW.isoformat()


class TestSlaAlerts:
    """Cases past the alert threshold."""

    def test_most_overdue_first(self, cases) -> None:
        alerts = sla_alerts(cases)
        assert [(a.case_id, a.days_overdue) for a in alerts] == [("BLK-003", 28), ("BLK-001", 13)]

    def test_custom_threshold(self, cases) -> None:
        assert [a.case_id for a in sla_alerts(cases, threshold_days=30)] == ["BLK-003"]
        assert sla_alerts(cases, threshold_days=35) == []
