"""
BlockGov Case Filtering

Pure predicate and ordering over case lists.

A case matches a FilterState iff it satisfies every non-empty constraint:
- list fields: the case's value is a member, or the list is empty
- ranges: the value lies within [min, max]; a missing bound is unbounded
- search: case-insensitive substring of id, subject, reason, bureau,
  amount and type
- sla_breached: delay strictly exceeds the case SLA (or the default)
"""
from __future__ import annotations

from typing import Iterable, Union

from ..models import Case, CaseSort, FilterState, SortDirection, SortField, parse_date
from .scoring import DEFAULT_SCORER, PriorityScorer, parse_amount

DEFAULT_SLA_DAYS = 30

# Impact order used when sorting by impact (higher = more severe)
IMPACT_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}


def search_text(case: Case) -> str:
    """The lowercase text a free-text search is matched against."""
    parts = [case.id, case.subject, case.reason, case.bureau, case.amount, case.type]
    return " ".join(str(p) for p in parts if p is not None).lower()


def is_sla_breached(case: Case, default_sla_days: int = DEFAULT_SLA_DAYS) -> bool:
    sla = case.sla_days if case.sla_days is not None else default_sla_days
    return case.effective_delay > sla


def matches(
    case: Case,
    filters: FilterState,
    default_sla_days: int = DEFAULT_SLA_DAYS,
) -> bool:
    """True if the case satisfies every non-empty constraint."""
    if filters.impact and case.impact not in filters.impact:
        return False
    if filters.bureaux and case.bureau not in filters.bureaux:
        return False
    if filters.types and case.type not in filters.types:
        return False
    if filters.status and case.status not in filters.status:
        return False

    if not filters.delay_range.is_empty and not filters.delay_range.contains(case.effective_delay):
        return False
    if not filters.amount_range.is_empty and not filters.amount_range.contains(
        parse_amount(case.amount)
    ):
        return False
    if not filters.date_range.is_empty:
        blocked_since = parse_date(case.blocked_since)
        if blocked_since is None or not filters.date_range.contains(blocked_since):
            return False

    if filters.search:
        needle = filters.search.strip().lower()
        if needle and needle not in search_text(case):
            return False

    if filters.sla_breached and not is_sla_breached(case, default_sla_days):
        return False

    return True


def apply_filters(
    cases: Iterable[Case],
    filters: FilterState,
    default_sla_days: int = DEFAULT_SLA_DAYS,
) -> list[Case]:
    """Cases matching the filters, in their original order."""
    if filters.is_identity:
        return list(cases)
    return [c for c in cases if matches(c, filters, default_sla_days)]


def sort_cases(
    cases: Iterable[Case],
    field: Union[SortField, str, CaseSort] = SortField.PRIORITY,
    direction: Union[SortDirection, str] = SortDirection.DESC,
    scorer: PriorityScorer = DEFAULT_SCORER,
) -> list[Case]:
    """
    Order cases by priority, delay, amount or impact.

    Ties keep a stable order by case id, whatever the direction.
    """
    if isinstance(field, CaseSort):
        field, direction = field.field, field.direction
    field = SortField(field)
    descending = SortDirection(direction) == SortDirection.DESC

    if field == SortField.PRIORITY:
        key = scorer.score
    elif field == SortField.DELAY:
        key = lambda c: c.effective_delay  # noqa: E731
    elif field == SortField.AMOUNT:
        key = lambda c: parse_amount(c.amount)  # noqa: E731
    else:
        key = lambda c: IMPACT_RANK.get(c.impact or "", 0)  # noqa: E731

    by_id = sorted(cases, key=lambda c: c.id)
    return sorted(by_id, key=key, reverse=descending)
