"""
BlockGov Filter Models

Filter and sort state shared by every case-list view in a workspace.

A FilterState with every field empty matches every case; each non-empty
field narrows the set independently.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional
from uuid import uuid4

from .case import parse_date, parse_int
from .enums import SortDirection, SortField


@dataclass(frozen=True)
class NumericRange:
    """Inclusive range; a missing bound is unbounded."""
    min: Optional[int] = None
    max: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "min", parse_int(self.min))
        object.__setattr__(self, "max", parse_int(self.max))

    @property
    def is_empty(self) -> bool:
        return self.min is None and self.max is None

    def contains(self, value: int) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive date range; a missing bound is unbounded.

    Bounds may be given as dates, datetimes or ISO strings; an unreadable
    bound is treated as missing.
    """
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", parse_date(self.start))
        object.__setattr__(self, "end", parse_date(self.end))

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class FilterState:
    """
    Active filters of a workspace.

    Attributes:
        impact: Allowed impacts (empty = any)
        bureaux: Allowed bureaux (empty = any)
        types: Allowed blocking types (empty = any)
        status: Allowed statuses (empty = any)
        delay_range: Inclusive bounds on delay in days
        amount_range: Inclusive bounds on the parsed amount
        date_range: Inclusive bounds on the blocked-since date
        search: Case-insensitive free text
        sla_breached: When True, only cases past their SLA
    """
    impact: tuple[str, ...] = ()
    bureaux: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    status: tuple[str, ...] = ()
    delay_range: NumericRange = field(default_factory=NumericRange)
    amount_range: NumericRange = field(default_factory=NumericRange)
    date_range: DateRange = field(default_factory=DateRange)
    search: Optional[str] = None
    sla_breached: Optional[bool] = None

    @property
    def is_identity(self) -> bool:
        """True when no field constrains anything."""
        return (
            not self.impact
            and not self.bureaux
            and not self.types
            and not self.status
            and self.delay_range.is_empty
            and self.amount_range.is_empty
            and self.date_range.is_empty
            and not self.search
            and not self.sla_breached
        )

    def merge(self, **partial: Any) -> FilterState:
        """
        Shallow merge: each given field replaces the current value.

        Lists and sets are normalized to tuples; enum members to values.
        """
        known = {f.name for f in fields(self)}
        unknown = set(partial) - known
        if unknown:
            raise TypeError(f"Unknown filter fields: {', '.join(sorted(unknown))}")
        normalized = {
            name: _normalize(name, value) for name, value in partial.items()
        }
        return replace(self, **normalized)

    def to_dict(self) -> dict[str, Any]:
        return {
            "impact": list(self.impact),
            "bureaux": list(self.bureaux),
            "types": list(self.types),
            "status": list(self.status),
            "delay_range": {"min": self.delay_range.min, "max": self.delay_range.max},
            "amount_range": {"min": self.amount_range.min, "max": self.amount_range.max},
            "date_range": {
                "start": self.date_range.start.isoformat() if self.date_range.start else None,
                "end": self.date_range.end.isoformat() if self.date_range.end else None,
            },
            "search": self.search,
            "sla_breached": self.sla_breached,
        }


_LIST_FIELDS = {"impact", "bureaux", "types", "status"}


def _normalize(name: str, value: Any) -> Any:
    if name in _LIST_FIELDS:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(getattr(v, "value", v) for v in value)
    if name in {"delay_range", "amount_range"} and isinstance(value, Mapping):
        return NumericRange(min=value.get("min"), max=value.get("max"))
    if name in {"delay_range", "amount_range"} and value is None:
        return NumericRange()
    if name == "date_range" and isinstance(value, Mapping):
        return DateRange(start=value.get("start"), end=value.get("end"))
    if name == "date_range" and value is None:
        return DateRange()
    return value


@dataclass(frozen=True)
class CaseSort:
    """Sort order for a case list."""
    field: SortField = SortField.PRIORITY
    direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class SavedFilter:
    """A named filter the user can re-apply from any tab."""
    id: str
    name: str
    filters: FilterState
    sort: Optional[CaseSort] = None
    is_default: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        name: str,
        filters: FilterState,
        sort: Optional[CaseSort] = None,
    ) -> SavedFilter:
        """Factory method to create a new SavedFilter."""
        return cls(
            id=f"FLT-{uuid4().hex[:8].upper()}",
            name=name,
            filters=filters,
            sort=sort,
        )
