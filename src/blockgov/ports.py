"""
BlockGov Ports

Boundary contracts consumed by the core, with reference adapters.

Key components:
- CaseStore: async read/write access to case records
- Notifier: fire-and-forget user-facing success/error signals
- InMemoryCaseStore: CaseStore over a dict, for tests and demos
- LoggingNotifier: Notifier that writes to the ``blockgov`` log

The core never retries a CaseStore call. Adapters raise CaseStoreError
(or a subclass) for every rejected operation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol, Sequence, Union

from .engine.filters import apply_filters
from .exceptions import CaseNotFoundError
from .models import Case, CaseStatus, FilterState, NotifyKind

logger = logging.getLogger(__name__)


# =============================================================================
# Protocols
# =============================================================================

class CaseStore(Protocol):
    """Async access to the system of record for cases."""

    async def list(self, filters: Optional[FilterState] = None) -> list[Case]:
        ...

    async def get_by_id(self, case_id: str) -> Case:
        ...

    async def update_status(self, case_id: str, status: CaseStatus) -> None:
        ...

    async def bulk_resolve(
        self,
        case_ids: Sequence[str],
        content: str,
        template_id: Optional[str] = None,
    ) -> None:
        ...


class Notifier(Protocol):
    """User-facing notification channel."""

    def notify(self, kind: NotifyKind, title: str, message: str) -> None:
        ...


# =============================================================================
# Reference Adapters
# =============================================================================

@dataclass(frozen=True)
class ResolutionRecord:
    """What an InMemoryCaseStore remembers about a bulk resolution."""
    case_ids: tuple[str, ...]
    content: str
    template_id: Optional[str]
    at: datetime


class InMemoryCaseStore:
    """
    CaseStore backed by a dict.

    Usage:
        store = InMemoryCaseStore([Case(id="BLK-001", impact="high")])
        cases = await store.list(FilterState(impact=("high",)))
    """

    def __init__(self, cases: Iterable[Case] = (), default_sla_days: int = 30):
        self._cases: dict[str, Case] = {c.id: c for c in cases}
        self._default_sla_days = default_sla_days
        self.resolutions: list[ResolutionRecord] = []

    def add(self, case: Case) -> None:
        self._cases[case.id] = case

    async def list(self, filters: Optional[FilterState] = None) -> list[Case]:
        cases = list(self._cases.values())
        if filters is None:
            return cases
        return apply_filters(cases, filters, self._default_sla_days)

    async def get_by_id(self, case_id: str) -> Case:
        try:
            return self._cases[case_id]
        except KeyError:
            raise CaseNotFoundError(
                message=f"Case not found: {case_id}", case_id=case_id
            ) from None

    async def update_status(self, case_id: str, status: Union[CaseStatus, str]) -> None:
        case = await self.get_by_id(case_id)
        self._cases[case_id] = replace(case, status=CaseStatus(status).value)

    async def bulk_resolve(
        self,
        case_ids: Sequence[str],
        content: str,
        template_id: Optional[str] = None,
    ) -> None:
        # All-or-nothing: every id must exist before any case changes
        cases = [await self.get_by_id(cid) for cid in case_ids]
        for case in cases:
            self._cases[case.id] = replace(case, status=CaseStatus.RESOLVED.value)
        self.resolutions.append(
            ResolutionRecord(
                case_ids=tuple(case_ids),
                content=content,
                template_id=template_id,
                at=datetime.now(timezone.utc),
            )
        )


class LoggingNotifier:
    """Notifier that logs; errors at WARNING, successes at INFO."""

    def __init__(self, logger_name: str = "blockgov.notify"):
        self._logger = logging.getLogger(logger_name)

    def notify(self, kind: NotifyKind, title: str, message: str) -> None:
        level = logging.WARNING if NotifyKind(kind) == NotifyKind.ERROR else logging.INFO
        self._logger.log(level, "%s: %s", title, message)
