"""
Test doubles for the case store, notifier and ledger storage.
"""
from __future__ import annotations

import asyncio
from typing import Iterable, Optional, Sequence

from blockgov.exceptions import CaseStoreError
from blockgov.models import Case, CaseStatus, Decision, FilterState, NotifyKind
from blockgov.ports import InMemoryCaseStore


class RecordingNotifier:
    """Notifier that remembers every notification."""

    def __init__(self):
        self.calls: list[tuple[NotifyKind, str, str]] = []

    def notify(self, kind: NotifyKind, title: str, message: str) -> None:
        self.calls.append((NotifyKind(kind), title, message))

    @property
    def kinds(self) -> list[NotifyKind]:
        return [kind for kind, _, _ in self.calls]

    @property
    def errors(self) -> list[tuple[NotifyKind, str, str]]:
        return [c for c in self.calls if c[0] == NotifyKind.ERROR]

    @property
    def successes(self) -> list[tuple[NotifyKind, str, str]]:
        return [c for c in self.calls if c[0] == NotifyKind.SUCCESS]


class FlakyCaseStore(InMemoryCaseStore):
    """
    InMemoryCaseStore that fails on demand.

    Attributes:
        bulk_failures: How many upcoming bulk_resolve calls fail
        fail_status_for: Case ids whose update_status fails
        fail_list: Whether list() fails
        error: Raised instead of CaseStoreError when set (e.g. ConnectionError)
    """

    def __init__(self, cases: Iterable[Case] = ()):
        super().__init__(cases)
        self.bulk_failures = 0
        self.fail_status_for: set[str] = set()
        self.fail_list = False
        self.error: Optional[Exception] = None
        self.bulk_calls: list[tuple[tuple[str, ...], str, Optional[str]]] = []
        self.status_calls: list[tuple[str, CaseStatus]] = []

    async def list(self, filters: Optional[FilterState] = None) -> list[Case]:
        if self.fail_list:
            raise self.error or CaseStoreError(message="Case service unavailable")
        return await super().list(filters)

    async def update_status(self, case_id: str, status: CaseStatus) -> None:
        self.status_calls.append((case_id, CaseStatus(status)))
        if case_id in self.fail_status_for:
            raise self.error or CaseStoreError(message="Status update rejected", case_id=case_id)
        await super().update_status(case_id, status)

    async def bulk_resolve(
        self,
        case_ids: Sequence[str],
        content: str,
        template_id: Optional[str] = None,
    ) -> None:
        self.bulk_calls.append((tuple(case_ids), content, template_id))
        if self.bulk_failures > 0:
            self.bulk_failures -= 1
            raise self.error or CaseStoreError(message="Bulk resolve timed out")
        await super().bulk_resolve(case_ids, content, template_id)


class ControlledCaseStore(InMemoryCaseStore):
    """
    Case store whose list() calls complete only when the test says so.

    Every list() call parks on a future appended to ``pending``; resolve
    it with ``complete(i, cases)`` or ``fail(i, exc)``.
    """

    def __init__(self, cases: Iterable[Case] = ()):
        super().__init__(cases)
        self.pending: list[asyncio.Future] = []

    async def list(self, filters: Optional[FilterState] = None) -> list[Case]:
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    def complete(self, index: int, cases: list[Case]) -> None:
        self.pending[index].set_result(cases)

    def fail(self, index: int, exc: Exception) -> None:
        self.pending[index].set_exception(exc)


class MemoryLedgerStore:
    """LedgerStore keeping entries in a list; can be told to fail."""

    def __init__(self, entries: Iterable[Decision] = ()):
        self.entries: list[Decision] = list(entries)
        self.fail = False

    def append(self, decision: Decision) -> None:
        if self.fail:
            raise OSError("disk full")
        self.entries.append(decision)

    def load(self):
        return iter(list(self.entries))
