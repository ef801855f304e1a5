"""
BlockGov Fetch Guard Tests

Out-of-order completion, cancellation and error routing for
asynchronous case fetches.
"""
from __future__ import annotations

import asyncio

import pytest

from blockgov.engine import FetchGuard, WorkspaceSession
from blockgov.exceptions import CaseStoreError
from blockgov.models import FilterState, NotifyKind, TabType, WorkspaceTab

from helpers.doubles import ControlledCaseStore, RecordingNotifier


@pytest.fixture
def controlled(cases):
    return ControlledCaseStore(cases)


@pytest.fixture
def controlled_session(controlled, notifier):
    return WorkspaceSession(controlled, notifier)


class TestFetchGuard:
    """Token bookkeeping."""

    def test_latest_token_is_current(self) -> None:
        guard = FetchGuard()
        first = guard.begin("inbox")
        second = guard.begin("inbox")
        assert not guard.is_current(first)
        assert guard.is_current(second)

    def test_scopes_are_independent(self) -> None:
        guard = FetchGuard()
        inbox = guard.begin("inbox")
        guard.begin("bureau:BF")
        assert guard.is_current(inbox)

    def test_cancel_invalidates(self) -> None:
        guard = FetchGuard()
        token = guard.begin("inbox")
        guard.cancel("inbox")
        guard.cancel("never-started")
        assert not guard.is_current(token)

    @pytest.mark.asyncio
    async def test_error_without_handler_propagates(self) -> None:
        async def boom():
            raise CaseStoreError(message="down")

        with pytest.raises(CaseStoreError):
            await FetchGuard().run("inbox", boom(), apply=lambda _: None)


class TestOutOfOrderCompletion:
    """Only the most recently started fetch for a tab applies."""

    @pytest.mark.asyncio
    async def test_older_fetch_resolving_last_is_dropped(
        self, controlled, controlled_session, cases
    ) -> None:
        inbox = controlled_session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))

        fetch_a = asyncio.ensure_future(
            controlled_session.refresh_cases(inbox.id, FilterState(impact=("critical",)))
        )
        await asyncio.sleep(0)
        fetch_b = asyncio.ensure_future(
            controlled_session.refresh_cases(inbox.id, FilterState(impact=("low",)))
        )
        await asyncio.sleep(0)
        assert len(controlled.pending) == 2

        controlled.complete(1, [cases[3]])
        assert await fetch_b is True
        controlled.complete(0, [cases[0]])
        assert await fetch_a is False

        assert [c.id for c in controlled_session.cases(inbox.id)] == ["BLK-004"]

    @pytest.mark.asyncio
    async def test_closed_tab_ignores_result(self, controlled, controlled_session, cases) -> None:
        tab = controlled_session.open(
            WorkspaceTab.create(TabType.BUREAU, "Bureau BF", discriminator="BF")
        )
        pending = asyncio.ensure_future(controlled_session.refresh_cases(tab.id))
        await asyncio.sleep(0)

        controlled_session.close(tab.id)
        controlled.complete(0, cases)

        assert await pending is False
        assert controlled_session.cases(tab.id) == ()

    @pytest.mark.asyncio
    async def test_stale_error_is_not_reported(
        self, controlled, controlled_session, notifier, cases
    ) -> None:
        inbox = controlled_session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))
        stale = asyncio.ensure_future(controlled_session.refresh_cases(inbox.id))
        await asyncio.sleep(0)
        fresh = asyncio.ensure_future(controlled_session.refresh_cases(inbox.id))
        await asyncio.sleep(0)

        controlled.fail(0, CaseStoreError(message="timeout"))
        controlled.complete(1, cases)

        assert await stale is False
        assert await fresh is True
        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_current_error_is_reported(self, controlled, cases) -> None:
        notifier = RecordingNotifier()
        session = WorkspaceSession(controlled, notifier)
        inbox = session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))

        pending = asyncio.ensure_future(session.refresh_cases(inbox.id))
        await asyncio.sleep(0)
        controlled.fail(0, CaseStoreError(message="timeout"))

        assert await pending is False
        assert notifier.kinds == [NotifyKind.ERROR]
        assert notifier.calls[0][2] == "timeout"

    @pytest.mark.asyncio
    async def test_transport_error_is_reported(
        self, controlled, controlled_session, notifier
    ) -> None:
        inbox = controlled_session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))
        pending = asyncio.ensure_future(controlled_session.refresh_cases(inbox.id))
        await asyncio.sleep(0)
        controlled.fail(0, ConnectionError("connection reset by peer"))

        assert await pending is False
        assert notifier.kinds == [NotifyKind.ERROR]
        assert notifier.calls[0][1] == "Could not load cases"
        assert notifier.calls[0][2] == "connection reset by peer"

    @pytest.mark.asyncio
    async def test_error_without_text_reports_its_type(
        self, controlled, controlled_session, notifier
    ) -> None:
        inbox = controlled_session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))
        pending = asyncio.ensure_future(controlled_session.refresh_cases(inbox.id))
        await asyncio.sleep(0)
        controlled.fail(0, TimeoutError())

        assert await pending is False
        assert notifier.calls[0][2] == "TimeoutError"
