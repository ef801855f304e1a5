"""
BlockGov Workspace Session Tests

Pure transitions first, then the WorkspaceSession owner.
"""
from __future__ import annotations

import pytest

from blockgov.engine.session import (
    WorkspaceSession,
    WorkspaceState,
    activate_tab,
    apply_saved_filter,
    clear_selection,
    close_tab,
    delete_saved_filter,
    open_tab,
    reset_filters,
    save_filter,
    select_all,
    set_default_filter,
    set_filters,
    toggle_selection,
)
from blockgov.models import (
    CaseSort,
    FilterState,
    NotifyKind,
    SavedFilter,
    SortDirection,
    SortField,
    TabType,
    WorkspaceTab,
)

from helpers.doubles import FlakyCaseStore, RecordingNotifier


def tab(discriminator: str, tab_type: TabType = TabType.CASE_DETAIL) -> WorkspaceTab:
    return WorkspaceTab.create(tab_type, discriminator, discriminator=discriminator)


def with_tabs(*names: str) -> WorkspaceState:
    state = WorkspaceState()
    for name in names:
        state = open_tab(state, tab(name))
    return state


def ids(state: WorkspaceState) -> list[str]:
    return [t.id for t in state.tabs]


# =============================================================================
# Tab transitions
# =============================================================================

class TestTabTransitions:
    """open / close / activate."""

    def test_open_appends_and_activates(self) -> None:
        state = with_tabs("A", "B")
        assert ids(state) == ["case-detail:A", "case-detail:B"]
        assert state.active_tab_id == "case-detail:B"

    def test_open_existing_only_activates(self) -> None:
        state = open_tab(with_tabs("A", "B"), tab("A"))
        assert ids(state) == ["case-detail:A", "case-detail:B"]
        assert state.active_tab_id == "case-detail:A"

    def test_close_active_activates_previous(self) -> None:
        state = activate_tab(with_tabs("A", "B", "C"), "case-detail:B")
        state = close_tab(state, "case-detail:B")
        assert state.active_tab_id == "case-detail:A"

    def test_close_first_active_activates_next(self) -> None:
        state = activate_tab(with_tabs("A", "B"), "case-detail:A")
        state = close_tab(state, "case-detail:A")
        assert state.active_tab_id == "case-detail:B"

    def test_close_last_tab_leaves_none_active(self) -> None:
        state = close_tab(with_tabs("A"), "case-detail:A")
        assert state.tabs == ()
        assert state.active_tab_id is None
        assert state.active_tab is None

    def test_close_inactive_keeps_active(self) -> None:
        state = close_tab(with_tabs("A", "B", "C"), "case-detail:A")
        assert state.active_tab_id == "case-detail:C"

    def test_close_unknown_is_noop(self) -> None:
        state = with_tabs("A")
        assert close_tab(state, "nope") is state

    def test_activate_unknown_is_noop(self) -> None:
        state = with_tabs("A", "B")
        assert activate_tab(state, "nope") is state

    def test_transitions_do_not_mutate(self) -> None:
        state = with_tabs("A")
        open_tab(state, tab("B"))
        assert ids(state) == ["case-detail:A"]


# =============================================================================
# Selection and filters
# =============================================================================

class TestSelection:
    """Cross-view selection."""

    def test_toggle_twice_is_identity(self) -> None:
        state = select_all(WorkspaceState(), ["BLK-1", "BLK-2"])
        assert toggle_selection(toggle_selection(state, "BLK-3"), "BLK-3").selection == state.selection
        assert toggle_selection(toggle_selection(state, "BLK-1"), "BLK-1").selection == state.selection

    def test_select_all_replaces(self) -> None:
        state = select_all(select_all(WorkspaceState(), ["A", "B"]), ["C"])
        assert state.selection == frozenset({"C"})

    def test_clear(self) -> None:
        state = clear_selection(select_all(WorkspaceState(), ["A"]))
        assert state.selection == frozenset()

    def test_switching_tabs_keeps_selection(self) -> None:
        state = select_all(with_tabs("A", "B"), ["BLK-1"])
        state = activate_tab(state, "case-detail:A")
        state = close_tab(state, "case-detail:B")
        assert state.selection == frozenset({"BLK-1"})


class TestFilterTransitions:
    """Filter merge, reset and saved filters."""

    def test_set_filters_merges(self) -> None:
        state = set_filters(WorkspaceState(), impact=["critical"])
        state = set_filters(state, search="budget")
        assert state.filters.impact == ("critical",)
        assert state.filters.search == "budget"

    def test_reset(self) -> None:
        state = reset_filters(set_filters(WorkspaceState(), impact=["high"]))
        assert state.filters.is_identity

    def test_saved_filter_round_trip(self) -> None:
        saved = SavedFilter.create(
            "Critical", FilterState(impact=("critical",)), CaseSort(SortField.DELAY)
        )
        state = save_filter(WorkspaceState(), saved)
        state = apply_saved_filter(reset_filters(state), saved.id)
        assert state.filters.impact == ("critical",)
        assert state.sort.field == SortField.DELAY

    def test_apply_unknown_saved_filter_is_noop(self) -> None:
        state = WorkspaceState()
        assert apply_saved_filter(state, "FLT-NOPE") is state

    def test_single_default(self) -> None:
        a = SavedFilter.create("A", FilterState())
        b = SavedFilter.create("B", FilterState())
        state = save_filter(save_filter(WorkspaceState(), a), b)

        state = set_default_filter(state, a.id)
        state = set_default_filter(state, b.id)

        assert [s.is_default for s in state.saved_filters] == [False, True]
        assert state.default_filter.id == b.id
        assert set_default_filter(state, None).default_filter is None

    def test_delete(self) -> None:
        saved = SavedFilter.create("A", FilterState())
        state = delete_saved_filter(save_filter(WorkspaceState(), saved), saved.id)
        assert state.saved_filters == ()


# =============================================================================
# Session owner
# =============================================================================

class TestWorkspaceSession:
    """Tests for the WorkspaceSession state owner."""

    def test_methods_drive_state(self, session) -> None:
        inbox = session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))
        session.open(tab("BLK-001"))
        session.toggle("BLK-001")
        session.activate(inbox.id)

        assert session.active_tab.id == "inbox"
        assert session.selection == frozenset({"BLK-001"})

    def test_set_filter_returns_merged_state(self, session) -> None:
        session.set_filter(impact=["critical"])
        filters = session.set_filter(bureaux=["BF"])
        assert filters.impact == ("critical",)
        assert filters.bureaux == ("BF",)
        assert session.reset_filters().is_identity

    def test_save_and_apply_filter(self, session) -> None:
        session.set_filter(impact=["high"])
        session.set_sort("amount", "asc")
        saved = session.save_filter("High by amount", is_default=True)

        session.reset_filters()
        session.set_sort(SortField.PRIORITY)
        session.apply_saved_filter(saved.id)

        assert session.filters.impact == ("high",)
        assert session.state.sort == CaseSort(SortField.AMOUNT, SortDirection.ASC)
        assert session.state.default_filter.id == saved.id

    def test_default_filter_applied_on_start(self, case_store) -> None:
        saved = SavedFilter(
            id="FLT-1", name="Mine", filters=FilterState(bureaux=("BF",)), is_default=True
        )
        state = WorkspaceState(saved_filters=(saved,))
        session = WorkspaceSession(case_store, state=state)
        assert session.filters.bureaux == ("BF",)

    @pytest.mark.asyncio
    async def test_refresh_applies_filtered_cases(self, session, inbox) -> None:
        session.set_filter(impact=["critical", "high"])
        applied = await session.refresh_cases(inbox.id)

        assert applied is True
        assert [c.id for c in session.cases(inbox.id)] == ["BLK-001", "BLK-002"]

    @pytest.mark.asyncio
    async def test_refresh_with_explicit_filters(self, session, inbox) -> None:
        await session.refresh_cases(inbox.id, FilterState(bureaux=("BF",)))
        assert {c.id for c in session.cases(inbox.id)} == {"BLK-001", "BLK-003"}

    @pytest.mark.asyncio
    async def test_sorted_cases_follow_active_sort(self, session, inbox) -> None:
        await session.refresh_cases(inbox.id)
        session.set_sort("delay", "asc")
        assert [c.id for c in session.sorted_cases(inbox.id)][0] == "BLK-004"

    @pytest.mark.asyncio
    async def test_refresh_unknown_tab(self, session) -> None:
        assert await session.refresh_cases("nope") is False

    @pytest.mark.asyncio
    async def test_refresh_failure_is_notified(self, cases) -> None:
        store = FlakyCaseStore(cases)
        store.fail_list = True
        notifier = RecordingNotifier()
        session = WorkspaceSession(store, notifier)
        inbox = session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))

        assert await session.refresh_cases(inbox.id) is False
        assert notifier.kinds == [NotifyKind.ERROR]
        assert session.cases(inbox.id) == ()

    @pytest.mark.asyncio
    async def test_close_drops_cached_cases(self, session, inbox) -> None:
        await session.refresh_cases(inbox.id)
        session.close(inbox.id)
        assert session.cases(inbox.id) == ()
        assert session.active_tab is None
