"""
BlockGov Workspace Session

Single-owner state container for the multi-tab workspace: open tabs,
the active tab, the cross-view selection, active filters and saved
filters.

Every transition is a pure function ``(WorkspaceState, ...) -> WorkspaceState``
so it can be tested without any view. WorkspaceSession holds the current
state, exposes the transitions as methods, keeps the case list fetched for
each tab and routes every fetch through a FetchGuard.

Tab rules:
- open: an existing id is activated, never duplicated
- close: if the closed tab was active, the tab before it becomes active,
  else the first remaining tab, else none; in-flight fetches for it are
  cancelled
- activate: unknown ids are ignored

The selection is independent of the active tab; switching tabs never
clears it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Union

from ..exceptions import CaseStoreError
from ..models import (
    Case,
    CaseSort,
    FilterState,
    NotifyKind,
    SavedFilter,
    SortDirection,
    SortField,
    WorkspaceTab,
)
from ..ports import CaseStore, LoggingNotifier, Notifier
from .fetch import FetchGuard
from .filters import DEFAULT_SLA_DAYS, sort_cases

logger = logging.getLogger(__name__)


# =============================================================================
# State
# =============================================================================

@dataclass(frozen=True)
class WorkspaceState:
    """
    Immutable snapshot of a workspace.

    Attributes:
        tabs: Open tabs in open order
        active_tab_id: Id of the active tab, None when no tab is active
        selection: Selected case ids, shared by every tab
        filters: Active filters
        sort: Active sort order
        saved_filters: Named filters, in creation order
    """
    tabs: tuple[WorkspaceTab, ...] = ()
    active_tab_id: Optional[str] = None
    selection: frozenset[str] = frozenset()
    filters: FilterState = field(default_factory=FilterState)
    sort: CaseSort = field(default_factory=CaseSort)
    saved_filters: tuple[SavedFilter, ...] = ()

    @property
    def active_tab(self) -> Optional[WorkspaceTab]:
        return self.tab(self.active_tab_id) if self.active_tab_id else None

    def tab(self, tab_id: str) -> Optional[WorkspaceTab]:
        for t in self.tabs:
            if t.id == tab_id:
                return t
        return None

    @property
    def default_filter(self) -> Optional[SavedFilter]:
        for saved in self.saved_filters:
            if saved.is_default:
                return saved
        return None


# =============================================================================
# Tab Transitions
# =============================================================================

def open_tab(state: WorkspaceState, tab: WorkspaceTab) -> WorkspaceState:
    if state.tab(tab.id) is not None:
        return replace(state, active_tab_id=tab.id)
    return replace(state, tabs=state.tabs + (tab,), active_tab_id=tab.id)


def close_tab(state: WorkspaceState, tab_id: str) -> WorkspaceState:
    ids = [t.id for t in state.tabs]
    if tab_id not in ids:
        return state
    index = ids.index(tab_id)
    remaining = state.tabs[:index] + state.tabs[index + 1:]

    active = state.active_tab_id
    if active == tab_id:
        if index > 0:
            active = remaining[index - 1].id
        elif remaining:
            active = remaining[0].id
        else:
            active = None
    return replace(state, tabs=remaining, active_tab_id=active)


def activate_tab(state: WorkspaceState, tab_id: str) -> WorkspaceState:
    if state.tab(tab_id) is None:
        return state
    return replace(state, active_tab_id=tab_id)


# =============================================================================
# Selection Transitions
# =============================================================================

def toggle_selection(state: WorkspaceState, case_id: str) -> WorkspaceState:
    return replace(state, selection=state.selection ^ {case_id})


def select_all(state: WorkspaceState, case_ids: Iterable[str]) -> WorkspaceState:
    """Replace the selection with exactly these ids."""
    return replace(state, selection=frozenset(case_ids))


def clear_selection(state: WorkspaceState) -> WorkspaceState:
    return replace(state, selection=frozenset())


# =============================================================================
# Filter Transitions
# =============================================================================

def set_filters(state: WorkspaceState, **partial: Any) -> WorkspaceState:
    """Shallow-merge the given fields into the active filters."""
    return replace(state, filters=state.filters.merge(**partial))


def reset_filters(state: WorkspaceState) -> WorkspaceState:
    return replace(state, filters=FilterState())


def set_sort(
    state: WorkspaceState,
    field: Union[SortField, str],
    direction: Union[SortDirection, str] = SortDirection.DESC,
) -> WorkspaceState:
    return replace(
        state, sort=CaseSort(field=SortField(field), direction=SortDirection(direction))
    )


def save_filter(state: WorkspaceState, saved: SavedFilter) -> WorkspaceState:
    others = tuple(s for s in state.saved_filters if s.id != saved.id)
    if saved.is_default:
        others = tuple(replace(s, is_default=False) for s in others)
    return replace(state, saved_filters=others + (saved,))


def apply_saved_filter(state: WorkspaceState, filter_id: str) -> WorkspaceState:
    """Make a saved filter (and its sort, if any) active. Unknown ids are ignored."""
    for saved in state.saved_filters:
        if saved.id == filter_id:
            return replace(state, filters=saved.filters, sort=saved.sort or state.sort)
    return state


def delete_saved_filter(state: WorkspaceState, filter_id: str) -> WorkspaceState:
    return replace(
        state,
        saved_filters=tuple(s for s in state.saved_filters if s.id != filter_id),
    )


def set_default_filter(state: WorkspaceState, filter_id: Optional[str]) -> WorkspaceState:
    """
    Mark one saved filter as the default (None clears the default).

    At most one saved filter is the default at any time.
    """
    if filter_id is not None and not any(s.id == filter_id for s in state.saved_filters):
        return state
    return replace(
        state,
        saved_filters=tuple(
            replace(s, is_default=(s.id == filter_id)) for s in state.saved_filters
        ),
    )


# =============================================================================
# Session
# =============================================================================

class WorkspaceSession:
    """
    Owner of one user's workspace state.

    Usage:
        session = WorkspaceSession(case_store)
        inbox = session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))

        session.set_filter(impact=["critical"])
        await session.refresh_cases(inbox.id)

        session.toggle("BLK-001")
        session.activate(other_tab.id)   # selection is kept
    """

    def __init__(
        self,
        case_store: CaseStore,
        notifier: Optional[Notifier] = None,
        state: Optional[WorkspaceState] = None,
        guard: Optional[FetchGuard] = None,
        default_sla_days: int = DEFAULT_SLA_DAYS,
    ):
        self._case_store = case_store
        self._notifier = notifier or LoggingNotifier()
        self._state = state or WorkspaceState()
        self._guard = guard or FetchGuard()
        self._cases: dict[str, tuple[Case, ...]] = {}
        self.default_sla_days = default_sla_days

        default = self._state.default_filter
        if default is not None and self._state.filters.is_identity:
            self._state = apply_saved_filter(self._state, default.id)

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> WorkspaceState:
        return self._state

    @property
    def tabs(self) -> tuple[WorkspaceTab, ...]:
        return self._state.tabs

    @property
    def active_tab(self) -> Optional[WorkspaceTab]:
        return self._state.active_tab

    @property
    def selection(self) -> frozenset[str]:
        return self._state.selection

    @property
    def filters(self) -> FilterState:
        return self._state.filters

    @property
    def saved_filters(self) -> tuple[SavedFilter, ...]:
        return self._state.saved_filters

    @property
    def guard(self) -> FetchGuard:
        return self._guard

    def cases(self, tab_id: str) -> tuple[Case, ...]:
        """Last case list applied to a tab, as fetched."""
        return self._cases.get(tab_id, ())

    def sorted_cases(self, tab_id: str) -> list[Case]:
        """A tab's cases in the active sort order."""
        return sort_cases(self.cases(tab_id), self._state.sort)

    # -------------------------------------------------------------------------
    # Tabs
    # -------------------------------------------------------------------------

    def open(self, tab: WorkspaceTab) -> WorkspaceTab:
        """Open (or re-activate) a tab and return the tab now active."""
        self._state = open_tab(self._state, tab)
        logger.debug("Opened tab", extra={"tab_id": tab.id})
        return self._state.tab(tab.id) or tab

    def close(self, tab_id: str) -> None:
        if self._state.tab(tab_id) is None:
            return
        self._guard.cancel(tab_id)
        self._cases.pop(tab_id, None)
        self._state = close_tab(self._state, tab_id)
        logger.debug("Closed tab", extra={"tab_id": tab_id})

    def activate(self, tab_id: str) -> None:
        self._state = activate_tab(self._state, tab_id)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def toggle(self, case_id: str) -> frozenset[str]:
        self._state = toggle_selection(self._state, case_id)
        return self._state.selection

    def select_all(self, case_ids: Iterable[str]) -> frozenset[str]:
        self._state = select_all(self._state, case_ids)
        return self._state.selection

    def clear_selection(self) -> None:
        self._state = clear_selection(self._state)

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def set_filter(self, **partial: Any) -> FilterState:
        self._state = set_filters(self._state, **partial)
        return self._state.filters

    def reset_filters(self) -> FilterState:
        self._state = reset_filters(self._state)
        return self._state.filters

    def set_sort(
        self,
        field: Union[SortField, str],
        direction: Union[SortDirection, str] = SortDirection.DESC,
    ) -> CaseSort:
        self._state = set_sort(self._state, field, direction)
        return self._state.sort

    def save_filter(self, name: str, is_default: bool = False) -> SavedFilter:
        """Save the active filters and sort under a name."""
        saved = replace(
            SavedFilter.create(name, self._state.filters, self._state.sort),
            is_default=is_default,
        )
        self._state = save_filter(self._state, saved)
        logger.info("Saved filter %s (%s)", saved.name, saved.id)
        return saved

    def apply_saved_filter(self, filter_id: str) -> FilterState:
        self._state = apply_saved_filter(self._state, filter_id)
        return self._state.filters

    def delete_saved_filter(self, filter_id: str) -> None:
        self._state = delete_saved_filter(self._state, filter_id)

    def set_default_filter(self, filter_id: Optional[str]) -> None:
        self._state = set_default_filter(self._state, filter_id)

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def refresh_cases(
        self,
        tab_id: str,
        filters: Optional[FilterState] = None,
    ) -> bool:
        """
        Fetch the case list for a tab and apply it if still current.

        Only the most recently started fetch for a tab may apply its result.
        A fetch for a tab closed while in flight is discarded. A failure of
        a current fetch is reported through the notifier.

        Returns True when the fetched list was applied.
        """
        if self._state.tab(tab_id) is None:
            return False
        filters = filters if filters is not None else self._state.filters

        def apply(cases: list[Case]) -> None:
            self._cases[tab_id] = tuple(cases)
            logger.debug("Applied %d cases", len(cases), extra={"tab_id": tab_id})

        def report(exc: Exception) -> None:
            if isinstance(exc, CaseStoreError):
                logger.warning("Case fetch failed: %s", exc, extra={"tab_id": tab_id})
                message = exc.message
            else:
                logger.error(
                    "Case fetch failed: %r", exc, exc_info=exc, extra={"tab_id": tab_id}
                )
                message = str(exc) or type(exc).__name__
            self._notifier.notify(NotifyKind.ERROR, "Could not load cases", message)

        return await self._guard.run(
            tab_id, self._case_store.list(filters), apply=apply, on_error=report
        )
