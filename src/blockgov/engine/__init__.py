"""
BlockGov Engine

Core services for blocked-case governance.

Services:
- PriorityScorer: Deterministic case priority
- DecisionLedger: Append-only, fingerprinted decision register
- JsonlLedgerStore: Durable JSON-lines storage for the ledger
- Filters: Case predicate and sorting
- FetchGuard: Stale-fetch protection for async case lists
- WorkspaceSession: Tabs, selection, filters and saved filters
- ResolutionWizard: Five-step resolution workflow
- DecisionDesk: Direct escalate / substitute / resolve batches
- Stats: Queue statistics and SLA alerts

Usage:
    from blockgov.engine import (
        DecisionLedger,
        WorkspaceSession,
        ResolutionWizard,
        DecisionDesk,
    )
"""
from __future__ import annotations

# Pure building blocks
from .scoring import (
    AMOUNT_UNIT,
    DEFAULT_SCORER,
    IMPACT_WEIGHT,
    UNKNOWN_IMPACT_WEIGHT,
    PriorityScorer,
    parse_amount,
    rank,
    round_half_up,
    score,
)
from .filters import (
    DEFAULT_SLA_DAYS,
    apply_filters,
    is_sla_breached,
    matches,
    search_text,
    sort_cases,
)
from .fetch import FetchGuard, FetchToken

# Ledger
from .ledger import (
    DecisionLedger,
    LedgerQuery,
    LedgerVerification,
    compute_fingerprint,
    open_ledger,
    verify_entries,
    verify_entry,
)
from .ledger_store import JsonlLedgerStore, LedgerStore

# Workflow
from .session import (
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
    set_sort,
    toggle_selection,
)
from .wizard import ResolutionWizard, WizardSession
from .actions import BatchOutcome, DecisionDesk
from .stats import (
    BureauCount,
    QueueStats,
    SlaAlert,
    TypeCount,
    compute_queue_stats,
    sla_alerts,
)

__all__ = [
    # Scoring
    "AMOUNT_UNIT",
    "DEFAULT_SCORER",
    "IMPACT_WEIGHT",
    "UNKNOWN_IMPACT_WEIGHT",
    "PriorityScorer",
    "parse_amount",
    "rank",
    "round_half_up",
    "score",
    # Filters
    "DEFAULT_SLA_DAYS",
    "apply_filters",
    "is_sla_breached",
    "matches",
    "search_text",
    "sort_cases",
    # Fetch guard
    "FetchGuard",
    "FetchToken",
    # Ledger
    "DecisionLedger",
    "LedgerQuery",
    "LedgerVerification",
    "compute_fingerprint",
    "open_ledger",
    "verify_entries",
    "verify_entry",
    "JsonlLedgerStore",
    "LedgerStore",
    # Session
    "WorkspaceSession",
    "WorkspaceState",
    "activate_tab",
    "apply_saved_filter",
    "clear_selection",
    "close_tab",
    "delete_saved_filter",
    "open_tab",
    "reset_filters",
    "save_filter",
    "select_all",
    "set_default_filter",
    "set_filters",
    "set_sort",
    "toggle_selection",
    # Wizard
    "ResolutionWizard",
    "WizardSession",
    # Direct actions
    "BatchOutcome",
    "DecisionDesk",
    # Stats
    "BureauCount",
    "QueueStats",
    "SlaAlert",
    "TypeCount",
    "compute_queue_stats",
    "sla_alerts",
]
