"""
BlockGov - Blocked-Case Governance Core

Back-office workflow for remediating blocked cases: staff triage stuck
work items, escalate them, exercise the substitution power, or resolve
them, and every decision is permanently recorded for audit.

Core Principle: "Every decision is recorded, fingerprinted and verifiable."

Key Features:
- Deterministic priority scoring (impact x delay x amount)
- Append-only decision ledger with SHA-256 fingerprints, optional chaining
- Multi-tab workspace sessions with shared selection and saved filters
- Stale-fetch protection for asynchronous case lists
- Five-step resolution wizard with retry that never double-records
- Direct escalate / substitute / resolve batches
- Resolution templates, queue statistics, CSV audit export, audit API

Quick Start:
    from blockgov import (
        Actor, DecisionLedger, WorkspaceSession, ResolutionWizard,
        InMemoryCaseStore, LoggingNotifier, TabType, WorkspaceTab,
    )

    store = InMemoryCaseStore(cases)
    ledger = DecisionLedger()
    session = WorkspaceSession(store)

    inbox = session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))
    await session.refresh_cases(inbox.id)
    session.select_all(c.id for c in session.cases(inbox.id))

    wizard = ResolutionWizard.open(session, ledger, store, LoggingNotifier(), actor)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    Actor,
    Case,
    CaseSnapshot,
    CaseSort,
    CaseStatus,
    CommitStatus,
    DateRange,
    Decision,
    DecisionAction,
    DecisionDraft,
    FilterState,
    FingerprintMode,
    Impact,
    NotifyKind,
    NumericRange,
    SavedFilter,
    SortDirection,
    SortField,
    TabType,
    TemplateCategory,
    WizardStep,
    WorkspaceTab,
    new_batch_id,
)

# =============================================================================
# Engine (imported before ports, which build on engine.filters)
# =============================================================================
from .engine import (
    BatchOutcome,
    DecisionDesk,
    DecisionLedger,
    FetchGuard,
    JsonlLedgerStore,
    LedgerQuery,
    LedgerVerification,
    PriorityScorer,
    QueueStats,
    ResolutionWizard,
    WorkspaceSession,
    WorkspaceState,
    apply_filters,
    compute_queue_stats,
    matches,
    open_ledger,
    parse_amount,
    rank,
    score,
    sla_alerts,
    sort_cases,
)
from .ports import CaseStore, InMemoryCaseStore, LoggingNotifier, Notifier

# =============================================================================
# Supporting services
# =============================================================================
from .config import Settings, load_settings
from .exceptions import (
    BlockGovError,
    CaseNotFoundError,
    CaseStoreError,
    ConfigError,
    DecisionRequestError,
    LedgerAppendError,
    LedgerError,
    LedgerIntegrityError,
    TemplatePackError,
    WizardError,
    WizardGuardError,
    WizardStateError,
)
from .export import decisions_to_csv
from .log import JSONFormatter, configure_logging
from .templates import (
    ResolutionTemplate,
    TemplateCatalog,
    apply_template,
    load_template_pack,
    missing_variables,
)

__all__ = [
    "__version__",
    # Models
    "Actor",
    "Case",
    "CaseSnapshot",
    "CaseSort",
    "CaseStatus",
    "CommitStatus",
    "DateRange",
    "Decision",
    "DecisionAction",
    "DecisionDraft",
    "FilterState",
    "FingerprintMode",
    "Impact",
    "NotifyKind",
    "NumericRange",
    "SavedFilter",
    "SortDirection",
    "SortField",
    "TabType",
    "TemplateCategory",
    "WizardStep",
    "WorkspaceTab",
    "new_batch_id",
    # Engine
    "BatchOutcome",
    "DecisionDesk",
    "DecisionLedger",
    "FetchGuard",
    "JsonlLedgerStore",
    "LedgerQuery",
    "LedgerVerification",
    "PriorityScorer",
    "QueueStats",
    "ResolutionWizard",
    "WorkspaceSession",
    "WorkspaceState",
    "apply_filters",
    "compute_queue_stats",
    "matches",
    "open_ledger",
    "parse_amount",
    "rank",
    "score",
    "sla_alerts",
    "sort_cases",
    # Ports
    "CaseStore",
    "InMemoryCaseStore",
    "LoggingNotifier",
    "Notifier",
    # Config & logging
    "Settings",
    "load_settings",
    "JSONFormatter",
    "configure_logging",
    # Exceptions
    "BlockGovError",
    "CaseNotFoundError",
    "CaseStoreError",
    "ConfigError",
    "DecisionRequestError",
    "LedgerAppendError",
    "LedgerError",
    "LedgerIntegrityError",
    "TemplatePackError",
    "WizardError",
    "WizardGuardError",
    "WizardStateError",
    # Export & templates
    "decisions_to_csv",
    "ResolutionTemplate",
    "TemplateCatalog",
    "apply_template",
    "load_template_pack",
    "missing_variables",
]
