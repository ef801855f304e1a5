"""
BlockGov Models

All domain models for the blocked-case governance core.

    from blockgov.models import (
        # Enums
        Impact, CaseStatus, DecisionAction, WizardStep,
        # Cases
        Case, CaseSnapshot, Actor,
        # Decisions
        DecisionDraft, Decision,
        # Workspace
        WorkspaceTab, FilterState,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    CaseStatus,
    CommitStatus,
    DecisionAction,
    FingerprintMode,
    Impact,
    NotifyKind,
    SortDirection,
    SortField,
    TabType,
    TemplateCategory,
    WizardStep,
)

# =============================================================================
# Cases
# =============================================================================
from .case import Actor, Case, CaseSnapshot, parse_date, parse_int

# =============================================================================
# Decisions
# =============================================================================
from .decision import Decision, DecisionDraft, new_batch_id

# =============================================================================
# Workspace
# =============================================================================
from .filters import CaseSort, DateRange, FilterState, NumericRange, SavedFilter
from .workspace import WorkspaceTab, make_tab_id

__all__ = [
    # Enums
    "CaseStatus",
    "CommitStatus",
    "DecisionAction",
    "FingerprintMode",
    "Impact",
    "NotifyKind",
    "SortDirection",
    "SortField",
    "TabType",
    "TemplateCategory",
    "WizardStep",
    # Cases
    "Actor",
    "Case",
    "CaseSnapshot",
    "parse_date",
    "parse_int",
    # Decisions
    "Decision",
    "DecisionDraft",
    "new_batch_id",
    # Workspace
    "CaseSort",
    "DateRange",
    "FilterState",
    "NumericRange",
    "SavedFilter",
    "WorkspaceTab",
    "make_tab_id",
]
