"""
BlockGov Enumerations

All enumeration types used throughout the governance core.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Case Attributes
# =============================================================================

class Impact(str, Enum):
    """Business impact of a blocked case, highest first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CaseStatus(str, Enum):
    """Lifecycle status of a blocked case, owned by the case store."""
    PENDING = "pending"
    ESCALATED = "escalated"
    SUBSTITUTED = "substituted"
    RESOLVED = "resolved"


# =============================================================================
# Decisions
# =============================================================================

class DecisionAction(str, Enum):
    """Kinds of governance decision recorded in the ledger."""
    ESCALATION = "escalation"          # Raised to higher authority
    SUBSTITUTION = "substitution"      # Governance office acts in place of a bureau
    RESOLUTION = "resolution"          # Blocking cause removed

    @property
    def batch_prefix(self) -> str:
        return _BATCH_PREFIX[self]

    @property
    def resulting_status(self) -> CaseStatus:
        """Case status the store should reflect after this decision."""
        return _RESULTING_STATUS[self]


_BATCH_PREFIX = {
    DecisionAction.ESCALATION: "ESC",
    DecisionAction.SUBSTITUTION: "SUB",
    DecisionAction.RESOLUTION: "RES",
}

_RESULTING_STATUS = {
    DecisionAction.ESCALATION: CaseStatus.ESCALATED,
    DecisionAction.SUBSTITUTION: CaseStatus.SUBSTITUTED,
    DecisionAction.RESOLUTION: CaseStatus.RESOLVED,
}


class FingerprintMode(str, Enum):
    """
    How ledger fingerprints are derived.

    PER_ENTRY hashes each entry on its own (tamper-evident per entry).
    CHAINED also folds in the previous entry's fingerprint, so removing or
    reordering entries breaks every later link.
    """
    PER_ENTRY = "per_entry"
    CHAINED = "chained"


# =============================================================================
# Workspace
# =============================================================================

class TabType(str, Enum):
    """Views that can be opened as workspace tabs."""
    INBOX = "inbox"
    CASE_DETAIL = "case-detail"
    MATRIX = "matrix"
    TIMELINE = "timeline"
    BUREAU = "bureau"
    KANBAN = "kanban"
    AUDIT = "audit"
    DECISIONS = "decisions"
    WIZARD = "wizard"


class SortField(str, Enum):
    """Fields a case list can be sorted by."""
    PRIORITY = "priority"
    DELAY = "delay"
    AMOUNT = "amount"
    IMPACT = "impact"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# =============================================================================
# Resolution Wizard
# =============================================================================

class WizardStep(str, Enum):
    """Ordered steps of the resolution wizard."""
    SELECT = "select"
    TEMPLATE = "template"
    COMPOSE = "compose"
    REVIEW = "review"
    CONFIRM = "confirm"


class CommitStatus(str, Enum):
    """Outcome of the wizard's confirm step."""
    NOT_STARTED = "not_started"
    COMMITTED = "committed"            # Ledger and case store both succeeded
    FAILED = "failed"                  # Needs manual follow-up or retry


class TemplateCategory(str, Enum):
    ADMINISTRATIVE = "administrative"
    TECHNICAL = "technical"
    FINANCIAL = "financial"
    LEGAL = "legal"


# =============================================================================
# Notifications
# =============================================================================

class NotifyKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
