"""
BlockGov Exception Hierarchy

Domain-specific exceptions for blocked-case governance.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: BG_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class BlockGovError(Exception):
    """
    Base exception for all BlockGov errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (BG_*)
        details: Additional context about the error
        case_id: Associated case ID if applicable
    """
    message: str
    code: str = "BG_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    case_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.case_id:
            parts.append(f"(case: {self.case_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.case_id:
            result["case_id"] = self.case_id
        return result


# =============================================================================
# Configuration Errors
# =============================================================================

@dataclass
class ConfigError(BlockGovError):
    """Settings file or environment overrides are invalid."""
    code: str = "BG_CONFIG_ERROR"


# =============================================================================
# Ledger Errors
# =============================================================================

@dataclass
class LedgerError(BlockGovError):
    """Base class for decision ledger failures."""
    code: str = "BG_LEDGER_ERROR"


@dataclass
class LedgerAppendError(LedgerError):
    """An entry could not be fingerprinted or stored; nothing was appended."""
    code: str = "BG_LEDGER_APPEND_FAILED"


@dataclass
class LedgerIntegrityError(LedgerError):
    """A stored ledger failed verification while being loaded."""
    code: str = "BG_LEDGER_INTEGRITY"


# =============================================================================
# Case Store Errors
# =============================================================================

@dataclass
class CaseStoreError(BlockGovError):
    """The case store rejected an operation."""
    code: str = "BG_CASE_STORE_ERROR"


@dataclass
class CaseNotFoundError(CaseStoreError):
    """Requested case does not exist in the store."""
    code: str = "BG_CASE_NOT_FOUND"


# =============================================================================
# Decision Request Errors
# =============================================================================

@dataclass
class DecisionRequestError(BlockGovError):
    """A decision action was requested with missing targets or justification."""
    code: str = "BG_DECISION_REQUEST_INVALID"


# =============================================================================
# Wizard Errors
# =============================================================================

@dataclass
class WizardError(BlockGovError):
    """Base class for resolution wizard errors."""
    code: str = "BG_WIZARD_ERROR"


@dataclass
class WizardGuardError(WizardError):
    """The current step's guard does not hold; the wizard cannot advance."""
    code: str = "BG_WIZARD_GUARD_BLOCKED"


@dataclass
class WizardStateError(WizardError):
    """The requested transition is not valid in the current step."""
    code: str = "BG_WIZARD_INVALID_TRANSITION"


# =============================================================================
# Template Errors
# =============================================================================

@dataclass
class TemplatePackError(BlockGovError):
    """Resolution template pack failed to load or validate."""
    code: str = "BG_TEMPLATE_PACK_ERROR"
