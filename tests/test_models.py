"""
BlockGov Model Tests

Tests for domain models, enums, canonical JSON and exceptions.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum

import pytest

from blockgov.canon import canonical_json, fingerprint, is_fingerprint, short_fingerprint
from blockgov.exceptions import (
    BlockGovError,
    CaseNotFoundError,
    CaseStoreError,
    LedgerAppendError,
    LedgerError,
    WizardGuardError,
    WizardError,
)
from blockgov.models import (
    Case,
    CaseStatus,
    DateRange,
    DecisionAction,
    FilterState,
    NumericRange,
    SavedFilter,
    TabType,
    WorkspaceTab,
    make_tab_id,
    new_batch_id,
)

from helpers.factories import make_case


class Colour(Enum):
    RED = 1


class TestCaseFromDict:
    """Lenient parsing of external case records."""

    def test_camel_case_keys(self) -> None:
        case = Case.from_dict(
            {
                "id": "BLK-2024-001",
                "impact": "critical",
                "delayDays": 12,
                "amount": "4 000 000 FCFA",
                "bureau": "BMO",
                "blockedSince": "2024-05-02T08:30:00Z",
                "sla": 10,
            }
        )
        assert case.delay_days == 12
        assert case.blocked_since == date(2024, 5, 2)
        assert case.sla_days == 10
        assert case.status == CaseStatus.PENDING.value

    def test_legacy_delay_key_and_bad_values(self) -> None:
        case = Case.from_dict({"id": 7, "delay": "n/a", "blocked_since": "someday"})
        assert case.id == "7"
        assert case.delay_days is None
        assert case.effective_delay == 0
        assert case.blocked_since is None

    def test_snapshot_freezes_decision_fields(self) -> None:
        case = make_case(delay_days=-3, amount=None)
        snapshot = case.snapshot()
        assert snapshot.delay_days == 0
        assert snapshot.amount == ""
        assert snapshot.subject == case.subject
        with pytest.raises(AttributeError):
            snapshot.subject = "changed"  # type: ignore[misc]


class TestFilterState:
    """Shallow merge and normalization."""

    def test_merge_replaces_only_given_fields(self) -> None:
        base = FilterState(impact=("critical",), search="budget")
        merged = base.merge(bureaux=["BF", "BCT"])
        assert merged.impact == ("critical",)
        assert merged.search == "budget"
        assert merged.bureaux == ("BF", "BCT")
        assert base.bureaux == ()

    def test_merge_normalizes(self) -> None:
        merged = FilterState().merge(
            impact="high",
            status=[CaseStatus.PENDING],
            delay_range={"min": 3},
            date_range={"start": date(2024, 1, 1)},
        )
        assert merged.impact == ("high",)
        assert merged.status == ("pending",)
        assert merged.delay_range == NumericRange(min=3)
        assert merged.date_range == DateRange(start=date(2024, 1, 1))

    def test_merge_none_clears(self) -> None:
        merged = FilterState(impact=("high",), delay_range=NumericRange(1, 2)).merge(
            impact=None, delay_range=None
        )
        assert merged.is_identity

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(TypeError):
            FilterState().merge(colour="red")

    def test_saved_filter_ids(self) -> None:
        saved = SavedFilter.create("Critical BF", FilterState(impact=("critical",)))
        assert re.fullmatch(r"FLT-[0-9A-F]{8}", saved.id)
        assert saved.is_default is False


class TestIdentifiers:
    """Tab ids and batch ids."""

    def test_tab_id_from_type_and_discriminator(self) -> None:
        assert make_tab_id(TabType.CASE_DETAIL, "BLK-001") == "case-detail:BLK-001"
        assert make_tab_id("inbox") == "inbox"

    def test_same_view_same_id(self) -> None:
        a = WorkspaceTab.create(TabType.BUREAU, "BF", discriminator="BF")
        b = WorkspaceTab.create("bureau", "Bureau BF", discriminator="BF")
        assert a.id == b.id

    def test_unknown_tab_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            WorkspaceTab.create("spreadsheet", "Nope")

    @pytest.mark.parametrize(
        "action,prefix",
        [
            (DecisionAction.ESCALATION, "BATCH-ESC-"),
            (DecisionAction.SUBSTITUTION, "BATCH-SUB-"),
            (DecisionAction.RESOLUTION, "BATCH-RES-"),
        ],
    )
    def test_batch_id_prefix(self, action, prefix) -> None:
        batch_id = new_batch_id(action)
        assert batch_id.startswith(prefix)
        assert batch_id != new_batch_id(action)

    def test_resulting_status(self) -> None:
        assert DecisionAction.SUBSTITUTION.resulting_status == CaseStatus.SUBSTITUTED


class TestCanon:
    """Canonical JSON and fingerprints."""

    def test_key_order_does_not_matter(self) -> None:
        assert canonical_json({"b": 1, "a": [1, 2]}) == canonical_json({"a": [1, 2], "b": 1})
        assert fingerprint({"b": 1, "a": 2}) == fingerprint({"a": 2, "b": 1})

    def test_non_ascii_kept(self) -> None:
        assert canonical_json({"k": "délai"}) == '{"k":"délai"}'

    def test_fingerprint_format(self) -> None:
        value = fingerprint({"a": 1})
        assert is_fingerprint(value)
        assert not is_fingerprint(value[:-1])
        assert not is_fingerprint("MD5:abc")
        assert len(short_fingerprint(value)) == 12

    def test_dates_and_enums(self) -> None:
        value = {
            "at": datetime(2024, 6, 15, 9, 0, 0, 250),
            "on": date(2024, 6, 15),
            "mode": Colour.RED,
        }
        assert canonical_json(value) == (
            '{"at":"2024-06-15T09:00:00.000250","mode":1,"on":"2024-06-15"}'
        )

    def test_other_types_rejected(self) -> None:
        with pytest.raises(TypeError):
            canonical_json({"ids": {"BLK-001"}})


class TestExceptions:
    """Exception hierarchy and serialization."""

    def test_hierarchy(self) -> None:
        assert issubclass(LedgerAppendError, LedgerError)
        assert issubclass(CaseNotFoundError, CaseStoreError)
        assert issubclass(WizardGuardError, WizardError)
        assert issubclass(WizardError, BlockGovError)

    def test_codes_and_to_dict(self) -> None:
        error = CaseNotFoundError(message="Case not found: BLK-9", case_id="BLK-9")
        assert error.code == "BG_CASE_NOT_FOUND"
        assert error.to_dict() == {
            "code": "BG_CASE_NOT_FOUND",
            "message": "Case not found: BLK-9",
            "case_id": "BLK-9",
        }
        assert str(error) == "[BG_CASE_NOT_FOUND] Case not found: BLK-9 (case: BLK-9)"

    def test_is_raisable(self) -> None:
        with pytest.raises(BlockGovError, match="boom"):
            raise LedgerAppendError(message="boom")
