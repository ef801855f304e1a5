"""
BlockGov Decision Ledger

The append-only register of every escalation, substitution and
resolution decision.

Key invariants enforced:
1. Append-only: entries are never modified or removed
2. Each entry carries a SHA-256 fingerprint over all of its other fields,
   including its timestamp and position
3. Any entry can be verified on its own, without the process that wrote it
4. In chained mode each entry also commits to its predecessor's
   fingerprint, so deletions and reorderings are detectable
5. A failed append stores nothing
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Iterator, Optional, Union

from ..canon import fingerprint, short_fingerprint
from ..config import Settings
from ..exceptions import LedgerAppendError, LedgerIntegrityError
from ..models import Decision, DecisionAction, DecisionDraft, FingerprintMode
from .ledger_store import JsonlLedgerStore, LedgerStore
from .scoring import PriorityScorer

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def compute_fingerprint(entry: Decision) -> str:
    """Fingerprint of an entry's own content, ignoring its stored fingerprint."""
    return fingerprint(entry.fingerprint_payload())


# =============================================================================
# Query
# =============================================================================

@dataclass(frozen=True)
class LedgerQuery:
    """
    Criteria for reading the ledger. Empty criteria match every entry.

    Attributes:
        actions: Decision kinds to keep (empty = all)
        search: Case-insensitive text matched against case id, subject,
            actor name, actor role and details
        case_id: Only entries about this case
        batch_id: Only entries from this batch
        since: Only entries at or after this instant
        until: Only entries at or before this instant
        limit: Maximum number of entries returned
    """
    actions: tuple[DecisionAction, ...] = ()
    search: Optional[str] = None
    case_id: Optional[str] = None
    batch_id: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    limit: Optional[int] = None

    @classmethod
    def create(
        cls,
        action: Union[DecisionAction, str, Iterable[Union[DecisionAction, str]], None] = None,
        **criteria: Any,
    ) -> LedgerQuery:
        """Build a query accepting a single action or several."""
        if action is None:
            actions: tuple[DecisionAction, ...] = ()
        elif isinstance(action, (DecisionAction, str)):
            actions = (DecisionAction(action),)
        else:
            actions = tuple(DecisionAction(a) for a in action)
        return cls(actions=actions, **criteria)

    def matches(self, entry: Decision) -> bool:
        if self.actions and entry.action not in self.actions:
            return False
        if self.case_id and entry.case_id != self.case_id:
            return False
        if self.batch_id and entry.batch_id != self.batch_id:
            return False
        if self.since and entry.at < self.since:
            return False
        if self.until and entry.at > self.until:
            return False
        if self.search:
            needle = self.search.strip().lower()
            haystack = " ".join(
                [
                    entry.case_id,
                    entry.snapshot.subject,
                    entry.actor.name,
                    entry.actor.role,
                    entry.details,
                ]
            ).lower()
            if needle not in haystack:
                return False
        return True


# =============================================================================
# Verification Result
# =============================================================================

@dataclass
class LedgerVerification:
    """Result of verifying the whole ledger."""
    is_valid: bool
    entries_checked: int
    mode: FingerprintMode
    errors: list[str] = field(default_factory=list)
    invalid_sequences: list[int] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.is_valid

    def summary(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        lines = [
            f"Ledger verification: {status}",
            f"  Entries checked: {self.entries_checked}",
            f"  Mode: {self.mode.value}",
            f"  Errors: {len(self.errors)}",
        ]
        for err in self.errors[:5]:
            lines.append(f"    - {err}")
        if len(self.errors) > 5:
            lines.append(f"    ... and {len(self.errors) - 5} more")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "entries_checked": self.entries_checked,
            "mode": self.mode.value,
            "errors": list(self.errors),
            "invalid_sequences": list(self.invalid_sequences),
        }


def verify_entries(
    entries: Iterable[Decision],
    mode: FingerprintMode = FingerprintMode.PER_ENTRY,
) -> LedgerVerification:
    """
    Verify a sequence of entries in append order.

    Checks every fingerprint, that sequence numbers run 0..n-1 and, where
    an entry names a predecessor, that the link holds. In chained mode an
    unlinked entry following a linked one is a broken chain.
    """
    result = LedgerVerification(is_valid=True, entries_checked=0, mode=mode)
    previous: Optional[Decision] = None
    chain_started = False

    for position, entry in enumerate(entries):
        result.entries_checked += 1
        problems = []

        if not verify_entry(entry):
            problems.append("fingerprint mismatch")
        if entry.sequence != position:
            problems.append(f"sequence {entry.sequence} at position {position}")

        if entry.previous_fingerprint is not None:
            expected = previous.fingerprint if previous else None
            if entry.previous_fingerprint != expected:
                problems.append("broken link to previous entry")
            chain_started = True
        elif chain_started and mode == FingerprintMode.CHAINED:
            problems.append("unlinked entry after chain start")

        if problems:
            result.is_valid = False
            result.invalid_sequences.append(position)
            result.errors.append(
                f"#{position} {entry.case_id} ({entry.batch_id}): " + ", ".join(problems)
            )
        previous = entry

    return result


def verify_entry(entry: Decision) -> bool:
    """Recompute an entry's fingerprint and compare."""
    try:
        return compute_fingerprint(entry) == entry.fingerprint
    except (TypeError, ValueError, AttributeError):
        return False


# =============================================================================
# Decision Ledger
# =============================================================================

@dataclass
class DecisionLedger:
    """
    Append-only, fingerprinted decision register.

    Usage:
        ledger = DecisionLedger()

        decision = ledger.append(DecisionDraft(
            batch_id=new_batch_id(DecisionAction.RESOLUTION),
            action=DecisionAction.RESOLUTION,
            case_id=case.id,
            snapshot=case.snapshot(),
            actor=actor,
            details="Supplementary budget approved",
        ))

        assert ledger.verify(decision)
        recent = ledger.query(LedgerQuery.create(action="resolution", limit=20))
    """

    scorer: PriorityScorer = field(default_factory=PriorityScorer)
    mode: FingerprintMode = FingerprintMode.PER_ENTRY
    clock: Callable[[], datetime] = _utc_now
    store: Optional[LedgerStore] = None
    _entries: list[Decision] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def from_store(cls, store: LedgerStore, **kwargs: Any) -> DecisionLedger:
        """
        Rebuild a ledger from its storage, then keep appending to it.

        Raises:
            LedgerIntegrityError: If any stored entry fails verification
        """
        ledger = cls(store=store, **kwargs)
        entries = list(store.load())
        result = verify_entries(entries, ledger.mode)
        if not result:
            raise LedgerIntegrityError(
                message="Stored ledger failed verification",
                details=result.to_dict(),
            )
        ledger._entries.extend(entries)
        logger.info("Loaded %d ledger entries", len(entries))
        return ledger

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Decision]:
        """Entries in append order (oldest first)."""
        return iter(tuple(self._entries))

    @property
    def head(self) -> Optional[Decision]:
        """Most recent entry."""
        return self._entries[-1] if self._entries else None

    def query(
        self,
        query: Optional[LedgerQuery] = None,
        **criteria: Any,
    ) -> tuple[Decision, ...]:
        """
        Read entries, newest first.

        Accepts a LedgerQuery or the same criteria as keyword arguments
        (``action=``, ``search=``, ``case_id=``, ``batch_id=``, ``limit=``).
        The result is an immutable snapshot; iterate it as often as needed.
        """
        if query is None:
            query = LedgerQuery.create(**criteria)
        matched = [e for e in reversed(self._entries) if query.matches(e)]
        if query.limit is not None:
            matched = matched[: max(0, query.limit)]
        return tuple(matched)

    def batch(self, batch_id: str) -> tuple[Decision, ...]:
        """Entries of one batch, in append order."""
        return tuple(e for e in self._entries if e.batch_id == batch_id)

    # -------------------------------------------------------------------------
    # Append
    # -------------------------------------------------------------------------

    def append(self, draft: DecisionDraft) -> Decision:
        """
        Score, timestamp, fingerprint and store a decision.

        Raises:
            LedgerAppendError: If the entry cannot be fingerprinted or
                persisted. Nothing is stored in that case.
        """
        previous = None
        if self.mode == FingerprintMode.CHAINED and self._entries:
            previous = self._entries[-1].fingerprint

        try:
            unsigned = Decision(
                batch_id=draft.batch_id,
                action=DecisionAction(draft.action),
                case_id=draft.case_id,
                snapshot=draft.snapshot,
                priority=self.scorer.score(draft.snapshot),
                actor=draft.actor,
                details=draft.details,
                at=self.clock(),
                sequence=len(self._entries),
                fingerprint="",
                previous_fingerprint=previous,
            )
            decision = replace(unsigned, fingerprint=compute_fingerprint(unsigned))
        except (TypeError, ValueError, AttributeError) as exc:
            raise LedgerAppendError(
                message=f"Could not fingerprint decision: {exc}",
                details={"batch_id": draft.batch_id, "action": str(draft.action)},
                case_id=draft.case_id,
            ) from exc

        if self.store is not None:
            try:
                self.store.append(decision)
            except OSError as exc:
                raise LedgerAppendError(
                    message=f"Could not persist decision: {exc}",
                    details={"batch_id": draft.batch_id},
                    case_id=draft.case_id,
                ) from exc

        self._entries.append(decision)
        logger.info(
            "Recorded %s for %s",
            decision.action.value,
            decision.case_id,
            extra={
                "batch_id": decision.batch_id,
                "case_id": decision.case_id,
                "action": decision.action.value,
                "fingerprint": short_fingerprint(decision.fingerprint),
            },
        )
        return decision

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def verify(self, entry: Decision) -> bool:
        """
        Re-derive an entry's fingerprint from its own fields and compare.

        Never corrects anything; a False result is for the caller to act on.
        """
        return verify_entry(entry)

    def verify_all(self) -> LedgerVerification:
        """Verify every entry, sequence continuity and chain links."""
        result = verify_entries(self._entries, self.mode)
        if not result:
            logger.warning("Ledger verification failed: %d errors", len(result.errors))
        return result


def open_ledger(settings: Settings, **kwargs: Any) -> DecisionLedger:
    """
    Create the ledger described by settings.

    With ``ledger_path`` set, the ledger is replayed from (and appends to)
    that JSON-lines file; otherwise it lives in memory only.
    """
    kwargs.setdefault("mode", settings.fingerprint_mode)
    if settings.ledger_path is None:
        return DecisionLedger(**kwargs)
    store = JsonlLedgerStore(settings.ledger_path, fsync=settings.ledger_fsync)
    return DecisionLedger.from_store(store, **kwargs)
