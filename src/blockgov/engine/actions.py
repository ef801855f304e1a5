"""
BlockGov Decision Desk

Direct bulk decisions outside the resolution wizard: escalate, substitute
and resolve.

Each request becomes one batch: a ledger entry per case under a single
batch id, followed by the matching case store update. Ledger entries are
never rolled back; a failed case store update is reported through the
notifier and returned in the BatchOutcome for manual follow-up.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..exceptions import CaseStoreError, DecisionRequestError, LedgerAppendError
from ..models import (
    Actor,
    Decision,
    DecisionAction,
    DecisionDraft,
    NotifyKind,
    new_batch_id,
)
from ..ports import CaseStore, Notifier
from .ledger import DecisionLedger
from .session import WorkspaceSession

logger = logging.getLogger(__name__)

_TITLES = {
    DecisionAction.ESCALATION: "Escalation",
    DecisionAction.SUBSTITUTION: "Substitution",
    DecisionAction.RESOLUTION: "Resolution",
}


@dataclass
class BatchOutcome:
    """
    Result of one direct decision request.

    Attributes:
        batch_id: Batch id shared by every entry
        action: Kind of decision
        decisions: Ledger entries written
        failed: Case ids whose lookup, entry or store update failed
        errors: Failure messages keyed by case id
    """
    batch_id: str
    action: DecisionAction
    decisions: list[Decision] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failed

    @property
    def recorded_ids(self) -> list[str]:
        return [d.case_id for d in self.decisions]

    def fail(self, case_id: str, message: str) -> None:
        if case_id not in self.failed:
            self.failed.append(case_id)
        self.errors[case_id] = message

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "action": self.action.value,
            "decisions": [d.to_dict() for d in self.decisions],
            "failed": list(self.failed),
            "errors": dict(self.errors),
        }


class DecisionDesk:
    """
    Issues direct escalation, substitution and resolution batches.

    Usage:
        desk = DecisionDesk(ledger, case_store, notifier, session=session)
        outcome = await desk.substitute(
            session.selection, "Bureau silent past SLA", actor
        )
        if not outcome.succeeded:
            ...
    """

    def __init__(
        self,
        ledger: DecisionLedger,
        case_store: CaseStore,
        notifier: Notifier,
        session: Optional[WorkspaceSession] = None,
    ):
        self._ledger = ledger
        self._case_store = case_store
        self._notifier = notifier
        self._session = session

    async def escalate(
        self, case_ids: Iterable[str], note: str, actor: Actor
    ) -> BatchOutcome:
        """Escalate cases to higher authority. The note may be blank."""
        return await self._run(DecisionAction.ESCALATION, case_ids, note or "", actor)

    async def substitute(
        self, case_ids: Iterable[str], justification: str, actor: Actor
    ) -> BatchOutcome:
        """Act in place of the owning bureau. A justification is required."""
        if not (justification or "").strip():
            raise DecisionRequestError(message="A substitution requires a justification")
        return await self._run(DecisionAction.SUBSTITUTION, case_ids, justification, actor)

    async def resolve(
        self,
        case_ids: Iterable[str],
        content: str,
        actor: Actor,
        template_id: Optional[str] = None,
    ) -> BatchOutcome:
        """Resolve cases with the given resolution content."""
        if not (content or "").strip():
            raise DecisionRequestError(message="A resolution requires content")
        return await self._run(
            DecisionAction.RESOLUTION, case_ids, content, actor, template_id
        )

    # -------------------------------------------------------------------------
    # Batch execution
    # -------------------------------------------------------------------------

    async def _run(
        self,
        action: DecisionAction,
        case_ids: Iterable[str],
        details: str,
        actor: Actor,
        template_id: Optional[str] = None,
    ) -> BatchOutcome:
        ids = list(dict.fromkeys(case_ids))
        if not ids:
            raise DecisionRequestError(
                message=f"No cases given for {action.value}",
                details={"action": action.value},
            )

        outcome = BatchOutcome(batch_id=new_batch_id(action), action=action)
        await self._record(outcome, ids, details, actor)
        await self._apply(outcome, details, template_id)

        title = _TITLES[action]
        if outcome.succeeded:
            logger.info(
                "%s applied to %d cases",
                title,
                len(outcome.decisions),
                extra={"batch_id": outcome.batch_id, "action": action.value},
            )
            self._notifier.notify(
                NotifyKind.SUCCESS,
                f"{title} recorded",
                f"{len(outcome.decisions)} case(s), batch {outcome.batch_id}",
            )
            if self._session is not None:
                self._session.clear_selection()
        else:
            logger.warning(
                "%s incomplete: %d of %d cases failed",
                title,
                len(outcome.failed),
                len(ids),
                extra={"batch_id": outcome.batch_id, "action": action.value},
            )
            self._notifier.notify(
                NotifyKind.ERROR,
                f"{title} incomplete",
                f"Failed for {', '.join(outcome.failed)}; recorded decisions are kept.",
            )
        return outcome

    async def _record(
        self, outcome: BatchOutcome, ids: list[str], details: str, actor: Actor
    ) -> None:
        for position, case_id in enumerate(ids):
            try:
                case = await self._case_store.get_by_id(case_id)
            except Exception as exc:
                outcome.fail(case_id, _store_failure(exc, outcome, case_id))
                continue
            try:
                decision = self._ledger.append(
                    DecisionDraft(
                        batch_id=outcome.batch_id,
                        action=outcome.action,
                        case_id=case_id,
                        snapshot=case.snapshot(),
                        actor=actor,
                        details=details,
                    )
                )
            except LedgerAppendError as exc:
                # The ledger is unusable; nothing further can be recorded
                for remaining in ids[position:]:
                    outcome.fail(remaining, exc.message)
                return
            outcome.decisions.append(decision)

    async def _apply(
        self, outcome: BatchOutcome, details: str, template_id: Optional[str]
    ) -> None:
        recorded = outcome.recorded_ids
        if not recorded:
            return
        if outcome.action == DecisionAction.RESOLUTION:
            try:
                await self._case_store.bulk_resolve(recorded, details, template_id)
            except Exception as exc:
                message = _store_failure(exc, outcome)
                for case_id in recorded:
                    outcome.fail(case_id, message)
            return

        status = outcome.action.resulting_status
        for case_id in recorded:
            try:
                await self._case_store.update_status(case_id, status)
            except Exception as exc:
                outcome.fail(case_id, _store_failure(exc, outcome, case_id))


def _store_failure(
    exc: Exception, outcome: BatchOutcome, case_id: Optional[str] = None
) -> str:
    """Message for a failed case store call; unexpected errors are logged with traceback."""
    if isinstance(exc, CaseStoreError):
        return exc.message
    logger.error(
        "Case store call failed: %r",
        exc,
        exc_info=exc,
        extra={"batch_id": outcome.batch_id, "action": outcome.action.value, "case_id": case_id},
    )
    return str(exc) or type(exc).__name__
