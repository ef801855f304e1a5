"""
BlockGov Resolution Wizard

Five-step machine that turns a selection of blocked cases into a batch of
resolution decisions.

    select -> template -> compose -> review -> confirm

Guards (must hold to advance):
- select: at least one target case
- template: always (choosing a template is optional)
- compose: non-blank free text, or a chosen template with every variable
  supplied
- review: always

Entering confirm commits: one ledger entry per target under a single batch
id, then one bulk resolve request to the case store. If the case store
rejects it, the ledger entries stay (they record that the decision was
made), the user is notified, and the wizard remains in confirm with
``retry()`` available. A retry appends entries only for targets that have
none yet, so no target is ever recorded twice.

``back()`` is allowed from every step; from select it exits the wizard.
Once entries have been recorded, going back from confirm is refused.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..exceptions import (
    CaseStoreError,
    LedgerAppendError,
    WizardError,
    WizardGuardError,
    WizardStateError,
)
from ..models import (
    Actor,
    CommitStatus,
    DecisionAction,
    DecisionDraft,
    NotifyKind,
    TabType,
    WizardStep,
    WorkspaceTab,
    new_batch_id,
)
from ..ports import CaseStore, Notifier
from ..templates import ResolutionTemplate, TemplateCatalog, apply_template, missing_variables
from .ledger import DecisionLedger
from .session import WorkspaceSession

logger = logging.getLogger(__name__)

NEXT_STEP: dict[WizardStep, WizardStep] = {
    WizardStep.SELECT: WizardStep.TEMPLATE,
    WizardStep.TEMPLATE: WizardStep.COMPOSE,
    WizardStep.COMPOSE: WizardStep.REVIEW,
    WizardStep.REVIEW: WizardStep.CONFIRM,
}

PREVIOUS_STEP: dict[WizardStep, WizardStep] = {
    after: before for before, after in NEXT_STEP.items()
}

WIZARD_TAB_TITLE = "Resolution wizard"


@dataclass
class WizardSession:
    """
    Working state of one wizard run.

    Attributes:
        step: Current step
        targets: Case ids to resolve, snapshot of the workspace selection
        content: Free-text resolution content
        template_id: Chosen template, if any
        variables: Values for the template's placeholders
        commit_status: Outcome of the confirm step
        batch_id: Batch id used for every entry of this run
        recorded: Targets that already have a ledger entry
        error: Last commit failure message
    """
    step: WizardStep = WizardStep.SELECT
    targets: tuple[str, ...] = ()
    content: str = ""
    template_id: Optional[str] = None
    variables: dict[str, str] = field(default_factory=dict)
    commit_status: CommitStatus = CommitStatus.NOT_STARTED
    batch_id: Optional[str] = None
    recorded: list[str] = field(default_factory=list)
    error: Optional[str] = None


class ResolutionWizard:
    """
    Drives a WizardSession against the ledger, case store and notifier.

    Usage:
        wizard = ResolutionWizard.open(session, ledger, case_store, notifier, actor)
        await wizard.advance()                      # select -> template
        wizard.choose_template("TPL-007")
        wizard.set_variable("office", "Works Bureau")
        await wizard.advance()                      # template -> compose
        await wizard.advance()                      # compose -> review
        await wizard.advance()                      # review -> confirm (commits)

        if wizard.state.commit_status == CommitStatus.FAILED:
            await wizard.retry()
    """

    def __init__(
        self,
        workspace: WorkspaceSession,
        ledger: DecisionLedger,
        case_store: CaseStore,
        notifier: Notifier,
        actor: Actor,
        catalog: Optional[TemplateCatalog] = None,
    ):
        self._workspace = workspace
        self._ledger = ledger
        self._case_store = case_store
        self._notifier = notifier
        self._actor = actor
        self._catalog = catalog or TemplateCatalog()
        self._state = WizardSession(targets=tuple(sorted(workspace.selection)))
        self._tab: Optional[WorkspaceTab] = None
        self._closed = False

    @classmethod
    def open(
        cls,
        workspace: WorkspaceSession,
        ledger: DecisionLedger,
        case_store: CaseStore,
        notifier: Notifier,
        actor: Actor,
        catalog: Optional[TemplateCatalog] = None,
    ) -> ResolutionWizard:
        """Create a wizard over the current selection and open its tab."""
        wizard = cls(workspace, ledger, case_store, notifier, actor, catalog)
        wizard._tab = workspace.open(
            WorkspaceTab.create(
                TabType.WIZARD,
                WIZARD_TAB_TITLE,
                payload={"targets": list(wizard.state.targets)},
            )
        )
        return wizard

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> WizardSession:
        return self._state

    @property
    def step(self) -> WizardStep:
        return self._state.step

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def template(self) -> Optional[ResolutionTemplate]:
        if self._state.template_id is None:
            return None
        return self._catalog.get(self._state.template_id)

    @property
    def final_content(self) -> str:
        """
        Text recorded with every decision.

        The chosen template with its variables applied when variables are
        given (or no free text was written), else the free text.
        """
        template = self.template
        if template is not None and (
            any(self._state.variables.values()) or not self._state.content.strip()
        ):
            return apply_template(template, self._state.variables)
        return self._state.content

    def guard_failure(self) -> Optional[str]:
        """Why the current step cannot be left forward, or None if it can."""
        step = self._state.step
        if step == WizardStep.SELECT and not self._state.targets:
            return "Select at least one case"
        if step == WizardStep.COMPOSE:
            if self._state.content.strip():
                return None
            template = self.template
            if template is None:
                return "Enter resolution content or choose a template"
            missing = missing_variables(template, self._state.variables)
            if missing:
                return f"Missing template variables: {', '.join(missing)}"
        if step == WizardStep.CONFIRM:
            return "The wizard is already at its last step"
        return None

    def can_advance(self) -> bool:
        return not self._closed and self.guard_failure() is None

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def set_targets(self, case_ids: Iterable[str]) -> None:
        self._require_editable(WizardStep.SELECT)
        self._state.targets = tuple(dict.fromkeys(case_ids))

    def choose_template(self, template_id: Optional[str]) -> None:
        """Pick a template (None clears it). Variables reset on change."""
        self._require_editable(WizardStep.TEMPLATE, WizardStep.COMPOSE)
        if template_id is not None and self._catalog.get(template_id) is None:
            raise WizardError(
                message=f"Unknown template: {template_id}",
                details={"template_id": template_id},
            )
        if template_id != self._state.template_id:
            self._state.variables = {}
        self._state.template_id = template_id

    def set_variable(self, name: str, value: str) -> None:
        self._require_editable(WizardStep.TEMPLATE, WizardStep.COMPOSE)
        self._state.variables[name] = value

    def set_content(self, content: str) -> None:
        self._require_editable(WizardStep.TEMPLATE, WizardStep.COMPOSE)
        self._state.content = content

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def advance(self) -> WizardStep:
        """
        Move to the next step, committing when confirm is entered.

        Raises:
            WizardGuardError: If the current step's guard does not hold
            WizardStateError: If the wizard is closed or already in confirm
        """
        self._require_open()
        if self._state.step == WizardStep.CONFIRM:
            raise WizardStateError(message="The wizard is already at its last step")
        reason = self.guard_failure()
        if reason is not None:
            raise WizardGuardError(
                message=reason, details={"step": self._state.step.value}
            )

        self._state.step = NEXT_STEP[self._state.step]
        if self._state.step == WizardStep.CONFIRM:
            await self._commit()
        return self._state.step

    def back(self) -> Optional[WizardStep]:
        """
        Go to the previous step. From select, exit the wizard (returns None).

        Raises:
            WizardStateError: From confirm once decisions have been recorded
        """
        self._require_open()
        step = self._state.step
        if step == WizardStep.SELECT:
            self.close()
            return None
        if step == WizardStep.CONFIRM and self._state.recorded:
            raise WizardStateError(
                message="Decisions already recorded; retry or close the wizard",
                details={"batch_id": self._state.batch_id},
            )
        self._state.step = PREVIOUS_STEP[step]
        return self._state.step

    async def retry(self) -> CommitStatus:
        """Re-issue whatever the last commit attempt did not complete."""
        self._require_open()
        if (
            self._state.step != WizardStep.CONFIRM
            or self._state.commit_status != CommitStatus.FAILED
        ):
            raise WizardStateError(message="Nothing to retry")
        await self._commit()
        return self._state.commit_status

    def close(self) -> None:
        """Exit the wizard and close its tab."""
        if self._closed:
            return
        self._closed = True
        if self._tab is not None:
            self._workspace.close(self._tab.id)

    # -------------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------------

    async def _commit(self) -> None:
        state = self._state
        content = self.final_content
        if state.batch_id is None:
            state.batch_id = new_batch_id(DecisionAction.RESOLUTION)

        try:
            for case_id in state.targets:
                if case_id in state.recorded:
                    continue
                case = await self._case_store.get_by_id(case_id)
                self._ledger.append(
                    DecisionDraft(
                        batch_id=state.batch_id,
                        action=DecisionAction.RESOLUTION,
                        case_id=case_id,
                        snapshot=case.snapshot(),
                        actor=self._actor,
                        details=content,
                    )
                )
                state.recorded.append(case_id)
            await self._case_store.bulk_resolve(
                list(state.targets), content, state.template_id
            )
        except (CaseStoreError, LedgerAppendError) as exc:
            logger.warning(
                "Resolution commit failed after %d of %d entries: %s",
                len(state.recorded),
                len(state.targets),
                exc,
                extra={"batch_id": state.batch_id, "action": DecisionAction.RESOLUTION.value},
            )
            self._fail_commit(exc.message)
            return
        except Exception as exc:
            # Adapters may raise transport errors of their own
            logger.exception(
                "Resolution commit failed after %d of %d entries",
                len(state.recorded),
                len(state.targets),
                extra={"batch_id": state.batch_id, "action": DecisionAction.RESOLUTION.value},
            )
            self._fail_commit(str(exc) or type(exc).__name__)
            return

        state.commit_status = CommitStatus.COMMITTED
        state.error = None
        logger.info(
            "Resolved %d cases",
            len(state.targets),
            extra={"batch_id": state.batch_id, "action": DecisionAction.RESOLUTION.value},
        )
        self._notifier.notify(
            NotifyKind.SUCCESS,
            "Resolution recorded",
            f"{len(state.targets)} case(s) resolved (batch {state.batch_id})",
        )
        self._workspace.clear_selection()
        self.close()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _fail_commit(self, message: str) -> None:
        self._state.commit_status = CommitStatus.FAILED
        self._state.error = message
        self._notifier.notify(
            NotifyKind.ERROR,
            "Resolution not completed",
            f"{message}. Recorded decisions are kept; retry or follow up manually.",
        )

    def _require_open(self) -> None:
        if self._closed:
            raise WizardStateError(message="The wizard is closed")

    def _require_editable(self, *steps: WizardStep) -> None:
        self._require_open()
        if self._state.step not in steps:
            raise WizardStateError(
                message=f"Cannot edit this in step {self._state.step.value}",
                details={"step": self._state.step.value},
            )
