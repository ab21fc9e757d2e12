"""
Three-step registration wizard (state machine).

Both registration forms (shop, online merchant) share this shape:

    STEP_1_BASIC --advance--> STEP_2_DOMAIN --advance--> STEP_3_CONFIRM --submit--> SUBMITTING
         ^                        |  ^                        |                     |      |
         +--------retreat---------+  +---------retreat--------+      <--failed------+      |
         ^                                                                           succeeded
         +------------------------------------reset------------------------ SUBMITTED <----+

Transitions live in one table; any event that is not in the table for the current
state raises `IllegalTransition`. Failed validations and unmet submit preconditions are
not transitions: the state stays put and the single error slot is overwritten.

Subclasses supply the draft model, the two step validators, and the row shaping.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from jpycmap.domain.models import AuthIdentity
from jpycmap.registration import messages
from jpycmap.registration.submission import ListingWriter, SubmissionAdapter, SubmissionFailed

logger = logging.getLogger(__name__)

DraftT = TypeVar("DraftT", bound=BaseModel)


class WizardState(str, Enum):
    STEP_1_BASIC = "step_1_basic"
    STEP_2_DOMAIN = "step_2_domain"
    STEP_3_CONFIRM = "step_3_confirm"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class WizardEvent(str, Enum):
    ADVANCE = "advance"
    RETREAT = "retreat"
    SUBMIT = "submit"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    SUBMIT_FAILED = "submit_failed"
    RESET = "reset"


TRANSITIONS: dict[tuple[WizardState, WizardEvent], WizardState] = {
    (WizardState.STEP_1_BASIC, WizardEvent.ADVANCE): WizardState.STEP_2_DOMAIN,
    (WizardState.STEP_2_DOMAIN, WizardEvent.ADVANCE): WizardState.STEP_3_CONFIRM,
    (WizardState.STEP_2_DOMAIN, WizardEvent.RETREAT): WizardState.STEP_1_BASIC,
    (WizardState.STEP_3_CONFIRM, WizardEvent.RETREAT): WizardState.STEP_2_DOMAIN,
    (WizardState.STEP_3_CONFIRM, WizardEvent.SUBMIT): WizardState.SUBMITTING,
    (WizardState.SUBMITTING, WizardEvent.SUBMIT_SUCCEEDED): WizardState.SUBMITTED,
    (WizardState.SUBMITTING, WizardEvent.SUBMIT_FAILED): WizardState.STEP_3_CONFIRM,
    (WizardState.SUBMITTED, WizardEvent.RESET): WizardState.STEP_1_BASIC,
}

EDITABLE_STATES = frozenset(
    {WizardState.STEP_1_BASIC, WizardState.STEP_2_DOMAIN, WizardState.STEP_3_CONFIRM}
)

_STEP_NUMBERS = {
    WizardState.STEP_1_BASIC: 1,
    WizardState.STEP_2_DOMAIN: 2,
    WizardState.STEP_3_CONFIRM: 3,
    WizardState.SUBMITTING: 3,
    WizardState.SUBMITTED: 3,
}


class IllegalTransition(RuntimeError):
    """An event was fired in a state that does not accept it."""

    def __init__(self, state: WizardState, event: WizardEvent | str):
        self.state = state
        self.event = event
        name = event.value if isinstance(event, WizardEvent) else event
        super().__init__(f"'{name}' is not allowed in state '{state.value}'")


def next_state(state: WizardState, event: WizardEvent) -> WizardState:
    """Look up the transition table; raise `IllegalTransition` if there is no entry."""
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise IllegalTransition(state, event) from None


class RegistrationWizard(Generic[DraftT]):
    """Shared state machine; see the module docstring for the transitions."""

    #: Store table the finished row is inserted into.
    table: str = ""

    def __init__(self, store: ListingWriter | None = None, *, table: str | None = None):
        self._submission = SubmissionAdapter(store) if store is not None else None
        if table:
            self.table = table
        self.state = WizardState.STEP_1_BASIC
        self.draft: DraftT = self.empty_draft()
        self.confirmed = False
        self.error: str | None = None
        self.abandoned = False
        # Bumped whenever the draft is discarded; outcomes of older submissions are dropped.
        self._generation = 0

    # -- subclass hooks -------------------------------------------------

    def empty_draft(self) -> DraftT:
        raise NotImplementedError

    def validate_basic(self, draft: DraftT) -> str | None:
        """Return the first step-1 error message, or None."""
        raise NotImplementedError

    def validate_domain(self, draft: DraftT) -> str | None:
        """Return the first step-2 error message, or None."""
        raise NotImplementedError

    def build_row(self, draft: DraftT, identity: AuthIdentity) -> BaseModel:
        raise NotImplementedError

    def summary(self) -> list[tuple[str, str]]:
        """Labelled values for the confirmation step."""
        raise NotImplementedError

    # -- read-only views ------------------------------------------------

    @property
    def step(self) -> int:
        return _STEP_NUMBERS[self.state]

    @property
    def submitting(self) -> bool:
        return self.state is WizardState.SUBMITTING

    @property
    def submitted(self) -> bool:
        return self.state is WizardState.SUBMITTED

    def snapshot(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "step": self.step,
            "draft": self.draft.model_dump(mode="json"),
            "confirmed": self.confirmed,
            "error": self.error,
            "submitting": self.submitting,
            "submitted": self.submitted,
        }

    # -- draft editing --------------------------------------------------

    def _require_editable(self, action: str) -> None:
        if self.state not in EDITABLE_STATES:
            raise IllegalTransition(self.state, action)

    def update(self, **changes: Any) -> None:
        """Replace draft fields; the whole draft is re-validated.

        Raises:
            pydantic.ValidationError: Unknown field or a value of the wrong shape.
        """
        self._require_editable("update")
        merged = {**self.draft.model_dump(), **changes}
        self.draft = type(self.draft).model_validate(merged)

    def confirm(self, confirmed: bool = True) -> None:
        self._require_editable("confirm")
        self.confirmed = bool(confirmed)

    # -- transitions ----------------------------------------------------

    def advance(self) -> bool:
        """Move to the next step if the current step validates."""
        target = next_state(self.state, WizardEvent.ADVANCE)
        if self.state is WizardState.STEP_1_BASIC:
            problem = self.validate_basic(self.draft)
        else:
            problem = self.validate_domain(self.draft)
        if problem:
            logger.debug("Step %d validation failed: %s", self.step, problem)
            self.error = problem
            return False
        self.error = None
        self.state = target
        return True

    def retreat(self) -> None:
        """Go back one step; the draft is kept."""
        self.state = next_state(self.state, WizardEvent.RETREAT)
        self.error = None

    def _precondition_error(self, identity: AuthIdentity | None) -> str | None:
        if not self.confirmed:
            return messages.CONFIRMATION_REQUIRED
        if identity is None:
            return messages.LOGIN_REQUIRED
        if self._submission is None:
            return messages.STORE_NOT_CONFIGURED
        return None

    async def submit(self, identity: AuthIdentity | None) -> bool:
        """Write the shaped draft once. Returns True when the wizard reached SUBMITTED.

        Precondition failures and write failures leave the wizard in STEP_3_CONFIRM with
        the error slot set and the draft untouched, ready for another attempt.
        """
        target = next_state(self.state, WizardEvent.SUBMIT)
        problem = self._precondition_error(identity)
        if problem:
            self.error = problem
            return False

        try:
            row = self.build_row(self.draft, identity)
        except ValidationError:
            logger.exception("Draft could not be shaped into a %s row", self.table)
            self.error = messages.SUBMIT_FAILED
            return False

        generation = self._generation
        self.state = target
        self.error = None
        try:
            await self._submission.submit(self.table, row, identity)
        except SubmissionFailed:
            if generation != self._generation:
                return False
            self.state = next_state(self.state, WizardEvent.SUBMIT_FAILED)
            self.error = messages.SUBMIT_FAILED
            return False

        if generation != self._generation:
            logger.info("Ignoring submission outcome for an abandoned %s draft", self.table)
            return False
        self.state = next_state(self.state, WizardEvent.SUBMIT_SUCCEEDED)
        return True

    def _discard(self) -> None:
        self._generation += 1
        self.draft = self.empty_draft()
        self.confirmed = False
        self.error = None

    def reset(self) -> None:
        """Start over after a successful submission."""
        self.state = next_state(self.state, WizardEvent.RESET)
        self._discard()

    def abandon(self) -> None:
        """Drop the session (e.g. the user navigated away), whatever its state."""
        self._discard()
        self.state = WizardState.STEP_1_BASIC
        self.abandoned = True
