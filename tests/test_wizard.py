import pytest

from jpycmap.registration.wizard import (
    TRANSITIONS,
    IllegalTransition,
    WizardEvent,
    WizardState,
    next_state,
)


def test_transition_table_covers_the_wizard_flow():
    assert next_state(WizardState.STEP_1_BASIC, WizardEvent.ADVANCE) is WizardState.STEP_2_DOMAIN
    assert next_state(WizardState.STEP_2_DOMAIN, WizardEvent.ADVANCE) is WizardState.STEP_3_CONFIRM
    assert next_state(WizardState.STEP_3_CONFIRM, WizardEvent.SUBMIT) is WizardState.SUBMITTING
    assert next_state(WizardState.SUBMITTING, WizardEvent.SUBMIT_SUCCEEDED) is WizardState.SUBMITTED
    assert next_state(WizardState.SUBMITTING, WizardEvent.SUBMIT_FAILED) is WizardState.STEP_3_CONFIRM
    assert next_state(WizardState.SUBMITTED, WizardEvent.RESET) is WizardState.STEP_1_BASIC
    assert len(TRANSITIONS) == 8


@pytest.mark.parametrize(
    "state,event",
    [
        (WizardState.STEP_1_BASIC, WizardEvent.SUBMIT),
        (WizardState.STEP_1_BASIC, WizardEvent.RETREAT),
        (WizardState.STEP_2_DOMAIN, WizardEvent.SUBMIT),
        (WizardState.STEP_3_CONFIRM, WizardEvent.ADVANCE),
        (WizardState.SUBMITTING, WizardEvent.RETREAT),
        (WizardState.SUBMITTED, WizardEvent.ADVANCE),
    ],
)
def test_events_outside_the_table_are_illegal(state, event):
    with pytest.raises(IllegalTransition) as excinfo:
        next_state(state, event)
    assert excinfo.value.state is state
    assert excinfo.value.event is event
    assert event.value in str(excinfo.value)
