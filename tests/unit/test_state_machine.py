"""Unit tests for wizard step structure."""
from clinic_booking.state import (
    INITIAL_STEP,
    VALID_TRANSITIONS,
    WizardStep,
    previous_step,
    validate_transition,
)


def test_all_steps_have_transitions():
    for step in WizardStep:
        assert step in VALID_TRANSITIONS


def test_initial_step_is_date():
    assert INITIAL_STEP == WizardStep.DATE


def test_from_date_only_time_slot_is_reachable():
    reachable = [s for s in WizardStep if validate_transition(WizardStep.DATE, s)]
    assert reachable == [WizardStep.TIME_SLOT]


def test_forward_flow():
    assert validate_transition(WizardStep.DATE, WizardStep.TIME_SLOT)
    assert validate_transition(WizardStep.TIME_SLOT, WizardStep.FORM)
    assert validate_transition(WizardStep.FORM, WizardStep.CONFIRMATION)


def test_no_skipping():
    assert not validate_transition(WizardStep.DATE, WizardStep.FORM)
    assert not validate_transition(WizardStep.DATE, WizardStep.CONFIRMATION)
    assert not validate_transition(WizardStep.TIME_SLOT, WizardStep.CONFIRMATION)


def test_backward_moves():
    assert previous_step(WizardStep.TIME_SLOT) == WizardStep.DATE
    assert previous_step(WizardStep.FORM) == WizardStep.TIME_SLOT
    assert previous_step(WizardStep.DATE) is None


def test_confirmation_is_terminal():
    assert VALID_TRANSITIONS[WizardStep.CONFIRMATION] == []
    assert previous_step(WizardStep.CONFIRMATION) is None
    for step in WizardStep:
        assert not validate_transition(WizardStep.CONFIRMATION, step)
