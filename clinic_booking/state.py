"""Booking wizard steps and the allowed transitions between them.

The flow is strictly linear:

    date -> time_slot -> form -> confirmation

with one-step backward moves from time_slot and form. Confirmation is
terminal; only tearing the wizard down (reset/close) leaves it.
"""
from enum import Enum
from typing import Dict, List, Optional


class WizardStep(str, Enum):
    """Discrete booking wizard steps."""
    DATE = "date"
    TIME_SLOT = "time_slot"
    FORM = "form"
    CONFIRMATION = "confirmation"


# Pattern: Current step → [allowed next steps]
VALID_TRANSITIONS: Dict[WizardStep, List[WizardStep]] = {
    WizardStep.DATE: [
        WizardStep.TIME_SLOT,
    ],
    WizardStep.TIME_SLOT: [
        WizardStep.FORM,
        WizardStep.DATE,  # back
    ],
    WizardStep.FORM: [
        WizardStep.CONFIRMATION,
        WizardStep.TIME_SLOT,  # back
    ],
    WizardStep.CONFIRMATION: [],
}

PREVIOUS_STEP: Dict[WizardStep, WizardStep] = {
    WizardStep.TIME_SLOT: WizardStep.DATE,
    WizardStep.FORM: WizardStep.TIME_SLOT,
}

INITIAL_STEP = WizardStep.DATE


class InvalidTransitionError(Exception):
    """Raised when a wizard action is not allowed on the current step."""

    def __init__(self, current: WizardStep, action: str):
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} on the '{current.value}' step")


def validate_transition(
    current: WizardStep,
    intended: WizardStep
) -> bool:
    """
    Validate step transition.

    Args:
        current: Current wizard step
        intended: Intended next step

    Returns:
        True if transition is valid

    Example:
        >>> validate_transition(WizardStep.DATE, WizardStep.TIME_SLOT)
        True
        >>> validate_transition(WizardStep.DATE, WizardStep.FORM)
        False
    """
    return intended in VALID_TRANSITIONS.get(current, [])


def previous_step(current: WizardStep) -> Optional[WizardStep]:
    """Step reached by going back, or None when going back is not allowed."""
    return PREVIOUS_STEP.get(current)
