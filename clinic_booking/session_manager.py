"""Registry of live booking wizards, keyed by wizard id.

Wizards live in memory only. Closing a wizard tears it down; reopening a
booking starts a fresh wizard on the date step.
"""
import threading
from datetime import datetime, timedelta, UTC
from typing import Dict, Optional

from clinic_booking import config
from clinic_booking.wizard import BookingWizard


class WizardNotFoundError(Exception):
    """Raised when wizard_id is unknown or already closed."""
    pass


class WizardSessionManager:
    """
    Holds the booking wizards of all visitors.

    Responsibilities:
    - Register new wizards
    - Look wizards up by id (refreshing their activity timestamp)
    - Tear wizards down on close
    - Evict wizards idle for longer than max_age_minutes
    """

    def __init__(self, max_age_minutes: int = config.WIZARD_MAX_AGE_MINUTES):
        self.max_age_minutes = max_age_minutes
        self._wizards: Dict[str, BookingWizard] = {}
        self._lock = threading.Lock()

    def add(self, wizard: BookingWizard) -> BookingWizard:
        with self._lock:
            self._wizards[wizard.id] = wizard
        return wizard

    def get(self, wizard_id: str) -> BookingWizard:
        """
        Get a live wizard.

        Raises:
            WizardNotFoundError: If the wizard doesn't exist
        """
        with self._lock:
            wizard = self._wizards.get(wizard_id)

        if wizard is None:
            raise WizardNotFoundError(f"Wizard {wizard_id} not found")

        wizard.touch()
        return wizard

    def close(self, wizard_id: str) -> None:
        with self._lock:
            wizard = self._wizards.pop(wizard_id, None)

        if wizard is None:
            raise WizardNotFoundError(f"Wizard {wizard_id} not found")

    def cleanup_expired_wizards(self, max_age_minutes: Optional[int] = None) -> int:
        """
        Drop wizards idle for longer than max_age_minutes.

        Returns:
            Number of removed wizards
        """
        max_age = self.max_age_minutes if max_age_minutes is None else max_age_minutes
        cutoff_time = datetime.now(UTC) - timedelta(minutes=max_age)

        with self._lock:
            expired = [
                wizard_id for wizard_id, wizard in self._wizards.items()
                if wizard.last_activity < cutoff_time
            ]
            for wizard_id in expired:
                del self._wizards[wizard_id]

        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._wizards)

    def __contains__(self, wizard_id: str) -> bool:
        with self._lock:
            return wizard_id in self._wizards
