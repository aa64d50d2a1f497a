"""Test the wizard registry."""
from datetime import datetime, timedelta, UTC

import pytest

from clinic_booking.session_manager import WizardNotFoundError, WizardSessionManager
from clinic_booking.wizard import BookingWizard


@pytest.fixture
def manager():
    return WizardSessionManager(max_age_minutes=60)


def make_wizard(doctor, client, wizard_id=None):
    return BookingWizard(doctor, client, wizard_id=wizard_id)


def test_add_and_get(manager, doctor, mock_client):
    wizard = manager.add(make_wizard(doctor, mock_client))

    assert manager.get(wizard.id) is wizard
    assert wizard.id in manager
    assert len(manager) == 1


def test_get_unknown_raises(manager):
    with pytest.raises(WizardNotFoundError):
        manager.get("wiz-missing")


def test_get_refreshes_activity(manager, doctor, mock_client):
    wizard = manager.add(make_wizard(doctor, mock_client))
    wizard.last_activity = datetime.now(UTC) - timedelta(minutes=30)

    manager.get(wizard.id)

    assert datetime.now(UTC) - wizard.last_activity < timedelta(minutes=1)


def test_close_tears_wizard_down(manager, doctor, mock_client):
    wizard = manager.add(make_wizard(doctor, mock_client))

    manager.close(wizard.id)

    assert wizard.id not in manager
    with pytest.raises(WizardNotFoundError):
        manager.get(wizard.id)
    with pytest.raises(WizardNotFoundError):
        manager.close(wizard.id)


def test_wizards_are_independent(manager, doctor, mock_client):
    first = manager.add(make_wizard(doctor, mock_client, "wiz-a"))
    second = manager.add(make_wizard(doctor, mock_client, "wiz-b"))

    manager.close(first.id)

    assert manager.get("wiz-b") is second


def test_cleanup_removes_only_idle_wizards(manager, doctor, mock_client):
    idle = manager.add(make_wizard(doctor, mock_client, "wiz-idle"))
    active = manager.add(make_wizard(doctor, mock_client, "wiz-active"))
    idle.last_activity = datetime.now(UTC) - timedelta(minutes=90)

    removed = manager.cleanup_expired_wizards()

    assert removed == 1
    assert idle.id not in manager
    assert active.id in manager


def test_cleanup_with_override_age(manager, doctor, mock_client):
    wizard = manager.add(make_wizard(doctor, mock_client))
    wizard.last_activity = datetime.now(UTC) - timedelta(minutes=10)

    assert manager.cleanup_expired_wizards(max_age_minutes=120) == 0
    assert manager.cleanup_expired_wizards(max_age_minutes=5) == 1
