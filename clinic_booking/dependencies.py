"""FastAPI dependency injection functions."""
from functools import lru_cache

from clinic_booking.session_manager import WizardSessionManager
from clinic_booking.upstream import ClinicApiClient


@lru_cache(maxsize=1)
def get_clinic_client() -> ClinicApiClient:
    """
    Get the upstream API client (cached singleton).

    Pattern: one pooled requests session reused across requests.
    """
    return ClinicApiClient()


@lru_cache(maxsize=1)
def get_session_manager() -> WizardSessionManager:
    """Get the wizard registry (cached singleton)."""
    return WizardSessionManager()
