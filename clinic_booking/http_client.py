"""HTTP session for the upstream clinic-management API.

Pattern: requests.Session with connection pooling and a default timeout.
GET requests are wrapped with a tenacity retry on transport errors.
POST requests are sent exactly once, since a repeated booking POST creates a
duplicate appointment upstream.
"""
import logging

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)

from clinic_booking import config

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


def create_http_session(
    max_retries: int = 0,
    timeout: int = 15,
    api_key: str = "",
) -> requests.Session:
    """
    Create HTTP session with connection pooling and GET retries.

    Args:
        max_retries: Retry attempts for GET transport errors (default: 0)
                     Retry delays grow exponentially: 1s, 2s, 4s, capped at 8s
        timeout: Request timeout in seconds (default: 15)
        api_key: Credential sent in the upstream `apikey` header

    Returns:
        Configured requests.Session
    """
    session = requests.Session()

    adapter = HTTPAdapter(pool_connections=10, pool_maxsize=10)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    if api_key:
        session.headers[config.CLINIC_API_KEY_HEADER] = api_key

    original_get = session.get
    original_post = session.post

    @retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(TRANSPORT_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def get_with_retry(*args, **kwargs):
        kwargs.setdefault('timeout', timeout)
        return original_get(*args, **kwargs)

    def post_once(*args, **kwargs):
        kwargs.setdefault('timeout', timeout)
        return original_post(*args, **kwargs)

    session.get = get_with_retry
    session.post = post_once

    return session


def create_default_session() -> requests.Session:
    """Session configured from the environment."""
    return create_http_session(
        max_retries=config.CLINIC_API_GET_RETRIES,
        timeout=config.CLINIC_API_TIMEOUT,
        api_key=config.CLINIC_API_KEY,
    )
