"""
Rate Limiting for the consent endpoints

Anonymous visitors can create person records, so write endpoints are
limited per client IP.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from cookie_consent.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
    storage_uri="memory://",  # Use memory storage (upgrade to Redis for production)
    headers_enabled=True,
)


def configure_rate_limiting(app):
    """
    Attach the limiter to the FastAPI application.

    The exception handler for breaches is registered with the other
    handlers in ``cookie_consent.exception_handlers``.
    """
    app.state.limiter = limiter
