"""Rate limiting service for API endpoints."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.profiles.auth.models import AuthenticatedIdentity
from src.profiles.config import settings

logger = logging.getLogger(__name__)


def get_subject_or_ip(request: Request) -> str:
    """
    Extract the Cognito subject from request state or fall back to IP address.

    This function is used as the key_func for rate limiting:
    - Authenticated requests: Rate limited per subject
    - Unauthenticated requests: Rate limited per IP address

    Args:
        request: FastAPI request object

    Returns:
        Rate limit key
    """
    # Set by get_current_user, which runs before the endpoint body
    identity: AuthenticatedIdentity | None = getattr(request.state, "identity", None)

    if identity is not None:
        return f"user:{identity.subject}"

    return f"ip:{get_remote_address(request)}"


# Initialize rate limiter with in-memory storage
limiter = Limiter(
    key_func=get_subject_or_ip,
    default_limits=[],  # No global limits, we'll apply per-endpoint
    storage_uri="memory://",  # In-memory storage for single-instance deployment
    enabled=settings.rate_limit_enabled,
)


class RateLimitTiers:
    """
    Rate limit tiers for different endpoint categories.

    Limits are per-subject for authenticated endpoints. The health check is
    not rate limited.
    """

    # Profile and secret reads
    DEFAULT = ["100 per minute", "1000 per hour"]

    # State-changing operations (PUT)
    WRITE = ["30 per minute", "200 per hour"]


# Note: These decorators require the endpoint to have a 'request: Request' parameter
# as per slowapi documentation requirements
default_rate_limit = limiter.limit(";".join(RateLimitTiers.DEFAULT))
write_rate_limit = limiter.limit(";".join(RateLimitTiers.WRITE))
