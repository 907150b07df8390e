"""API handlers for system endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from src.profiles.auth.dependencies import get_current_user
from src.profiles.auth.models import AuthenticatedIdentity
from src.profiles.config import settings
from src.profiles.services.rate_limiter import default_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


class SecretResponse(BaseModel):
    """Response for the injected secret endpoint."""

    secret: str


@router.get("/secret", response_model=SecretResponse)
@default_rate_limit
async def get_system_secret(
    request: Request,
    current_user: AuthenticatedIdentity = Depends(get_current_user),
) -> SecretResponse:
    """
    Return the secret injected into the process environment at deploy time.

    Raises:
        HTTPException: 500 if SYSTEM_SECRET is not configured
    """
    if not settings.system_secret:
        logger.error("System secret requested but SYSTEM_SECRET is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="System secret not configured",
        )

    return SecretResponse(secret=settings.system_secret)
