"""API handlers for profile endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from src.profiles.auth.dependencies import get_current_user
from src.profiles.auth.models import AuthenticatedIdentity
from src.profiles.features.profile.models import ProfileUpdateRequest
from src.profiles.services.database import ProfileStore, UserProfile, get_profile_store
from src.profiles.services.rate_limiter import default_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
@default_rate_limit
async def get_profile(
    request: Request,
    current_user: AuthenticatedIdentity = Depends(get_current_user),
    store: ProfileStore = Depends(get_profile_store),
) -> UserProfile:
    """
    Get the authenticated user's profile.

    Raises:
        HTTPException: 404 if the user has not created a profile yet

    Example Response:
        {
            "id": "5d0e7c3a-2a61-4f5e-9a53-0c0f3f6f2b1e",
            "cognito_sub": "0f6c1c1e-7f2e-4a43-9a57-4c5d8e2b9a10",
            "first_name": "John",
            "last_name": "Doe",
            "created_at": "2024-01-01T00:00:00"
        }
    """
    profile = await store.get_by_subject(current_user.subject)

    if profile is None:
        logger.info(f"Profile not found for user {current_user.subject}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    return profile


@router.put("", response_model=UserProfile)
@write_rate_limit
async def update_profile(
    request: Request,
    body: ProfileUpdateRequest,
    current_user: AuthenticatedIdentity = Depends(get_current_user),
    store: ProfileStore = Depends(get_profile_store),
) -> UserProfile:
    """
    Create or update the authenticated user's profile.

    Fields omitted from the body keep their stored value. The first call for
    a user creates the profile.
    """
    return await store.upsert(
        current_user.subject,
        first_name=body.first_name,
        last_name=body.last_name,
    )
