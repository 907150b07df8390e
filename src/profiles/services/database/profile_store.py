"""Persistence for user profiles keyed by Cognito subject."""

import logging

import asyncpg

from src.profiles.services.database.connection import get_database_pool
from src.profiles.services.database.models import UserProfile

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, cognito_sub, first_name, last_name, created_at"

SELECT_BY_SUBJECT = f"SELECT {PROFILE_COLUMNS} FROM user_profiles WHERE cognito_sub = $1"

# Single statement so concurrent first writes for one subject cannot create two rows.
# COALESCE keeps the stored value for any name passed as NULL.
UPSERT_PROFILE = f"""
INSERT INTO user_profiles (cognito_sub, first_name, last_name)
VALUES ($1, $2, $3)
ON CONFLICT (cognito_sub) DO UPDATE SET
    first_name = COALESCE(EXCLUDED.first_name, user_profiles.first_name),
    last_name = COALESCE(EXCLUDED.last_name, user_profiles.last_name)
RETURNING {PROFILE_COLUMNS}
"""


class ProfileStore:
    """Reads and upserts ``user_profiles`` rows."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool

    async def get_by_subject(self, subject: str) -> UserProfile | None:
        """
        Fetch the profile for a Cognito subject.

        Args:
            subject: Cognito 'sub' claim

        Returns:
            UserProfile, or None if the subject has no profile yet
        """
        row = await self.pool.fetchrow(SELECT_BY_SUBJECT, subject)
        return UserProfile(**dict(row)) if row is not None else None

    async def upsert(
        self,
        subject: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> UserProfile:
        """
        Create the subject's profile or update it in place.

        Names that are None or empty leave the stored value unchanged; on
        insert they are stored as NULL.

        Args:
            subject: Cognito 'sub' claim
            first_name: New first name, if any
            last_name: New last name, if any

        Returns:
            The profile row after the write
        """
        row = await self.pool.fetchrow(
            UPSERT_PROFILE,
            subject,
            first_name or None,
            last_name or None,
        )
        logger.info(f"Profile upserted for user {subject}", extra={"user_id": subject})
        return UserProfile(**dict(row))


def get_profile_store() -> ProfileStore:
    """FastAPI dependency returning a store bound to the process-wide pool."""
    return ProfileStore(get_database_pool())
