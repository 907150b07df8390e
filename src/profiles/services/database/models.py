"""Pydantic models for database entities."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class UserProfile(BaseModel):
    """A row of the ``user_profiles`` table, one per Cognito subject."""

    id: UUID
    cognito_sub: str
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime
