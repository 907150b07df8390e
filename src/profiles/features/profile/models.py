"""Pydantic models for profile feature."""

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdateRequest(BaseModel):
    """Request body for PUT /profile. Omitted fields keep their stored value."""

    first_name: str | None = Field(None, max_length=100, description="User's first name")
    last_name: str | None = Field(None, max_length=100, description="User's last name")

    model_config = ConfigDict(
        json_schema_extra={"example": {"first_name": "John", "last_name": "Doe"}}
    )
