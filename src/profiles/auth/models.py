"""Data models for authentication."""

from pydantic import BaseModel


class AuthenticatedIdentity(BaseModel):
    """
    Identity extracted from a verified Cognito token.

    Lives only for the request that presented the token; it is never persisted.

    Attributes:
        subject: Cognito user ID from the 'sub' claim
        email: User email from the 'email' claim, when present

    Example:
        >>> identity = AuthenticatedIdentity(
        ...     subject="0f6c1c1e-7f2e-4a43-9a57-4c5d8e2b9a10",
        ...     email="user@example.com",
        ... )
    """

    subject: str
    email: str | None = None
