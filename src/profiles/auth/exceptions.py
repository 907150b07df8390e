"""Custom exceptions for authentication."""


class AuthenticationError(Exception):
    """Raised when authentication fails (missing credentials, invalid or expired tokens, etc.)."""

    pass


class MissingCredentialsError(AuthenticationError):
    """Raised when the request carries no ``Authorization: Bearer`` header."""

    pass


class TokenVerificationError(AuthenticationError):
    """Base exception for failures while verifying a presented token."""

    pass


class MalformedTokenError(TokenVerificationError):
    """Raised when the token header cannot be parsed or lacks a key ID."""

    pass


class KeyResolutionError(TokenVerificationError):
    """Raised when the signing key cannot be fetched or is not in the key set."""

    pass


class InvalidSignatureError(TokenVerificationError):
    """Raised when the signature or declared algorithm does not match."""

    pass


class ClaimValidationError(TokenVerificationError):
    """
    Raised when a verified token carries unacceptable claims.

    Attributes:
        reason: One of ``expired``, ``issuer``, ``audience``, ``subject``, ``claims``
    """

    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        super().__init__(message or f"Claim validation failed: {reason}")
