"""Authentication module for JWT-based authentication."""

from src.profiles.auth.dependencies import (
    get_current_user,
    get_jwt_validator,
    set_jwt_validator,
)
from src.profiles.auth.exceptions import (
    AuthenticationError,
    ClaimValidationError,
    InvalidSignatureError,
    KeyResolutionError,
    MalformedTokenError,
    MissingCredentialsError,
    TokenVerificationError,
)
from src.profiles.auth.jwks import JWKSCache
from src.profiles.auth.jwt_validator import JWTValidator
from src.profiles.auth.models import AuthenticatedIdentity

__all__ = [
    "get_current_user",
    "get_jwt_validator",
    "set_jwt_validator",
    "JWKSCache",
    "JWTValidator",
    "AuthenticationError",
    "ClaimValidationError",
    "InvalidSignatureError",
    "KeyResolutionError",
    "MalformedTokenError",
    "MissingCredentialsError",
    "TokenVerificationError",
    "AuthenticatedIdentity",
]
