"""FastAPI dependencies for JWT authentication using Cognito."""

import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.profiles.auth.exceptions import (
    AuthenticationError,
    ClaimValidationError,
    MissingCredentialsError,
)
from src.profiles.auth.jwt_validator import JWTValidator
from src.profiles.auth.models import AuthenticatedIdentity

# auto_error is off so a missing header yields our 401 instead of FastAPI's default
security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

MISSING_CREDENTIALS_DETAIL = "Missing or invalid authorization header"
INVALID_TOKEN_DETAIL = "Invalid or expired token"

# Global JWT validator instance (initialized in main.py lifespan)
_jwt_validator: JWTValidator | None = None


def set_jwt_validator(validator: JWTValidator | None) -> None:
    """
    Set the global JWT validator instance.

    Called during application startup to initialize the JWT validator.

    Args:
        validator: JWTValidator instance (None to reset)
    """
    global _jwt_validator
    _jwt_validator = validator


def get_jwt_validator() -> JWTValidator:
    """
    Get the global JWT validator instance.

    Raises:
        RuntimeError: If JWT validator not initialized
    """
    if _jwt_validator is None:
        raise RuntimeError(
            "JWT validator not initialized. "
            "Ensure application startup calls set_jwt_validator()."
        )
    return _jwt_validator


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedIdentity:
    """
    Authenticate the request from its bearer token.

    Requests without a ``Bearer`` credential are rejected before any key
    lookup. Every verification failure is reported with the same generic
    message; the cause is only logged.

    Args:
        request: Incoming request; the identity is stored on ``request.state``
        credentials: Bearer token from Authorization header

    Returns:
        AuthenticatedIdentity with subject and optional email

    Raises:
        HTTPException: 401 if token missing or invalid

    Example:
        @router.get("/me")
        async def me(current_user: AuthenticatedIdentity = Depends(get_current_user)):
            return {"sub": current_user.subject}
    """
    # HTTPBearer matches the scheme case-insensitively; only "Bearer" is accepted
    if credentials is None or credentials.scheme != "Bearer" or not credentials.credentials:
        error = MissingCredentialsError("No bearer token in Authorization header")
        logger.warning(
            f"Auth failed: {error}",
            extra={"error_type": "missing_credentials", "path": request.url.path},
        )
        raise _unauthorized(MISSING_CREDENTIALS_DETAIL)

    try:
        identity = await get_jwt_validator().verify_token(credentials.credentials)
    except ClaimValidationError as e:
        logger.warning(
            f"JWT claim validation failed ({e.reason}): {e}",
            extra={"error_type": "jwt_claims_invalid", "reason": e.reason},
        )
        raise _unauthorized(INVALID_TOKEN_DETAIL) from e
    except AuthenticationError as e:
        logger.warning(
            f"JWT verification failed: {e}",
            extra={"error_type": type(e).__name__, "error": str(e)},
        )
        raise _unauthorized(INVALID_TOKEN_DETAIL) from e
    except Exception as e:
        logger.error(f"Auth failed: {e}", exc_info=True)
        raise _unauthorized(INVALID_TOKEN_DETAIL) from e

    request.state.identity = identity
    logger.info(f"User authenticated: {identity.subject}")
    return identity
