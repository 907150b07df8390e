"""Local JWT verification using JWKS for signature validation."""

import logging

from jose import jws, jwt
from jose.exceptions import ExpiredSignatureError, JWSError, JWTClaimsError, JWTError

from src.profiles.auth.exceptions import (
    ClaimValidationError,
    InvalidSignatureError,
    MalformedTokenError,
)
from src.profiles.auth.jwks import JWKSCache
from src.profiles.auth.models import AuthenticatedIdentity

logger = logging.getLogger(__name__)

# Cognito signs ID tokens with RS256 only; any other declared alg is rejected
ALGORITHM = "RS256"


def _claims_error_reason(error: JWTClaimsError) -> str:
    message = str(error).lower()
    if "issuer" in message:
        return "issuer"
    if "audience" in message:
        return "audience"
    return "claims"


class JWTValidator:
    """
    Verifies Cognito JWTs locally against the published signing keys.

    Validates signature, expiration, issuer, and audience claims and turns the
    verified claims into an ``AuthenticatedIdentity``.

    Attributes:
        jwks_cache: JWKS cache instance for fetching signing keys
        issuer: Expected issuer (iss claim) - the Cognito user pool URL
        audience: Expected audience (aud claim) - the app client ID
        leeway: Clock skew tolerance in seconds (default: 0)

    Example:
        >>> validator = JWTValidator(jwks_cache, issuer, audience="client-id")
        >>> identity = await validator.verify_token(jwt_token)
        >>> identity.subject
    """

    def __init__(
        self,
        jwks_cache: JWKSCache,
        issuer: str,
        audience: str,
        leeway: int = 0,
    ):
        self.jwks_cache = jwks_cache
        self.issuer = issuer
        self.audience = audience
        self.leeway = leeway

    async def verify_token(self, token: str) -> AuthenticatedIdentity:
        """
        Verify JWT token and return the identity it carries.

        Performs the following validations, stopping at the first failure:
        1. Decode JWT header to extract key ID (kid)
        2. Fetch signing key from JWKS cache
        3. Check the declared algorithm and verify the RS256 signature
        4. Validate expiration, issuer, and audience claims
        5. Extract subject and optional email

        Args:
            token: JWT token string (without "Bearer " prefix)

        Returns:
            AuthenticatedIdentity built from the 'sub' and 'email' claims

        Raises:
            MalformedTokenError: If the header is unreadable or has no 'kid'
            KeyResolutionError: If the signing key cannot be resolved
            InvalidSignatureError: If the algorithm or signature does not match
            ClaimValidationError: If expiry, issuer, audience, or subject is invalid
        """
        # Step 1: Decode header to get key ID (kid) without verification
        try:
            unverified_header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise MalformedTokenError(f"Unreadable JWT header: {e}") from e

        kid = unverified_header.get("kid")
        if not kid:
            raise MalformedTokenError("JWT header missing 'kid' (key ID)")

        # Step 2: Fetch signing key from cache
        signing_key = await self.jwks_cache.get_signing_key(kid)

        # Step 3: Verify algorithm and signature
        alg = unverified_header.get("alg")
        if alg != ALGORITHM:
            raise InvalidSignatureError(f"Unexpected signing algorithm: {alg!r}")

        try:
            jws.verify(token, signing_key, algorithms=[ALGORITHM])
        except JWSError as e:
            raise InvalidSignatureError(f"Signature verification failed: {e}") from e

        # Step 4: Validate claims
        try:
            claims = jwt.decode(
                token,
                signing_key,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "verify_at_hash": False,
                    "require_exp": True,
                    "leeway": self.leeway,
                },
            )
        except ExpiredSignatureError as e:
            raise ClaimValidationError("expired", "Token has expired") from e
        except JWTClaimsError as e:
            raise ClaimValidationError(_claims_error_reason(e), str(e)) from e
        except JWTError as e:
            raise ClaimValidationError("claims", str(e)) from e

        # python-jose skips iss/aud checks when the claim is absent
        if claims.get("iss") != self.issuer:
            raise ClaimValidationError("issuer", "Token issuer does not match")
        if claims.get("aud") != self.audience:
            raise ClaimValidationError("audience", "Token audience does not match")

        # Step 5: Extract identity
        subject = claims.get("sub")
        if not subject:
            raise ClaimValidationError("subject", "Token missing 'sub' claim")

        logger.debug(
            "JWT verified successfully",
            extra={"user_id": subject, "kid": kid, "exp": claims.get("exp")},
        )

        return AuthenticatedIdentity(subject=subject, email=claims.get("email"))
