"""JWKS (JSON Web Key Set) fetching and caching for JWT verification."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import NamedTuple

import httpx
from jose import jwk
from jose.backends import RSAKey
from jose.exceptions import JWKError

from src.profiles.auth.exceptions import KeyResolutionError

logger = logging.getLogger(__name__)


class CachedSigningKey(NamedTuple):
    """A public key together with the time it was fetched."""

    key: RSAKey
    fetched_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JWKSCache:
    """
    Manages JWKS fetching and caching with per-key expiry.

    Keys are cached in-memory by key ID. A cached key is served until it is
    older than ``cache_ttl``; a missing or stale key triggers a fetch of the
    whole key set. Concurrent misses may fetch twice, which is harmless: each
    cache entry is replaced as a single immutable tuple.

    Attributes:
        jwks_url: URL to fetch JWKS from (typically /.well-known/jwks.json)
        cache_ttl: Cache time-to-live in seconds (default: 86400 = 24 hours)
        _keys: Cached entries (kid -> CachedSigningKey)
        _http_client: HTTP client for fetching JWKS
        _clock: Returns the current UTC time; replaced in tests

    Example:
        >>> cache = JWKSCache("https://cognito-idp.us-east-1.amazonaws.com/pool/.well-known/jwks.json")
        >>> signing_key = await cache.get_signing_key("key-id-123")
    """

    def __init__(
        self,
        jwks_url: str,
        cache_ttl: int = 86400,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize JWKS cache.

        Args:
            jwks_url: URL to fetch JWKS from
            cache_ttl: Cache TTL in seconds (default: 24 hours)
            http_client: Client used for fetches (a default one is created if None)
            clock: Current-time source (default: ``datetime.now(UTC)``)
        """
        self.jwks_url = jwks_url
        self.cache_ttl = cache_ttl
        self._keys: dict[str, CachedSigningKey] = {}
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(10.0, read=30.0, connect=10.0, write=10.0)
        )
        self._clock = clock or _utcnow

    async def get_signing_key(self, kid: str) -> RSAKey:
        """
        Get signing key by key ID (kid).

        Fetches the key set when the key is not cached or its entry has
        outlived the TTL.

        Args:
            kid: Key ID from JWT header

        Returns:
            RSA public key for signature verification

        Raises:
            KeyResolutionError: If the fetch fails or the key ID is not published
        """
        entry = self._keys.get(kid)
        if entry is not None and not self._is_expired(entry):
            return entry.key

        if entry is None:
            logger.info(f"Key ID '{kid}' not cached, fetching JWKS", extra={"kid": kid})
        else:
            logger.info(f"Cached key '{kid}' expired, fetching JWKS", extra={"kid": kid})

        await self.refresh_keys()

        entry = self._keys.get(kid)
        if entry is None:
            raise KeyResolutionError(f"Key ID '{kid}' not found in JWKS")

        return entry.key

    async def refresh_keys(self) -> None:
        """
        Fetch JWKS from Cognito and update cache.

        Every RSA key in the response is cached with a fresh timestamp.
        Entries for key IDs no longer published are left to expire.

        Raises:
            KeyResolutionError: If the HTTP request fails or the response is not a key set
        """
        try:
            logger.info(f"Fetching JWKS from {self.jwks_url}")
            response = await self._http_client.get(self.jwks_url)
            response.raise_for_status()
            jwks_data = response.json()
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to fetch JWKS from {self.jwks_url}: {e}",
                extra={"error_type": "jwks_fetch_failed"},
            )
            raise KeyResolutionError(f"Failed to fetch JWKS: {e}") from e
        except ValueError as e:
            logger.error(
                f"JWKS response is not valid JSON: {e}",
                extra={"error_type": "jwks_parse_failed"},
            )
            raise KeyResolutionError(f"Invalid JWKS response: {e}") from e

        if not isinstance(jwks_data, dict) or not isinstance(jwks_data.get("keys"), list):
            raise KeyResolutionError("Invalid JWKS response: missing 'keys' list")

        fetched_at = self._clock()
        loaded: list[str] = []
        for key_data in jwks_data["keys"]:
            if not isinstance(key_data, dict):
                logger.warning("JWKS entry is not an object, skipping")
                continue

            kid = key_data.get("kid")
            if not isinstance(kid, str) or not kid:
                logger.warning("JWKS key missing 'kid', skipping")
                continue

            if key_data.get("kty") != "RSA":
                logger.warning(
                    f"Skipping non-RSA key {kid}",
                    extra={"kid": kid, "kty": key_data.get("kty")},
                )
                continue

            try:
                key = jwk.construct(key_data, algorithm="RS256")
            except (JWKError, TypeError, ValueError, KeyError) as e:
                logger.warning(f"Skipping unparseable key {kid}: {e}", extra={"kid": kid})
                continue

            self._keys[kid] = CachedSigningKey(key=key, fetched_at=fetched_at)
            loaded.append(kid)

        logger.info(
            "JWKS cache refreshed successfully",
            extra={"key_count": len(loaded), "key_ids": loaded, "ttl_seconds": self.cache_ttl},
        )

    def _is_expired(self, entry: CachedSigningKey) -> bool:
        age = (self._clock() - entry.fetched_at).total_seconds()
        return age >= self.cache_ttl

    async def close(self) -> None:
        """
        Close HTTP client and cleanup resources.

        Should be called during application shutdown.
        """
        await self._http_client.aclose()
        logger.info("JWKS cache closed")
