"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.profiles.auth import JWKSCache, JWTValidator, KeyResolutionError, set_jwt_validator
from src.profiles.config import settings
from src.profiles.features.profile import router as profile_router
from src.profiles.features.system import router as system_router
from src.profiles.middleware import SecurityHeadersMiddleware
from src.profiles.services.database import (
    close_database_pool,
    create_database_pool,
    initialize_database,
    set_database_pool,
)
from src.profiles.services.rate_limiter import limiter

logger = logging.getLogger(__name__)

# Global JWKS cache instance for cleanup
_jwks_cache: JWKSCache | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    Any exception raised before ``yield`` aborts startup, so the server never
    accepts traffic without a database or without auth configuration.
    """
    global _jwks_cache

    # Startup
    settings.validate_auth_config()

    try:
        pool = await create_database_pool(settings)
        set_database_pool(pool)
        await initialize_database(pool)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(
            f"Failed to initialize database: {e}",
            exc_info=True,
            extra={"error_type": "database_init_failed"},
        )
        await close_database_pool()
        raise

    jwks_url = settings.cognito_jwks_url
    _jwks_cache = JWKSCache(jwks_url=jwks_url, cache_ttl=settings.jwks_cache_ttl_seconds)
    jwt_validator = JWTValidator(
        jwks_cache=_jwks_cache,
        issuer=settings.cognito_issuer,
        audience=settings.cognito_client_id,
        leeway=settings.jwt_leeway_seconds,
    )
    set_jwt_validator(jwt_validator)

    # Warm the key cache; a failure here is retried lazily on the first request
    try:
        await _jwks_cache.refresh_keys()
    except KeyResolutionError as e:
        logger.warning(f"JWKS warm-up failed, keys will be fetched on demand: {e}")

    logger.info(
        "JWT validator initialized successfully",
        extra={
            "jwks_url": jwks_url,
            "cache_ttl": settings.jwks_cache_ttl_seconds,
            "issuer": settings.cognito_issuer,
        },
    )

    yield

    # Shutdown
    set_jwt_validator(None)
    if _jwks_cache is not None:
        await _jwks_cache.close()
        _jwks_cache = None
    await close_database_pool()


app = FastAPI(
    title="Profile Service API",
    description="Authenticated user profile management backed by Cognito",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET", "PUT"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(SecurityHeadersMiddleware)

app.include_router(profile_router)
app.include_router(system_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"error": ...}``; unmatched routes and methods are 404."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED) and (
        exc.detail in ("Not Found", "Method Not Allowed")
    ):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Not found"})

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report unexpected failures as 500; the exception text is only exposed in development."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={"error_type": "unhandled_exception"},
    )
    content = {"error": "Internal server error"}
    if settings.is_development:
        content["message"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(status="healthy", timestamp=datetime.now(UTC))


def run() -> None:
    """Configure logging and serve the app with uvicorn."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
