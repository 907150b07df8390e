"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # System Configuration
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "production"
    log_level: str = "INFO"
    cors_origins: str = "*"
    rate_limit_enabled: bool = True

    # Cognito Configuration
    aws_region: str = "us-east-1"
    cognito_user_pool_id: str | None = None
    cognito_client_id: str | None = None

    # JWT Verification Configuration
    jwks_cache_ttl_seconds: int = 86400  # 24 hours
    jwt_leeway_seconds: int = 0

    # Injected secret returned by /system/secret
    system_secret: str | None = None

    # Database Configuration (unset values fall back to asyncpg/libpq defaults)
    db_host: str | None = None
    db_port: int = 5432
    db_name: str | None = None
    db_user: str | None = None
    db_password: str | None = None
    db_ssl: bool = False

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cognito_issuer(self) -> str:
        """Issuer URL Cognito writes into the ``iss`` claim."""
        return f"https://cognito-idp.{self.aws_region}.amazonaws.com/{self.cognito_user_pool_id}"

    @property
    def cognito_jwks_url(self) -> str:
        return f"{self.cognito_issuer}/.well-known/jwks.json"

    def validate_auth_config(self) -> None:
        """
        Fail fast when token verification cannot possibly succeed.

        Raises:
            ConfigurationError: If the user pool id or client id is unset
        """
        missing = [
            name.upper()
            for name in ("cognito_user_pool_id", "cognito_client_id")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")


settings = Settings()
