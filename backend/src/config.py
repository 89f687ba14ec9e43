"""
FastAPI application configuration using Pydantic Settings.

Provides centralized configuration for:
- Database connection (MongoDB)
- Authentication (JWT and password hashing settings)
- Password reset collaborators (Firebase identity provider, SMTP relay)
- API settings (CORS, security headers)
- Logging and monitoring

All settings support environment variable overrides and .env file loading.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    prefix "VAACAY_" (e.g., VAACAY_MONGODB_URL). A handful of settings also
    accept the unprefixed names used by earlier deployments (MONGO_URI,
    JWT_SECRET, EMAIL_USER, EMAIL_PASS, PORT, FRONTEND_URL).

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="Vaacay Backend",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="API version"
    )
    api_prefix: str = Field(
        default="",
        description="URL prefix for the signup/login/trip/notification routes"
    )

    debug: bool = Field(
        default=False,
        description="Debug mode - enables verbose logging and error traces"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="API bind host"
    )
    port: int = Field(
        default=5001,
        validation_alias=AliasChoices("VAACAY_PORT", "PORT"),
        description="API bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # Database Settings (MongoDB)
    # =========================================================================

    mongodb_url: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("VAACAY_MONGODB_URL", "MONGO_URI"),
        description="MongoDB connection URL"
    )
    mongodb_database: str = Field(
        default="vaacay",
        description="Database name used when the URL does not name one"
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long to wait for a reachable server before failing (ms)",
        gt=0
    )

    # =========================================================================
    # JWT Authentication Settings
    # =========================================================================

    jwt_secret_key: str = Field(
        default="change-this-secret-key-in-production-use-env-var-minimum-32-chars",
        validation_alias=AliasChoices("VAACAY_JWT_SECRET_KEY", "JWT_SECRET"),
        description="Secret key for JWT token signing (MUST be changed in production)",
        min_length=32
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm (HS256, HS384, HS512)"
    )
    jwt_access_token_expire_minutes: int = Field(
        default=60,
        description="Access token expiration time in minutes",
        gt=0,
        le=1440  # Max 24 hours
    )

    # =========================================================================
    # Password Hashing Settings
    # =========================================================================

    password_bcrypt_rounds: int = Field(
        default=10,
        description="BCrypt cost factor (higher = slower but more secure)",
        ge=4,
        le=14
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS middleware"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )
    frontend_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VAACAY_FRONTEND_URL", "FRONTEND_URL"),
        description="Frontend origin, added to the allowed CORS origins"
    )

    # =========================================================================
    # Identity Provider Settings (Firebase)
    # =========================================================================

    firebase_credentials_path: str = Field(
        default="./Vaacay.json",
        description="Path to the Firebase service account JSON file"
    )
    firebase_app_name: str = Field(
        default="vaacay",
        description="Name of the firebase_admin app instance"
    )

    # =========================================================================
    # Mail Relay Settings (SMTP)
    # =========================================================================

    smtp_host: str = Field(
        default="smtp.gmail.com",
        description="SMTP server host"
    )
    smtp_port: int = Field(
        default=587,
        description="SMTP server port",
        gt=0,
        lt=65536
    )
    smtp_username: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VAACAY_SMTP_USERNAME", "EMAIL_USER"),
        description="SMTP login user, also the default sender address"
    )
    smtp_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VAACAY_SMTP_PASSWORD", "EMAIL_PASS"),
        description="SMTP login password"
    )
    smtp_sender: Optional[str] = Field(
        default=None,
        description="From address; defaults to smtp_username"
    )
    smtp_use_starttls: bool = Field(
        default=True,
        description="Upgrade the SMTP connection with STARTTLS"
    )
    smtp_timeout: float = Field(
        default=30.0,
        description="SMTP socket timeout (seconds)",
        gt=0
    )

    # =========================================================================
    # Password Reset Settings
    # =========================================================================

    reset_password_subject: str = Field(
        default="Password Reset",
        description="Subject of the password reset email"
    )
    reset_password_expose_link: bool = Field(
        default=True,
        description="Include the reset link in the /reset-password response body"
    )

    # =========================================================================
    # Security Settings
    # =========================================================================

    security_headers_enabled: bool = Field(
        default=True,
        description="Add security headers to responses"
    )

    # =========================================================================
    # Monitoring Settings
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Expose Prometheus metrics on /metrics"
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Validate JWT algorithm is a supported HMAC algorithm."""
        allowed = ["HS256", "HS384", "HS512"]
        if v not in allowed:
            raise ValueError(f"jwt_algorithm must be one of {allowed}, got: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins(self) -> List[str]:
        """CORS origins including the configured frontend URL."""
        origins = list(self.cors_origins) or ["*"]
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def mail_sender(self) -> Optional[str]:
        """From address for outgoing mail."""
        return self.smtp_sender or self.smtp_username

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="VAACAY_",    # Environment variable prefix
        env_file=".env",         # Load from .env file
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",          # Ignore extra environment variables
        populate_by_name=True,   # Allow Settings(mongodb_url=...) in tests
        validate_default=True,   # Validate default values
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once and shared
    across the application.

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from backend.src.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.mongodb_url)
        mongodb://localhost:27017
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
