"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (the two JWT signing secrets) are
validated at load time; the database URL is checked lazily on first use.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OTP_DELIVERY_CHANNELS = ("log", "sms", "email")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (jwt_access_secret, jwt_refresh_secret, and the SMS
    gateway or SMTP settings when that delivery channel is selected).
    """

    # App
    app_name: str = "school-auth"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1/auth"

    # Database (postgresql+asyncpg://... in production, sqlite+aiosqlite://... for dev)
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Tokens: access and refresh use independent keys; reset tokens reuse the access key.
    jwt_access_secret: SecretStr = SecretStr("")
    jwt_refresh_secret: SecretStr = SecretStr("")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    reset_token_expire_minutes: int = 10

    # OTP
    otp_length: int = 6
    otp_expire_minutes: int = 10
    otp_delivery_channel: str = "log"
    otp_delivery_timeout_seconds: float = 10.0
    sms_api_url: str | None = None
    sms_api_key: SecretStr | None = None
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    smtp_from_email: str | None = None
    smtp_from_name: str = "School Auth"

    # Accounts
    bcrypt_rounds: int = 12
    default_role_name: str = "DEFAULT"
    revoke_sessions_on_password_reset: bool = True

    # Request context headers (set upstream by the gateway)
    context_header_name: str = "X-Context"
    school_id_header_name: str = "X-School-ID"
    school_subdomain_header_name: str = "X-School-Subdomain"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Rate limiting (slowapi)
    rate_limit_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate signing secrets and the OTP delivery channel.

        - JWT_ACCESS_SECRET and JWT_REFRESH_SECRET are required and must differ.
        - OTP_DELIVERY_CHANNEL must be 'log', 'sms' or 'email'.
        - 'sms' requires SMS_API_URL and SMS_API_KEY.
        - 'email' requires SMTP_HOST and SMTP_FROM_EMAIL (or SMTP_USER).
        """
        access = self.jwt_access_secret.get_secret_value()
        refresh = self.jwt_refresh_secret.get_secret_value()
        if not access or not refresh:
            raise ValueError(
                "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET are required. "
                "Generate each with: openssl rand -hex 32."
            )
        if access == refresh:
            raise ValueError(
                "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be different keys."
            )
        if self.otp_delivery_channel not in OTP_DELIVERY_CHANNELS:
            raise ValueError(
                f"otp_delivery_channel must be one of {OTP_DELIVERY_CHANNELS}, "
                f"got: {self.otp_delivery_channel!r}"
            )
        if self.otp_delivery_channel == "sms":
            has_key = self.sms_api_key and self.sms_api_key.get_secret_value()
            if not self.sms_api_url or not has_key:
                raise ValueError(
                    "When otp_delivery_channel is 'sms', set SMS_API_URL and SMS_API_KEY."
                )
        if self.otp_delivery_channel == "email":
            if not self.smtp_host or not (self.smtp_from_email or self.smtp_user):
                raise ValueError(
                    "When otp_delivery_channel is 'email', set SMTP_HOST and "
                    "SMTP_FROM_EMAIL (or SMTP_USER)."
                )
        if self.otp_length < 4:
            raise ValueError("otp_length must be at least 4")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {LOG_LEVELS}, got: {self.log_level!r}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
