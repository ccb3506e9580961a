"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from appendlist_api.utils.normalization import parse_email_allowlist


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database
    DATABASE_URL: str = "sqlite:///./append_lists.db"

    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_HOURS: int = 24 * 7

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Admins who may broadcast notifications and edit any member record.
    # JSON array or comma-separated list of emails.
    ADMINS: str = ""

    # Non-owners granted list inspection/export when they have also joined.
    LIST_OWNER_EMAIL_WHITELIST: str = ""

    # Export timestamps are rendered in one fixed zone
    EXPORT_TIMEZONE: str = "Asia/Kolkata"
    EXPORT_TIMEZONE_LABEL: str = "IST"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def admin_emails(self) -> frozenset[str]:
        """Parse ADMINS into a lowercase set."""
        return parse_email_allowlist(self.ADMINS)

    @property
    def owner_export_whitelist(self) -> frozenset[str]:
        """Parse LIST_OWNER_EMAIL_WHITELIST into a lowercase set."""
        return parse_email_allowlist(self.LIST_OWNER_EMAIL_WHITELIST)

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets


settings = Settings()
