from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Upstream services
    session_service_host: str = ""
    chat_completion_service_host: str = ""
    completion_mode: str = "conversation"  # "conversation" or "session"
    upstream_timeout_seconds: float = 5.0

    # Session retries
    session_retries: int = 100
    session_retry_delay: float = 0.001  # seconds, fixed between attempts

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = Field(default=8000, validation_alias=AliasChoices("PORT", "APP_PORT"))

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable

    @property
    def local_base_url(self) -> str:
        return f"http://localhost:{self.app_port}/v1"


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup."""
    errors: list[str] = []

    if not settings.session_service_host:
        errors.append("SESSION_SERVICE_HOST must be set")

    if not settings.chat_completion_service_host:
        errors.append("CHAT_COMPLETION_SERVICE_HOST must be set")

    if settings.completion_mode not in ("conversation", "session"):
        errors.append("COMPLETION_MODE must be 'conversation' or 'session'")

    if settings.session_retries < 0:
        errors.append("SESSION_RETRIES must not be negative")

    if settings.app_env == "production" and settings.app_debug:
        errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
