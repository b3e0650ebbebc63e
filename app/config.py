from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

PLACEHOLDER_KEY_MARKERS = ("your", "changeme", "placeholder", "replace-me", "xxx")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Thesis Signal"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_format: str = "text"

    # Providers
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    extraction_temperature: float = 0.1
    primary_excerpt_chars: int = 12_000
    secondary_excerpt_chars: int = 15_000

    # Fetching
    fetch_timeout_seconds: float = 10.0
    fetch_retry_delay_seconds: float = 1.0
    fetch_max_retries: int = 1
    fetch_user_agent: str = "Mozilla/5.0 (compatible; ThesisSignal/0.1; +https://thesis-signal.local)"
    fetch_max_bytes_warning: int = 5 * 1024 * 1024
    min_content_chars: int = 100

    # Security
    cors_origins: list[str] = []  # Empty by default for security

    # Sentry
    sentry_dsn: str | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Metrics
    metrics_backend: str = "stdout"
    metrics_namespace: str = "enrichment"
    metrics_disable: bool = False
    metrics_statsd_host: str = "127.0.0.1"
    metrics_statsd_port: int = 8125

    @property
    def live_extraction_enabled(self) -> bool:
        """True when the primary provider key looks like a real credential."""
        return is_live_credential(self.openai_api_key)

    model_config = ConfigDict(env_file=".env", case_sensitive=False)


def is_live_credential(value: str | None) -> bool:
    """Reject empty keys and the placeholders shipped in example env files."""
    if not value or not value.strip():
        return False
    lowered = value.strip().lower()
    return not any(marker in lowered for marker in PLACEHOLDER_KEY_MARKERS)


settings = Settings()
