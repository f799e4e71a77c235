"""HOTELFEED — Central Configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── Feed ──
    staff_role: str = "Employee"  # Only rows joined to this role appear in the feed
    source_timeout_seconds: float = 10.0

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    poll_interval_seconds: int = 5

    @property
    def effective_database_url(self) -> str:
        """Return the configured URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        return "sqlite:///./hotelfeed.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
