"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVEL_NAMES = (
    "emergency",
    "alert",
    "critical",
    "error",
    "warning",
    "notice",
    "info",
    "debug",
)

LOG_ENTRY_TYPES = (
    "element_created",
    "element_edited",
    "element_deleted",
    "collection_element_deleted",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "partlog"
    environment: str = "development"  # development, staging, production

    # Database
    database_url: str = "sqlite:///./partlog.db"
    database_echo: bool = False

    # Observability
    log_level: str = "INFO"

    # History (change capture)
    history_save_changed_fields: bool = True
    history_save_changed_data: bool = False
    history_save_removed_data: bool = True

    # Event logger filtering
    event_log_min_level: str = "info"
    event_log_blacklist: list[str] = []
    event_log_whitelist: list[str] = []

    @field_validator("event_log_min_level")
    @classmethod
    def validate_min_level(cls, v: str) -> str:
        """Validate that the minimum level is a known level name.

        Args:
            v: The level name

        Returns:
            The lower-cased level name

        Raises:
            ValueError: If the level is unknown
        """
        level = v.lower()
        if level not in LOG_LEVEL_NAMES:
            raise ValueError(
                f"EVENT_LOG_MIN_LEVEL must be one of: {', '.join(LOG_LEVEL_NAMES)}"
            )
        return level

    @field_validator("event_log_blacklist", "event_log_whitelist")
    @classmethod
    def validate_entry_types(cls, v: list[str]) -> list[str]:
        """Validate that filter lists only name known log entry types."""
        unknown = [t for t in v if t not in LOG_ENTRY_TYPES]
        if unknown:
            raise ValueError(f"Unknown log entry types: {', '.join(unknown)}")
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
