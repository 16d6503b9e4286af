"""Application configuration using Pydantic Settings."""

import logging
import warnings
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    app_name: str = "Nota"
    debug: bool = True
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./nota.db"
    db_echo: bool = False

    # Local files (internal backup)
    data_dir: Path = Path(".")
    internal_backup_name: str = "backup_internal.json"

    # Trash retention
    trash_retention_days: int = 30
    cleanup_hour: int = 3
    cleanup_retry_base_seconds: int = 60
    cleanup_max_retries: int = 5

    # Auto-save
    autosave_debounce_seconds: float = 0.8
    autosave_interval_seconds: float = 60.0

    # Preferences
    default_text_size: int = 2

    # CORS
    cors_origins: list[str] = ["*"]

    def __init__(self, **kwargs):
        """Initialize settings and validate production configuration."""
        super().__init__(**kwargs)
        self._validate_production_settings()

    @property
    def internal_backup_path(self) -> Path:
        return self.data_dir / self.internal_backup_name

    def _validate_production_settings(self) -> None:
        """Warn about permissive settings outside debug mode."""
        if not self.debug and "*" in self.cors_origins:
            warnings.warn(
                "CORS is configured to allow all origins (*). Restrict this in production!",
                UserWarning,
                stacklevel=2,
            )
            logger.warning(
                "CORS is configured to allow all origins (*). Restrict this in production!"
            )


settings = Settings()
