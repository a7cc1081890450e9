"""Application settings using Pydantic."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from folio.core.models import Currency

# Default paths
DEFAULT_DATA_DIR = Path.home() / ".folio"


class Settings(BaseSettings):
    """Application settings loaded from FOLIO_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Valuation settings
    currency: Currency = Field(default=Currency.EUR)

    # Data/storage settings
    data_dir: Path = Field(default=DEFAULT_DATA_DIR)
    db_path: Path | None = Field(default=None)  # Defaults to data_dir/folio.db
    holdings_file: Path | None = Field(default=None)  # data_dir/holdings.yaml

    # Logging settings
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=False)
    log_dir: Path | None = Field(default=None)  # Defaults to data_dir/logs
    log_retention_days: int = Field(default=30, ge=1)

    @property
    def database_path(self) -> Path:
        """Get the database file path."""
        if self.db_path:
            return self.db_path
        return self.data_dir / "folio.db"

    @property
    def holdings_path(self) -> Path:
        """Get the holdings file path."""
        if self.holdings_file:
            return self.holdings_file
        return self.data_dir / "holdings.yaml"

    @property
    def logs_path(self) -> Path:
        """Get the logs directory path."""
        if self.log_dir:
            return self.log_dir
        return self.data_dir / "logs"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def setup_logging(settings: Settings | None = None) -> None:
    """Configure loguru for file and console logging.

    Args:
        settings: Optional settings instance. Uses default if not provided.
    """
    import sys

    from loguru import logger

    if settings is None:
        settings = get_settings()

    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )

    if settings.log_to_file:
        log_path = settings.logs_path
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / "folio_{time:YYYY-MM-DD}.log",
            level=settings.log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="00:00",  # Rotate at midnight
            retention=f"{settings.log_retention_days} days",
            compression="gz",
        )

        logger.info(f"Logging to {log_path}")
