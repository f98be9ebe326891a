"""Configuration management."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (``JOURNAL_*``)."""
    
    model_config = SettingsConfigDict(
        env_prefix="JOURNAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Data storage
    data_dir: Path = Field(default=Path("data"))
    database_name: str = "journal.json"
    
    # Web server
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False
    
    log_level: str = "INFO"
    
    # Accounts
    min_password_length: int = Field(default=6, ge=1)
    
    # Default unlock times (HH:MM, 24h)
    morning_unlock: str = "09:00"
    afternoon_unlock: str = "18:00"
    evening_unlock: str = "21:00"
    
    @property
    def database_path(self) -> Path:
        """Path to the TinyDB file."""
        return self.data_dir / self.database_name


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
