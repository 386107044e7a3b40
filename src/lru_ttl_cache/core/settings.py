from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from enum import Enum

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class CacheSettings(BaseModel):
    ttl_ms: int = Field(default=60_000, gt=0, description="Milliseconds an entry may stay unaccessed")
    item_limit: int = Field(default=1000, gt=0, description="Maximum number of live entries")
    background_sweep: bool = Field(default=True, description="Run the TTL sweeper thread")

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

    cache: CacheSettings = Field(default_factory=CacheSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process settings, read from the environment on first use."""
    return Settings()
