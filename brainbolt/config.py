"""
Application configuration module.

Settings are read from environment variables (and a ``.env`` file when
present). An optional YAML or JSON file named by ``CONFIG_PATH`` provides
base values; environment variables always win over the file.
"""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from brainbolt.common.exceptions import ConfigurationError
from brainbolt.common.logger import app_logger
from brainbolt.quiz.adaptive import DifficultyBounds

logger = app_logger.getChild("config")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./brainbolt.db"
    SQL_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_CREATE_SCHEMA: bool = True

    # Cache settings
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_USE_REDIS: bool = False
    CACHE_KEY_PREFIX: str = "bb:"
    CACHE_MEMORY_MAX_SIZE: int = 10000

    # Quiz engine settings
    SESSION_TTL_SECONDS: int = Field(default=1800, gt=0)
    DIFFICULTY_MIN: int = Field(default=1, ge=1, le=10)
    DIFFICULTY_MAX: int = Field(default=10, ge=1, le=10)
    DEFAULT_DIFFICULTY: int = 3

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None

    # API settings
    PROJECT_NAME: str = "BrainBolt Quiz API"
    CORS_ORIGIN: str = "http://localhost:3000"
    HOST: str = "0.0.0.0"
    PORT: int = Field(default=4000, gt=0)

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings,
                                   dotenv_settings, file_secret_settings):
        # File values arrive as init kwargs and rank below the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def check_difficulty_bounds(self) -> "Settings":
        if self.DIFFICULTY_MIN > self.DIFFICULTY_MAX:
            raise ValueError(
                f"DIFFICULTY_MIN ({self.DIFFICULTY_MIN}) must not exceed DIFFICULTY_MAX ({self.DIFFICULTY_MAX})"
            )
        if not self.DIFFICULTY_MIN <= self.DEFAULT_DIFFICULTY <= self.DIFFICULTY_MAX:
            raise ValueError(
                f"DEFAULT_DIFFICULTY ({self.DEFAULT_DIFFICULTY}) must lie within "
                f"[{self.DIFFICULTY_MIN}, {self.DIFFICULTY_MAX}]"
            )
        return self

    @property
    def difficulty_bounds(self) -> DifficultyBounds:
        return DifficultyBounds(self.DIFFICULTY_MIN, self.DIFFICULTY_MAX)


def _load_file(path: str) -> Dict[str, Any]:
    """
    Load base configuration values from a YAML or JSON file.

    Args:
        path: Path to the config file

    Returns:
        Mapping of setting names to values, empty if the file is unusable
    """
    file_path = Path(path)
    if not file_path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    with open(file_path, "r") as f:
        if file_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        elif file_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            logger.warning(f"Unsupported config file format: {file_path.suffix}")
            return {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {file_path} must contain a mapping")
    return data


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> Settings:
    """
    Build a ``Settings`` instance.

    Args:
        config_path: Optional YAML/JSON file with base values
        **overrides: Explicit values, ranked like file values

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If any value or combination of values is invalid
    """
    values: Dict[str, Any] = {}
    if config_path:
        values.update(_load_file(config_path))
    values.update(overrides)

    try:
        return Settings(**values)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(first.get("msg", str(e)), config_key=key) from e


@lru_cache()
def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    return load_settings(os.environ.get("CONFIG_PATH"))

