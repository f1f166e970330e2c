from pathlib import Path
from typing import Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SNAPSHOT_BACKENDS = ("memory", "file", "redis")
LOG_FORMATS = ("colored", "json", "plain")


class Settings(BaseSettings):
    """
    Console core configuration loaded from environment variables and `.env`.
    """

    PROJECT_NAME: str = "MediCore Admin Core"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field("production", description="Runtime environment name")

    # Remote API
    API_BASE_URL: str = Field(
        "https://medicore-backend-sv2c.onrender.com/api/v1",
        description="Base URL of the MediCore REST API",
    )
    API_TIMEOUT: float = Field(30.0, description="Request timeout in seconds")
    API_USER_AGENT: str = Field("MediCore-Admin-Core/0.1", description="User-Agent sent to the API")

    # Routing
    LOGIN_PATH: str = Field("/login", description="Login entry point used for redirects")
    HOME_PATH: str = Field("/", description="Landing route after login")

    # Durable snapshot store
    SNAPSHOT_BACKEND: str = Field("file", description="memory, file or redis")
    SNAPSHOT_DIR: Path = Field(Path(".medicore"), description="Directory for file snapshots")
    REDIS_URL: str = Field("redis://localhost:6379/0", description="Redis URL for the redis backend")
    REDIS_KEY_PREFIX: str = Field("medicore:snapshot:", description="Key prefix for redis snapshots")

    # Notices
    NOTICE_AUTO_CLOSE_SECONDS: float = Field(3.0, description="Seconds before a notice auto-closes")

    # Behaviour
    DEMO_MODE: bool = Field(True, description="Disable destructive actions such as message delete")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="colored, json or plain")
    LOG_FILE: str | None = Field(None, description="Optional JSON log file")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must be an http(s) URL")
        return value.rstrip("/")

    @field_validator("SNAPSHOT_BACKEND")
    @classmethod
    def validate_snapshot_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in SNAPSHOT_BACKENDS:
            raise ValueError(f"SNAPSHOT_BACKEND must be one of {SNAPSHOT_BACKENDS}")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {LOG_FORMATS}")
        return v

    @field_validator("LOGIN_PATH", "HOME_PATH")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("Route paths must start with '/'")
        return v

    @computed_field
    @property
    def is_test(self) -> bool:
        return self.ENVIRONMENT == "test"


# Settings singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return the cached settings instance.
    Avoids parsing the environment more than once per process.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings (used by tests after changing the environment)."""
    global _settings_instance
    _settings_instance = None
