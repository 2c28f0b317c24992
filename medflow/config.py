import logging
import os
import sys
from enum import Enum
from typing import Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-8s] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    LOG_LEVEL: int = logging.INFO
    LOG_FORMAT: LogFormat = LogFormat.JSON
    DATABASE_URL: str
    UNIT_TEST_DATABASE_URL: str | None = None  # Optional, for unit tests

    # JWT settings (tokens are issued by the dashboard's auth service)
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    AUTH_COOKIE_NAME: str = "auth-token"

    # Comma-separated roles that may read every owner's files
    ELEVATED_ROLES: str = "admin,staff"

    # Object storage
    AWS_S3_BUCKET_NAME: str
    AWS_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str | None = None  # Set for MinIO / localstack
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None

    # Signed URLs and upload retention
    SIGNED_URL_DEFAULT_EXPIRES: int = 3600
    S3_UPDATE_URL_EXPIRES: int = 24 * 60 * 60
    FILE_RETENTION_DAYS: int = 7

    RATE_LIMIT: str = "100/15minutes"

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def parse_log_format(cls, v: str | LogFormat) -> LogFormat:
        if isinstance(v, LogFormat):
            return v
        if isinstance(v, str):
            try:
                return LogFormat(v.lower())
            except ValueError:
                raise ValueError(f"Invalid LOG_FORMAT: {v}")
        raise ValueError(f"LOG_FORMAT must be a string or LogFormat, got {type(v)}")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: Any) -> int:
        if isinstance(v, int):
            return v
        if isinstance(v, str):
            # Accepts 'INFO', 'DEBUG', etc. (case-insensitive)
            level = logging.getLevelName(v.upper())
            if isinstance(level, int):
                return level
            raise ValueError(f"Invalid log level: {v}")
        raise ValueError(f"LOG_LEVEL must be int or str, got {type(v)}")

    def get_elevated_roles(self) -> List[str]:
        """Parse ELEVATED_ROLES into a list of lowercase role names."""
        return [
            part.strip().lower()
            for part in self.ELEVATED_ROLES.split(",")
            if part.strip()
        ]

    def get_active_database_url(self) -> str:
        """
        Returns the correct database URL for the current context.
        - If running under pytest (unit test) and UNIT_TEST_DATABASE_URL is set, use it.
        - Otherwise, use DATABASE_URL.
        """
        if os.environ.get("PYTEST_CURRENT_TEST") and self.UNIT_TEST_DATABASE_URL:
            return self.UNIT_TEST_DATABASE_URL
        return self.DATABASE_URL

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="forbid"
    )


def get_settings() -> Settings:
    """
    Returns a fresh Settings instance, reading environment variables at call time.
    Tests can patch os.environ or use monkeypatch before calling get_settings().
    """
    return Settings()  # type: ignore[call-arg]
