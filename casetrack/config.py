# casetrack/config.py
from functools import lru_cache
from pathlib import Path
from typing import ClassVar

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    # Required: the app refuses to start without these
    SECRET_KEY: str
    DATABASE_URL: str
    FRONTEND_URL: str
    UPLOAD_DIR: str

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60
    BCRYPT_ROUNDS: int = 10

    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024

    # Sliding-window rate limits, per client address
    AUTH_RATE_LIMIT: int = 5
    API_RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    REQUEST_TIMEOUT_SECONDS: float = 30.0
    DB_POOL_SIZE: int = 10
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)

    @field_validator("SECRET_KEY", "DATABASE_URL", "FRONTEND_URL", "UPLOAD_DIR")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("DATABASE_URL")
    @classmethod
    def _fix_postgres_scheme(cls, value: str) -> str:
        # SQLAlchemy only understands the postgresql:// scheme
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql://", 1)
        return value


@lru_cache()
def get_settings() -> Settings:
    """Settings loaded from the environment, built once per process."""
    return Settings()
