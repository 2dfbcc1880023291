"""Application settings loaded from environment variables / .env."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DATA_DIR: Path = BASE_DIR / "data"
    DATABASE_URL: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'lessons.db'}"

    # Frontend origin allowed by CORS
    CORS_ORIGIN: str = "http://localhost:3000"

    # Header carrying the authenticated caller's email (set by the auth proxy)
    AUTH_HEADER: str = "x-user-email"


settings = Settings()
