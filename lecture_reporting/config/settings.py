"""
lecture_reporting/config/settings.py
Centralized configuration loaded from environment variables.

All settings are read once at import time. A .env file in the project root
is honoured but never overrides variables already set in the environment.
"""
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=ENV_FILE)


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_list_env(key: str, default: str = "") -> List[str]:
    """Comma separated environment variable as a list of non-empty items."""
    return [item.strip() for item in os.getenv(key, default).split(",") if item.strip()]


class Settings:
    """
    Application settings.

    To add a new setting:
    1. Add it here as a class attribute
    2. Load it from an environment variable with a safe default
    3. Read it through the module-level `settings` instance
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./lecture_reporting.db")
    SEED_DEMO_DATA: bool = get_bool_env("SEED_DEMO_DATA", True)

    # Credentials
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # HTTP
    ALLOWED_ORIGINS: List[str] = get_list_env(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
    )
    RATE_LIMIT_ENABLED: bool = get_bool_env("RATE_LIMIT_ENABLED", True)
    AUTH_RATE_LIMIT: str = os.getenv("AUTH_RATE_LIMIT", "20/minute")

    # Workflow policy
    # Off by default: any authenticated role may mark a report reviewed.
    REPORT_FEEDBACK_RESTRICTED: bool = get_bool_env("REPORT_FEEDBACK_RESTRICTED", False)

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def uses_default_secret(self) -> bool:
        return self.JWT_SECRET_KEY == "dev-secret-key-change-in-production"


settings = Settings()
