"""Application configuration.

Environment variables override all defaults. A `.env` file next to the backend
directory is loaded for local development.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmadist.db")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Notifications auto-dismiss after this many seconds
    NOTIFICATION_TIMEOUT_SECONDS: float = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "5"))

    # Leaving the bill screen while editing an old bill drops the edit session,
    # the same way purchase editing behaves.
    AUTO_CANCEL_BILL_EDIT: bool = _env_bool("AUTO_CANCEL_BILL_EDIT", True)

    # First-run demo data (catalog seed, demo store, demo supplier)
    SEED_DEMO_DATA: bool = _env_bool("SEED_DEMO_DATA", True)

    # Header carrying the account id, set by the upstream auth gateway
    ACCOUNT_HEADER: str = os.getenv("ACCOUNT_HEADER", "X-Account-ID")


settings = Settings()
