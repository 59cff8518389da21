# access_console/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Local state database ──────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./access_console.db"

    # ── Network ───────────────────────────────────────────────────────────
    CONSOLE_HOST: str = "0.0.0.0"
    CONSOLE_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to require X-API-Key on console endpoints

    # ── Access-control backend ────────────────────────────────────────────
    BACKEND_API_URL: str = "http://localhost:5000/api"
    BACKEND_TIMEOUT_SECONDS: Optional[float] = None   # None = wait indefinitely, no retries

    @property
    def BACKEND_ROOT_URL(self) -> str:
        """Server root used for the connectivity probe (API URL without its /api suffix)."""
        url = self.BACKEND_API_URL.rstrip("/")
        if url.endswith("/api"):
            url = url[: -len("/api")]
        return url + "/"

    # ── Reconciliation ────────────────────────────────────────────────────
    HISTORY_LIMIT: int = 300        # Recent log window, newest first by logDate

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None   # Default: logs/ at the project root
    LOG_FILE: str = "access.log"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
