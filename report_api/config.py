"""
Configuration management for the reporting API.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv(os.path.join(Path(__file__).parent.parent, ".env"))


def _split(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """API server configuration."""

    # Server
    API_TITLE: str = "Grupo 2025 Reporting API"
    API_DESCRIPTION: str = "Read-only API over balances, campaigns, leases, clients, PR and staff"
    API_VERSION: str = "1.0.0"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "10000"))
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "15"))

    # CORS
    CORS_ORIGINS: List[str] = _split(os.getenv("CORS_ORIGINS", "*"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "verify-full")
    DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
    DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))
    DB_ACQUIRE_TIMEOUT: float = float(os.getenv("DB_ACQUIRE_TIMEOUT", "10"))
    DB_STATEMENT_TIMEOUT_MS: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "10000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
