"""
Configuration for the ledger service.

``Settings`` reads every value from an environment variable and falls
back to a default suitable for local development.  ``DATABASE_PATH``
names the SQLite file holding the counter and the product records.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Bakery Ledger")
    api_version: str = os.getenv("API_VERSION", "0.1.0")
    database_path: str = os.getenv("DATABASE_PATH", "ledger.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8085"))
    cors_origins: List[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ORIGINS", "*"))
    )


settings = Settings()
