"""Configuration management for SheetSync."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

logger = logging.getLogger(__name__)


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


def _parse_error_status_map() -> dict[str, int]:
    """Parse domain error code to HTTP status overrides, e.g. "CIRCULAR_REF=409,SYNTAX=400"."""
    raw = os.getenv("ERROR_STATUS_MAP", "")
    mapping = {}
    for entry in raw.split(","):
        if "=" not in entry:
            continue
        code, status = entry.split("=", 1)
        try:
            mapping[code.strip()] = int(status)
        except ValueError:
            logger.warning(f"Ignoring ERROR_STATUS_MAP entry {entry.strip()!r}: status is not a number")
    return mapping


class Settings(BaseModel):
    """Application settings."""

    # Store backend: 'sqlite' or 'memory'
    store_backend: str = os.getenv("STORE_BACKEND", "sqlite")

    # Database path for the sqlite backend
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/sheetsync.db"))

    # Base URL of a remote store service (used by StoreClient)
    store_url: str = os.getenv("STORE_URL", "http://127.0.0.1:8000")
    store_api_prefix: str = os.getenv("STORE_API_PREFIX", "/api/store")
    http_timeout: Optional[float] = (
        float(os.getenv("HTTP_TIMEOUT")) if os.getenv("HTTP_TIMEOUT") else None
    )

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Domain error code -> HTTP status; unmapped codes are reported as 400
    error_status_map: dict[str, int] = _parse_error_status_map()

    # Minimum grid size for rendered spreadsheets
    min_rows: int = int(os.getenv("MIN_ROWS", "10"))
    min_cols: int = int(os.getenv("MIN_COLS", "10"))


settings = Settings()
