"""
Reflect Application Configuration
=================================

PURPOSE:
    Pydantic-Settings based configuration for the Reflect retrospective backend.
    All settings can be overridden via environment variables (REFLECT_ prefix).

    DATABASE_URL is read unprefixed by reflect.core.database so the same
    variable drives both the app and the Alembic CLI.
"""

import logging
from typing import List, Literal

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    app_name: str = "Reflect"
    debug: bool = False

    # Storage
    data_directory: str = "/data"

    # Logging
    log_directory: str = "logs"
    log_file: str = "reflect.jsonl"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Identity cache: seconds a resolved X-User-ID stays trusted
    auth_cache_ttl: int = 300

    # CORS
    cors_origins: List[str] = ["http://localhost:4200", "http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_prefix = "REFLECT_"


settings = Settings()
