"""
Configuration helpers for the users backend.

Routers/services read the Settings object instead of touching os.environ
directly, so tests can point the app at a temporary users file.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEV_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    users_file: Path
    strict_reads: bool
    host: str
    port: int
    log_level: str
    cors_origins: tuple[str, ...]


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    origins = {o.strip().rstrip("/") for o in os.getenv("CORS_ORIGINS", "").split(",")}
    if app_env != "prod":
        origins.update(DEV_ORIGINS)

    return Settings(
        app_env=app_env,
        users_file=Path(os.getenv("USERS_FILE") or "users.json"),
        strict_reads=_bool(os.getenv("USERS_STRICT_READS"), False),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_int(os.getenv("PORT", "3000"), 3000),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=tuple(sorted(o for o in origins if o)),
    )
