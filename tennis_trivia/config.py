"""
Process-wide configuration.

Settings are read from the environment (and an optional .env file) once,
at first use, and exposed as an immutable value. Services that need signing
secrets or token lifetimes receive the Settings object as an argument.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

# Environments where development defaults are acceptable for secrets
_RELAXED_ENVS = {"development", "test"}

DEFAULT_DATABASE_URL = (
    f"postgresql+asyncpg://{os.getenv('POSTGRES_USER', 'tennis')}:"
    f"{os.getenv('POSTGRES_PASSWORD', 'tennis')}@{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/{os.getenv('POSTGRES_DB', 'tennis_trivia')}"
)


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    env: str
    port: int
    database_url: str
    jwt_access_secret: str
    jwt_refresh_secret: str
    jwt_access_expires_in: str
    jwt_refresh_expires_in: str
    jwt_algorithm: str = "HS256"
    log_level: str = "INFO"
    allowed_origins: Tuple[str, ...] = ("http://localhost:3000",)
    sql_echo: bool = False

    @property
    def is_test(self) -> bool:
        return self.env == "test"


def _require(key: str, env: str, dev_default: str) -> str:
    """Read a required variable, allowing a default only in relaxed environments."""
    value = os.getenv(key)
    if value:
        return value
    if env in _RELAXED_ENVS:
        return dev_default
    raise RuntimeError(f"Missing required environment variable: {key}")


def load_settings() -> Settings:
    """Build a Settings value from the current environment."""
    env = os.getenv("ENV", "development").lower()
    origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
    return Settings(
        env=env,
        port=int(os.getenv("PORT", "3000")),
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        jwt_access_secret=_require("JWT_ACCESS_SECRET", env, "dev-access-secret-change-me"),
        jwt_refresh_secret=_require("JWT_REFRESH_SECRET", env, "dev-refresh-secret-change-me"),
        jwt_access_expires_in=os.getenv("JWT_ACCESS_EXPIRES_IN", "15m"),
        jwt_refresh_expires_in=os.getenv("JWT_REFRESH_EXPIRES_IN", "7d"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        sql_echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the process-wide Settings, loading them on first call.

    Usable directly or as a FastAPI dependency:
        async def route(settings: Settings = Depends(get_settings)):
            ...
    """
    return load_settings()
