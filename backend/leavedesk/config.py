"""Application settings and configuration helpers."""
from functools import lru_cache
import logging
import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    database_url: str = Field(
        default="sqlite+aiosqlite:///./leavedesk.db", alias="DATABASE_URL"
    )
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    access_token_expires_minutes: int = Field(
        default=60 * 24, alias="ACCESS_TOKEN_EXPIRES_MINUTES"
    )
    session_cookie_name: str = Field(default="access_token", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")
    session_cookie_samesite: str = Field(default="lax", alias="SESSION_COOKIE_SAMESITE")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"], alias="CORS_ORIGINS"
    )
    allow_self_evaluation: bool = Field(default=False, alias="ALLOW_SELF_EVALUATION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance built from the environment."""

    values: dict[str, object] = {}
    for name, field in Settings.model_fields.items():
        raw = os.getenv(field.alias or name.upper())
        if raw is None:
            continue
        values[name] = _split_origins(raw) if name == "cors_origins" else raw
    return Settings(**values)


def configure_logging(level: str | None = None) -> None:
    """Attach a single stream handler to the ``leavedesk`` logger."""

    logger = logging.getLogger("leavedesk")
    logger.setLevel((level or get_settings().log_level).upper())
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
