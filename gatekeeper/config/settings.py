"""Environment-backed application settings with sane defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "supersecret"

DEFAULTS: dict[str, str] = {
    "APP_ENV": "development",
    "PORT": "3001",
    "DATABASE_URL": "sqlite+pysqlite:///auth-app.sqlite",
    "JWT_SECRET": DEFAULT_JWT_SECRET,
    "OTP_ISSUER_NAME": "AuthApp",
    "ALLOWED_ORIGINS": "http://localhost:5173",
    "RATE_LIMIT_REGISTER_MAX": "5",
    "RATE_LIMIT_LOGIN_MAX": "10",
    "RATE_LIMIT_WINDOW_MS": "60000",
    "TOTP_REPLAY_PROTECTION": "false",
    "LOG_LEVEL": "INFO",
}


def _read_env_var(name: str, env: Mapping[str, str | None]) -> str:
    value = env.get(name)
    if value is None or str(value).strip() == "":
        return DEFAULTS[name]
    return str(value).strip()


def _read_positive_int(name: str, env: Mapping[str, str | None]) -> int:
    raw = _read_env_var(name, env)
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid integer for environment variable {name}: {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"Environment variable {name} must be positive, got {value}")
    return value


def _read_bool(name: str, env: Mapping[str, str | None]) -> bool:
    return _read_env_var(name, env).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    app_env: str
    port: int
    database_url: str
    jwt_secret: str
    otp_issuer_name: str
    allowed_origins: tuple[str, ...]
    rate_limit_register_max: int
    rate_limit_login_max: int
    rate_limit_window_ms: int
    totp_replay_protection: bool
    log_level: str

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.rate_limit_window_ms / 1000.0


def load_settings(env: Mapping[str, str | None] | None = None) -> Settings:
    """Load environment variables into a Settings object, falling back to defaults."""
    source_env = os.environ if env is None else env

    origins = tuple(
        origin.strip() for origin in _read_env_var("ALLOWED_ORIGINS", source_env).split(",") if origin.strip()
    )

    settings = Settings(
        app_env=_read_env_var("APP_ENV", source_env),
        port=_read_positive_int("PORT", source_env),
        database_url=_read_env_var("DATABASE_URL", source_env),
        jwt_secret=_read_env_var("JWT_SECRET", source_env),
        otp_issuer_name=_read_env_var("OTP_ISSUER_NAME", source_env),
        allowed_origins=origins,
        rate_limit_register_max=_read_positive_int("RATE_LIMIT_REGISTER_MAX", source_env),
        rate_limit_login_max=_read_positive_int("RATE_LIMIT_LOGIN_MAX", source_env),
        rate_limit_window_ms=_read_positive_int("RATE_LIMIT_WINDOW_MS", source_env),
        totp_replay_protection=_read_bool("TOTP_REPLAY_PROTECTION", source_env),
        log_level=_read_env_var("LOG_LEVEL", source_env).upper(),
    )

    if settings.jwt_secret == DEFAULT_JWT_SECRET and settings.app_env not in ("development", "test"):
        logger.warning("JWT_SECRET is using the built-in default in env=%s", settings.app_env)

    logger.info("Loaded application settings for env=%s", settings.app_env)
    return settings
