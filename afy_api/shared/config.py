from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


# .env.local wins over .env; neither overrides the real environment.
load_dotenv(".env.local")
load_dotenv()


DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "https://www.agentforyou.ca",
    "https://agentforyou.ca",
)

TOKEN_SCHEMES = ("session", "embedded")
SIGNUP_MODES = ("admin", "self_serve")


class ConfigurationError(RuntimeError):
    pass


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: bool = False) -> bool:
    value = _env(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _csv(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = _env(name)
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_env: str
    port: int
    log_level: str
    cors_allowed_origins: tuple[str, ...]
    database_url: str
    supabase_url: str
    supabase_service_role_key: str
    supabase_timeout_seconds: float
    supabase_max_retries: int
    jwt_secret: str
    jwt_refresh_secret: str
    jwt_access_ttl_minutes: int
    jwt_refresh_ttl_days: int
    auth_token_scheme: str
    auth_strict_provider_check: bool
    signup_mode: str

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


def get_settings() -> Settings:
    return Settings(
        app_env=(_env("APP_ENV", "development") or "development").strip().lower(),
        port=int(_env("PORT", "3001")),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").strip().upper(),
        cors_allowed_origins=_csv("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS),
        database_url=_env("DATABASE_URL", ""),
        supabase_url=_env("SUPABASE_URL", ""),
        supabase_service_role_key=_env("SUPABASE_SERVICE_ROLE_KEY", ""),
        supabase_timeout_seconds=float(_env("SUPABASE_TIMEOUT_SECONDS", "10")),
        supabase_max_retries=int(_env("SUPABASE_MAX_RETRIES", "2")),
        jwt_secret=_env("JWT_SECRET", ""),
        jwt_refresh_secret=_env("JWT_REFRESH_SECRET", ""),
        jwt_access_ttl_minutes=int(_env("JWT_ACCESS_TTL_MINUTES", "60")),
        jwt_refresh_ttl_days=int(_env("JWT_REFRESH_TTL_DAYS", "7")),
        auth_token_scheme=(_env("AUTH_TOKEN_SCHEME", "session") or "session").strip().lower(),
        auth_strict_provider_check=_bool("AUTH_STRICT_PROVIDER_CHECK"),
        signup_mode=(_env("SIGNUP_MODE", "admin") or "admin").strip().lower(),
    )


def validate_settings(settings: Settings) -> None:
    """Fail fast on missing or contradictory configuration."""
    required = {
        "SUPABASE_URL": settings.supabase_url,
        "SUPABASE_SERVICE_ROLE_KEY": settings.supabase_service_role_key,
        "JWT_SECRET": settings.jwt_secret,
        "DATABASE_URL": settings.database_url,
    }
    if settings.auth_token_scheme == "session":
        required["JWT_REFRESH_SECRET"] = settings.jwt_refresh_secret

    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}.")

    if settings.auth_token_scheme not in TOKEN_SCHEMES:
        raise ConfigurationError(
            f"AUTH_TOKEN_SCHEME must be one of {', '.join(TOKEN_SCHEMES)}."
        )
    if settings.signup_mode not in SIGNUP_MODES:
        raise ConfigurationError(f"SIGNUP_MODE must be one of {', '.join(SIGNUP_MODES)}.")
    if settings.auth_strict_provider_check and settings.auth_token_scheme != "embedded":
        raise ConfigurationError(
            "AUTH_STRICT_PROVIDER_CHECK requires AUTH_TOKEN_SCHEME=embedded."
        )
    if settings.auth_token_scheme == "session" and settings.jwt_refresh_secret == settings.jwt_secret:
        raise ConfigurationError("JWT_REFRESH_SECRET must differ from JWT_SECRET.")
