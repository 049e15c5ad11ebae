from __future__ import annotations

import pytest

from afy_api.shared.config import (
    DEFAULT_CORS_ORIGINS,
    ConfigurationError,
    get_settings,
    validate_settings,
)

from conftest import ACCESS_SECRET, make_settings


OPTIONAL_VARS = (
    "APP_ENV",
    "PORT",
    "LOG_LEVEL",
    "CORS_ALLOWED_ORIGINS",
    "SUPABASE_TIMEOUT_SECONDS",
    "SUPABASE_MAX_RETRIES",
    "JWT_ACCESS_TTL_MINUTES",
    "JWT_REFRESH_TTL_DAYS",
    "AUTH_TOKEN_SCHEME",
    "AUTH_STRICT_PROVIDER_CHECK",
    "SIGNUP_MODE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in OPTIONAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
    monkeypatch.setenv("JWT_SECRET", "access")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "refresh")
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/afy")
    return monkeypatch


def test_defaults(clean_env):
    settings = get_settings()

    assert settings.app_env == "development"
    assert settings.is_development is True
    assert settings.port == 3001
    assert settings.cors_allowed_origins == DEFAULT_CORS_ORIGINS
    assert settings.jwt_access_ttl_minutes == 60
    assert settings.jwt_refresh_ttl_days == 7
    assert settings.auth_token_scheme == "session"
    assert settings.auth_strict_provider_check is False
    assert settings.signup_mode == "admin"
    validate_settings(settings)


def test_environment_overrides(clean_env):
    clean_env.setenv("APP_ENV", "Production")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("CORS_ALLOWED_ORIGINS", "https://a.example, https://b.example,")
    clean_env.setenv("AUTH_TOKEN_SCHEME", "EMBEDDED")
    clean_env.setenv("AUTH_STRICT_PROVIDER_CHECK", "true")
    clean_env.setenv("SIGNUP_MODE", "self_serve")

    settings = get_settings()

    assert settings.is_development is False
    assert settings.port == 8080
    assert settings.cors_allowed_origins == ("https://a.example", "https://b.example")
    assert settings.auth_token_scheme == "embedded"
    assert settings.auth_strict_provider_check is True
    assert settings.signup_mode == "self_serve"
    validate_settings(settings)


def test_missing_required_values_are_listed():
    settings = make_settings(jwt_secret="", database_url="")
    with pytest.raises(ConfigurationError, match="JWT_SECRET, DATABASE_URL"):
        validate_settings(settings)


def test_refresh_secret_required_only_for_session_scheme():
    with pytest.raises(ConfigurationError, match="JWT_REFRESH_SECRET"):
        validate_settings(make_settings(jwt_refresh_secret=""))
    validate_settings(make_settings(jwt_refresh_secret="", auth_token_scheme="embedded"))


def test_refresh_secret_must_differ_from_access_secret():
    with pytest.raises(ConfigurationError, match="must differ"):
        validate_settings(make_settings(jwt_refresh_secret=ACCESS_SECRET))


def test_unknown_token_scheme_is_rejected():
    with pytest.raises(ConfigurationError, match="AUTH_TOKEN_SCHEME"):
        validate_settings(make_settings(auth_token_scheme="opaque"))


def test_unknown_signup_mode_is_rejected():
    with pytest.raises(ConfigurationError, match="SIGNUP_MODE"):
        validate_settings(make_settings(signup_mode="invite"))


def test_strict_check_requires_embedded_scheme():
    with pytest.raises(ConfigurationError, match="AUTH_STRICT_PROVIDER_CHECK"):
        validate_settings(make_settings(auth_strict_provider_check=True))
    validate_settings(make_settings(auth_strict_provider_check=True, auth_token_scheme="embedded"))
