from __future__ import annotations

from functools import lru_cache
import logging

from fastapi import Depends, Header, HTTPException, Request

from afy_api.application.dto.auth import AuthenticatedIdentity, AuthOptions, SessionClaims, TokenDomain
from afy_api.application.ports.identity_provider_port import IdentityProviderPort
from afy_api.application.ports.token_port import TokenPort
from afy_api.application.ports.users_port import UsersPort
from afy_api.application.use_cases.get_me import GetMeUseCase
from afy_api.application.use_cases.login_supabase import LoginSupabaseUseCase
from afy_api.application.use_cases.logout_session import LogoutSessionUseCase
from afy_api.application.use_cases.refresh_session import RefreshSessionUseCase
from afy_api.application.use_cases.signup_user import SignupUserUseCase
from afy_api.domain.exceptions import InvalidCredentialError
from afy_api.infrastructure.clients.supabase_auth_client import (
    SupabaseAuthClient,
    SupabaseAuthClientSettings,
)
from afy_api.infrastructure.db.engine import get_engine
from afy_api.infrastructure.db.repositories.users_repository import SqlUsersRepository
from afy_api.infrastructure.security.token_service import JwtTokenService
from afy_api.shared.config import get_settings


logger = logging.getLogger(__name__)

NO_HEADER_MESSAGE = "No authorization header provided"
INVALID_FORMAT_MESSAGE = "Invalid authorization format. Use: Bearer <token>"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"
REVOKED_MESSAGE = "Session expired or revoked"


def _get_db_engine():
    settings = get_settings()
    if not settings.database_url:
        raise HTTPException(status_code=500, detail="DATABASE_URL is required.")
    return get_engine(settings.database_url)


@lru_cache(maxsize=1)
def _get_token_service() -> JwtTokenService:
    settings = get_settings()
    if not settings.jwt_secret:
        raise HTTPException(status_code=500, detail="JWT_SECRET is required.")
    refresh_secret = settings.jwt_refresh_secret if settings.auth_token_scheme == "session" else None
    return JwtTokenService(
        access_secret=settings.jwt_secret,
        refresh_secret=refresh_secret,
        access_ttl_minutes=settings.jwt_access_ttl_minutes,
        refresh_ttl_days=settings.jwt_refresh_ttl_days,
    )


@lru_cache(maxsize=1)
def _get_supabase_auth_client() -> SupabaseAuthClient:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise HTTPException(
            status_code=500,
            detail="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required.",
        )
    return SupabaseAuthClient(
        SupabaseAuthClientSettings(
            base_url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
            timeout_seconds=settings.supabase_timeout_seconds,
            max_retries=settings.supabase_max_retries,
        )
    )


@lru_cache(maxsize=1)
def _get_auth_options() -> AuthOptions:
    settings = get_settings()
    return AuthOptions(
        token_scheme=settings.auth_token_scheme,
        strict_provider_check=settings.auth_strict_provider_check,
        signup_mode=settings.signup_mode,
    )


def shutdown() -> None:
    """Release process-level clients built by this module."""
    if _get_supabase_auth_client.cache_info().currsize:
        _get_supabase_auth_client().close()
    _get_supabase_auth_client.cache_clear()
    _get_token_service.cache_clear()
    _get_auth_options.cache_clear()


def get_token_port() -> TokenPort:
    return _get_token_service()


def get_identity_provider() -> IdentityProviderPort:
    return _get_supabase_auth_client()


def get_users_port() -> UsersPort:
    return SqlUsersRepository(_get_db_engine())


def get_auth_options() -> AuthOptions:
    return _get_auth_options()


def get_login_supabase_use_case(
    users_port: UsersPort = Depends(get_users_port),
    identity_provider: IdentityProviderPort = Depends(get_identity_provider),
    token_port: TokenPort = Depends(get_token_port),
    options: AuthOptions = Depends(get_auth_options),
) -> LoginSupabaseUseCase:
    return LoginSupabaseUseCase(
        users_port=users_port,
        identity_provider=identity_provider,
        token_port=token_port,
        token_scheme=options.token_scheme,
    )


def get_signup_user_use_case(
    users_port: UsersPort = Depends(get_users_port),
    identity_provider: IdentityProviderPort = Depends(get_identity_provider),
    token_port: TokenPort = Depends(get_token_port),
    options: AuthOptions = Depends(get_auth_options),
) -> SignupUserUseCase:
    return SignupUserUseCase(
        users_port=users_port,
        identity_provider=identity_provider,
        token_port=token_port,
        token_scheme=options.token_scheme,
        signup_mode=options.signup_mode,
    )


def get_refresh_session_use_case(
    users_port: UsersPort = Depends(get_users_port),
    token_port: TokenPort = Depends(get_token_port),
    options: AuthOptions = Depends(get_auth_options),
) -> RefreshSessionUseCase:
    return RefreshSessionUseCase(
        users_port=users_port,
        token_port=token_port,
        token_scheme=options.token_scheme,
    )


def get_logout_session_use_case() -> LogoutSessionUseCase:
    return LogoutSessionUseCase()


def get_get_me_use_case(users_port: UsersPort = Depends(get_users_port)) -> GetMeUseCase:
    return GetMeUseCase(users_port=users_port)


def _bearer_token(authorization: str | None) -> str:
    if authorization is None:
        raise HTTPException(status_code=401, detail=NO_HEADER_MESSAGE)
    parts = authorization.split()
    if len(parts) != 2 or parts[0] != "Bearer":
        raise HTTPException(status_code=401, detail=INVALID_FORMAT_MESSAGE)
    return parts[1]


def _matches_scheme(claims: SessionClaims, token_scheme: str) -> bool:
    if token_scheme == "embedded":
        return bool(claims.supabase_token) and claims.session_id is None
    return bool(claims.session_id) and claims.supabase_token is None


def resolve_identity(
    *,
    authorization: str | None,
    token_port: TokenPort,
    identity_provider: IdentityProviderPort,
    options: AuthOptions,
) -> AuthenticatedIdentity:
    token = _bearer_token(authorization)

    try:
        claims = token_port.verify(token, TokenDomain.ACCESS)
    except InvalidCredentialError as exc:
        raise HTTPException(status_code=401, detail=INVALID_TOKEN_MESSAGE) from exc

    if not _matches_scheme(claims, options.token_scheme):
        logger.info(
            "auth: token_scheme_mismatch user_id=%s expected=%s",
            claims.user_id,
            options.token_scheme,
        )
        raise HTTPException(status_code=401, detail=INVALID_TOKEN_MESSAGE)

    # Strict mode re-checks the embedded provider token on every request.
    if options.strict_provider_check and options.token_scheme == "embedded":
        verified = identity_provider.verify_external_token(claims.supabase_token or "")
        if verified is None or verified.id != claims.supabase_id:
            logger.info(
                "auth: provider_recheck_failed user_id=%s supabase_id=%s",
                claims.user_id,
                claims.supabase_id,
            )
            raise HTTPException(status_code=401, detail=REVOKED_MESSAGE)

    return AuthenticatedIdentity(
        user_id=claims.user_id,
        email=claims.email,
        supabase_id=claims.supabase_id,
        session_id=claims.session_id,
    )


def get_current_identity(
    request: Request,
    authorization: str | None = Header(default=None),
    token_port: TokenPort = Depends(get_token_port),
    identity_provider: IdentityProviderPort = Depends(get_identity_provider),
    options: AuthOptions = Depends(get_auth_options),
) -> AuthenticatedIdentity:
    identity = resolve_identity(
        authorization=authorization,
        token_port=token_port,
        identity_provider=identity_provider,
        options=options,
    )
    request.state.identity = identity
    return identity


def get_optional_identity(
    request: Request,
    authorization: str | None = Header(default=None),
    token_port: TokenPort = Depends(get_token_port),
    identity_provider: IdentityProviderPort = Depends(get_identity_provider),
    options: AuthOptions = Depends(get_auth_options),
) -> AuthenticatedIdentity | None:
    if authorization is None:
        return None
    try:
        identity = resolve_identity(
            authorization=authorization,
            token_port=token_port,
            identity_provider=identity_provider,
            options=options,
        )
    except HTTPException:
        return None
    request.state.identity = identity
    return identity
