from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from afy_api.application.dto.auth import (
    AuthTokensOutput,
    AuthUserOutput,
    SessionClaims,
    TokenDomain,
    TokenScheme,
)
from afy_api.application.ports.token_port import TokenPort
from afy_api.domain.entities.user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_session_id() -> str:
    return str(uuid4())


def build_auth_user_output(user: User) -> AuthUserOutput:
    return AuthUserOutput(id=user.id, email=user.email, name=user.name)


def issue_tokens(
    *,
    user: User,
    supabase_id: str,
    token_port: TokenPort,
    token_scheme: TokenScheme,
    supabase_token: str | None = None,
    session_id: str | None = None,
) -> AuthTokensOutput:
    """Mint the credentials of the active token scheme for ``user``.

    The embedded scheme issues a single access credential carrying the
    provider token. The session scheme issues an access/refresh pair bound to
    ``session_id``, generating a new one when none is given.
    """
    now = utcnow()

    if token_scheme == "embedded":
        if not supabase_token:
            raise ValueError("Embedded token scheme requires a Supabase token.")
        access = token_port.mint(
            SessionClaims(
                user_id=user.id,
                email=user.email,
                supabase_id=supabase_id,
                supabase_token=supabase_token,
            ),
            TokenDomain.ACCESS,
            now=now,
        )
        return AuthTokensOutput(
            user=build_auth_user_output(user),
            access_token=access.token,
            refresh_token=None,
            expires_in=access.expires_in,
            access_expires_at=access.expires_at,
            refresh_expires_at=None,
            session_id=None,
        )

    claims = SessionClaims(
        user_id=user.id,
        email=user.email,
        supabase_id=supabase_id,
        session_id=session_id or generate_session_id(),
    )
    access = token_port.mint(claims, TokenDomain.ACCESS, now=now)
    refresh = token_port.mint(claims, TokenDomain.REFRESH, now=now)
    return AuthTokensOutput(
        user=build_auth_user_output(user),
        access_token=access.token,
        refresh_token=refresh.token,
        expires_in=access.expires_in,
        access_expires_at=access.expires_at,
        refresh_expires_at=refresh.expires_at,
        session_id=claims.session_id,
    )
