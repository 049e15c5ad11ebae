from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Any

import jwt

from afy_api.application.dto.auth import IssuedToken, SessionClaims, TokenDomain
from afy_api.application.ports.token_port import TokenPort
from afy_api.domain.exceptions import InvalidCredentialError


logger = logging.getLogger(__name__)

ISSUER = "afy-backend"
AUDIENCE = "afy-client"
ALGORITHM = "HS256"

INVALID_TOKEN_MESSAGE = "Invalid or expired token."


class TokenConfigurationError(RuntimeError):
    pass


class JwtTokenService(TokenPort):
    """HS256 codec with one secret and one TTL per token domain.

    Access and refresh credentials are isolated twice: each domain signs with
    its own secret, and the ``type`` claim must name the domain being verified.
    """

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str | None,
        access_ttl_minutes: int = 60,
        refresh_ttl_days: int = 7,
    ):
        if not access_secret:
            raise TokenConfigurationError("JWT_SECRET is required.")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret or None
        self._access_ttl = timedelta(minutes=access_ttl_minutes)
        self._refresh_ttl = timedelta(days=refresh_ttl_days)

    @property
    def access_ttl_seconds(self) -> int:
        return int(self._access_ttl.total_seconds())

    def mint(
        self,
        claims: SessionClaims,
        domain: TokenDomain,
        *,
        now: datetime | None = None,
    ) -> IssuedToken:
        secret = self._secret_for(domain)
        if secret is None:
            raise TokenConfigurationError("JWT_REFRESH_SECRET is required to mint refresh tokens.")

        issued_at = now or utcnow()
        ttl = self._ttl_for(domain)
        expires_at = issued_at + ttl
        payload: dict[str, Any] = {
            "userId": claims.user_id,
            "email": claims.email,
            "supabaseId": claims.supabase_id,
            "type": domain.value,
            "iss": ISSUER,
            "aud": AUDIENCE,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        if claims.session_id is not None:
            payload["sessionId"] = claims.session_id
        if claims.supabase_token is not None:
            payload["supabaseToken"] = claims.supabase_token

        token = jwt.encode(payload, secret, algorithm=ALGORITHM)
        return IssuedToken(token=token, expires_at=expires_at, expires_in=int(ttl.total_seconds()))

    def verify(self, token: str, domain: TokenDomain) -> SessionClaims:
        secret = self._secret_for(domain)
        if secret is None:
            logger.warning("token_service: domain_disabled domain=%s", domain.value)
            raise InvalidCredentialError(INVALID_TOKEN_MESSAGE)

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                issuer=ISSUER,
                audience=AUDIENCE,
                options={"require": ["exp", "iat", "iss", "aud"]},
            )
        except jwt.ExpiredSignatureError as exc:
            logger.info("token_service: token_expired domain=%s", domain.value)
            raise InvalidCredentialError(INVALID_TOKEN_MESSAGE) from exc
        except jwt.PyJWTError as exc:
            logger.info("token_service: token_invalid domain=%s error=%s", domain.value, exc)
            raise InvalidCredentialError(INVALID_TOKEN_MESSAGE) from exc

        if payload.get("type") != domain.value:
            logger.info(
                "token_service: token_wrong_domain expected=%s got=%s",
                domain.value,
                payload.get("type"),
            )
            raise InvalidCredentialError(INVALID_TOKEN_MESSAGE)

        user_id = payload.get("userId")
        email = payload.get("email")
        supabase_id = payload.get("supabaseId", "")
        if not user_id or not isinstance(user_id, str):
            raise InvalidCredentialError(INVALID_TOKEN_MESSAGE)
        if not isinstance(email, str) or not isinstance(supabase_id, str):
            raise InvalidCredentialError(INVALID_TOKEN_MESSAGE)

        return SessionClaims(
            user_id=user_id,
            email=email,
            supabase_id=supabase_id,
            session_id=_optional_str(payload.get("sessionId")),
            supabase_token=_optional_str(payload.get("supabaseToken")),
        )

    def decode_unverified(self, token: str) -> dict[str, Any] | None:
        """Payload without any check. Diagnostics only, never for authorization."""
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError:
            return None

    def _secret_for(self, domain: TokenDomain) -> str | None:
        if domain is TokenDomain.ACCESS:
            return self._access_secret
        return self._refresh_secret

    def _ttl_for(self, domain: TokenDomain) -> timedelta:
        if domain is TokenDomain.ACCESS:
            return self._access_ttl
        return self._refresh_ttl


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
