from __future__ import annotations

import logging

from afy_api.application.dto.auth import (
    AuthTokensOutput,
    RefreshSessionInput,
    TokenDomain,
    TokenScheme,
)
from afy_api.application.ports.token_port import TokenPort
from afy_api.application.ports.users_port import UsersPort
from afy_api.domain.exceptions import (
    InvalidCredentialError,
    RefreshNotSupportedError,
    RefreshSessionInvalidError,
)

from .auth_common import issue_tokens


logger = logging.getLogger(__name__)


class RefreshSessionUseCase:
    def __init__(self, *, users_port: UsersPort, token_port: TokenPort, token_scheme: TokenScheme):
        self._users_port = users_port
        self._token_port = token_port
        self._token_scheme = token_scheme

    def execute(self, command: RefreshSessionInput) -> AuthTokensOutput:
        if self._token_scheme != "session":
            raise RefreshNotSupportedError("Refresh tokens are not issued by the embedded token scheme.")

        token = command.refresh_token.strip()
        if not token:
            raise RefreshSessionInvalidError("Missing refresh token.")

        try:
            claims = self._token_port.verify(token, TokenDomain.REFRESH)
        except InvalidCredentialError as exc:
            raise RefreshSessionInvalidError("Invalid or expired refresh token") from exc

        if not claims.session_id:
            raise RefreshSessionInvalidError("Invalid or expired refresh token")

        # Identity comes from storage, never from the old credential's email.
        user = self._users_port.get_user_by_id(user_id=claims.user_id)
        if user is None:
            raise RefreshSessionInvalidError("User not found")

        # No provider round trip on refresh, so the provider id is unknown here.
        logger.info(
            "refresh_session: reissued session_id=%s user_id=%s supabase_id=unknown",
            claims.session_id,
            user.id,
        )
        return issue_tokens(
            user=user,
            supabase_id="",
            token_port=self._token_port,
            token_scheme=self._token_scheme,
            session_id=claims.session_id,
        )
