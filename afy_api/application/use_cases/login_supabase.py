from __future__ import annotations

import logging
from uuid import uuid4

from afy_api.application.dto.auth import AuthTokensOutput, LoginSupabaseInput, TokenScheme
from afy_api.application.ports.identity_provider_port import IdentityProviderPort
from afy_api.application.ports.token_port import TokenPort
from afy_api.application.ports.users_port import UsersPort
from afy_api.domain.exceptions import InvalidExternalTokenError

from .auth_common import issue_tokens, normalize_email, utcnow


logger = logging.getLogger(__name__)


class LoginSupabaseUseCase:
    def __init__(
        self,
        *,
        users_port: UsersPort,
        identity_provider: IdentityProviderPort,
        token_port: TokenPort,
        token_scheme: TokenScheme,
    ):
        self._users_port = users_port
        self._identity_provider = identity_provider
        self._token_port = token_port
        self._token_scheme = token_scheme

    def execute(self, command: LoginSupabaseInput) -> AuthTokensOutput:
        supabase_token = command.supabase_token.strip()
        if not supabase_token:
            raise InvalidExternalTokenError("Missing Supabase token.")

        identity = self._identity_provider.verify_external_token(supabase_token)
        if identity is None:
            raise InvalidExternalTokenError("Invalid Supabase token.")

        email = normalize_email(identity.email)
        if not email:
            raise InvalidExternalTokenError("Supabase identity has no email.")

        user = self._users_port.get_user_by_email(email=email)
        if user is None:
            user = self._users_port.get_or_create_user(
                user_id=str(uuid4()),
                email=email,
                name=None,
                created_at=utcnow(),
            )
            logger.info(
                "login_supabase: local_user_provisioned user_id=%s supabase_id=%s",
                user.id,
                identity.id,
            )

        return issue_tokens(
            user=user,
            supabase_id=identity.id,
            token_port=self._token_port,
            token_scheme=self._token_scheme,
            supabase_token=supabase_token,
        )
