from __future__ import annotations

import logging
from uuid import uuid4

from afy_api.application.dto.auth import (
    SignupMode,
    SignupOutput,
    SignupUserInput,
    TokenScheme,
    VerifiedIdentity,
)
from afy_api.application.ports.identity_provider_port import IdentityProviderPort
from afy_api.application.ports.token_port import TokenPort
from afy_api.application.ports.users_port import UsersPort
from afy_api.domain.entities.user import User
from afy_api.domain.exceptions import (
    AccountAlreadyExistsError,
    IdentityErrorKind,
    IdentityProviderError,
    SignupInputError,
    SignupRejectedError,
)

from .auth_common import build_auth_user_output, issue_tokens, normalize_email, utcnow


logger = logging.getLogger(__name__)

ACCOUNT_EXISTS_MESSAGE = "User already exists with this email"


class SignupUserUseCase:
    """Creates the provider account first, then the local row, then credentials."""

    def __init__(
        self,
        *,
        users_port: UsersPort,
        identity_provider: IdentityProviderPort,
        token_port: TokenPort,
        token_scheme: TokenScheme,
        signup_mode: SignupMode,
    ):
        self._users_port = users_port
        self._identity_provider = identity_provider
        self._token_port = token_port
        self._token_scheme = token_scheme
        self._signup_mode = signup_mode

    def execute(self, command: SignupUserInput) -> SignupOutput:
        email = normalize_email(command.email)
        password = command.password
        name = (command.name or "").strip() or None

        if not email:
            raise SignupInputError("email is required")
        if not password:
            raise SignupInputError("password is required")

        try:
            if self._signup_mode == "self_serve":
                result = self._identity_provider.signup_identity(
                    email=email,
                    password=password,
                    name=name,
                )
                user = self._create_local_user(result.identity, name=name)
                return SignupOutput(
                    user=build_auth_user_output(user),
                    tokens=None,
                    email_sent=result.email_sent,
                )

            provisioned = self._identity_provider.create_identity(
                email=email,
                password=password,
                name=name,
            )
        except IdentityProviderError as exc:
            logger.info("signup_user: provider_rejected kind=%s message=%s", exc.kind.value, exc.message)
            if exc.kind is IdentityErrorKind.ACCOUNT_EXISTS:
                raise AccountAlreadyExistsError(ACCOUNT_EXISTS_MESSAGE) from exc
            raise SignupRejectedError(exc.message) from exc

        user = self._create_local_user(provisioned.identity, name=name)
        tokens = issue_tokens(
            user=user,
            supabase_id=provisioned.identity.id,
            token_port=self._token_port,
            token_scheme=self._token_scheme,
            supabase_token=provisioned.session_token,
        )
        return SignupOutput(user=tokens.user, tokens=tokens, email_sent=False)

    def _create_local_user(self, identity: VerifiedIdentity, *, name: str | None) -> User:
        # The provider's email is authoritative, not the client's input.
        email = normalize_email(identity.email)
        user = self._users_port.get_or_create_user(
            user_id=str(uuid4()),
            email=email,
            name=name,
            created_at=utcnow(),
        )
        logger.info("signup_user: local_user_ready user_id=%s supabase_id=%s", user.id, identity.id)
        return user
