from __future__ import annotations

from typing import Protocol

from afy_api.application.dto.auth import (
    ProvisionedIdentity,
    SignupIdentityResult,
    VerifiedIdentity,
)


class IdentityProviderPort(Protocol):
    def verify_external_token(self, token: str) -> VerifiedIdentity | None:
        ...

    def create_identity(
        self,
        *,
        email: str,
        password: str,
        name: str | None = None,
    ) -> ProvisionedIdentity:
        ...

    def signup_identity(
        self,
        *,
        email: str,
        password: str,
        name: str | None = None,
    ) -> SignupIdentityResult:
        ...
