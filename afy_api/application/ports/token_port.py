from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from afy_api.application.dto.auth import IssuedToken, SessionClaims, TokenDomain


class TokenPort(Protocol):
    def mint(
        self,
        claims: SessionClaims,
        domain: TokenDomain,
        *,
        now: datetime | None = None,
    ) -> IssuedToken:
        ...

    def verify(self, token: str, domain: TokenDomain) -> SessionClaims:
        ...

    def decode_unverified(self, token: str) -> dict[str, Any] | None:
        ...
