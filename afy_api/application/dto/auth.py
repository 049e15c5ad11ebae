from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal


TokenScheme = Literal["session", "embedded"]
SignupMode = Literal["admin", "self_serve"]


class TokenDomain(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: str
    supabase_id: str
    session_id: str | None = None
    supabase_token: str | None = None


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime
    expires_in: int


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: str
    email: str
    supabase_id: str
    session_id: str | None


@dataclass(frozen=True)
class VerifiedIdentity:
    id: str
    email: str
    phone: str | None
    email_confirmed_at: str | None
    last_sign_in_at: str | None
    identity_count: int = 0


@dataclass(frozen=True)
class ProvisionedIdentity:
    identity: VerifiedIdentity
    session_token: str


@dataclass(frozen=True)
class SignupIdentityResult:
    identity: VerifiedIdentity
    email_sent: bool


@dataclass(frozen=True)
class AuthOptions:
    token_scheme: TokenScheme
    strict_provider_check: bool
    signup_mode: SignupMode


@dataclass(frozen=True)
class AuthUserOutput:
    id: str
    email: str
    name: str | None


@dataclass(frozen=True)
class LoginSupabaseInput:
    supabase_token: str


@dataclass(frozen=True)
class SignupUserInput:
    email: str
    password: str
    name: str | None


@dataclass(frozen=True)
class RefreshSessionInput:
    refresh_token: str


@dataclass(frozen=True)
class LogoutInput:
    identity: AuthenticatedIdentity


@dataclass(frozen=True)
class AuthTokensOutput:
    user: AuthUserOutput
    access_token: str
    refresh_token: str | None
    expires_in: int
    access_expires_at: datetime
    refresh_expires_at: datetime | None
    session_id: str | None


@dataclass(frozen=True)
class SignupOutput:
    user: AuthUserOutput
    tokens: AuthTokensOutput | None
    email_sent: bool


@dataclass(frozen=True)
class LogoutOutput:
    message: str
