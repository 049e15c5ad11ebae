from __future__ import annotations

from enum import Enum


class DomainError(Exception):
    """Base for domain errors."""


class InvalidCredentialError(DomainError):
    """Internal credential failed signature, claim or expiry checks."""


class InvalidExternalTokenError(DomainError):
    """Identity provider did not accept the presented token."""


class SignupInputError(DomainError):
    """Signup request is missing required fields."""


class AccountAlreadyExistsError(DomainError):
    """Identity provider already has an account for this email."""


class SignupRejectedError(DomainError):
    """Identity provider refused to create the account."""


class RefreshSessionInvalidError(DomainError):
    """Refresh credential cannot be redeemed."""


class RefreshNotSupportedError(DomainError):
    """Active token scheme does not issue refresh credentials."""


class UserNotFoundError(DomainError):
    """Local user referenced by a credential no longer exists."""


class IdentityErrorKind(str, Enum):
    ACCOUNT_EXISTS = "account_exists"
    WEAK_CREDENTIAL = "weak_credential"
    INVALID_IDENTIFIER = "invalid_identifier"
    UNKNOWN = "unknown"


class IdentityProviderError(DomainError):
    """Normalized identity provider failure."""

    def __init__(self, kind: IdentityErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
