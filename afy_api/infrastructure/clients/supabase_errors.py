from __future__ import annotations

from typing import Any

from afy_api.domain.exceptions import IdentityErrorKind, IdentityProviderError


DEFAULT_ERROR_MESSAGE = "Identity provider request failed."

# Structured codes returned by GoTrue in ``error_code``.
_ERROR_CODE_KINDS = {
    "user_already_exists": IdentityErrorKind.ACCOUNT_EXISTS,
    "email_exists": IdentityErrorKind.ACCOUNT_EXISTS,
    "phone_exists": IdentityErrorKind.ACCOUNT_EXISTS,
    "identity_already_exists": IdentityErrorKind.ACCOUNT_EXISTS,
    "weak_password": IdentityErrorKind.WEAK_CREDENTIAL,
    "email_address_invalid": IdentityErrorKind.INVALID_IDENTIFIER,
    "email_address_not_authorized": IdentityErrorKind.INVALID_IDENTIFIER,
}

# Fallback for providers or versions without error codes. Depends on message
# wording, so it breaks silently if the provider rephrases.
_MESSAGE_PATTERNS = (
    ("already registered", IdentityErrorKind.ACCOUNT_EXISTS),
    ("already been registered", IdentityErrorKind.ACCOUNT_EXISTS),
    ("already exists", IdentityErrorKind.ACCOUNT_EXISTS),
    ("password should", IdentityErrorKind.WEAK_CREDENTIAL),
    ("password is too", IdentityErrorKind.WEAK_CREDENTIAL),
    ("weak password", IdentityErrorKind.WEAK_CREDENTIAL),
    ("unable to validate email", IdentityErrorKind.INVALID_IDENTIFIER),
    ("invalid email", IdentityErrorKind.INVALID_IDENTIFIER),
    ("is invalid", IdentityErrorKind.INVALID_IDENTIFIER),
)


def provider_error_message(payload: Any) -> str:
    if isinstance(payload, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return DEFAULT_ERROR_MESSAGE


def classify_provider_error(*, code: str | None, message: str) -> IdentityErrorKind:
    if code:
        kind = _ERROR_CODE_KINDS.get(code.strip().lower())
        if kind is not None:
            return kind

    lower_msg = message.lower()
    for pattern, kind in _MESSAGE_PATTERNS:
        if pattern in lower_msg:
            return kind
    return IdentityErrorKind.UNKNOWN


def normalize_provider_error(payload: Any) -> IdentityProviderError:
    message = provider_error_message(payload)
    code = payload.get("error_code") if isinstance(payload, dict) else None
    kind = classify_provider_error(
        code=code if isinstance(code, str) else None,
        message=message,
    )
    return IdentityProviderError(kind, message)
