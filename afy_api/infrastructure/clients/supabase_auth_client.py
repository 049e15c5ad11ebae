from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any

import httpx

from afy_api.application.dto.auth import (
    ProvisionedIdentity,
    SignupIdentityResult,
    VerifiedIdentity,
)
from afy_api.application.ports.identity_provider_port import IdentityProviderPort
from afy_api.domain.exceptions import IdentityErrorKind, IdentityProviderError

from .supabase_errors import normalize_provider_error, provider_error_message


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SupabaseAuthClientSettings:
    base_url: str
    service_role_key: str
    timeout_seconds: float
    max_retries: int


class SupabaseAuthClient(IdentityProviderPort):
    """Thin client over the Supabase Auth (GoTrue) REST API.

    One ``httpx.Client`` is held for the lifetime of the instance so that
    connections are pooled across requests.
    """

    def __init__(
        self,
        settings: SupabaseAuthClientSettings,
        *,
        http_client: httpx.Client | None = None,
    ):
        self._settings = settings
        self._auth_url = f"{settings.base_url.rstrip('/')}/auth/v1"
        self._http = http_client or httpx.Client(timeout=settings.timeout_seconds)

    def close(self) -> None:
        self._http.close()

    def verify_external_token(self, token: str) -> VerifiedIdentity | None:
        token = (token or "").strip()
        if not token:
            return None
        if not token.isascii():
            logger.info("supabase_auth_client: token_rejected reason=non_ascii")
            return None

        attempts = max(1, self._settings.max_retries)
        delay = 0.25
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                response = self._http.get(
                    f"{self._auth_url}/user",
                    headers=self._headers(bearer=token),
                )
            except httpx.TransportError as exc:
                last_exc = exc
                if attempt == attempts:
                    break
                logger.warning(
                    "supabase_auth_client: verify_retry attempt=%s/%s error=%s",
                    attempt,
                    attempts,
                    exc,
                )
                time.sleep(delay)
                delay *= 2
                continue
            except httpx.HTTPError as exc:
                logger.error("supabase_auth_client: verify_failed error=%s", exc)
                return None
            except (httpx.InvalidURL, ValueError) as exc:
                logger.error("supabase_auth_client: verify_request_invalid error=%s", exc)
                return None

            payload = _json_or_none(response)
            if response.status_code != 200:
                logger.info(
                    "supabase_auth_client: token_rejected status=%s message=%s",
                    response.status_code,
                    provider_error_message(payload),
                )
                return None

            identity = _map_identity(payload)
            if identity is None:
                logger.warning("supabase_auth_client: user_payload_incomplete")
            return identity

        logger.error(
            "supabase_auth_client: verify_failed attempts=%s error=%s",
            attempts,
            last_exc,
        )
        return None

    def create_identity(
        self,
        *,
        email: str,
        password: str,
        name: str | None = None,
    ) -> ProvisionedIdentity:
        body: dict[str, Any] = {
            "email": email,
            "password": password,
            "email_confirm": True,
        }
        if name:
            body["user_metadata"] = {"name": name}

        payload = self._post(
            "/admin/users",
            json=body,
            headers=self._headers(bearer=self._settings.service_role_key),
        )
        identity = _map_identity(payload)
        if identity is None:
            raise IdentityProviderError(
                IdentityErrorKind.UNKNOWN,
                "Identity provider returned an incomplete user.",
            )
        logger.info("supabase_auth_client: identity_created supabase_id=%s", identity.id)

        session = self._post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        session_token = session.get("access_token") if isinstance(session, dict) else None
        if not isinstance(session_token, str) or not session_token:
            raise IdentityProviderError(
                IdentityErrorKind.UNKNOWN,
                "Account created but sign-in failed.",
            )
        return ProvisionedIdentity(identity=identity, session_token=session_token)

    def signup_identity(
        self,
        *,
        email: str,
        password: str,
        name: str | None = None,
    ) -> SignupIdentityResult:
        body: dict[str, Any] = {"email": email, "password": password}
        if name:
            body["data"] = {"name": name}

        payload = self._post("/signup", json=body, headers=self._headers())

        # Autoconfirm projects answer with a session wrapping the user.
        user_payload = payload.get("user") if isinstance(payload.get("user"), dict) else payload

        # An existing, confirmed email yields a fake user with no identities.
        identities = user_payload.get("identities")
        if isinstance(identities, list) and not identities:
            raise IdentityProviderError(
                IdentityErrorKind.ACCOUNT_EXISTS,
                "User already registered",
            )

        identity = _map_identity(user_payload)
        if identity is None:
            raise IdentityProviderError(
                IdentityErrorKind.UNKNOWN,
                "Identity provider returned an incomplete user.",
            )
        email_sent = bool(user_payload.get("confirmation_sent_at"))
        logger.info(
            "supabase_auth_client: identity_signed_up supabase_id=%s email_sent=%s",
            identity.id,
            email_sent,
        )
        return SignupIdentityResult(identity=identity, email_sent=email_sent)

    def _post(
        self,
        path: str,
        *,
        json: dict[str, Any],
        headers: dict[str, str],
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = self._http.post(
                f"{self._auth_url}{path}",
                json=json,
                headers=headers,
                params=params,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("supabase_auth_client: request_failed path=%s error=%s", path, exc)
            raise IdentityProviderError(
                IdentityErrorKind.UNKNOWN,
                "Identity provider is unavailable.",
            ) from exc

        payload = _json_or_none(response)
        if response.is_error:
            error = normalize_provider_error(payload)
            logger.info(
                "supabase_auth_client: request_rejected path=%s status=%s kind=%s",
                path,
                response.status_code,
                error.kind.value,
            )
            raise error
        if not isinstance(payload, dict):
            raise IdentityProviderError(
                IdentityErrorKind.UNKNOWN,
                "Identity provider returned an unexpected response.",
            )
        return payload

    def _headers(self, *, bearer: str | None = None) -> dict[str, str]:
        headers = {"apikey": self._settings.service_role_key}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _map_identity(payload: Any) -> VerifiedIdentity | None:
    if not isinstance(payload, dict):
        return None
    user_id = payload.get("id")
    email = payload.get("email")
    identities = payload.get("identities")
    if not user_id or not isinstance(email, str) or not email:
        return None
    return VerifiedIdentity(
        id=str(user_id),
        email=email,
        phone=_optional_str(payload.get("phone")),
        email_confirmed_at=_optional_str(payload.get("email_confirmed_at")),
        last_sign_in_at=_optional_str(payload.get("last_sign_in_at")),
        identity_count=len(identities) if isinstance(identities, list) else 0,
    )
