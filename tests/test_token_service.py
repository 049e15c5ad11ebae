from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from afy_api.application.dto.auth import SessionClaims, TokenDomain
from afy_api.domain.exceptions import InvalidCredentialError
from afy_api.infrastructure.security.token_service import (
    AUDIENCE,
    ISSUER,
    JwtTokenService,
    TokenConfigurationError,
)

from conftest import ACCESS_SECRET, REFRESH_SECRET, make_token_service


SESSION_CLAIMS = SessionClaims(
    user_id="3f1c2a9e-0000-4000-8000-000000000001",
    email="user@example.com",
    supabase_id="sb-1",
    session_id="session-1",
)


@pytest.mark.parametrize("domain", [TokenDomain.ACCESS, TokenDomain.REFRESH])
def test_verify_returns_minted_claims(domain):
    service = make_token_service()

    issued = service.mint(SESSION_CLAIMS, domain)

    assert service.verify(issued.token, domain) == SESSION_CLAIMS


def test_embedded_claims_round_trip_with_provider_token():
    service = make_token_service(embedded=True)
    claims = SessionClaims(
        user_id="user-1",
        email="user@example.com",
        supabase_id="sb-1",
        supabase_token="provider-token",
    )

    issued = service.mint(claims, TokenDomain.ACCESS)

    assert service.verify(issued.token, TokenDomain.ACCESS) == claims


def test_access_ttl_is_one_hour_and_refresh_ttl_is_seven_days():
    service = make_token_service()
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    access = service.mint(SESSION_CLAIMS, TokenDomain.ACCESS, now=now)
    refresh = service.mint(SESSION_CLAIMS, TokenDomain.REFRESH, now=now)

    assert access.expires_in == 3600
    assert access.expires_at == now + timedelta(hours=1)
    assert refresh.expires_in == 7 * 24 * 3600
    assert refresh.expires_at == now + timedelta(days=7)


def test_minted_token_carries_issuer_audience_and_domain_type():
    service = make_token_service()

    issued = service.mint(SESSION_CLAIMS, TokenDomain.REFRESH)
    payload = service.decode_unverified(issued.token)

    assert payload["iss"] == ISSUER
    assert payload["aud"] == AUDIENCE
    assert payload["type"] == "refresh"
    assert payload["sessionId"] == "session-1"
    assert "supabaseToken" not in payload


def test_access_token_is_rejected_in_refresh_domain():
    service = make_token_service()
    issued = service.mint(SESSION_CLAIMS, TokenDomain.ACCESS)

    with pytest.raises(InvalidCredentialError):
        service.verify(issued.token, TokenDomain.REFRESH)


def test_refresh_token_is_rejected_in_access_domain():
    service = make_token_service()
    issued = service.mint(SESSION_CLAIMS, TokenDomain.REFRESH)

    with pytest.raises(InvalidCredentialError):
        service.verify(issued.token, TokenDomain.ACCESS)


def test_type_claim_isolates_domains_even_with_a_shared_secret():
    service = JwtTokenService(access_secret=ACCESS_SECRET, refresh_secret=ACCESS_SECRET)
    issued = service.mint(SESSION_CLAIMS, TokenDomain.REFRESH)

    with pytest.raises(InvalidCredentialError):
        service.verify(issued.token, TokenDomain.ACCESS)


@pytest.mark.parametrize(
    ("domain", "age"),
    [
        (TokenDomain.ACCESS, timedelta(hours=2)),
        (TokenDomain.REFRESH, timedelta(days=8)),
    ],
)
def test_expired_token_fails_verification(domain, age):
    service = make_token_service()
    issued = service.mint(SESSION_CLAIMS, domain, now=datetime.now(timezone.utc) - age)

    with pytest.raises(InvalidCredentialError):
        service.verify(issued.token, domain)


def test_token_signed_with_other_secret_fails_verification():
    service = make_token_service()
    forger = JwtTokenService(
        access_secret="some-other-secret-0123456789abcdefgh",
        refresh_secret=REFRESH_SECRET,
    )
    issued = forger.mint(SESSION_CLAIMS, TokenDomain.ACCESS)

    with pytest.raises(InvalidCredentialError):
        service.verify(issued.token, TokenDomain.ACCESS)


def test_wrong_issuer_fails_verification():
    service = make_token_service()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "userId": "user-1",
            "email": "user@example.com",
            "supabaseId": "sb-1",
            "type": "access",
            "iss": "someone-else",
            "aud": AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=1)).timestamp()),
        },
        ACCESS_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidCredentialError):
        service.verify(token, TokenDomain.ACCESS)


def test_malformed_token_fails_verification():
    service = make_token_service()

    with pytest.raises(InvalidCredentialError):
        service.verify("not-a-jwt", TokenDomain.ACCESS)


def test_decode_unverified_returns_none_for_garbage():
    assert make_token_service().decode_unverified("garbage") is None


def test_refresh_domain_disabled_without_refresh_secret():
    service = make_token_service(embedded=True)
    other = make_token_service()
    refresh = other.mint(SESSION_CLAIMS, TokenDomain.REFRESH)

    with pytest.raises(TokenConfigurationError):
        service.mint(SESSION_CLAIMS, TokenDomain.REFRESH)
    with pytest.raises(InvalidCredentialError):
        service.verify(refresh.token, TokenDomain.REFRESH)


def test_missing_access_secret_is_a_configuration_error():
    with pytest.raises(TokenConfigurationError):
        JwtTokenService(access_secret="", refresh_secret=REFRESH_SECRET)
