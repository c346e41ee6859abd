from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from jose import jwt
from pydantic import ValidationError

from src.app.services.token_issuer import TokenIssuer, TokenIssuerConfig
from src.domain.entities import Account, AccountRole


def make_account() -> Account:
    return Account(
        id=uuid4(),
        email="alice@example.com",
        password_hash="x",
        first_name="Alice",
        last_name="Smith",
        country="Romania",
        role=AccountRole.participant,
    )


def test_access_token_roundtrip(token_issuer):
    account = make_account()

    claims = token_issuer.verify_access_token(token_issuer.issue_access_token(account))

    assert claims.sub == account.id
    assert claims.email == "alice@example.com"
    assert claims.role == AccountRole.participant
    assert claims.exp - claims.iat == timedelta(minutes=15)


def test_access_tokens_are_unique(token_issuer):
    account = make_account()

    first = token_issuer.verify_access_token(token_issuer.issue_access_token(account))
    second = token_issuer.verify_access_token(token_issuer.issue_access_token(account))

    assert first.jti != second.jti


def test_wrong_key_is_rejected(token_issuer):
    other = TokenIssuer(TokenIssuerConfig(signing_key="another-key"))

    assert other.verify_access_token(token_issuer.issue_access_token(make_account())) is None


def test_expired_token_is_rejected():
    issuer = TokenIssuer(
        TokenIssuerConfig(signing_key="k", access_token_ttl=timedelta(seconds=-1))
    )

    assert issuer.verify_access_token(issuer.issue_access_token(make_account())) is None


def test_token_without_access_type_is_rejected(token_issuer):
    now = datetime.now(UTC)
    forged = jwt.encode(
        {
            "sub": str(uuid4()),
            "email": "alice@example.com",
            "role": "admin",
            "iat": now,
            "exp": now + timedelta(minutes=5),
            "jti": "x",
        },
        "unit-test-signing-key",
        algorithm="HS256",
    )

    assert token_issuer.verify_access_token(forged) is None


def test_unknown_role_claim_is_rejected(token_issuer):
    now = datetime.now(UTC)
    forged = jwt.encode(
        {
            "sub": str(uuid4()),
            "email": "alice@example.com",
            "role": "superuser",
            "type": "access",
            "iat": now,
            "exp": now + timedelta(minutes=5),
            "jti": "x",
        },
        "unit-test-signing-key",
        algorithm="HS256",
    )

    assert token_issuer.verify_access_token(forged) is None


def test_refresh_token_is_opaque_and_hashed(token_issuer, now):
    issued = token_issuer.issue_refresh_token(now)

    assert issued.token.count(".") == 0
    assert issued.token_hash == TokenIssuer.hash_token(issued.token)
    assert issued.token_hash != issued.token
    assert issued.expires_at == now + timedelta(days=7)
    assert token_issuer.issue_refresh_token(now).token != issued.token


def test_empty_signing_key_is_refused():
    with pytest.raises(ValidationError):
        TokenIssuerConfig(signing_key="")
