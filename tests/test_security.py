from datetime import timedelta

import jwt
import pytest

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("secret1")
    second = hash_password("secret1")

    assert first != "secret1"
    assert first != second
    assert verify_password("secret1", first)
    assert not verify_password("secret2", first)


def test_verify_against_missing_hash():
    assert not verify_password("1234", None)


def test_token_carries_subject_and_one_hour_expiry():
    token = create_access_token("abc123")
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

    assert payload["sub"] == "abc123"
    assert decode_access_token(token) == "abc123"


def test_expired_token_rejected():
    token = create_access_token("abc123", expires_delta=timedelta(seconds=-1))

    with pytest.raises(AuthenticationError, match="expired"):
        decode_access_token(token)


def test_token_signed_with_other_secret_rejected():
    token = jwt.encode({"sub": "abc123"}, "another-secret", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        decode_access_token(token)
