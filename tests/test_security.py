"""
Tests for password hashing and bearer tokens.
"""

import pytest

from wardwatch.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_round_trip():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-password", hashed)


def test_missing_hash_never_verifies():
    assert verify_password("anything", None) is False


def test_overlong_password_rejected():
    with pytest.raises(ValueError):
        hash_password("x" * 73)


def test_token_carries_subject_and_role():
    claims = decode_access_token(create_access_token("user-1", "admin"))

    assert claims["sub"] == "user-1"
    assert claims["role"] == "admin"


def test_expired_token_rejected():
    assert decode_access_token(create_access_token("user-1", "resident", expires_hours=-1)) is None


def test_tampered_token_rejected():
    token = create_access_token("user-1", "resident")

    assert decode_access_token(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1]) is None
    assert decode_access_token("not-a-token") is None
