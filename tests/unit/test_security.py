"""Unit tests for password hashing, credential generation and tokens."""

from datetime import timedelta

import jwt
import pytest

from travel_booking.core.security import (
    PASSWORD_SYMBOLS,
    create_access_token,
    decode_access_token,
    generate_temporary_password,
    hash_password,
    verify_password,
)


def test_hash_and_verify_password():
    password_hash = hash_password("S3cret!pass")

    assert password_hash != "S3cret!pass"
    assert verify_password("S3cret!pass", password_hash)
    assert not verify_password("wrong", password_hash)


def test_generated_password_default_length():
    password = generate_temporary_password()

    assert len(password) == 12
    assert any(c.isupper() for c in password)
    assert any(c.islower() for c in password)
    assert any(c.isdigit() for c in password)
    assert any(c in PASSWORD_SYMBOLS for c in password)


def test_generated_passwords_differ():
    passwords = {generate_temporary_password() for _ in range(20)}
    assert len(passwords) == 20


def test_generated_password_rejects_short_length():
    with pytest.raises(ValueError):
        generate_temporary_password(3)


def test_generated_password_zero_length_is_not_default():
    with pytest.raises(ValueError):
        generate_temporary_password(0)


def test_access_token_round_trip():
    token = create_access_token(subject="abc", role="admin", email="a@example.com", name="A")

    payload = decode_access_token(token)

    assert payload["sub"] == "abc"
    assert payload["role"] == "admin"
    assert payload["email"] == "a@example.com"


def test_expired_token_is_rejected():
    token = create_access_token(
        subject="abc",
        role="traveler",
        email="a@example.com",
        name="A",
        expires_delta=timedelta(seconds=-5),
    )

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)
