"""
Unit Tests for Security Module
Tests for: password hashing, JWT access/refresh tokens
"""
import pytest
from datetime import datetime, timedelta
from jose import jwt
from fastapi import HTTPException

from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from app.core.config import settings


def claims(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_is_salted(self):
        """Same password hashes differently each time"""
        password = "counselor-pass-1"
        first = get_password_hash(password)
        second = get_password_hash(password)

        assert first != password
        assert first != second

    def test_verify_round_trip(self):
        hashed = get_password_hash("counselor-pass-1")

        assert verify_password("counselor-pass-1", hashed) is True
        assert verify_password("wrong-pass", hashed) is False

    def test_missing_hash_never_verifies(self):
        """Accounts without a stored hash cannot log in with a password"""
        assert verify_password("anything", "") is False
        assert verify_password("anything", None) is False

    def test_long_password_truncated_consistently(self):
        # Bcrypt has 72 byte limit
        long_password = "a" * 100
        hashed = get_password_hash(long_password)
        assert verify_password(long_password, hashed) is True


class TestTokens:
    """Test access and refresh tokens"""

    def test_access_token_claims(self):
        token = create_access_token({"sub": "user-1", "email": "c@example.com", "role": "counselor"})
        payload = claims(token)

        assert payload["type"] == "access"
        assert payload["sub"] == "user-1"
        assert payload["role"] == "counselor"

    def test_access_token_custom_expiry(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(hours=1))
        exp = datetime.utcfromtimestamp(claims(token)["exp"])
        remaining = (exp - datetime.utcnow()).total_seconds()

        assert 3500 < remaining < 3700

    def test_refresh_token_outlives_access_token(self):
        access = claims(create_access_token({"sub": "user-1"}))
        refresh = claims(create_refresh_token({"sub": "user-1"}))

        assert refresh["type"] == "refresh"
        assert refresh["exp"] > access["exp"]


class TestDecodeToken:
    """Test token decoding"""

    def test_decode_valid_token(self):
        token = create_access_token({"sub": "user-1", "email": "a@example.com"})
        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["email"] == "a@example.com"

    def test_decode_garbage(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("not-a-jwt")

        assert exc_info.value.status_code == 401
        assert "Could not validate credentials" in exc_info.value.detail

    def test_decode_expired_token(self):
        expired = jwt.encode(
            {"sub": "user-1", "exp": datetime.utcnow() - timedelta(hours=1), "type": "access"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_token(expired)
        assert exc_info.value.status_code == 401

    def test_decode_wrong_secret(self):
        forged = jwt.encode(
            {"sub": "user-1", "exp": datetime.utcnow() + timedelta(hours=1)},
            "wrong_secret_key",
            algorithm=settings.JWT_ALGORITHM
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_token(forged)
        assert exc_info.value.status_code == 401
