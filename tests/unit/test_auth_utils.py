"""Tests for password hashing and auth tokens."""

from datetime import timedelta

import pytest
from jose import jwt

from itsm_core.config import AppConfig
from itsm_core.exceptions import AuthenticationError, ServiceError
from itsm_core.utils.auth_utils import create_token, hash_password, verify_password, verify_token


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("secret123")

        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)

    @pytest.mark.parametrize("stored", [None, "", "not-a-hash"])
    def test_unusable_hash_never_matches(self, stored):
        assert not verify_password("secret123", stored)


class TestTokens:
    def test_round_trip_claims(self, app_config):
        token = create_token("user-1", "a@b.test")

        claims = jwt.decode(token, app_config.get_auth_secret(), algorithms=["HS256"])
        assert claims["sub"] == "user-1"
        assert claims["email"] == "a@b.test"
        assert verify_token(token).id == "user-1"

    @pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
    def test_invalid_tokens(self, token):
        with pytest.raises(AuthenticationError):
            verify_token(token)

    def test_expired_token(self):
        token = create_token("user-1", "a@b.test", expires_delta=timedelta(seconds=-1))

        with pytest.raises(AuthenticationError):
            verify_token(token)

    def test_token_signed_with_other_secret(self):
        token = jwt.encode({"sub": "user-1", "email": "a@b.test"}, "other", algorithm="HS256")

        with pytest.raises(AuthenticationError):
            verify_token(token)

    def test_missing_claims(self, app_config):
        token = jwt.encode({"sub": "user-1"}, app_config.get_auth_secret(), algorithm="HS256")

        with pytest.raises(AuthenticationError):
            verify_token(token)

    def test_production_without_secret_cannot_sign(self, monkeypatch):
        monkeypatch.delenv("AUTH_SECRET", raising=False)
        config = AppConfig(environment="production")

        with pytest.raises(ServiceError):
            create_token("user-1", "a@b.test", config=config)
