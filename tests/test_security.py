"""
Tests for access-token handling and settings validation.
"""

from datetime import timedelta

import pytest
from jose import jwt
from pydantic import ValidationError

from catalog.config import Settings, get_settings
from catalog.services.security import create_access_token, read_access_token


class TestAccessTokens:
    def test_round_trip(self):
        claims = read_access_token(create_access_token({"sub": "7"}))

        assert claims["sub"] == "7"
        assert claims["type"] == "access"

    def test_expired(self):
        token = create_access_token({"sub": "7"}, expires_delta=timedelta(seconds=-1))

        assert read_access_token(token) is None

    def test_wrong_type(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": "7", "type": "refresh"},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert read_access_token(token) is None

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "7", "type": "access"}, "x" * 40, algorithm="HS256")

        assert read_access_token(token) is None

    def test_token_for_unknown_account(self, client, sample_book):
        token = create_access_token({"sub": "424242"})

        response = client.get(
            f"/api/v1/books/{sample_book.id}/rating",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401


class TestSettings:
    def test_rejects_placeholder_secret(self):
        with pytest.raises(ValidationError):
            Settings(secret_key="REPLACE_WITH_SHARED_TOKEN_SECRET_0123456789")

    def test_rejects_short_secret(self):
        with pytest.raises(ValidationError):
            Settings(secret_key="too-short")

    def test_normalizes_log_level(self):
        settings = Settings(log_level="debug")

        assert settings.log_level == "DEBUG"

    def test_rejects_unknown_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="qa")

    def test_origins_list(self):
        settings = Settings(allowed_origins="http://a.test, http://b.test")

        assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]
        assert settings.api_prefix == "/api/v1"
