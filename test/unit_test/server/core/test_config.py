"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds environment variables and that
the grouped configuration properties expose the same values.
"""

import pytest

from usogui_db.server.core import constant
from usogui_db.server.core.config import (
    AuthConfig,
    CORSConfig,
    DatabaseConfig,
    MediaResolverConfig,
    Settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove variables set for the test session so defaults are visible."""
    for name in (
        "DATABASE_URL",
        "JWT_SECRET",
        "BCRYPT_ROUNDS",
        "EXPOSE_AUTH_TOKENS",
        "MAX_CHAPTER",
        "CORS_ORIGINS",
        "TEST_USER_EMAIL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsDefaults:
    """Test default values without environment overrides."""

    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)

        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000
        assert settings.log_level == "INFO"
        assert settings.max_chapter == 539
        assert settings.test_user_email is None
        assert settings.database_url.startswith("postgresql+asyncpg://")

    def test_auth_defaults(self, clean_env):
        auth = Settings(_env_file=None).auth

        assert isinstance(auth, AuthConfig)
        assert auth.jwt_algorithm == "HS256"
        assert auth.access_token_expire_minutes == 7 * 24 * 60
        assert auth.refresh_token_expire_days == 30
        assert auth.password_reset_expire_minutes == 60
        assert auth.refresh_cookie_name == "refreshToken"
        assert auth.expose_tokens is False

    def test_cors_exposes_total_count(self, clean_env):
        cors = Settings(_env_file=None).cors

        assert isinstance(cors, CORSConfig)
        assert cors.origins == ["*"]
        assert "X-Total-Count" in cors.expose_headers


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_database_url_binding(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgres://fan:secret@db:5432/usogui")

        settings = Settings(_env_file=None)
        assert settings.database_url == "postgres://fan:secret@db:5432/usogui"
        assert isinstance(settings.database, DatabaseConfig)
        assert settings.database.url == "postgres://fan:secret@db:5432/usogui"

    def test_auth_binding(self, clean_env):
        clean_env.setenv("JWT_SECRET", "s3cr3t")
        clean_env.setenv("BCRYPT_ROUNDS", "5")
        clean_env.setenv("EXPOSE_AUTH_TOKENS", "true")

        auth = Settings(_env_file=None).auth
        assert auth.jwt_secret == "s3cr3t"
        assert auth.bcrypt_rounds == 5
        assert auth.expose_tokens is True

    def test_media_resolver_binding(self, clean_env):
        clean_env.setenv("MEDIA_RESOLVER_TIMEOUT", "2.5")
        clean_env.setenv("MEDIA_RESOLVER_CACHE_TTL", "60")

        resolver = Settings(_env_file=None).media_resolver
        assert isinstance(resolver, MediaResolverConfig)
        assert resolver.timeout == 2.5
        assert resolver.cache_ttl == 60
        assert resolver.user_agent == "Usogui-Fansite/1.0"

    def test_cors_origins_binding(self, clean_env):
        clean_env.setenv("CORS_ORIGINS", '["https://usogui-fans.net"]')

        assert Settings(_env_file=None).cors.origins == ["https://usogui-fans.net"]

    def test_max_chapter_binding(self, clean_env):
        clean_env.setenv("MAX_CHAPTER", "540")

        assert Settings(_env_file=None).max_chapter == 540

    def test_invalid_port(self, clean_env):
        clean_env.setenv("USOGUI_DB_SERVER_PORT", "not-a-port")

        with pytest.raises(ValueError):
            Settings(_env_file=None)


class TestConstants:
    """Test project constants."""

    def test_api_prefix(self):
        assert constant.API_V1_STR == "/api/v1"
        assert constant.PROJECT_NAME
