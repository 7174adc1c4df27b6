import pytest

from order_api.config import Settings


def test_cors_origins_accept_json_and_comma_lists():
    assert Settings(CORS_ORIGINS='["http://a.test", "http://b.test"]').CORS_ORIGINS == [
        "http://a.test",
        "http://b.test",
    ]
    assert Settings(CORS_ORIGINS="http://a.test, http://b.test").CORS_ORIGINS == [
        "http://a.test",
        "http://b.test",
    ]


def test_access_lifetime_must_be_shorter_than_refresh():
    Settings(ACCESS_TOKEN_EXPIRE_MINUTES=60, REFRESH_TOKEN_EXPIRE_DAYS=7).validate_token_lifetimes()

    with pytest.raises(ValueError):
        Settings(ACCESS_TOKEN_EXPIRE_MINUTES=60 * 24 * 8, REFRESH_TOKEN_EXPIRE_DAYS=7).validate_token_lifetimes()
    with pytest.raises(ValueError):
        Settings(ACCESS_TOKEN_EXPIRE_MINUTES=0).validate_token_lifetimes()


def test_production_rejects_default_secrets():
    with pytest.raises(ValueError):
        Settings(
            ENVIRONMENT="production",
            SECRET_KEY="dev-secret-key-change-in-production-use-openssl-rand-hex-32",
        ).validate_security_settings()

    Settings(
        ENVIRONMENT="production",
        SECRET_KEY="x" * 40,
        ADMIN_PASSWORD="a-much-longer-password",
    ).validate_security_settings()


def test_database_url_from_parts():
    url = Settings(DATABASE_URL="", POSTGRES_PASSWORD="p@ss").get_database_url()
    assert url.startswith("postgresql://")
    assert "p%40ss" in url
