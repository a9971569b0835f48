"""Unit tests for infrastructure settings."""

import pytest
from pydantic import SecretStr, ValidationError

from infrastructure.settings import (
    AccessSettings,
    AddressValidationSettings,
    AuthSettings,
    DatabaseSettings,
    get_access_settings,
    get_database_settings,
)


class TestDatabaseSettings:
    """Tests for connection and pool configuration."""

    def test_defaults(self):
        settings = DatabaseSettings()
        assert settings.host == "localhost"
        assert 1 <= settings.pool_max_connections <= 20

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("ACCESS_DB_HOST", "db.internal")
        monkeypatch.setenv("ACCESS_DB_POOL_MAX_CONNECTIONS", "4")

        settings = get_database_settings()

        assert settings.host == "db.internal"
        assert settings.pool_max_connections == 4

    def test_pool_must_be_positive(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=0)

    def test_pool_respects_upper_limit(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)

    def test_password_is_not_rendered(self):
        settings = DatabaseSettings(password=SecretStr("hunter2"))
        assert "hunter2" not in repr(settings)


class TestAccessSettings:
    """Tests for behavioral settings of the access context."""

    def test_defaults(self):
        settings = AccessSettings()
        assert settings.audit_retention_days == 90
        assert settings.purge_confirmation == "CLEAR OLD LOGS"
        assert settings.code_length == 8
        assert settings.audit_query_limit == 100

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ACCESS_AUDIT_RETENTION_DAYS", "30")
        monkeypatch.setenv("ACCESS_PURGE_CONFIRMATION", "PURGE")

        settings = get_access_settings()

        assert settings.audit_retention_days == 30
        assert settings.purge_confirmation == "PURGE"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("audit_retention_days", 0),
            ("code_length", 3),
            ("code_length", 65),
            ("audit_query_limit", 1001),
            ("purge_confirmation", ""),
        ],
    )
    def test_rejects_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            AccessSettings(**{field: value})


class TestAuthSettings:
    def test_defaults(self):
        settings = AuthSettings()
        assert settings.audience == "authenticated"
        assert settings.user_id_claim == "sub"

    def test_secret_is_not_rendered(self):
        settings = AuthSettings(jwt_secret=SecretStr("s3cret"))
        assert "s3cret" not in repr(settings)
        assert settings.jwt_secret.get_secret_value() == "s3cret"


class TestAddressValidationSettings:
    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            AddressValidationSettings(timeout_seconds=0)
