"""Application settings using pydantic-settings.

Every section reads environment variables under its own prefix, then a
``.env`` file. Defaults suit local development only.
"""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(prefix: str = "") -> SettingsConfigDict:
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection (``ACCESS_DB_*``).

    ``pool_max_connections`` is a hard cap; the engine allows no overflow.
    """

    model_config = _env("ACCESS_DB_")

    host: str = "localhost"
    port: int = 5432
    database: str = "access"
    username: str = "access"
    password: SecretStr = SecretStr("")
    pool_max_connections: int = Field(default=10, ge=1, le=100)


class AuthSettings(BaseSettings):
    """Bearer token validation (``ACCESS_AUTH_*``).

    ``jwt_secret`` is the HS256 secret shared with the identity provider.
    An empty secret rejects every token.
    """

    model_config = _env("ACCESS_AUTH_")

    jwt_secret: SecretStr = SecretStr("")
    audience: str = "authenticated"
    user_id_claim: str = "sub"


class AddressValidationSettings(BaseSettings):
    """Smarty US street address API (``ACCESS_SMARTY_*``)."""

    model_config = _env("ACCESS_SMARTY_")

    base_url: str = "https://us-street.api.smarty.com"
    auth_id: str = ""
    auth_token: SecretStr = SecretStr("")
    timeout_seconds: float = Field(default=10.0, gt=0)


class AccessSettings(BaseSettings):
    """Behavior of the access context (``ACCESS_*``)."""

    model_config = _env("ACCESS_")

    audit_retention_days: int = Field(
        default=90, ge=1, description="Entries older than this may be purged"
    )
    purge_confirmation: str = Field(
        default="CLEAR OLD LOGS",
        min_length=1,
        description="Phrase an operator must type to purge audit entries",
    )
    code_length: int = Field(default=8, ge=4, le=64)
    max_hierarchy_depth: int = Field(
        default=100, ge=1, description="Steps after which an ancestor walk counts as a cycle"
    )
    audit_query_limit: int = Field(default=100, ge=1, le=1000)


class Settings(BaseSettings):
    model_config = _env()

    app_name: str = "Access API"
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings()


@lru_cache
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


@lru_cache
def get_address_validation_settings() -> AddressValidationSettings:
    return AddressValidationSettings()


@lru_cache
def get_access_settings() -> AccessSettings:
    return AccessSettings()
