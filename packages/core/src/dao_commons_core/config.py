"""
Connection settings loaded from the environment or a key/value file.

All backends read their connection parameters from one ``DaoSettings``
object.  Values come from environment variables prefixed ``DAO_`` (nested
sections separated by ``__``) or from a ``.env`` properties file::

    DAO_SQL__URL=postgresql+asyncpg://app:secret@db/app
    DAO_SQL__POOL_MAX_SIZE=20
    DAO_MONGO__DATABASE=app
    DAO_LDAP__BASE_DN=dc=example,dc=org
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SqlSettings(BaseModel):
    """Relational backend: connection URL, pool sizing and isolation."""

    url: str = "sqlite+aiosqlite:///:memory:"
    pool_min_size: int = Field(default=5, ge=1)
    pool_max_size: int = Field(default=20, ge=1)
    pool_idle_timeout: int = Field(
        default=1800, ge=-1, description="Seconds before an idle connection is recycled"
    )
    pool_acquire_timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for a pooled connection"
    )
    isolation_level: str | None = None
    echo: bool = False

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> SqlSettings:
        if self.pool_max_size < self.pool_min_size:
            raise ValueError(
                f"pool_max_size ({self.pool_max_size}) must be >= "
                f"pool_min_size ({self.pool_min_size})"
            )
        return self


class MongoSettings(BaseModel):
    """Document backend: client URL, database and driver pool options."""

    url: str = "mongodb://localhost:27017"
    database: str = "dao_commons"
    server_selection_timeout_ms: int = Field(default=5000, ge=0)
    connect_timeout_ms: int = Field(default=10000, ge=0)
    min_pool_size: int = Field(default=0, ge=0)
    max_pool_size: int = Field(default=100, ge=1)


class LdapSettings(BaseModel):
    """Directory backend: server URL, base DN and bind credentials."""

    url: str = "ldap://localhost:389"
    base_dn: str = ""
    bind_dn: str | None = None
    password: SecretStr | None = None
    connect_timeout: int | None = Field(default=10, ge=1)


class DaoSettings(BaseSettings):
    """Root settings object for every dao-commons backend."""

    model_config = SettingsConfigDict(
        env_prefix="DAO_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sql: SqlSettings = Field(default_factory=SqlSettings)
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    ldap: LdapSettings = Field(default_factory=LdapSettings)
