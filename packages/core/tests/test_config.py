"""Tests for DaoSettings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from dao_commons_core.config import DaoSettings, SqlSettings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for var in ("DAO_SQL__URL", "DAO_SQL__POOL_MAX_SIZE", "DAO_MONGO__DATABASE"):
        monkeypatch.delenv(var, raising=False)


def test_defaults() -> None:
    settings = DaoSettings()

    assert settings.sql.url.startswith("sqlite+aiosqlite")
    assert settings.sql.pool_min_size == 5
    assert settings.mongo.database == "dao_commons"
    assert settings.ldap.password is None


def test_nested_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAO_SQL__URL", "postgresql+asyncpg://app@db/app")
    monkeypatch.setenv("DAO_SQL__POOL_MAX_SIZE", "40")
    monkeypatch.setenv("DAO_MONGO__DATABASE", "reports")

    settings = DaoSettings()

    assert settings.sql.url == "postgresql+asyncpg://app@db/app"
    assert settings.sql.pool_max_size == 40
    assert settings.mongo.database == "reports"


def test_properties_file(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "DAO_LDAP__URL=ldap://directory:389\n"
        "DAO_LDAP__BASE_DN=dc=example,dc=org\n"
        "DAO_LDAP__PASSWORD=s3cret\n"
    )

    settings = DaoSettings()

    assert settings.ldap.url == "ldap://directory:389"
    assert settings.ldap.base_dn == "dc=example,dc=org"
    assert settings.ldap.password is not None
    assert settings.ldap.password.get_secret_value() == "s3cret"
    assert "s3cret" not in repr(settings)


def test_pool_bounds_validated() -> None:
    with pytest.raises(ValidationError, match="pool_max_size"):
        SqlSettings(pool_min_size=10, pool_max_size=5)
