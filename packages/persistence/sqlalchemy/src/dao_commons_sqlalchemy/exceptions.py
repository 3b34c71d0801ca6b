"""Exceptions for the SQLAlchemy persistence layer."""

from __future__ import annotations

from dao_commons_core.primitives.exceptions import (
    InvalidEntityStateError,
    PersistenceError,
    UnitOfWorkError,
)


class SQLAlchemyPersistenceError(PersistenceError):
    """Base exception for all SQLAlchemy-specific persistence errors."""


class SessionManagementError(SQLAlchemyPersistenceError):
    """Raised when session creation or management fails."""


__all__: list[str] = [
    "InvalidEntityStateError",
    "SessionManagementError",
    "SQLAlchemyPersistenceError",
    "UnitOfWorkError",
]
