"""SQLAlchemy Persistence Adapter."""

from __future__ import annotations

from .compiler import (
    apply_page_window,
    build_sqla_filter,
    build_update_values,
    resolve_column,
)
from .core.dao import SQLAlchemyDao
from .core.uow import SQLAlchemyUnitOfWork
from .engine import create_engine_from_settings, create_session_factory, engine_options
from .exceptions import (
    InvalidEntityStateError,
    SessionManagementError,
    SQLAlchemyPersistenceError,
    UnitOfWorkError,
)

__all__ = [
    # Core
    "SQLAlchemyDao",
    "SQLAlchemyUnitOfWork",
    # Engine wiring
    "create_engine_from_settings",
    "create_session_factory",
    "engine_options",
    # Compiler
    "apply_page_window",
    "build_sqla_filter",
    "build_update_values",
    "resolve_column",
    # Exceptions
    "InvalidEntityStateError",
    "SessionManagementError",
    "SQLAlchemyPersistenceError",
    "UnitOfWorkError",
]
