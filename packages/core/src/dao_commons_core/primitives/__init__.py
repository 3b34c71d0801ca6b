"""Primitives — exceptions shared by every dao-commons package."""

from .exceptions import (
    ConfigurationError,
    DaoError,
    InvalidEntityStateError,
    MissingUnitOfWorkError,
    PersistenceError,
    RestrictionError,
    UnitOfWorkError,
)

__all__ = [
    "ConfigurationError",
    "DaoError",
    "InvalidEntityStateError",
    "MissingUnitOfWorkError",
    "PersistenceError",
    "RestrictionError",
    "UnitOfWorkError",
]
