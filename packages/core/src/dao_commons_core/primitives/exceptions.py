"""Exceptions raised by dao-commons itself.

Driver and ORM exceptions raised while a DAO operation talks to its backend
are never wrapped; they reach the caller unchanged.
"""

from __future__ import annotations


class DaoError(Exception):
    """Root exception for the entire dao-commons toolkit."""


class ConfigurationError(DaoError):
    """Raised when connection or descriptor configuration is invalid."""


class RestrictionError(DaoError):
    """Raised when a restriction or update map cannot be translated.

    Usage: backend compilers raise this when a restriction names a field
    the target table or collection does not have.
    """


class PersistenceError(DaoError):
    """Base class for all persistence-related errors."""


class UnitOfWorkError(PersistenceError):
    """Raised when a unit of work is used outside its lifecycle."""


class MissingUnitOfWorkError(UnitOfWorkError):
    """Raised when a DAO call has neither an explicit, ambient nor factory UoW."""

    def __init__(self, dao_name: str) -> None:
        self.dao_name = dao_name
        super().__init__(
            f"{dao_name} needs a unit of work: pass uow=..., run inside "
            "transaction_scope(...) or configure uow_factory."
        )


class InvalidEntityStateError(PersistenceError):
    """Raised when an entity is not in the state an operation requires."""

    def __init__(self, entity: object, expected: str) -> None:
        self.entity = entity
        self.expected = expected
        super().__init__(
            f"{type(entity).__name__} instance must be {expected} for this operation"
        )
