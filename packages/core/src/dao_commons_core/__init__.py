"""dao-commons core — backend-agnostic pieces of the generic DAOs."""

from __future__ import annotations

from .adapters.memory import InMemoryDao, InMemoryUnitOfWork
from .config import DaoSettings, LdapSettings, MongoSettings, SqlSettings
from .dao import BaseDao
from .domain import EntityDescriptor, PageWindow
from .ports import IDao, IPartialUpdateDao, UnitOfWork
from .primitives.exceptions import (
    ConfigurationError,
    DaoError,
    InvalidEntityStateError,
    MissingUnitOfWorkError,
    PersistenceError,
    RestrictionError,
    UnitOfWorkError,
)
from .restrictions import (
    RestrictionOperator,
    RestrictionSpecification,
    build_restriction_ast,
    build_update_document,
    is_candidate_set,
    iter_leaves,
)
from .transaction import (
    get_current_uow,
    run_in_transaction,
    transaction_scope,
    transactional,
)

__all__ = [
    # DAO plumbing
    "BaseDao",
    "EntityDescriptor",
    "IDao",
    "IPartialUpdateDao",
    "PageWindow",
    # Restrictions
    "RestrictionOperator",
    "RestrictionSpecification",
    "build_restriction_ast",
    "build_update_document",
    "is_candidate_set",
    "iter_leaves",
    # Transactions
    "UnitOfWork",
    "get_current_uow",
    "run_in_transaction",
    "transaction_scope",
    "transactional",
    # Configuration
    "DaoSettings",
    "LdapSettings",
    "MongoSettings",
    "SqlSettings",
    # In-memory adapters
    "InMemoryDao",
    "InMemoryUnitOfWork",
    # Exceptions
    "ConfigurationError",
    "DaoError",
    "InvalidEntityStateError",
    "MissingUnitOfWorkError",
    "PersistenceError",
    "RestrictionError",
    "UnitOfWorkError",
]
