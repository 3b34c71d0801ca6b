"""LDAP persistence for dao-commons, built on ldap3."""

from __future__ import annotations

from .connection import LdapConnectionManager
from .core.dao import LdapDao
from .descriptor import LdapEntryDescriptor
from .exceptions import LdapConnectionError, LdapOperationError, LdapPersistenceError
from .filters import build_ldap_filter
from .mapper import LdapEntryMapper

__all__ = [
    # Core
    "LdapConnectionManager",
    "LdapDao",
    "LdapEntryDescriptor",
    # Utilities
    "LdapEntryMapper",
    "build_ldap_filter",
    # Exceptions
    "LdapConnectionError",
    "LdapOperationError",
    "LdapPersistenceError",
]
