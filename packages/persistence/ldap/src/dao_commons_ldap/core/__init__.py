"""Core LDAP persistence: the generic directory DAO."""

from .dao import LdapDao

__all__ = ["LdapDao"]
