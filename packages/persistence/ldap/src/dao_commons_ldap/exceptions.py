"""LDAP persistence exceptions."""

from __future__ import annotations

from typing import Any

from dao_commons_core.primitives.exceptions import PersistenceError


class LdapPersistenceError(PersistenceError):
    """Base for LDAP persistence errors."""


class LdapConnectionError(LdapPersistenceError):
    """Raised when the directory cannot be reached or the bind fails."""


class LdapOperationError(LdapPersistenceError):
    """Raised when the server answers an operation with a non-success code."""

    def __init__(
        self,
        operation: str,
        dn: str,
        result: dict[str, Any] | None = None,
    ) -> None:
        result = result or {}
        self.operation = operation
        self.dn = dn
        self.code: int | None = result.get("result")
        self.description: str | None = result.get("description")
        self.server_message: str | None = result.get("message") or None
        detail = self.description or "unknown error"
        if self.server_message:
            detail = f"{detail}: {self.server_message}"
        super().__init__(f"LDAP {operation} of {dn!r} failed ({self.code}): {detail}")
